"""Shared utilities used across the clinic scheduler."""

import re
from typing import Optional


def normalize_phone(value: str) -> str:
    """Normalize a phone number by stripping everything except digits and a leading +.

    Examples:
        >>> normalize_phone("512 345 678")
        '512345678'
        >>> normalize_phone("+48 (512) 345-678")
        '+48512345678'
    """
    value = value.strip()
    if value.startswith("+"):
        return "+" + re.sub(r"[^\d]", "", value[1:])
    return re.sub(r"[^\d]", "", value)


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Lower-case and trim an email; blank input becomes None."""
    if value is None:
        return None
    value = value.strip().lower()
    return value or None
