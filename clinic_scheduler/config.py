"""
Centralized configuration with environment variable overrides.

Clinic identity, booking policy, and access rules are configurable here.
Services receive these values through their constructors and fall back
to the ``settings`` singleton, so nothing is hardcoded in booking logic.
"""

import logging
import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    raw = os.getenv(env_var, default)
    return raw.strip().lower() in _TRUE_VALUES


def _email_list(env_var: str) -> tuple[str, ...]:
    """Parse a comma-separated list of emails, lower-cased and de-blanked."""
    raw = os.getenv(env_var, "")
    return tuple(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class ClinicConfig:
    """Clinic identity used in logs and the console."""

    name: str = os.getenv("CLINIC_NAME", "MyWay Point")


@dataclass(frozen=True)
class BookingConfig:
    """Slot sizing, working hours, and package policy.

    Availability windows must fall within
    ``working_hours_start:00``..``working_hours_end:00``.
    """

    slot_duration_minutes: int = _safe_int("SLOT_DURATION_MINUTES", "60")
    working_hours_start: int = _safe_int("WORKING_HOURS_START", "8")
    working_hours_end: int = _safe_int("WORKING_HOURS_END", "22")
    default_package_size: int = _safe_int("DEFAULT_PACKAGE_SIZE", "20")
    renewal_warning_threshold: int = _safe_int("RENEWAL_WARNING_THRESHOLD", "2")
    # Deleting a completed session leaves used_sessions alone unless enabled.
    compensate_on_delete: bool = _safe_bool("COMPENSATE_ON_DELETE", "false")


@dataclass(frozen=True)
class AccessConfig:
    """Emails that are granted the admin role on first sign-in."""

    admin_emails: tuple[str, ...] = field(default_factory=lambda: _email_list("ADMIN_EMAILS"))


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    clinic: ClinicConfig = field(default_factory=ClinicConfig)
    booking: BookingConfig = field(default_factory=BookingConfig)
    access: AccessConfig = field(default_factory=AccessConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    booking = config.booking
    if booking.slot_duration_minutes < 1:
        raise ValueError(
            f"SLOT_DURATION_MINUTES must be >= 1, got {booking.slot_duration_minutes}"
        )
    if not 0 <= booking.working_hours_start < booking.working_hours_end <= 24:
        raise ValueError(
            "WORKING_HOURS_START/WORKING_HOURS_END must satisfy 0 <= start < end <= 24, "
            f"got {booking.working_hours_start}-{booking.working_hours_end}"
        )
    if booking.default_package_size < 0:
        raise ValueError(
            f"DEFAULT_PACKAGE_SIZE must be >= 0, got {booking.default_package_size}"
        )
    if booking.renewal_warning_threshold < 0:
        raise ValueError(
            "RENEWAL_WARNING_THRESHOLD must be >= 0, "
            f"got {booking.renewal_warning_threshold}"
        )
    for email in config.access.admin_emails:
        if "@" not in email:
            raise ValueError(f"ADMIN_EMAILS contains an invalid address: {email!r}")


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logger.info("Configuration loaded for '%s'", config.clinic.name)
    return config


# Singleton instance
settings = load_config()
