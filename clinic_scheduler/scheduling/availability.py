"""
Availability resolution over recurring weekly windows.

Times are wall-clock minutes-of-day parsed from ``HH:MM``. The clinic runs
in one local timezone, so there is no timezone or DST arithmetic here.
Every function is pure.

Usage:
    if is_slot_open(windows, day_of_week("2025-03-10"), "09:00"):
        ...
    slots = enumerate_open_slots(windows, 1, slot_duration_minutes=60)
"""

import logging
import re
from datetime import date as Date
from typing import Iterable, NamedTuple

from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow
from clinic_scheduler.scheduling.errors import InvalidBookingRequest, MalformedTimeError

logger = logging.getLogger(__name__)

MINUTES_PER_DAY = 24 * 60

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


class TimeRange(NamedTuple):
    """A half-open ``[start, end)`` slot rendered as HH:MM strings."""

    start_time: str
    end_time: str


def parse_time(value: str) -> int:
    """Convert ``HH:MM`` to minutes since midnight.

    Raises:
        MalformedTimeError: If the value is not a valid wall-clock time.
    """
    if not isinstance(value, str):
        raise MalformedTimeError(value)
    match = _TIME_PATTERN.match(value.strip())
    if not match:
        raise MalformedTimeError(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedTimeError(value)
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    """Convert minutes since midnight back to zero-padded ``HH:MM``."""
    if not 0 <= minutes <= MINUTES_PER_DAY:
        raise ValueError(f"Minute offset out of range: {minutes}")
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: str) -> Date:
    """Parse a ``YYYY-MM-DD`` calendar date."""
    try:
        return Date.fromisoformat(value.strip())
    except (ValueError, TypeError, AttributeError):
        raise InvalidBookingRequest(f"Invalid calendar date {value!r}; expected YYYY-MM-DD") from None


def day_of_week(value: str) -> int:
    """Return the weekday of a ``YYYY-MM-DD`` date with 0=Sunday .. 6=Saturday."""
    return (parse_date(value).weekday() + 1) % 7


def ranges_overlap(start_a: int, end_a: int, start_b: int, end_b: int) -> bool:
    """Two half-open minute ranges conflict iff each starts before the other ends."""
    return start_a < end_b and start_b < end_a


def _active_on(windows: Iterable[AvailabilityWindow], weekday: int) -> list[AvailabilityWindow]:
    return [w for w in windows if w.is_active and w.day_of_week == weekday]


def is_slot_open(windows: Iterable[AvailabilityWindow], weekday: int, slot_start: str) -> bool:
    """True iff an active window on ``weekday`` contains ``slot_start``.

    Both window ends are inclusive: a window ending at 13:00 still admits
    a slot that starts at 13:00.
    """
    start = parse_time(slot_start)
    for window in _active_on(windows, weekday):
        if parse_time(window.start_time) <= start <= parse_time(window.end_time):
            return True
    return False


def enumerate_open_slots(
    windows: Iterable[AvailabilityWindow],
    weekday: int,
    slot_duration_minutes: int,
) -> list[TimeRange]:
    """List fixed-size slots carved from each active window on ``weekday``.

    Windows are walked independently from their start while a whole slot
    still fits; overlapping windows may therefore yield duplicate slots.
    The combined result is sorted by start time.
    """
    if slot_duration_minutes < 1:
        raise ValueError(f"slot_duration_minutes must be >= 1, got {slot_duration_minutes}")

    slots: list[tuple[int, int]] = []
    for window in _active_on(windows, weekday):
        current = parse_time(window.start_time)
        end = parse_time(window.end_time)
        while current + slot_duration_minutes <= end:
            slots.append((current, current + slot_duration_minutes))
            current += slot_duration_minutes

    slots.sort(key=lambda pair: pair[0])
    logger.debug("Enumerated %d slots for weekday %d", len(slots), weekday)
    return [TimeRange(format_time(s), format_time(e)) for s, e in slots]
