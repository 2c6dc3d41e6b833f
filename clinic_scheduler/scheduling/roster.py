"""
Therapist roster and availability window administration.

Deleting a therapist cascades to their availability windows but leaves
their sessions in place, so historical bookings stay queryable. Windows
must sit inside the configured working hours.
"""

import logging
from typing import Any, Optional

from clinic_scheduler.config import BookingConfig, settings
from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow, Therapist
from clinic_scheduler.scheduling.availability import format_time, parse_time
from clinic_scheduler.scheduling.errors import (
    InvalidBookingRequest,
    TherapistNotFound,
    WindowNotFound,
)
from clinic_scheduler.stores.base import ClinicStores

logger = logging.getLogger(__name__)

_THERAPIST_FIELDS = frozenset({"name", "specialization", "color"})
_WINDOW_FIELDS = frozenset({"day_of_week", "start_time", "end_time", "is_active"})


def _canonical_window_times(
    start_time: str, end_time: str, config: BookingConfig
) -> tuple[str, str]:
    start, end = parse_time(start_time), parse_time(end_time)
    if start >= end:
        raise InvalidBookingRequest(
            f"Window start {start_time} must be before end {end_time}"
        )
    opens, closes = config.working_hours_start * 60, config.working_hours_end * 60
    if start < opens or end > closes:
        raise InvalidBookingRequest(
            f"Window {start_time}-{end_time} falls outside working hours "
            f"{format_time(opens)}-{format_time(closes)}"
        )
    return format_time(start), format_time(end)


def _check_day(day_of_week: int) -> None:
    if not 0 <= day_of_week <= 6:
        raise InvalidBookingRequest(f"day_of_week must be 0-6 (0=Sunday), got {day_of_week}")


class RosterService:
    """Admin operations over therapists and their weekly windows."""

    def __init__(self, stores: ClinicStores, config: Optional[BookingConfig] = None) -> None:
        self._stores = stores
        self._config = config or settings.booking

    async def list_therapists(self) -> list[Therapist]:
        return await self._stores.therapists.list_all()

    async def get_therapist(self, therapist_id: str) -> Therapist:
        therapist = await self._stores.therapists.get(therapist_id)
        if therapist is None:
            raise TherapistNotFound(therapist_id)
        return therapist

    async def add_therapist(self, name: str, specialization: str = "", color: str = "") -> Therapist:
        if not name or not name.strip():
            raise InvalidBookingRequest("Therapist name is required")
        therapist = await self._stores.therapists.create(
            Therapist(name=name.strip(), specialization=specialization, color=color)
        )
        logger.info("Therapist added: %s (%s)", therapist.name, therapist.id)
        return therapist

    async def update_therapist(self, therapist_id: str, **changes: Any) -> Therapist:
        """Edit display fields. Existing sessions keep their name snapshot."""
        unknown = set(changes) - _THERAPIST_FIELDS
        if unknown:
            raise InvalidBookingRequest(f"Unknown therapist fields: {sorted(unknown)}")
        updated = await self._stores.therapists.update(therapist_id, changes)
        if updated is None:
            raise TherapistNotFound(therapist_id)
        return updated

    async def delete_therapist(self, therapist_id: str) -> int:
        """Delete a therapist and all of their windows.

        Returns:
            The number of availability windows removed.
        """
        if not await self._stores.therapists.delete(therapist_id):
            raise TherapistNotFound(therapist_id)
        removed = await self._stores.availability.delete_all_windows_for(therapist_id)
        logger.info("Therapist %s deleted with %d availability windows", therapist_id, removed)
        return removed

    # ------------------------------------------------------------------ #
    # Availability windows
    # ------------------------------------------------------------------ #

    async def list_windows(self, therapist_id: str) -> list[AvailabilityWindow]:
        windows = await self._stores.availability.list_windows(therapist_id)
        return sorted(windows, key=lambda w: (w.day_of_week, w.start_time))

    async def list_all_windows(self) -> list[AvailabilityWindow]:
        return await self._stores.availability.list_all_windows()

    async def add_window(
        self,
        therapist_id: str,
        day_of_week: int,
        start_time: str,
        end_time: str,
        is_active: bool = True,
    ) -> AvailabilityWindow:
        await self.get_therapist(therapist_id)
        _check_day(day_of_week)
        start_time, end_time = _canonical_window_times(start_time, end_time, self._config)
        window = await self._stores.availability.create_window(AvailabilityWindow(
            therapist_id=therapist_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            is_active=is_active,
        ))
        logger.info(
            "Window added for %s: day %d %s-%s", therapist_id, day_of_week, start_time, end_time
        )
        return window

    async def update_window(self, window_id: str, **changes: Any) -> AvailabilityWindow:
        unknown = set(changes) - _WINDOW_FIELDS
        if unknown:
            raise InvalidBookingRequest(f"Unknown window fields: {sorted(unknown)}")
        if "day_of_week" in changes:
            _check_day(changes["day_of_week"])
        for key in ("start_time", "end_time"):
            if key in changes:
                changes[key] = format_time(parse_time(changes[key]))

        current = await self._find_window(window_id)
        start = changes.get("start_time", current.start_time)
        end = changes.get("end_time", current.end_time)
        _canonical_window_times(start, end, self._config)

        updated = await self._stores.availability.update_window(window_id, changes)
        if updated is None:
            raise WindowNotFound(window_id)
        return updated

    async def set_window_active(self, window_id: str, is_active: bool) -> AvailabilityWindow:
        return await self.update_window(window_id, is_active=is_active)

    async def delete_window(self, window_id: str) -> None:
        if not await self._stores.availability.delete_window(window_id):
            raise WindowNotFound(window_id)

    async def _find_window(self, window_id: str) -> AvailabilityWindow:
        window: Optional[AvailabilityWindow] = next(
            (w for w in await self._stores.availability.list_all_windows() if w.id == window_id),
            None,
        )
        if window is None:
            raise WindowNotFound(window_id)
        return window
