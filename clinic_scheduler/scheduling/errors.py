"""Domain errors raised by the scheduling core.

Every error is surfaced to the caller verbatim; none are retried here.
"""

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from clinic_scheduler.schemas.session_schema import Session


class SchedulingError(Exception):
    """Base class for all scheduling failures."""


class MalformedTimeError(SchedulingError, ValueError):
    """A wall-clock time string is not a valid HH:MM value."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Malformed time {value!r}; expected HH:MM")
        self.value = value


class InvalidBookingRequest(SchedulingError, ValueError):
    """A request is structurally invalid (bad date, empty range, unknown status)."""


class BookingNotPermitted(SchedulingError):
    """The acting role may not perform this booking."""


class SlotNotAvailable(SchedulingError):
    """The requested start falls outside every active availability window."""

    def __init__(self, therapist_id: str, date: str, start_time: str) -> None:
        super().__init__(
            f"Therapist {therapist_id} is not available on {date} at {start_time}"
        )
        self.therapist_id = therapist_id
        self.date = date
        self.start_time = start_time


class SlotConflict(SchedulingError):
    """The requested range overlaps an existing non-cancelled session."""

    def __init__(
        self,
        therapist_id: str,
        date: str,
        start_time: str,
        end_time: str,
        conflicting: Optional["Session"] = None,
    ) -> None:
        detail = ""
        if conflicting is not None:
            detail = f" (overlaps {conflicting.start_time}-{conflicting.end_time})"
        super().__init__(
            f"Therapist {therapist_id} already has a session on {date} "
            f"between {start_time} and {end_time}{detail}"
        )
        self.therapist_id = therapist_id
        self.date = date
        self.start_time = start_time
        self.end_time = end_time
        self.conflicting = conflicting


class PackageExhausted(SchedulingError):
    """The patient has no remaining sessions in their package."""

    def __init__(self, patient_id: str, remaining: int) -> None:
        super().__init__(
            f"Patient {patient_id} has no remaining sessions (remaining={remaining})"
        )
        self.patient_id = patient_id
        self.remaining = remaining


class _NotFound(SchedulingError, LookupError):
    entity = "Record"

    def __init__(self, record_id: str) -> None:
        super().__init__(f"{self.entity} {record_id!r} not found")
        self.record_id = record_id


class SessionNotFound(_NotFound):
    entity = "Session"


class TherapistNotFound(_NotFound):
    entity = "Therapist"


class PatientNotFound(_NotFound):
    entity = "Patient"


class WindowNotFound(_NotFound):
    entity = "Availability window"
