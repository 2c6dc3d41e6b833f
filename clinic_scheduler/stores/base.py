"""
Store contracts consumed by the scheduling core.

The core never assumes exclusive access: every store is a shared,
multi-writer resource, and every method is a single awaited round-trip.
The two conditional operations (``insert_unless_conflict`` and the
used-session counters) must be atomic at the store level.
"""

from dataclasses import dataclass
from typing import Any, Optional, Protocol

from clinic_scheduler.schemas.patient_schema import AppUser, Patient
from clinic_scheduler.schemas.session_schema import Session, SessionStatus
from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow, Therapist


class TherapistStore(Protocol):
    async def list_all(self) -> list[Therapist]: ...
    async def get(self, therapist_id: str) -> Optional[Therapist]: ...
    async def create(self, therapist: Therapist) -> Therapist: ...
    async def update(self, therapist_id: str, patch: dict[str, Any]) -> Optional[Therapist]: ...
    async def delete(self, therapist_id: str) -> bool: ...


class AvailabilityStore(Protocol):
    async def list_windows(self, therapist_id: str) -> list[AvailabilityWindow]: ...
    async def list_all_windows(self) -> list[AvailabilityWindow]: ...
    async def create_window(self, window: AvailabilityWindow) -> AvailabilityWindow: ...
    async def update_window(
        self, window_id: str, patch: dict[str, Any]
    ) -> Optional[AvailabilityWindow]: ...
    async def delete_window(self, window_id: str) -> bool: ...
    async def delete_all_windows_for(self, therapist_id: str) -> int: ...


class SessionStore(Protocol):
    async def get(self, session_id: str) -> Optional[Session]: ...
    async def list_by_date(self, date: str) -> list[Session]: ...
    async def list_by_date_range(self, start_date: str, end_date: str) -> list[Session]: ...
    async def list_by_therapist(self, therapist_id: str) -> list[Session]: ...
    async def create(self, session: Session) -> Session:
        """Write a session as-is, with no overlap check. Reserved for bulk
        imports of existing calendars; bookings use insert_unless_conflict."""
        ...

    async def insert_unless_conflict(self, session: Session) -> Session:
        """Insert atomically, raising SlotConflict if an overlapping
        non-cancelled session for the same therapist exists at commit time."""
        ...

    async def update_status(self, session_id: str, status: SessionStatus) -> Optional[Session]:
        """Set a status with no package side effects (bulk imports).
        Status changes that move balances use swap_status."""
        ...

    async def swap_status(
        self, session_id: str, status: SessionStatus
    ) -> Optional[tuple[SessionStatus, Session]]:
        """Atomically set the status, returning the previous status and the
        updated session; None if the session is missing."""
        ...

    async def reschedule_unless_conflict(
        self, session_id: str, date: str, start_time: str, end_time: str
    ) -> Optional[Session]:
        """Atomically move a session, raising SlotConflict on overlap and
        InvalidBookingRequest if it is cancelled at commit time."""
        ...


    async def delete(self, session_id: str) -> bool: ...


class PatientStore(Protocol):
    async def list_all(self) -> list[Patient]: ...
    async def get(self, patient_id: str) -> Optional[Patient]: ...
    async def find_by_email(self, email: str) -> Optional[Patient]: ...
    async def create(self, patient: Patient) -> Patient: ...
    async def update(self, patient_id: str, patch: dict[str, Any]) -> Optional[Patient]: ...
    async def delete(self, patient_id: str) -> bool: ...

    async def increment_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        """Atomically add one used session and record ``session_id`` in the history.

        Returns None if the patient is missing.
        """
        ...

    async def decrement_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        """Atomically remove one used session (floored at 0) and its history entry."""
        ...


class UserStore(Protocol):
    async def get(self, uid: str) -> Optional[AppUser]: ...
    async def put(self, user: AppUser) -> AppUser: ...
    async def link_patient(self, uid: str, patient_id: str) -> Optional[AppUser]: ...


@dataclass
class ClinicStores:
    """The set of collaborators a clinic deployment provides."""

    therapists: TherapistStore
    availability: AvailabilityStore
    sessions: SessionStore
    patients: PatientStore
    users: UserStore
