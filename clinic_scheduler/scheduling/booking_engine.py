"""
Booking engine: validates and commits new sessions.

A booking passes four gates in order: the request is well-formed, the
therapist is available at the requested start, no non-cancelled session
of that therapist overlaps the range, and the patient still has
sessions left in their package. The final insert is a conditional write
that re-checks overlap at commit time, so a concurrent booking that won
the race surfaces as ``SlotConflict`` instead of a double-booking.

Usage:
    engine = BookingEngine(stores)
    session = await engine.book(request, role=PatientRole(patient_id))
"""

from typing import Optional

from clinic_scheduler import events
from clinic_scheduler.config import BookingConfig, settings
from clinic_scheduler.identity import AdminRole, PatientRole, Role
from clinic_scheduler.logging_context import get_request_logger
from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.schemas.session_schema import BookingRequest, OpenSlot, Session
from clinic_scheduler.schemas.therapist_schema import Therapist
from clinic_scheduler.scheduling.availability import (
    day_of_week,
    enumerate_open_slots,
    format_time,
    is_slot_open,
    parse_date,
    parse_time,
)
from clinic_scheduler.scheduling.conflicts import find_conflict
from clinic_scheduler.scheduling.errors import (
    BookingNotPermitted,
    InvalidBookingRequest,
    PackageExhausted,
    PatientNotFound,
    SessionNotFound,
    SlotConflict,
    SlotNotAvailable,
    TherapistNotFound,
)
from clinic_scheduler.stores.base import ClinicStores

logger = get_request_logger(__name__)


def _normalized_range(date: str, start_time: str, end_time: str) -> tuple[str, str, str]:
    """Validate a date/time range and return it in canonical form."""
    canonical_date = parse_date(date).isoformat()
    start, end = parse_time(start_time), parse_time(end_time)
    if start >= end:
        raise InvalidBookingRequest(
            f"start_time {start_time} must be before end_time {end_time}"
        )
    return canonical_date, format_time(start), format_time(end)


def _check_role(role: Role, patient_id: str) -> None:
    if isinstance(role, AdminRole):
        return
    if isinstance(role, PatientRole):
        if role.patient_id is None:
            raise BookingNotPermitted("Account is not linked to a patient record")
        if role.patient_id != patient_id:
            raise BookingNotPermitted("Patients may only manage their own sessions")
        return
    raise BookingNotPermitted(f"Unknown role {role!r}")


class BookingEngine:
    """Availability-aware, conflict-free session booking."""

    def __init__(self, stores: ClinicStores, config: Optional[BookingConfig] = None) -> None:
        self._stores = stores
        self._config = config or settings.booking

    async def book(self, request: BookingRequest, role: Role) -> Session:
        """Validate and commit a new ``scheduled`` session.

        Raises:
            InvalidBookingRequest, MalformedTimeError: Malformed input.
            BookingNotPermitted: A patient booking for someone else.
            TherapistNotFound, PatientNotFound: Unknown references.
            SlotNotAvailable: Start outside every active window.
            SlotConflict: Overlap with a non-cancelled session.
            PackageExhausted: No remaining sessions in the package.
        """
        date, start_time, end_time = _normalized_range(
            request.date, request.start_time, request.end_time
        )
        _check_role(role, request.patient_id)

        therapist = await self._require_therapist(request.therapist_id)
        patient = await self._require_patient(request.patient_id)

        await self._ensure_open(therapist.id, date, start_time)
        await self._ensure_no_conflict(therapist.id, date, start_time, end_time)

        # Enforced for admins too; the dashboard only shows it as a warning.
        if patient.remaining_sessions <= 0:
            logger.info(
                "Booking refused for patient %s: package exhausted (%d/%d)",
                patient.id, patient.used_sessions, patient.total_sessions,
            )
            raise PackageExhausted(patient.id, patient.remaining_sessions)

        session = Session(
            patient_id=patient.id,
            patient_name=patient.name,
            therapist_id=therapist.id,
            therapist_name=therapist.name,
            date=date,
            start_time=start_time,
            end_time=end_time,
            notes=request.notes,
        )
        created = await self._stores.sessions.insert_unless_conflict(session)
        logger.info(
            "Session %s booked: %s with %s on %s %s-%s",
            created.reference, patient.name, therapist.name, date, start_time, end_time,
        )

        await events.publish(events.SESSION_CREATED, created)
        return created

    async def reschedule(
        self,
        session_id: str,
        date: str,
        start_time: str,
        end_time: str,
        role: Role,
    ) -> Session:
        """Move an existing session, excluding itself from the conflict check."""
        date, start_time, end_time = _normalized_range(date, start_time, end_time)

        session = await self._stores.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        _check_role(role, session.patient_id)
        if session.is_cancelled:
            raise InvalidBookingRequest(f"Session {session_id} is cancelled and cannot be moved")

        await self._ensure_open(session.therapist_id, date, start_time)
        await self._ensure_no_conflict(
            session.therapist_id, date, start_time, end_time, exclude_session_id=session_id
        )

        moved = await self._stores.sessions.reschedule_unless_conflict(
            session_id, date, start_time, end_time
        )
        if moved is None:
            raise SessionNotFound(session_id)
        logger.info(
            "Session %s moved from %s %s to %s %s",
            moved.reference, session.date, session.start_time, date, start_time,
        )
        return moved

    async def open_slots(
        self,
        therapist_id: str,
        date: str,
        slot_duration_minutes: Optional[int] = None,
    ) -> list[OpenSlot]:
        """Bookable slots for a therapist on a date, minus occupied ranges."""
        date = parse_date(date).isoformat()
        await self._require_therapist(therapist_id)
        duration = (
            self._config.slot_duration_minutes
            if slot_duration_minutes is None
            else slot_duration_minutes
        )

        windows = await self._stores.availability.list_windows(therapist_id)
        booked = await self._stores.sessions.list_by_date(date)

        slots = []
        for slot in enumerate_open_slots(windows, day_of_week(date), duration):
            if find_conflict(booked, therapist_id, date, slot.start_time, slot.end_time):
                continue
            slots.append(OpenSlot(
                therapist_id=therapist_id,
                date=date,
                start_time=slot.start_time,
                end_time=slot.end_time,
            ))
        return slots

    # ------------------------------------------------------------------ #
    # Gates
    # ------------------------------------------------------------------ #

    async def _require_therapist(self, therapist_id: str) -> Therapist:
        therapist = await self._stores.therapists.get(therapist_id)
        if therapist is None:
            raise TherapistNotFound(therapist_id)
        return therapist

    async def _require_patient(self, patient_id: str) -> Patient:
        patient = await self._stores.patients.get(patient_id)
        if patient is None:
            raise PatientNotFound(patient_id)
        return patient

    async def _ensure_open(self, therapist_id: str, date: str, start_time: str) -> None:
        windows = await self._stores.availability.list_windows(therapist_id)
        if not is_slot_open(windows, day_of_week(date), start_time):
            logger.info(
                "Slot not available: therapist %s on %s at %s", therapist_id, date, start_time
            )
            raise SlotNotAvailable(therapist_id, date, start_time)

    async def _ensure_no_conflict(
        self,
        therapist_id: str,
        date: str,
        start_time: str,
        end_time: str,
        exclude_session_id: Optional[str] = None,
    ) -> None:
        existing = await self._stores.sessions.list_by_date(date)
        clash = find_conflict(
            existing, therapist_id, date, start_time, end_time,
            exclude_session_id=exclude_session_id,
        )
        if clash is not None:
            logger.info(
                "Slot conflict: therapist %s on %s %s-%s overlaps session %s",
                therapist_id, date, start_time, end_time, clash.reference,
            )
            raise SlotConflict(therapist_id, date, start_time, end_time, conflicting=clash)
