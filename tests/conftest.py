"""Shared test fixtures and helpers."""

import asyncio
from typing import Any, Optional

import pytest

from clinic_scheduler import events
from clinic_scheduler.config import BookingConfig
from clinic_scheduler.identity import AdminRole
from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.schemas.session_schema import BookingRequest, Session, SessionStatus
from clinic_scheduler.schemas.therapist_schema import AvailabilityWindow, Therapist
from clinic_scheduler.scheduling.booking_engine import BookingEngine
from clinic_scheduler.scheduling.lifecycle import SessionLifecycleManager
from clinic_scheduler.scheduling.patients import PatientRegistry
from clinic_scheduler.scheduling.roster import RosterService
from clinic_scheduler.stores.base import ClinicStores
from clinic_scheduler.stores.memory import in_memory_stores

# Fixed calendar anchors (2025-03-10 is a Monday).
MONDAY = "2025-03-10"
THURSDAY = "2025-03-13"
SATURDAY = "2025-03-15"

ADMIN = AdminRole()


@pytest.fixture(autouse=True)
def _isolate_listeners():
    events.clear_listeners()
    yield
    events.clear_listeners()


@pytest.fixture
def booking_config() -> BookingConfig:
    return BookingConfig(
        slot_duration_minutes=60,
        working_hours_start=8,
        working_hours_end=22,
        default_package_size=20,
        renewal_warning_threshold=2,
        compensate_on_delete=False,
    )


@pytest.fixture
def stores() -> ClinicStores:
    return in_memory_stores()


@pytest.fixture
def engine(stores, booking_config) -> BookingEngine:
    return BookingEngine(stores, booking_config)


@pytest.fixture
def lifecycle(stores, booking_config) -> SessionLifecycleManager:
    return SessionLifecycleManager(stores, config=booking_config)


@pytest.fixture
def roster(stores, booking_config) -> RosterService:
    return RosterService(stores, booking_config)


@pytest.fixture
def registry(stores, booking_config) -> PatientRegistry:
    return PatientRegistry(stores.patients, booking_config)


def make_window(
    therapist_id: str = "t-1",
    day_of_week: int = 1,
    start_time: str = "09:00",
    end_time: str = "12:00",
    is_active: bool = True,
) -> AvailabilityWindow:
    """Helper to create an AvailabilityWindow."""
    return AvailabilityWindow(
        therapist_id=therapist_id,
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time,
        is_active=is_active,
    )


def make_request(
    patient_id: str,
    therapist_id: str,
    date: str = MONDAY,
    start_time: str = "09:00",
    end_time: str = "10:00",
    notes: Optional[str] = None,
) -> BookingRequest:
    """Helper to create a BookingRequest with sensible defaults."""
    return BookingRequest(
        patient_id=patient_id,
        therapist_id=therapist_id,
        date=date,
        start_time=start_time,
        end_time=end_time,
        notes=notes,
    )


async def add_therapist(
    stores: ClinicStores,
    name: str = "Waldemar Sikorski",
    windows: tuple[tuple[int, str, str], ...] = ((1, "09:00", "12:00"),),
) -> Therapist:
    """Store a therapist with the given (day, start, end) windows."""
    therapist = await stores.therapists.create(Therapist(name=name, specialization="Therapist"))
    for day, start, end in windows:
        await stores.availability.create_window(make_window(therapist.id, day, start, end))
    return therapist


async def add_patient(
    stores: ClinicStores,
    name: str = "Jan Kowalski",
    total_sessions: int = 20,
    used_sessions: int = 0,
    email: Optional[str] = None,
) -> Patient:
    return await stores.patients.create(Patient(
        name=name,
        email=email,
        total_sessions=total_sessions,
        used_sessions=used_sessions,
    ))


def make_session(
    therapist_id: str = "t-1",
    date: str = MONDAY,
    start_time: str = "09:00",
    end_time: str = "10:00",
    status: SessionStatus = SessionStatus.SCHEDULED,
    patient_id: str = "p-1",
) -> Session:
    """Helper to create a Session record without going through the engine."""
    return Session(
        patient_id=patient_id,
        patient_name="Jan Kowalski",
        therapist_id=therapist_id,
        therapist_name="Waldemar Sikorski",
        date=date,
        start_time=start_time,
        end_time=end_time,
        status=status,
    )


class InterleavingStore:
    """Wraps a store so the named methods yield to the event loop after returning.

    Concurrent tasks then all complete their reads before any of them
    writes. Every method call is recorded in ``calls``.
    """

    def __init__(self, inner: Any, *yield_after: str) -> None:
        self._inner = inner
        self._yield_after = frozenset(yield_after)
        self.calls: list[str] = []

    def __getattr__(self, name: str) -> Any:
        method = getattr(self._inner, name)

        async def wrapped(*args: Any, **kwargs: Any) -> Any:
            self.calls.append(name)
            result = await method(*args, **kwargs)
            if name in self._yield_after:
                await asyncio.sleep(0)
            return result

        return wrapped
