"""Tests for session status transitions and their package side effects."""

import asyncio
import dataclasses
import logging

import pytest

from clinic_scheduler.schemas.session_schema import SessionStatus
from clinic_scheduler.scheduling.errors import InvalidBookingRequest, SessionNotFound
from clinic_scheduler.scheduling.lifecycle import SessionLifecycleManager, balance_delta
from tests.conftest import ADMIN, InterleavingStore, add_patient, add_therapist, make_request


async def _booked(stores, engine, total_sessions=20, used_sessions=0):
    therapist = await add_therapist(stores)
    patient = await add_patient(stores, total_sessions=total_sessions, used_sessions=used_sessions)
    session = await engine.book(make_request(patient.id, therapist.id), ADMIN)
    return patient, session


class TestBalanceDelta:
    @pytest.mark.parametrize("previous", [SessionStatus.SCHEDULED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW])
    def test_entering_completed(self, previous):
        assert balance_delta(previous, SessionStatus.COMPLETED) == 1

    @pytest.mark.parametrize("new", [SessionStatus.SCHEDULED, SessionStatus.CANCELLED, SessionStatus.NO_SHOW])
    def test_leaving_completed(self, new):
        assert balance_delta(SessionStatus.COMPLETED, new) == -1

    def test_completed_to_completed(self):
        assert balance_delta(SessionStatus.COMPLETED, SessionStatus.COMPLETED) == 0

    def test_between_non_completed(self):
        assert balance_delta(SessionStatus.SCHEDULED, SessionStatus.CANCELLED) == 0
        assert balance_delta(SessionStatus.NO_SHOW, SessionStatus.SCHEDULED) == 0


class TestChangeStatus:
    @pytest.mark.asyncio
    async def test_complete_consumes_one(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine, total_sessions=20, used_sessions=0)

        change = await lifecycle.complete(session.id)

        assert change.previous_status == SessionStatus.SCHEDULED
        assert change.delta == 1
        assert change.session.status == SessionStatus.COMPLETED
        assert change.patient.used_sessions == 1
        assert change.patient.remaining_sessions == 19

    @pytest.mark.asyncio
    async def test_uncomplete_restores_balance(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine, used_sessions=3)

        await lifecycle.complete(session.id)
        await lifecycle.change_status(session.id, SessionStatus.SCHEDULED)

        assert (await stores.patients.get(patient.id)).used_sessions == 3

    @pytest.mark.asyncio
    async def test_completion_tracked_in_history(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)

        completed = await lifecycle.complete(session.id)
        reopened = await lifecycle.change_status(session.id, SessionStatus.SCHEDULED)

        assert completed.patient.sessions_history == [session.id]
        assert reopened.patient.sessions_history == []

    @pytest.mark.asyncio
    async def test_completed_to_cancelled_returns_session(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)

        await lifecycle.complete(session.id)
        change = await lifecycle.cancel(session.id)

        assert change.delta == -1
        assert (await stores.patients.get(patient.id)).used_sessions == 0

    @pytest.mark.asyncio
    async def test_repeat_complete_is_no_op(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)

        await lifecycle.complete(session.id)
        change = await lifecycle.complete(session.id)

        assert change.delta == 0
        assert change.patient is None
        assert (await stores.patients.get(patient.id)).used_sessions == 1

    @pytest.mark.asyncio
    async def test_decrement_floors_at_zero(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)
        await lifecycle.complete(session.id)
        await stores.patients.update(patient.id, {"used_sessions": 0})

        await lifecycle.cancel(session.id)

        assert (await stores.patients.get(patient.id)).used_sessions == 0

    @pytest.mark.asyncio
    async def test_no_show_does_not_consume(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)

        change = await lifecycle.mark_no_show(session.id)

        assert change.session.status == SessionStatus.NO_SHOW
        assert (await stores.patients.get(patient.id)).used_sessions == 0

    @pytest.mark.asyncio
    async def test_status_accepts_string_value(self, stores, engine, lifecycle):
        _, session = await _booked(stores, engine)
        change = await lifecycle.change_status(session.id, "no-show")
        assert change.session.status == SessionStatus.NO_SHOW

    @pytest.mark.asyncio
    async def test_unknown_status_rejected(self, stores, engine, lifecycle):
        _, session = await _booked(stores, engine)
        with pytest.raises(InvalidBookingRequest):
            await lifecycle.change_status(session.id, "done")
        assert (await stores.sessions.get(session.id)).status == SessionStatus.SCHEDULED

    @pytest.mark.asyncio
    async def test_missing_session(self, lifecycle):
        with pytest.raises(SessionNotFound):
            await lifecycle.complete("missing")

    @pytest.mark.asyncio
    async def test_missing_patient_logged_and_skipped(self, stores, engine, lifecycle, caplog):
        patient, session = await _booked(stores, engine)
        await stores.patients.delete(patient.id)

        with caplog.at_level(logging.WARNING):
            change = await lifecycle.complete(session.id)

        assert change.session.status == SessionStatus.COMPLETED
        assert change.patient is None
        assert "not found" in caplog.text

    @pytest.mark.asyncio
    async def test_concurrent_completes_count_once(self, stores, engine, booking_config):
        patient, session = await _booked(stores, engine)
        sessions = InterleavingStore(stores.sessions, "get", "swap_status")
        manager = SessionLifecycleManager(
            dataclasses.replace(stores, sessions=sessions), config=booking_config
        )

        changes = await asyncio.gather(*(manager.complete(session.id) for _ in range(5)))

        assert sessions.calls.count("swap_status") == 5
        assert sorted(c.delta for c in changes) == [0, 0, 0, 0, 1]
        assert (await stores.patients.get(patient.id)).used_sessions == 1

    @pytest.mark.asyncio
    async def test_completing_different_sessions_counts_each(self, stores, engine, lifecycle):
        therapist = await add_therapist(stores)
        patient = await add_patient(stores)
        first = await engine.book(
            make_request(patient.id, therapist.id, start_time="09:00", end_time="10:00"), ADMIN,
        )
        second = await engine.book(
            make_request(patient.id, therapist.id, start_time="10:00", end_time="11:00"), ADMIN,
        )

        await asyncio.gather(lifecycle.complete(first.id), lifecycle.complete(second.id))

        assert (await stores.patients.get(patient.id)).used_sessions == 2


class TestDeleteSession:
    @pytest.mark.asyncio
    async def test_delete_removes_record(self, stores, engine, lifecycle):
        _, session = await _booked(stores, engine)

        deleted = await lifecycle.delete_session(session.id)

        assert deleted.id == session.id
        assert await stores.sessions.get(session.id) is None

    @pytest.mark.asyncio
    async def test_deleting_completed_keeps_balance_by_default(self, stores, engine, lifecycle, caplog):
        patient, session = await _booked(stores, engine)
        await lifecycle.complete(session.id)

        with caplog.at_level(logging.WARNING):
            await lifecycle.delete_session(session.id)

        assert (await stores.patients.get(patient.id)).used_sessions == 1
        assert "balance left unchanged" in caplog.text

    @pytest.mark.asyncio
    async def test_deleting_completed_compensates_when_enabled(self, stores, engine, booking_config):
        manager = SessionLifecycleManager(
            stores, config=dataclasses.replace(booking_config, compensate_on_delete=True)
        )
        patient, session = await _booked(stores, engine)
        await manager.complete(session.id)

        await manager.delete_session(session.id)

        assert (await stores.patients.get(patient.id)).used_sessions == 0

    @pytest.mark.asyncio
    async def test_delete_frees_slot(self, stores, engine, lifecycle):
        patient, session = await _booked(stores, engine)
        await lifecycle.delete_session(session.id)

        rebooked = await engine.book(make_request(patient.id, session.therapist_id), ADMIN)
        assert rebooked.start_time == session.start_time

    @pytest.mark.asyncio
    async def test_delete_missing(self, lifecycle):
        with pytest.raises(SessionNotFound):
            await lifecycle.delete_session("missing")
