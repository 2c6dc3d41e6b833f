"""Tests for dashboard statistics."""

from datetime import date

import pytest

from clinic_scheduler.scheduling.reports import dashboard_stats, month_bounds, week_bounds
from tests.conftest import ADMIN, add_patient, add_therapist, make_request


class TestBounds:
    def test_week_runs_monday_to_sunday(self):
        assert week_bounds(date(2025, 3, 13)) == ("2025-03-10", "2025-03-16")

    def test_week_from_sunday(self):
        assert week_bounds(date(2025, 3, 16)) == ("2025-03-10", "2025-03-16")

    def test_month_february(self):
        assert month_bounds(date(2024, 2, 10)) == ("2024-02-01", "2024-02-29")


class TestDashboardStats:
    @pytest.mark.asyncio
    async def test_counts(self, stores, engine, lifecycle):
        therapist = await add_therapist(
            stores, windows=((1, "09:00", "12:00"), (4, "09:00", "12:00")),
        )
        patient = await add_patient(stores)
        monday_a = await engine.book(
            make_request(patient.id, therapist.id, start_time="09:00", end_time="10:00"), ADMIN,
        )
        monday_b = await engine.book(
            make_request(patient.id, therapist.id, start_time="10:00", end_time="11:00"), ADMIN,
        )
        monday_c = await engine.book(
            make_request(patient.id, therapist.id, start_time="11:00", end_time="12:00"), ADMIN,
        )
        await engine.book(make_request(patient.id, therapist.id, date="2025-03-13"), ADMIN)
        earlier = await engine.book(
            make_request(patient.id, therapist.id, date="2025-03-03"), ADMIN,
        )

        await lifecycle.complete(monday_a.id)
        await lifecycle.cancel(monday_b.id)
        await lifecycle.mark_no_show(monday_c.id)
        await lifecycle.complete(earlier.id)

        stats = await dashboard_stats(stores.sessions, date(2025, 3, 10))

        assert stats.today_sessions == 2
        assert stats.today_completed == 1
        assert stats.week_sessions == 3
        assert stats.month_completed == 2

    @pytest.mark.asyncio
    async def test_empty(self, stores):
        stats = await dashboard_stats(stores.sessions, date(2025, 3, 10))
        assert stats.today_sessions == 0
        assert stats.month_completed == 0
