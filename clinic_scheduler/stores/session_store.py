"""
In-memory session store with conditional writes.

In production this is the ``sessions`` document collection. The
``*_unless_conflict`` methods stand in for a store-level transaction:
the overlap re-check and the write happen under one lock, so two
concurrent bookings for the same therapist and time cannot both commit.
"""

import asyncio
import logging
from typing import Iterable, Optional

from clinic_scheduler.schemas.patient_schema import utc_now
from clinic_scheduler.schemas.session_schema import Session, SessionStatus
from clinic_scheduler.scheduling.conflicts import find_conflict
from clinic_scheduler.scheduling.errors import InvalidBookingRequest, SlotConflict

logger = logging.getLogger(__name__)


def _ordered(sessions: Iterable[Session]) -> list[Session]:
    return [s.model_copy() for s in sorted(sessions, key=lambda s: (s.date, s.start_time))]


class InMemorySessionStore:
    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}
        self._write_lock = asyncio.Lock()

    async def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        return session.model_copy() if session else None

    async def list_all(self) -> list[Session]:
        return _ordered(self._sessions.values())

    async def list_by_date(self, date: str) -> list[Session]:
        return _ordered(s for s in self._sessions.values() if s.date == date)

    async def list_by_date_range(self, start_date: str, end_date: str) -> list[Session]:
        """Sessions with ``start_date <= date <= end_date`` (ISO dates compare lexically)."""
        return _ordered(
            s for s in self._sessions.values() if start_date <= s.date <= end_date
        )

    async def list_by_therapist(self, therapist_id: str) -> list[Session]:
        return _ordered(s for s in self._sessions.values() if s.therapist_id == therapist_id)

    async def create(self, session: Session) -> Session:
        """Unconditional write for bulk imports; bookings go through ``insert_unless_conflict``."""
        async with self._write_lock:
            self._sessions[session.id] = session.model_copy()
        return session.model_copy()

    async def insert_unless_conflict(self, session: Session) -> Session:
        async with self._write_lock:
            clash = find_conflict(
                self._sessions.values(),
                session.therapist_id,
                session.date,
                session.start_time,
                session.end_time,
            )
            if clash is not None:
                raise SlotConflict(
                    session.therapist_id, session.date,
                    session.start_time, session.end_time, conflicting=clash.model_copy(),
                )
            self._sessions[session.id] = session.model_copy()
        logger.debug("Session committed: %s", session.id)
        return session.model_copy()

    async def update_status(self, session_id: str, status: SessionStatus) -> Optional[Session]:
        """Set a status without reporting the previous one; no package side effects."""
        async with self._write_lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            updated = current.model_copy(update={"status": status, "updated_at": utc_now()})
            self._sessions[session_id] = updated
        return updated.model_copy()

    async def swap_status(
        self, session_id: str, status: SessionStatus
    ) -> Optional[tuple[SessionStatus, Session]]:
        async with self._write_lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            updated = current.model_copy(update={"status": status, "updated_at": utc_now()})
            self._sessions[session_id] = updated
        return current.status, updated.model_copy()

    async def reschedule_unless_conflict(
        self, session_id: str, date: str, start_time: str, end_time: str
    ) -> Optional[Session]:
        async with self._write_lock:
            current = self._sessions.get(session_id)
            if current is None:
                return None
            if current.is_cancelled:
                raise InvalidBookingRequest(
                    f"Session {session_id} is cancelled and cannot be moved"
                )
            clash = find_conflict(
                self._sessions.values(), current.therapist_id, date, start_time, end_time,
                exclude_session_id=session_id,
            )
            if clash is not None:
                raise SlotConflict(
                    current.therapist_id, date, start_time, end_time,
                    conflicting=clash.model_copy(),
                )
            updated = current.model_copy(update={
                "date": date,
                "start_time": start_time,
                "end_time": end_time,
                "updated_at": utc_now(),
            })
            self._sessions[session_id] = updated
        return updated.model_copy()

    async def delete(self, session_id: str) -> bool:
        async with self._write_lock:
            return self._sessions.pop(session_id, None) is not None
