"""
Session lifecycle: status transitions and their package side effects.

Sessions start ``scheduled`` and move to ``completed``, ``cancelled`` or
``no-show``. Admins may move any status to any other, so the graph is
not one-way. Only the ``completed`` boundary touches the package:

    * entering ``completed``  -> used_sessions + 1
    * leaving ``completed``   -> used_sessions - 1 (floored at 0)
    * anything else           -> no change

Usage:
    manager = SessionLifecycleManager(stores)
    change = await manager.change_status(session_id, SessionStatus.COMPLETED)
"""

from dataclasses import dataclass
from typing import Optional, Union

from clinic_scheduler.config import BookingConfig, settings
from clinic_scheduler.logging_context import get_request_logger
from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.schemas.session_schema import Session, SessionStatus
from clinic_scheduler.scheduling.balance import PackageBalanceTracker
from clinic_scheduler.scheduling.errors import InvalidBookingRequest, SessionNotFound
from clinic_scheduler.stores.base import ClinicStores

logger = get_request_logger(__name__)


def balance_delta(previous: SessionStatus, new: SessionStatus) -> int:
    """Package adjustment implied by moving from ``previous`` to ``new``."""
    if previous == new:
        return 0
    if new == SessionStatus.COMPLETED:
        return 1
    if previous == SessionStatus.COMPLETED:
        return -1
    return 0


def _coerce_status(status: Union[SessionStatus, str]) -> SessionStatus:
    try:
        return SessionStatus(status)
    except ValueError:
        valid = [s.value for s in SessionStatus]
        raise InvalidBookingRequest(
            f"Unknown session status {status!r}. Valid: {valid}"
        ) from None


@dataclass
class StatusChange:
    """Outcome of a status transition."""

    session: Session
    previous_status: SessionStatus
    delta: int
    patient: Optional[Patient] = None


class SessionLifecycleManager:
    """Applies status transitions and keeps package balances in step."""

    def __init__(
        self,
        stores: ClinicStores,
        balance: Optional[PackageBalanceTracker] = None,
        config: Optional[BookingConfig] = None,
    ) -> None:
        self._stores = stores
        self._balance = balance or PackageBalanceTracker(stores.patients)
        self._config = config or settings.booking

    async def change_status(
        self, session_id: str, status: Union[SessionStatus, str]
    ) -> StatusChange:
        """Set a session's status and adjust the patient's balance.

        Raises:
            InvalidBookingRequest: ``status`` is not a known value.
            SessionNotFound: No session with this id.
        """
        new_status = _coerce_status(status)
        swapped = await self._stores.sessions.swap_status(session_id, new_status)
        if swapped is None:
            raise SessionNotFound(session_id)
        previous, session = swapped

        delta = balance_delta(previous, new_status)
        patient = None
        if delta > 0:
            patient = await self._balance.increment_used(session.patient_id, session.id)
        elif delta < 0:
            patient = await self._balance.decrement_used(session.patient_id, session.id)

        logger.info(
            "Session %s status %s -> %s",
            session.reference, previous.value, new_status.value,
        )
        return StatusChange(session=session, previous_status=previous, delta=delta, patient=patient)

    async def complete(self, session_id: str) -> StatusChange:
        return await self.change_status(session_id, SessionStatus.COMPLETED)

    async def cancel(self, session_id: str) -> StatusChange:
        return await self.change_status(session_id, SessionStatus.CANCELLED)

    async def mark_no_show(self, session_id: str) -> StatusChange:
        return await self.change_status(session_id, SessionStatus.NO_SHOW)

    async def delete_session(self, session_id: str) -> Session:
        """Remove a session record outright.

        Unlike cancellation, deletion does not return a completed session
        to the package unless ``compensate_on_delete`` is enabled.
        """
        session = await self._stores.sessions.get(session_id)
        if session is None:
            raise SessionNotFound(session_id)
        if not await self._stores.sessions.delete(session_id):
            raise SessionNotFound(session_id)

        if session.status == SessionStatus.COMPLETED:
            if self._config.compensate_on_delete:
                await self._balance.decrement_used(session.patient_id, session.id)
            else:
                logger.warning(
                    "Completed session %s deleted; patient %s balance left unchanged",
                    session.reference, session.patient_id,
                )
        logger.info("Session %s deleted", session.reference)
        return session
