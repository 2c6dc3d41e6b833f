"""
Package balance tracker: the only sanctioned mutator of used_sessions.

Both adjustments are single atomic store operations rather than
read-modify-write, so concurrent status changes on one patient's
sessions cannot lose an update. Remaining balance is always derived
(``total_sessions - used_sessions``) and never stored.
"""

import logging
from typing import Optional

from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.stores.base import PatientStore

logger = logging.getLogger(__name__)


class PackageBalanceTracker:
    """Adjusts and reports a patient's package consumption."""

    def __init__(self, patients: PatientStore) -> None:
        self._patients = patients

    async def increment_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        """Consume one session. Missing patients are logged and skipped."""
        patient = await self._patients.increment_used(patient_id, session_id)
        if patient is None:
            logger.warning("Balance increment skipped: patient %s not found", patient_id)
            return None
        logger.info(
            "Patient %s used sessions -> %d/%d",
            patient_id, patient.used_sessions, patient.total_sessions,
        )
        return patient

    async def decrement_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        """Return one session to the package; a no-op at zero."""
        patient = await self._patients.decrement_used(patient_id, session_id)
        if patient is None:
            logger.warning("Balance decrement skipped: patient %s not found", patient_id)
            return None
        logger.info(
            "Patient %s used sessions -> %d/%d",
            patient_id, patient.used_sessions, patient.total_sessions,
        )
        return patient

    async def remaining(self, patient_id: str) -> Optional[int]:
        patient = await self._patients.get(patient_id)
        return patient.remaining_sessions if patient else None
