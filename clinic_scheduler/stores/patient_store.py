"""
In-memory patient records with atomic package counters.

In production this is the ``patients`` document collection, and the
counters map to the database's server-side increment.
"""

import asyncio
import logging
from typing import Any, Optional

from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.utils import normalize_email

logger = logging.getLogger(__name__)


class InMemoryPatientStore:
    def __init__(self) -> None:
        self._patients: dict[str, Patient] = {}
        self._counter_lock = asyncio.Lock()

    async def list_all(self) -> list[Patient]:
        """All patients ordered by name."""
        return [p.model_copy(deep=True) for p in sorted(self._patients.values(), key=lambda p: p.name)]

    async def get(self, patient_id: str) -> Optional[Patient]:
        patient = self._patients.get(patient_id)
        return patient.model_copy(deep=True) if patient else None

    async def find_by_email(self, email: str) -> Optional[Patient]:
        wanted = normalize_email(email)
        for patient in self._patients.values():
            if wanted and normalize_email(patient.email) == wanted:
                return patient.model_copy(deep=True)
        return None

    async def create(self, patient: Patient) -> Patient:
        self._patients[patient.id] = patient.model_copy(deep=True)
        return patient.model_copy(deep=True)

    async def update(self, patient_id: str, patch: dict[str, Any]) -> Optional[Patient]:
        async with self._counter_lock:
            current = self._patients.get(patient_id)
            if current is None:
                return None
            updated = Patient.model_validate({**current.model_dump(), **patch, "id": patient_id})
            self._patients[patient_id] = updated
        return updated.model_copy(deep=True)

    async def delete(self, patient_id: str) -> bool:
        return self._patients.pop(patient_id, None) is not None

    async def increment_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        async with self._counter_lock:
            current = self._patients.get(patient_id)
            if current is None:
                return None
            history = list(current.sessions_history)
            if session_id and session_id not in history:
                history.append(session_id)
            updated = current.model_copy(update={
                "used_sessions": current.used_sessions + 1,
                "sessions_history": history,
            })
            self._patients[patient_id] = updated
        return updated.model_copy(deep=True)

    async def decrement_used(
        self, patient_id: str, session_id: Optional[str] = None
    ) -> Optional[Patient]:
        async with self._counter_lock:
            current = self._patients.get(patient_id)
            if current is None:
                return None
            updated = current.model_copy(update={
                "used_sessions": max(0, current.used_sessions - 1),
                "sessions_history": [s for s in current.sessions_history if s != session_id],
            })
            self._patients[patient_id] = updated
        return updated.model_copy(deep=True)
