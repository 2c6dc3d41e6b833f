"""
Patient administration and package alerts.

Admin edits may shrink ``total_sessions`` below what has already been
used; the resulting negative balance is reported as exhausted rather
than clamped. ``used_sessions`` is not editable here: it only moves
through session status transitions.
"""

import logging
from typing import Any, Optional

from clinic_scheduler import events
from clinic_scheduler.config import BookingConfig, settings
from clinic_scheduler.schemas.patient_schema import Patient
from clinic_scheduler.scheduling.errors import InvalidBookingRequest, PatientNotFound
from clinic_scheduler.stores.base import PatientStore
from clinic_scheduler.utils import normalize_email, normalize_phone

logger = logging.getLogger(__name__)

_EDITABLE_FIELDS = frozenset({"name", "phone", "email", "total_sessions", "notes", "crm_patient_id"})


class PatientRegistry:
    """Create, edit, and inspect patient records."""

    def __init__(self, patients: PatientStore, config: Optional[BookingConfig] = None) -> None:
        self._patients = patients
        self._config = config or settings.booking

    async def create_patient(
        self,
        name: str,
        phone: Optional[str] = None,
        email: Optional[str] = None,
        total_sessions: Optional[int] = None,
        notes: Optional[str] = None,
        crm_patient_id: Optional[str] = None,
    ) -> Patient:
        if not name or not name.strip():
            raise InvalidBookingRequest("Patient name is required")
        package = self._config.default_package_size if total_sessions is None else total_sessions
        if package < 0:
            raise InvalidBookingRequest(f"total_sessions must be >= 0, got {package}")

        patient = await self._patients.create(Patient(
            name=name.strip(),
            phone=normalize_phone(phone) if phone else None,
            email=normalize_email(email),
            total_sessions=package,
            notes=notes,
            crm_patient_id=crm_patient_id,
        ))
        logger.info("Patient created: %s (%s), package %d", patient.name, patient.id, package)
        await events.publish(events.PATIENT_CREATED, patient)
        return patient

    async def get_patient(self, patient_id: str) -> Patient:
        patient = await self._patients.get(patient_id)
        if patient is None:
            raise PatientNotFound(patient_id)
        return patient

    async def list_patients(self) -> list[Patient]:
        return await self._patients.list_all()

    async def update_patient(self, patient_id: str, **changes: Any) -> Patient:
        unknown = set(changes) - _EDITABLE_FIELDS
        if unknown:
            raise InvalidBookingRequest(f"Fields not editable: {sorted(unknown)}")
        if changes.get("total_sessions") is not None and changes["total_sessions"] < 0:
            raise InvalidBookingRequest("total_sessions must be >= 0")
        if "email" in changes:
            changes["email"] = normalize_email(changes["email"])
        if changes.get("phone"):
            changes["phone"] = normalize_phone(changes["phone"])

        updated = await self._patients.update(patient_id, changes)
        if updated is None:
            raise PatientNotFound(patient_id)
        if updated.remaining_sessions < 0:
            logger.warning(
                "Patient %s package now below usage (%d/%d)",
                patient_id, updated.used_sessions, updated.total_sessions,
            )
        return updated

    async def delete_patient(self, patient_id: str) -> None:
        """Irreversibly remove a patient. Their sessions are kept."""
        if not await self._patients.delete(patient_id):
            raise PatientNotFound(patient_id)
        logger.info("Patient %s deleted", patient_id)

    async def patients_near_renewal(self, threshold: Optional[int] = None) -> list[Patient]:
        """Patients whose remaining balance is at or below the warning threshold."""
        limit = self._config.renewal_warning_threshold if threshold is None else threshold
        return [p for p in await self._patients.list_all() if p.remaining_sessions <= limit]

    async def exhausted_patients(self) -> list[Patient]:
        return [p for p in await self._patients.list_all() if p.package_exhausted]
