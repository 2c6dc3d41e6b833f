"""
Role resolution for signed-in users.

The identity provider hands over ``(uid, email)``. On first sight a user
record is created: allow-listed emails become admins, everyone else is a
patient, linked to an existing patient record when the email matches.
The resolved ``Role`` is passed explicitly into every booking call;
there is no ambient "current user".
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from clinic_scheduler.config import settings
from clinic_scheduler.schemas.patient_schema import AppUser, UserRole
from clinic_scheduler.stores.base import PatientStore, UserStore
from clinic_scheduler.utils import normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdminRole:
    """Staff member acting on behalf of any patient."""


@dataclass(frozen=True)
class PatientRole:
    """Self-service patient; ``patient_id`` is None until linked."""

    patient_id: Optional[str] = None


Role = Union[AdminRole, PatientRole]


def role_for(user: AppUser) -> Role:
    if user.role == UserRole.ADMIN:
        return AdminRole()
    return PatientRole(patient_id=user.patient_id)


class IdentityResolver:
    """Maps identity-provider users onto clinic roles."""

    def __init__(
        self,
        users: UserStore,
        patients: PatientStore,
        admin_emails: Optional[Iterable[str]] = None,
    ) -> None:
        self._users = users
        self._patients = patients
        emails = settings.access.admin_emails if admin_emails is None else admin_emails
        self._admin_emails = frozenset(e.strip().lower() for e in emails)

    def is_admin_email(self, email: str) -> bool:
        return normalize_email(email) in self._admin_emails

    async def ensure_user(self, uid: str, email: str) -> AppUser:
        """Return the stored user for ``uid``, creating it on first sign-in."""
        existing = await self._users.get(uid)
        if existing is not None:
            return existing

        normalized = normalize_email(email) or ""
        role = UserRole.ADMIN if self.is_admin_email(normalized) else UserRole.PATIENT

        patient_id = None
        if role == UserRole.PATIENT and normalized:
            patient = await self._patients.find_by_email(normalized)
            if patient is not None:
                patient_id = patient.id

        user = await self._users.put(
            AppUser(uid=uid, email=normalized, role=role, patient_id=patient_id)
        )
        logger.info(
            "User %s registered as %s%s",
            uid, role.value, f" (patient {patient_id})" if patient_id else "",
        )
        return user

    async def resolve_role(self, uid: str, email: str) -> Role:
        return role_for(await self.ensure_user(uid, email))

    async def link_user_to_patient(self, uid: str, patient_id: str) -> Optional[AppUser]:
        """Attach a patient record to a user who signed up before it existed."""
        user = await self._users.link_patient(uid, patient_id)
        if user is None:
            logger.warning("Cannot link patient %s: user %s not found", patient_id, uid)
        return user
