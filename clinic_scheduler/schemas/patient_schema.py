"""Patient records and signed-in user records."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from clinic_scheduler.schemas.therapist_schema import new_id


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Patient(BaseModel):
    """A patient and their session package.

    ``used_sessions`` is only moved by the balance tracker; the package
    cap is enforced at booking time, not here.
    """
    id: str = Field(default_factory=new_id)
    name: str
    phone: Optional[str] = None
    email: Optional[str] = None
    total_sessions: int = Field(default=0, ge=0)
    used_sessions: int = Field(default=0, ge=0)
    # Ids of completed sessions counted against the package.
    sessions_history: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    crm_patient_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def remaining_sessions(self) -> int:
        """Negative when an admin shrank the package below what was used."""
        return self.total_sessions - self.used_sessions

    @property
    def package_exhausted(self) -> bool:
        return self.remaining_sessions <= 0


class UserRole(str, Enum):
    ADMIN = "admin"
    PATIENT = "patient"


class AppUser(BaseModel):
    """Role record keyed by the identity provider's uid."""
    uid: str
    email: str
    role: UserRole
    patient_id: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
