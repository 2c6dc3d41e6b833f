"""Session, booking request, and reporting models."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from clinic_scheduler.schemas.patient_schema import utc_now
from clinic_scheduler.schemas.therapist_schema import new_id


class SessionStatus(str, Enum):
    SCHEDULED = "scheduled"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no-show"


class Session(BaseModel):
    """A single appointment pinned to a calendar date.

    Patient and therapist names are snapshots taken at booking time.
    """
    id: str = Field(default_factory=new_id)
    patient_id: str
    patient_name: str
    therapist_id: str
    therapist_name: str
    date: str  # YYYY-MM-DD
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    status: SessionStatus = SessionStatus.SCHEDULED
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_cancelled(self) -> bool:
        return self.status == SessionStatus.CANCELLED

    @property
    def reference(self) -> str:
        """Short human-facing booking reference."""
        return self.id[:8].upper()


class BookingRequest(BaseModel):
    """Booking intent as issued by the presentation layer."""
    patient_id: str
    therapist_id: str
    date: str
    start_time: str
    end_time: str
    notes: Optional[str] = None


class OpenSlot(BaseModel):
    """A bookable slot for a therapist on a concrete date."""
    therapist_id: str
    date: str
    start_time: str
    end_time: str


class DashboardStats(BaseModel):
    """Counts shown on the staff dashboard."""
    today_sessions: int = 0
    today_completed: int = 0
    week_sessions: int = 0
    month_completed: int = 0
