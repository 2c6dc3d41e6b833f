"""Therapist and availability window records."""

import uuid

from pydantic import BaseModel, Field, model_validator

# Zero-padded 24h wall-clock time, e.g. "08:00" or "19:30".
HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


def new_id() -> str:
    return uuid.uuid4().hex


class Therapist(BaseModel):
    """A bookable therapist."""
    id: str = Field(default_factory=new_id)
    name: str
    specialization: str = ""
    color: str = ""


class AvailabilityWindow(BaseModel):
    """A recurring weekly range during which a therapist accepts bookings."""
    id: str = Field(default_factory=new_id)
    therapist_id: str
    day_of_week: int = Field(ge=0, le=6)  # 0 = Sunday
    start_time: str = Field(pattern=HHMM_PATTERN)
    end_time: str = Field(pattern=HHMM_PATTERN)
    is_active: bool = True

    @model_validator(mode="after")
    def _start_before_end(self) -> "AvailabilityWindow":
        # Zero-padded HH:MM strings order the same way as the times they encode.
        if self.start_time >= self.end_time:
            raise ValueError(
                f"start_time {self.start_time} must be before end_time {self.end_time}"
            )
        return self
