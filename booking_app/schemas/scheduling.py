"""
Pydantic schemas for availability checks and slot enumeration
"""
from datetime import date
from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from booking_app.services.scheduling.time_utils import TimeOfDay


class SlotWarning(str, Enum):
    """Soft-policy violations that keep a slot bookable"""
    NO_EMPLOYEE_SCHEDULE = "NO_EMPLOYEE_SCHEDULE"
    OUTSIDE_BUSINESS_HOURS = "OUTSIDE_BUSINESS_HOURS"


class TimeSlot(BaseModel):
    """Candidate start time produced by the slot generator"""
    time: str = Field(..., description="Start time as HH:MM")
    available: bool
    warning: Optional[SlotWarning] = None
    warning_message: Optional[str] = None

    @property
    def minutes(self) -> int:
        return TimeOfDay.parse(self.time).minutes


class AvailabilityCheckRequest(BaseModel):
    """Schema for a single availability check"""
    employee_id: UUID
    date: date
    start_time: str = Field(..., description="Start time as HH:MM")
    duration: int = Field(..., gt=0, description="Duration in minutes")
    exclude_appointment_id: Optional[UUID] = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return str(TimeOfDay.parse(v))


class AvailabilityCheckResponse(BaseModel):
    available: bool
    reason: Optional[str] = None
