"""
Pydantic schemas for appointment create/update requests
"""
import datetime as dt
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from booking_app.models.appointment import AppointmentStatus, PaymentStatus
from booking_app.services.scheduling.time_utils import TimeOfDay


# ============================================================================
# Request Schemas (for incoming data)
# ============================================================================

class ExtraItem(BaseModel):
    """An add-on requested with a booking"""
    id: UUID
    quantity: int = Field(1, ge=1)


class AppointmentCreate(BaseModel):
    client_id: UUID
    employee_id: UUID
    service_id: UUID
    date: dt.date
    start_time: str = Field(..., description="Start time as HH:MM")
    notes: Optional[str] = None
    client_notes: Optional[str] = None
    source: str = Field(default="internal", max_length=30)
    created_by_id: Optional[UUID] = None
    extras: List[ExtraItem] = Field(default_factory=list)

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: str) -> str:
        return str(TimeOfDay.parse(v))


NON_NULLABLE_UPDATE_FIELDS = (
    "client_id",
    "employee_id",
    "service_id",
    "date",
    "start_time",
    "status",
    "payment_status",
)


class AppointmentUpdate(BaseModel):
    """
    Partial update. Only fields explicitly sent are applied; sending
    ``extras`` (even an empty list) replaces all extras of the appointment.
    """
    client_id: Optional[UUID] = None
    employee_id: Optional[UUID] = None
    service_id: Optional[UUID] = None
    date: Optional[dt.date] = None
    start_time: Optional[str] = None
    status: Optional[AppointmentStatus] = None
    notes: Optional[str] = None
    client_notes: Optional[str] = None
    payment_status: Optional[PaymentStatus] = None
    payment_method: Optional[str] = None
    discount: Optional[Decimal] = Field(None, ge=0)
    discount_type: Optional[str] = None
    cancel_reason: Optional[str] = None
    extras: Optional[List[ExtraItem]] = None

    @field_validator("start_time")
    @classmethod
    def validate_start_time(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return str(TimeOfDay.parse(v))

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "AppointmentUpdate":
        # Omit a field to keep its value; these columns cannot be cleared
        cleared = sorted(
            field for field in NON_NULLABLE_UPDATE_FIELDS
            if field in self.model_fields_set and getattr(self, field) is None
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class AppointmentCancelRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=500)
