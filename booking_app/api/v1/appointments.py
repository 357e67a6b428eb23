# ============================================================================
# booking_app/api/v1/appointments.py
# Appointment booking endpoints - thin HTTP layer
# ============================================================================
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, Path, Query

from booking_app.api.dependencies import get_appointment_service, get_query_service, get_tenant_id
from booking_app.models.appointment import AppointmentStatus
from booking_app.schemas.appointment import AppointmentCancelRequest, AppointmentCreate, AppointmentUpdate
from booking_app.services.appointment.appointment_query_service import AppointmentQueryService
from booking_app.services.appointment.appointment_service import AppointmentService

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _check_range(start_date: date, end_date: date) -> None:
    if end_date < start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")


@router.get("")
def list_appointments(
        start_date: date = Query(..., description="First day, inclusive"),
        end_date: date = Query(..., description="Last day, inclusive"),
        employee_id: Optional[UUID] = Query(None, description="Only this employee's appointments"),
        status: Optional[List[AppointmentStatus]] = Query(None, description="Only these statuses"),
        tenant_id: UUID = Depends(get_tenant_id),
        query_service: AppointmentQueryService = Depends(get_query_service)
):
    """Appointments in a date range, ordered by date and start time."""
    _check_range(start_date, end_date)
    appointments = query_service.list_by_date_range(tenant_id, start_date, end_date, employee_id, status)
    return [appointment.to_dict() for appointment in appointments]


@router.get("/stats")
def appointment_stats(
        start_date: date = Query(..., description="First day, inclusive"),
        end_date: date = Query(..., description="Last day, inclusive"),
        tenant_id: UUID = Depends(get_tenant_id),
        query_service: AppointmentQueryService = Depends(get_query_service)
):
    """Counts, revenue and rates for a date range."""
    _check_range(start_date, end_date)
    return query_service.get_stats(tenant_id, start_date, end_date)


@router.post("", status_code=201)
def create_appointment(
        data: AppointmentCreate,
        tenant_id: UUID = Depends(get_tenant_id),
        appointment_service: AppointmentService = Depends(get_appointment_service)
):
    """
    Book an appointment. Duration and price come from the service;
    409 when the slot is taken or outside the employee's schedule.
    """
    appointment = appointment_service.create_appointment(tenant_id, data)
    return appointment.to_dict()


@router.patch("/{appointment_id}")
def update_appointment(
        data: AppointmentUpdate,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        actor_id: Optional[str] = Header(None, alias="X-User-ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        appointment_service: AppointmentService = Depends(get_appointment_service)
):
    """Partial update; moving the appointment re-checks availability."""
    appointment = appointment_service.update_appointment(tenant_id, appointment_id, data, actor_id)
    return appointment.to_dict()


@router.post("/{appointment_id}/cancel")
def cancel_appointment(
        data: AppointmentCancelRequest,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        actor_id: Optional[str] = Header(None, alias="X-User-ID"),
        tenant_id: UUID = Depends(get_tenant_id),
        appointment_service: AppointmentService = Depends(get_appointment_service)
):
    appointment = appointment_service.cancel_appointment(tenant_id, appointment_id, data.reason, actor_id)
    return appointment.to_dict()
