# ============================================================================
# booking_app/api/v1/availability.py
# Slot enumeration and single-slot checks - thin HTTP layer
# ============================================================================
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from booking_app.api.dependencies import (
    get_conflict_service,
    get_repository,
    get_slot_service,
    get_tenant_id,
)
from booking_app.core.exceptions import ServiceNotFound
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.schemas.scheduling import (
    AvailabilityCheckRequest,
    AvailabilityCheckResponse,
    TimeSlot,
)
from booking_app.services.scheduling.conflict_service import ConflictService
from booking_app.services.scheduling.slot_service import SlotService

router = APIRouter(prefix="/availability", tags=["availability"])


@router.get("/slots", response_model=List[TimeSlot])
def list_slots(
        employee_id: UUID = Query(..., description="Employee to enumerate slots for"),
        day: date = Query(..., alias="date", description="Calendar date"),
        service_id: Optional[UUID] = Query(None, description="Use this service's duration plus buffers"),
        duration: Optional[int] = Query(None, gt=0, description="Explicit duration in minutes"),
        interval: Optional[int] = Query(None, gt=0, description="Minutes between candidate starts"),
        tenant_id: UUID = Depends(get_tenant_id),
        repository: SchedulingRepository = Depends(get_repository),
        slot_service: SlotService = Depends(get_slot_service)
):
    """
    Candidate start times for one employee on one day.
    Either service_id or duration is required.
    """
    if service_id is not None:
        service = repository.get_service(tenant_id, service_id)
        if not service:
            raise ServiceNotFound(service_id)
        duration = service.booked_duration
    elif duration is None:
        raise HTTPException(status_code=422, detail="Either service_id or duration is required")

    return slot_service.generate_slots(tenant_id, employee_id, day, duration, interval)


@router.post("/check", response_model=AvailabilityCheckResponse)
def check_availability(
        request: AvailabilityCheckRequest,
        tenant_id: UUID = Depends(get_tenant_id),
        conflict_service: ConflictService = Depends(get_conflict_service)
):
    """Whether the employee can take a booking of the given length at the given time."""
    result = conflict_service.check_availability(
        tenant_id,
        request.employee_id,
        request.date,
        request.start_time,
        request.duration,
        exclude_appointment_id=request.exclude_appointment_id,
    )
    return AvailabilityCheckResponse(available=result.available, reason=result.reason)
