# ============================================================================
# FILE: booking_app/api/dependencies.py
# Tenant resolution and service wiring for the HTTP layer
# ============================================================================
from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from booking_app.config.database import get_db
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.services.appointment.appointment_query_service import AppointmentQueryService
from booking_app.services.appointment.appointment_service import AppointmentService
from booking_app.services.appointment.booking_lock import get_booking_lock
from booking_app.services.notification.notifier import CeleryNotifier
from booking_app.services.scheduling.conflict_service import ConflictService
from booking_app.services.scheduling.slot_service import SlotService
from booking_app.services.webhook.dispatcher import CeleryWebhookDispatcher


def get_tenant_id(x_tenant_id: UUID = Header(..., alias="X-Tenant-ID")) -> UUID:
    """
    Tenant of the current request.

    Authentication and tenant routing happen upstream; the gateway forwards
    the resolved tenant in the X-Tenant-ID header.
    """
    return x_tenant_id


def get_repository(db: Session = Depends(get_db)) -> SchedulingRepository:
    return SchedulingRepository(db)


def get_slot_service(repository: SchedulingRepository = Depends(get_repository)) -> SlotService:
    return SlotService(repository)


def get_conflict_service(repository: SchedulingRepository = Depends(get_repository)) -> ConflictService:
    return ConflictService(repository)


def get_appointment_service(repository: SchedulingRepository = Depends(get_repository)) -> AppointmentService:
    return AppointmentService(
        repository,
        notifier=CeleryNotifier(),
        webhook_dispatcher=CeleryWebhookDispatcher(),
        booking_lock=get_booking_lock(),
    )


def get_query_service(repository: SchedulingRepository = Depends(get_repository)) -> AppointmentQueryService:
    return AppointmentQueryService(repository)
