# ============================================================================
# booking_app/services/appointment/appointment_service.py
# ============================================================================
"""
Booking transaction: create, reschedule/update and cancel appointments.

The availability check and the write it guards run under the booking lock
for the target (tenant, employee, date). Notifications and webhooks go out
after the commit and never undo it.
"""
import logging
from contextlib import nullcontext
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from uuid import UUID

from booking_app.core.exceptions import (
    AppointmentNotFound,
    InvalidStatusTransition,
    ServiceNotFound,
    SlotUnavailable,
)
from booking_app.models.appointment import (
    Appointment,
    AppointmentStatus,
    PaymentStatus,
    TERMINAL_STATUSES,
)
from booking_app.models.extra import AppointmentExtra
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.schemas.appointment import AppointmentCreate, AppointmentUpdate, ExtraItem
from booking_app.services.appointment.booking_lock import get_booking_lock
from booking_app.services.notification.notifier import (
    NotificationChannel,
    NotificationType,
    Notifier,
    notification_for_status,
)
from booking_app.services.scheduling.conflict_service import ConflictService
from booking_app.services.scheduling.time_utils import TimeOfDay
from booking_app.services.webhook.dispatcher import WebhookDispatcher

logger = logging.getLogger(__name__)

# Copied verbatim from the request onto the appointment
PLAIN_FIELDS = (
    "client_id",
    "notes",
    "client_notes",
    "payment_status",
    "payment_method",
    "discount",
    "discount_type",
    "cancel_reason",
)


class AppointmentService:
    """Handles appointment writes"""

    def __init__(
            self,
            repository: SchedulingRepository,
            notifier: Notifier,
            webhook_dispatcher: WebhookDispatcher,
            booking_lock=None,
            conflict_service: Optional[ConflictService] = None
    ):
        self.repository = repository
        self.notifier = notifier
        self.webhook_dispatcher = webhook_dispatcher
        self.booking_lock = booking_lock or get_booking_lock()
        self.conflicts = conflict_service or ConflictService(repository)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_appointment(self, tenant_id: UUID, data: AppointmentCreate) -> Appointment:
        service = self.repository.get_service(tenant_id, data.service_id)
        if not service:
            raise ServiceNotFound(data.service_id)

        duration = service.booked_duration
        start_time = TimeOfDay.parse(data.start_time)
        end_time = start_time.plus(duration)

        with self.booking_lock.hold(tenant_id, data.employee_id, data.date):
            availability = self.conflicts.check_availability(
                tenant_id, data.employee_id, data.date, start_time, duration
            )
            if not availability.available:
                raise SlotUnavailable(availability.reason)

            appointment = Appointment(
                tenant_id=tenant_id,
                client_id=data.client_id,
                employee_id=data.employee_id,
                service_id=service.id,
                date=data.date,
                start_time=start_time,
                end_time=end_time,
                duration=duration,
                price=service.price,
                notes=data.notes,
                client_notes=data.client_notes,
                source=data.source or "internal",
                status=AppointmentStatus.PENDING if service.requires_confirm else AppointmentStatus.CONFIRMED,
                payment_status=PaymentStatus.PENDING,
                created_by_id=data.created_by_id,
            )
            appointment.extras = self._snapshot_extras(tenant_id, data.extras)

            try:
                self.repository.add(appointment)
                self.repository.increment_client_visits(data.client_id, datetime.now(timezone.utc))
                self.repository.commit()
            except Exception:
                self.repository.rollback()
                raise

        self.repository.refresh(appointment)
        logger.info(
            f"Appointment {appointment.id} booked for employee {appointment.employee_id} "
            f"on {appointment.date} {appointment.start_time}-{appointment.end_time} ({appointment.status.value})"
        )

        self._notify(appointment.id, NotificationType.APPOINTMENT_CREATED)
        self._dispatch_webhook(appointment.id)

        return appointment

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_appointment(
            self,
            tenant_id: UUID,
            appointment_id: UUID,
            data: AppointmentUpdate,
            actor_id: Optional[str] = None
    ) -> Appointment:
        appointment = self.repository.get_appointment(tenant_id, appointment_id)
        if not appointment:
            raise AppointmentNotFound(appointment_id)

        previous_status = appointment.status
        changes = data.model_dump(exclude_unset=True)
        extras_provided = "extras" in changes
        changes.pop("extras", None)

        new_status = changes.get("status")
        if (
                new_status is not None
                and new_status != previous_status
                and previous_status in TERMINAL_STATUSES
        ):
            raise InvalidStatusTransition(previous_status.value, AppointmentStatus(new_status).value)

        target_date = changes.get("date") or appointment.date
        target_employee = changes.get("employee_id") or appointment.employee_id
        reschedule = self._is_reschedule(appointment, changes)

        guard = (
            self.booking_lock.hold(tenant_id, target_employee, target_date)
            if reschedule else nullcontext()
        )

        with guard:
            try:
                if reschedule:
                    self._apply_reschedule(tenant_id, appointment, changes)

                for field in PLAIN_FIELDS:
                    if field in changes:
                        setattr(appointment, field, changes[field])

                if new_status is not None and new_status != previous_status:
                    self._apply_status(appointment, AppointmentStatus(new_status), changes, actor_id)

                if extras_provided:
                    self.repository.replace_appointment_extras(
                        appointment, self._snapshot_extras(tenant_id, data.extras or [])
                    )

                self.repository.commit()
            except Exception:
                self.repository.rollback()
                raise

        self.repository.refresh(appointment)
        logger.info(f"Appointment {appointment.id} updated ({previous_status.value} -> {appointment.status.value})")

        if appointment.status != previous_status:
            notification_type = notification_for_status(appointment.status)
            if notification_type:
                self._notify(appointment.id, notification_type)

        self._dispatch_webhook(appointment.id, previous_status)

        return appointment

    def cancel_appointment(
            self,
            tenant_id: UUID,
            appointment_id: UUID,
            reason: Optional[str],
            actor_id: Optional[str] = None
    ) -> Appointment:
        return self.update_appointment(
            tenant_id,
            appointment_id,
            AppointmentUpdate(status=AppointmentStatus.CANCELED, cancel_reason=reason),
            actor_id,
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _is_reschedule(appointment: Appointment, changes: dict) -> bool:
        """True when the occupied employee-time would move"""
        if changes.get("date") is not None and changes["date"] != appointment.date:
            return True
        if changes.get("start_time") is not None and TimeOfDay.parse(changes["start_time"]) != appointment.start_time:
            return True
        if changes.get("employee_id") is not None and changes["employee_id"] != appointment.employee_id:
            return True
        if changes.get("service_id") is not None and changes["service_id"] != appointment.service_id:
            return True
        return False

    def _apply_reschedule(self, tenant_id: UUID, appointment: Appointment, changes: dict) -> None:
        service_changed = changes.get("service_id") is not None and changes["service_id"] != appointment.service_id

        if service_changed:
            service = self.repository.get_service(tenant_id, changes["service_id"])
        else:
            service = appointment.service
        if not service:
            raise ServiceNotFound(changes.get("service_id") or appointment.service_id)

        target_date = changes.get("date") or appointment.date
        target_employee = changes.get("employee_id") or appointment.employee_id
        start_time = TimeOfDay.parse(changes.get("start_time") or appointment.start_time)
        duration = service.booked_duration
        end_time = start_time.plus(duration)

        availability = self.conflicts.check_availability(
            tenant_id, target_employee, target_date, start_time, duration,
            exclude_appointment_id=appointment.id,
        )
        if not availability.available:
            raise SlotUnavailable(availability.reason)

        # Only touch the row once the new slot is known to be free
        appointment.date = target_date
        appointment.employee_id = target_employee
        appointment.start_time = start_time
        appointment.end_time = end_time
        appointment.duration = duration
        if service_changed:
            appointment.service_id = service.id
            appointment.price = service.price

    @staticmethod
    def _apply_status(
            appointment: Appointment,
            status: AppointmentStatus,
            changes: dict,
            actor_id: Optional[str]
    ) -> None:
        now = datetime.now(timezone.utc)
        appointment.status = status

        if status == AppointmentStatus.CONFIRMED:
            appointment.confirmed_at = now
        elif status == AppointmentStatus.COMPLETED:
            appointment.completed_at = now
            if changes.get("payment_status") is None:
                appointment.payment_status = PaymentStatus.PAID
        elif status == AppointmentStatus.CANCELED:
            appointment.canceled_at = now
            appointment.canceled_by = str(actor_id) if actor_id else "system"
            appointment.cancel_reason = changes.get("cancel_reason")

    def _snapshot_extras(self, tenant_id: UUID, items: Iterable[ExtraItem]) -> List[AppointmentExtra]:
        """Freeze current extra prices; unknown or inactive extras are skipped"""
        items = list(items)
        if not items:
            return []

        known = {extra.id: extra for extra in self.repository.get_extras(tenant_id, [item.id for item in items])}

        snapshots = []
        for item in items:
            extra = known.get(item.id)
            if extra is None:
                logger.info(f"Skipping unknown or inactive extra {item.id}")
                continue
            snapshots.append(AppointmentExtra(
                extra_id=extra.id,
                quantity=item.quantity,
                unit_price=extra.price,
                total=extra.price * item.quantity,
            ))
        return snapshots

    def _notify(self, appointment_id: UUID, notification_type: NotificationType) -> None:
        try:
            self.notifier.notify(appointment_id, notification_type, NotificationChannel.EMAIL)
        except Exception as e:
            logger.error(f"Failed to dispatch {notification_type.value} notification for appointment {appointment_id}: {e}")

    def _dispatch_webhook(self, appointment_id: UUID, previous_status: Optional[AppointmentStatus] = None) -> None:
        try:
            self.webhook_dispatcher.dispatch(appointment_id, previous_status)
        except Exception as e:
            logger.error(f"Failed to dispatch webhook for appointment {appointment_id}: {e}")
