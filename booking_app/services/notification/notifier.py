# booking_app/services/notification/notifier.py
"""Outbound appointment notifications (fire-and-forget)"""
import enum
import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from booking_app.models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)


class NotificationType(str, enum.Enum):
    APPOINTMENT_CREATED = "APPOINTMENT_CREATED"
    APPOINTMENT_CONFIRMED = "APPOINTMENT_CONFIRMED"
    APPOINTMENT_CANCELED = "APPOINTMENT_CANCELED"
    APPOINTMENT_RESCHEDULED = "APPOINTMENT_RESCHEDULED"
    APPOINTMENT_COMPLETED = "APPOINTMENT_COMPLETED"


class NotificationChannel(str, enum.Enum):
    EMAIL = "EMAIL"
    WHATSAPP = "WHATSAPP"


# Status changes that warrant telling the client; others stay silent
STATUS_NOTIFICATIONS = {
    AppointmentStatus.CONFIRMED: NotificationType.APPOINTMENT_CONFIRMED,
    AppointmentStatus.CANCELED: NotificationType.APPOINTMENT_CANCELED,
    AppointmentStatus.RESCHEDULED: NotificationType.APPOINTMENT_RESCHEDULED,
    AppointmentStatus.COMPLETED: NotificationType.APPOINTMENT_COMPLETED,
}


def notification_for_status(status: AppointmentStatus) -> Optional[NotificationType]:
    return STATUS_NOTIFICATIONS.get(status)


class Notifier(ABC):
    """Sends a notification about an appointment; must not block on delivery"""

    @abstractmethod
    def notify(self, appointment_id: UUID, event_type: NotificationType, channel: NotificationChannel) -> None:
        ...


class CeleryNotifier(Notifier):
    """Queues notification delivery on the Celery notifications queue"""

    def notify(self, appointment_id: UUID, event_type: NotificationType, channel: NotificationChannel) -> None:
        from booking_app.tasks.notification_tasks import send_appointment_notification

        send_appointment_notification.delay(
            str(appointment_id),
            NotificationType(event_type).value,
            NotificationChannel(channel).value,
        )
        logger.info(f"Queued {event_type.value} notification for appointment {appointment_id}")
