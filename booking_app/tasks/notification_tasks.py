# booking_app/tasks/notification_tasks.py
import logging
from uuid import UUID

from booking_app.config.celery_config import celery_app
from booking_app.config.database import SessionLocal
from booking_app.services.notification.notification_service import NotificationService
from booking_app.services.notification.notifier import NotificationChannel, NotificationType

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def send_appointment_notification(
        self,
        appointment_id: str,
        event_type: str,
        channel: str = NotificationChannel.EMAIL.value
):
    """
    Send one appointment notification to the client

    Args:
        appointment_id: Appointment UUID as string
        event_type: NotificationType value
        channel: NotificationChannel value
    """
    db = SessionLocal()
    try:
        logger.info(f"Sending {event_type} notification for appointment {appointment_id} via {channel}")

        sent = NotificationService(db).send_appointment_notification(
            UUID(appointment_id),
            NotificationType(event_type),
            NotificationChannel(channel)
        )

        return {"status": "sent" if sent else "skipped", "appointment_id": appointment_id}

    except Exception as exc:
        logger.error(f"Failed to send {event_type} notification for {appointment_id}: {exc}")

        # Retry with exponential backoff: 1min, 2min, 4min
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        db.close()
