# booking_app/services/notification/notification_service.py
"""Renders and delivers appointment notifications, logging every attempt"""
import logging
from datetime import datetime, timezone
from html import escape
from typing import Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session

from booking_app.config.settings import get_settings
from booking_app.models.appointment import Appointment
from booking_app.models.notification_log import NotificationLog
from booking_app.services.email.email_service import EmailService
from booking_app.services.notification.notifier import NotificationChannel, NotificationType

logger = logging.getLogger(__name__)

SUBJECTS = {
    NotificationType.APPOINTMENT_CREATED: "Your appointment has been booked - {business}",
    NotificationType.APPOINTMENT_CONFIRMED: "Your appointment has been confirmed - {business}",
    NotificationType.APPOINTMENT_CANCELED: "Your appointment has been canceled - {business}",
    NotificationType.APPOINTMENT_RESCHEDULED: "Your appointment has been rescheduled - {business}",
    NotificationType.APPOINTMENT_COMPLETED: "Thanks for your visit - {business}",
}

HEADLINES = {
    NotificationType.APPOINTMENT_CREATED: "We have received your booking.",
    NotificationType.APPOINTMENT_CONFIRMED: "Your booking is confirmed.",
    NotificationType.APPOINTMENT_CANCELED: "Your booking has been canceled.",
    NotificationType.APPOINTMENT_RESCHEDULED: "Your booking has moved to a new time.",
    NotificationType.APPOINTMENT_COMPLETED: "We hope you enjoyed your visit.",
}


class NotificationService:
    """Delivers one notification for one appointment"""

    def __init__(self, db: Session, email_service=EmailService):
        self.db = db
        self.email_service = email_service
        self.settings = get_settings()

    def send_appointment_notification(
            self,
            appointment_id: UUID,
            event_type: NotificationType,
            channel: NotificationChannel = NotificationChannel.EMAIL
    ) -> bool:
        """
        Send a notification about an appointment.

        Returns:
            True if delivered, False if skipped. Delivery errors are logged
            and re-raised so the calling task can retry.
        """
        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            logger.warning(f"Notification {event_type.value}: appointment {appointment_id} not found")
            return False

        if channel != NotificationChannel.EMAIL:
            logger.warning(f"Notification channel {channel.value} is not supported, skipping")
            self._log(appointment, event_type, channel, None, "skipped", f"Unsupported channel {channel.value}")
            return False

        recipient = appointment.client.email if appointment.client else None
        if not recipient:
            self._log(appointment, event_type, channel, None, "skipped", "Client has no email")
            return False

        if not self.settings.EMAIL_ENABLED:
            self._log(appointment, event_type, channel, recipient, "skipped", "Email disabled")
            return False

        subject, html_content, plain_text = self.render(appointment, event_type)

        try:
            self.email_service.send_email(
                to_email=recipient,
                subject=subject,
                html_content=html_content,
                plain_text=plain_text,
            )
        except Exception as e:
            self._log(appointment, event_type, channel, recipient, "failed", str(e)[:500])
            raise

        self._log(appointment, event_type, channel, recipient, "sent", None)
        return True

    @staticmethod
    def render(appointment: Appointment, event_type: NotificationType) -> Tuple[str, str, str]:
        business = appointment.tenant.name if appointment.tenant else ""
        client_name = appointment.client.first_name if appointment.client else "there"
        service_name = appointment.service.name if appointment.service else ""
        employee_name = appointment.employee.full_name if appointment.employee else ""

        subject = SUBJECTS[event_type].format(business=business)
        lines = [
            f"Hi {client_name},",
            HEADLINES[event_type],
            f"Service: {service_name}",
            f"With: {employee_name}",
            f"Date: {appointment.date.isoformat()}",
            f"Time: {appointment.start_time} - {appointment.end_time}",
        ]
        if event_type == NotificationType.APPOINTMENT_CANCELED and appointment.cancel_reason:
            lines.append(f"Reason: {appointment.cancel_reason}")

        plain_text = "\n".join(lines)
        html_content = "".join(f"<p>{escape(line)}</p>" for line in lines)
        return subject, html_content, plain_text

    def _log(
            self,
            appointment: Appointment,
            event_type: NotificationType,
            channel: NotificationChannel,
            recipient: Optional[str],
            status: str,
            error_message: Optional[str]
    ) -> None:
        self.db.add(NotificationLog(
            appointment_id=appointment.id,
            event_type=event_type.value,
            channel=channel.value,
            recipient=recipient,
            status=status,
            error_message=error_message,
            sent_at=datetime.now(timezone.utc) if status == "sent" else None,
        ))
        self.db.commit()
