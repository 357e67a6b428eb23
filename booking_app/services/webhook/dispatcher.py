# booking_app/services/webhook/dispatcher.py
"""Outbound appointment webhooks (fire-and-forget)"""
import logging
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from booking_app.models.appointment import AppointmentStatus

logger = logging.getLogger(__name__)


class WebhookDispatcher(ABC):
    """Announces an appointment change to the tenant's webhook endpoint"""

    @abstractmethod
    def dispatch(self, appointment_id: UUID, previous_status: Optional[AppointmentStatus] = None) -> None:
        ...


class CeleryWebhookDispatcher(WebhookDispatcher):
    """Queues webhook delivery on the Celery webhooks queue"""

    def dispatch(self, appointment_id: UUID, previous_status: Optional[AppointmentStatus] = None) -> None:
        from booking_app.tasks.webhook_tasks import deliver_appointment_webhook

        deliver_appointment_webhook.delay(
            str(appointment_id),
            AppointmentStatus(previous_status).value if previous_status else None,
        )
        logger.info(f"Queued webhook for appointment {appointment_id}")
