# booking_app/services/webhook/webhook_service.py
import httpx
import hmac
import hashlib
import json
import logging
from typing import Optional, Dict, Any
from datetime import datetime, timedelta, timezone
from uuid import UUID

from sqlalchemy.orm import Session

from booking_app.config.settings import get_settings
from booking_app.models.appointment import Appointment, AppointmentStatus
from booking_app.models.tenant import Tenant
from booking_app.models.webhook_event import WebhookEvent

logger = logging.getLogger(__name__)

STATUS_EVENTS = {
    AppointmentStatus.CONFIRMED: "appointment.confirmed",
    AppointmentStatus.CANCELED: "appointment.canceled",
    AppointmentStatus.COMPLETED: "appointment.completed",
    AppointmentStatus.NO_SHOW: "appointment.no_show",
    AppointmentStatus.RESCHEDULED: "appointment.rescheduled",
}

# Exponential backoff between attempts: 1min, 5min, 15min, 1hour, 6hours
BACKOFF_MINUTES = [1, 5, 15, 60, 360]


def event_for_status(status: AppointmentStatus, previous_status: Optional[AppointmentStatus] = None) -> str:
    """Webhook event name for an appointment change"""
    if previous_status is None:
        return "appointment.created"
    return STATUS_EVENTS.get(status, "appointment.updated")


class WebhookService:
    """Builds, signs and delivers appointment webhooks to tenants"""

    def __init__(self, db: Session, http_client: Optional[httpx.Client] = None):
        self.db = db
        self.settings = get_settings()
        self.http_client = http_client or httpx.Client(
            timeout=self.settings.WEBHOOK_TIMEOUT_SECONDS,
            follow_redirects=True
        )

    def create_appointment_event(
            self,
            appointment_id: UUID,
            previous_status: Optional[AppointmentStatus] = None
    ) -> Optional[WebhookEvent]:
        """
        Record a pending webhook for an appointment change.

        Returns:
            The WebhookEvent, or None when the tenant has no active webhook.
        """
        appointment = self.db.get(Appointment, appointment_id)
        if not appointment:
            logger.warning(f"Webhook skipped: appointment {appointment_id} not found")
            return None

        tenant = appointment.tenant
        target_url = self._target_url(tenant)
        if not target_url:
            logger.debug(f"Webhook skipped: tenant {tenant.id} has no active webhook")
            return None

        event_type = event_for_status(appointment.status, previous_status)
        payload = self._build_payload(event_type, tenant, self._appointment_data(appointment, previous_status))

        webhook_event = WebhookEvent(
            tenant_id=tenant.id,
            appointment_id=appointment.id,
            event_type=event_type,
            target_url=target_url,
            event_data=payload,
            status="pending",
            attempts=0,
            max_attempts=self.settings.WEBHOOK_MAX_ATTEMPTS
        )
        self.db.add(webhook_event)
        self.db.commit()
        self.db.refresh(webhook_event)

        return webhook_event

    def deliver(self, webhook_event: WebhookEvent) -> bool:
        """
        Attempt to deliver a single webhook event.

        Returns:
            True if successful, False otherwise
        """
        tenant = self.db.get(Tenant, webhook_event.tenant_id)
        secret = self._secret(tenant)

        payload_json = json.dumps(webhook_event.event_data)

        headers = {
            "Content-Type": "application/json",
            "X-Webhook-Signature": self.sign_payload(payload_json, secret),
            "X-Webhook-Event": webhook_event.event_type,
            "X-Webhook-Id": str(webhook_event.id),
            "X-Tenant-Id": str(webhook_event.tenant_id),
        }

        webhook_event.attempts = (webhook_event.attempts or 0) + 1
        webhook_event.last_attempt_at = datetime.now(timezone.utc)
        webhook_event.status = "retrying"

        start_time = datetime.now(timezone.utc)

        try:
            response = self.http_client.post(
                webhook_event.target_url,
                content=payload_json,
                headers=headers
            )

            webhook_event.response_status_code = response.status_code
            webhook_event.response_body = response.text[:1000]
            webhook_event.response_time_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)

            if 200 <= response.status_code < 300:
                webhook_event.status = "delivered"
                webhook_event.delivered_at = datetime.now(timezone.utc)
                webhook_event.next_retry_at = None
                self.db.commit()
                logger.info(f"Webhook {webhook_event.event_type} delivered to {webhook_event.target_url}")
                return True

            webhook_event.error_message = f"HTTP {response.status_code}: {response.text[:200]}"

        except httpx.TimeoutException:
            webhook_event.error_message = f"Request timeout ({self.settings.WEBHOOK_TIMEOUT_SECONDS}s)"

        except httpx.RequestError as e:
            webhook_event.error_message = f"Request error: {str(e)[:200]}"

        self._handle_failed_delivery(webhook_event)
        return False

    def _handle_failed_delivery(self, webhook_event: WebhookEvent) -> None:
        """Schedule a retry with backoff, or give up after max_attempts."""
        if webhook_event.attempts < webhook_event.max_attempts:
            delay_minutes = BACKOFF_MINUTES[min(webhook_event.attempts - 1, len(BACKOFF_MINUTES) - 1)]
            webhook_event.next_retry_at = datetime.now(timezone.utc) + timedelta(minutes=delay_minutes)
            webhook_event.status = "pending"
        else:
            webhook_event.status = "failed"
            webhook_event.failed_at = datetime.now(timezone.utc)
            webhook_event.next_retry_at = None

        logger.warning(
            f"Webhook {webhook_event.id} attempt {webhook_event.attempts} failed: {webhook_event.error_message}"
        )
        self.db.commit()

    def pending_events(self, batch_size: int = 50):
        """Pending deliveries whose retry time has come"""
        now = datetime.now(timezone.utc)
        return self.db.query(WebhookEvent).filter(
            WebhookEvent.status == "pending",
            (WebhookEvent.next_retry_at.is_(None)) | (WebhookEvent.next_retry_at <= now),
            WebhookEvent.attempts < WebhookEvent.max_attempts,
        ).limit(batch_size).all()

    def _target_url(self, tenant: Tenant) -> Optional[str]:
        if not tenant or not tenant.webhook_active:
            return None
        return tenant.webhook_url or self.settings.WEBHOOK_URL or None

    def _secret(self, tenant: Optional[Tenant]) -> str:
        return (tenant.webhook_secret if tenant else None) or self.settings.WEBHOOK_SECRET

    @staticmethod
    def _appointment_data(appointment: Appointment, previous_status: Optional[AppointmentStatus]) -> Dict[str, Any]:
        client = appointment.client
        employee = appointment.employee
        service = appointment.service

        return {
            "appointment": {
                "id": str(appointment.id),
                "date": appointment.date.isoformat(),
                "start_time": str(appointment.start_time),
                "end_time": str(appointment.end_time),
                "duration": appointment.duration,
                "status": appointment.status.value,
                "price": str(appointment.price),
                "notes": appointment.notes,
                "client_notes": appointment.client_notes,
                "source": appointment.source,
                "payment_status": appointment.payment_status.value if appointment.payment_status else None,
            },
            "client": {
                "id": str(client.id),
                "name": client.full_name,
                "email": client.email,
                "phone": client.phone,
            } if client else None,
            "employee": {
                "id": str(employee.id),
                "name": employee.full_name,
                "email": employee.email,
            } if employee else None,
            "service": {
                "id": str(service.id),
                "name": service.name,
                "duration": service.duration,
                "price": str(service.price),
            } if service else None,
            "previous_status": previous_status.value if previous_status else None,
        }

    @staticmethod
    def _build_payload(event_type: str, tenant: Tenant, event_data: Dict[str, Any]) -> Dict[str, Any]:
        """Build the webhook payload in a consistent format."""
        return {
            "event": event_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "tenant": {
                "id": str(tenant.id),
                "slug": tenant.slug,
                "name": tenant.name,
            },
            "data": event_data
        }

    @staticmethod
    def sign_payload(payload_json: str, secret: str) -> str:
        """Sign the payload using HMAC-SHA256 so tenants can verify the sender."""
        signature = hmac.new(
            (secret or "").encode(),
            payload_json.encode(),
            hashlib.sha256
        ).hexdigest()

        return f"sha256={signature}"

    @staticmethod
    def verify_signature(payload_json: str, signature: str, secret: str) -> bool:
        expected_signature = WebhookService.sign_payload(payload_json, secret)
        return hmac.compare_digest(signature, expected_signature)

    def close(self):
        """Close the HTTP client."""
        self.http_client.close()
