# booking_app/tasks/webhook_tasks.py
import logging
from typing import Optional
from uuid import UUID

from booking_app.config.celery_config import celery_app
from booking_app.config.database import SessionLocal
from booking_app.models.appointment import AppointmentStatus
from booking_app.models.webhook_event import WebhookEvent
from booking_app.services.webhook.webhook_service import WebhookService, BACKOFF_MINUTES

logger = logging.getLogger(__name__)


@celery_app.task(bind=True, max_retries=3)
def deliver_appointment_webhook(self, appointment_id: str, previous_status: Optional[str] = None):
    """Record a webhook for an appointment change and make the first delivery attempt"""
    db = SessionLocal()
    service = WebhookService(db)
    try:
        previous = AppointmentStatus(previous_status) if previous_status else None
        event = service.create_appointment_event(UUID(appointment_id), previous)
        if event is None:
            return {"status": "skipped", "appointment_id": appointment_id}

        if service.deliver(event):
            return {"status": "delivered", "event_id": str(event.id)}

        if event.status == "pending":
            delay = BACKOFF_MINUTES[min(event.attempts - 1, len(BACKOFF_MINUTES) - 1)]
            deliver_webhook_event.apply_async(args=[str(event.id)], countdown=delay * 60)

        return {"status": event.status, "event_id": str(event.id)}

    except Exception as exc:
        logger.error(f"Webhook for appointment {appointment_id} failed: {exc}")
        raise self.retry(
            exc=exc,
            countdown=60 * (2 ** self.request.retries)
        )
    finally:
        service.close()
        db.close()


@celery_app.task
def deliver_webhook_event(event_id: str):
    """Retry delivery of a previously recorded webhook event"""
    db = SessionLocal()
    service = WebhookService(db)
    try:
        event = db.get(WebhookEvent, UUID(event_id))
        if not event or event.status in ("delivered", "failed"):
            return {"status": "skipped", "event_id": event_id}

        if service.deliver(event):
            return {"status": "delivered", "event_id": event_id}

        if event.status == "pending":
            delay = BACKOFF_MINUTES[min(event.attempts - 1, len(BACKOFF_MINUTES) - 1)]
            deliver_webhook_event.apply_async(args=[event_id], countdown=delay * 60)

        return {"status": event.status, "event_id": event_id}
    finally:
        service.close()
        db.close()


@celery_app.task
def retry_pending_webhooks(batch_size: int = 50):
    """Sweep pending webhooks whose retry time has passed, e.g. after a worker restart"""
    db = SessionLocal()
    service = WebhookService(db)
    try:
        events = service.pending_events(batch_size)
        delivered = sum(1 for event in events if service.deliver(event))
        logger.info(f"Webhook sweep: {delivered}/{len(events)} delivered")
        return {"processed": len(events), "delivered": delivered}
    finally:
        service.close()
        db.close()
