"""Celery application factory"""
from celery import Celery

from booking_app.config.settings import get_settings


def create_celery_app() -> Celery:
    """Create and configure the Celery app used by workers and producers"""
    settings = get_settings()

    app = Celery(
        "booking_app",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
        include=[
            "booking_app.tasks.notification_tasks",
            "booking_app.tasks.webhook_tasks",
        ],
    )

    app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer="json",
        accept_content=["json"],
        timezone="UTC",
        enable_utc=True,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=1,
        task_routes={
            "booking_app.tasks.notification_tasks.*": {"queue": "notifications"},
            "booking_app.tasks.webhook_tasks.*": {"queue": "webhooks"},
        },
        beat_schedule={
            # Picks up retries lost to worker restarts
            "retry-pending-webhooks": {
                "task": "booking_app.tasks.webhook_tasks.retry_pending_webhooks",
                "schedule": 300.0,
            },
        },
    )

    return app


celery_app = create_celery_app()
