# booking_app/models/__init__.py
from .base import Base
from .tenant import Tenant
from .user import User
from .client import Client
from .service import Service
from .extra import Extra, AppointmentExtra
from .schedule import WorkSchedule, Holiday
from .appointment import Appointment, AppointmentStatus, PaymentStatus
from .webhook_event import WebhookEvent
from .notification_log import NotificationLog

__all__ = [
    "Base",
    "Tenant",
    "User",
    "Client",
    "Service",
    "Extra",
    "AppointmentExtra",
    "WorkSchedule",
    "Holiday",
    "Appointment",
    "AppointmentStatus",
    "PaymentStatus",
    "WebhookEvent",
    "NotificationLog",
]
