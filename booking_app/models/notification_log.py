# booking_app/models/notification_log.py
from sqlalchemy import Column, String, DateTime, Text, ForeignKey
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base


class NotificationLog(Base):
    """One row per appointment notification attempt"""
    __tablename__ = "notification_logs"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(Uuid(as_uuid=True), ForeignKey("appointments.id"), nullable=False, index=True)

    event_type = Column(String(50), nullable=False)  # APPOINTMENT_CREATED, APPOINTMENT_CANCELED...
    channel = Column(String(20), nullable=False)  # EMAIL, WHATSAPP
    recipient = Column(String(255), nullable=True)
    status = Column(String(20), nullable=False)  # sent, skipped, failed
    error_message = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    sent_at = Column(DateTime(timezone=True), nullable=True)
