# booking_app/models/tenant.py
from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base


class Tenant(Base):
    """An isolated business account; every schedule and booking belongs to one"""
    __tablename__ = "tenants"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(200), nullable=False)
    slug = Column(String(100), nullable=False, unique=True)

    # Outgoing webhook configuration (falls back to settings when empty)
    webhook_url = Column(String(500), nullable=True)
    webhook_secret = Column(String(128), nullable=True)
    webhook_active = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Tenant(id={self.id}, slug={self.slug})>"
