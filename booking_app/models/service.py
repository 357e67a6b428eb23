# booking_app/models/service.py
"""
Service Model - bookable service definitions
Duration, buffers and price are copied onto each appointment at booking time.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, DateTime, Text
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base


class Service(Base):
    __tablename__ = "services"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )

    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False, default=0)

    # Minutes
    duration = Column(Integer, nullable=False)
    buffer_before = Column(Integer, nullable=False, default=0)
    buffer_after = Column(Integer, nullable=False, default=0)

    # New bookings start PENDING instead of CONFIRMED
    requires_confirm = Column(Boolean, default=False, nullable=False)

    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now()
    )

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, tenant_id={self.tenant_id})>"

    @property
    def booked_duration(self) -> int:
        """Minutes an appointment of this service occupies, buffers included"""
        return (self.duration or 0) + (self.buffer_before or 0) + (self.buffer_after or 0)
