# booking_app/models/extra.py
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, DateTime
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base


class Extra(Base):
    """Chargeable add-on; its price may change at any time"""
    __tablename__ = "extras"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    is_active = Column(Boolean, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class AppointmentExtra(Base):
    """Price snapshot of an Extra attached to one appointment"""
    __tablename__ = "appointment_extras"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    appointment_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    extra_id = Column(Uuid(as_uuid=True), ForeignKey("extras.id"), nullable=False)

    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False)
    total = Column(Numeric(10, 2), nullable=False)

    extra = relationship("Extra")
    appointment = relationship("Appointment", back_populates="extras")
