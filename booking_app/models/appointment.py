# booking_app/models/appointment.py
from sqlalchemy import Column, String, Integer, Numeric, Text, Date, DateTime, ForeignKey, Index, Enum as SQLAEnum
from sqlalchemy import Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
import uuid
from booking_app.models.base import Base
from booking_app.models.types import TimeOfDayType


class AppointmentStatus(str, enum.Enum):
    """Lifecycle states of an appointment"""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"
    NO_SHOW = "NO_SHOW"
    RESCHEDULED = "RESCHEDULED"


# Appointments in these states no longer occupy employee time
INACTIVE_STATUSES = (AppointmentStatus.CANCELED, AppointmentStatus.NO_SHOW)

TERMINAL_STATUSES = (
    AppointmentStatus.COMPLETED,
    AppointmentStatus.CANCELED,
    AppointmentStatus.NO_SHOW,
)


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # References
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id"), nullable=False)
    client_id = Column(Uuid(as_uuid=True), ForeignKey("clients.id"), nullable=False)
    employee_id = Column(Uuid(as_uuid=True), ForeignKey("users.id"), nullable=False)
    service_id = Column(Uuid(as_uuid=True), ForeignKey("services.id"), nullable=False)

    # Occupied interval; duration includes service buffers and is frozen at booking time
    date = Column(Date, nullable=False)
    start_time = Column(TimeOfDayType, nullable=False)
    end_time = Column(TimeOfDayType, nullable=False)
    duration = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    status = Column(
        SQLAEnum(
            AppointmentStatus,
            name="appointment_status",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False,
        default=AppointmentStatus.PENDING,
        index=True
    )
    payment_status = Column(
        SQLAEnum(
            PaymentStatus,
            name="payment_status",
            values_callable=lambda obj: [e.value for e in obj]
        ),
        nullable=False,
        default=PaymentStatus.PENDING
    )
    payment_method = Column(String(50), nullable=True)
    discount = Column(Numeric(10, 2), nullable=True)
    discount_type = Column(String(20), nullable=True)  # "fixed" or "percent"

    notes = Column(Text, nullable=True)
    client_notes = Column(Text, nullable=True)
    source = Column(String(30), default="internal")  # internal, public, api
    created_by_id = Column(Uuid(as_uuid=True), nullable=True)

    # Status tracking
    confirmed_at = Column(DateTime(timezone=True), nullable=True)
    completed_at = Column(DateTime(timezone=True), nullable=True)
    canceled_at = Column(DateTime(timezone=True), nullable=True)
    canceled_by = Column(String(100), nullable=True)
    cancel_reason = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    client = relationship("Client")
    employee = relationship("User")
    service = relationship("Service")
    tenant = relationship("Tenant")
    extras = relationship(
        "AppointmentExtra",
        back_populates="appointment",
        cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("ix_appointments_employee_day", "tenant_id", "employee_id", "date"),
        Index("ix_appointments_tenant_date", "tenant_id", "date"),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, date={self.date}, {self.start_time}-{self.end_time}, status={self.status})>"

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": str(self.id),
            "tenant_id": str(self.tenant_id),
            "client_id": str(self.client_id),
            "employee_id": str(self.employee_id),
            "service_id": str(self.service_id),
            "date": self.date.isoformat() if self.date else None,
            "start_time": str(self.start_time) if self.start_time is not None else None,
            "end_time": str(self.end_time) if self.end_time is not None else None,
            "duration": self.duration,
            "price": float(self.price) if self.price is not None else None,
            "status": self.status.value if self.status else None,
            "payment_status": self.payment_status.value if self.payment_status else None,
            "payment_method": self.payment_method,
            "notes": self.notes,
            "client_notes": self.client_notes,
            "source": self.source,
            "confirmed_at": self.confirmed_at.isoformat() if self.confirmed_at else None,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "canceled_at": self.canceled_at.isoformat() if self.canceled_at else None,
            "canceled_by": self.canceled_by,
            "cancel_reason": self.cancel_reason,
            "extras": [
                {
                    "extra_id": str(item.extra_id),
                    "quantity": item.quantity,
                    "unit_price": float(item.unit_price),
                    "total": float(item.total),
                }
                for item in self.extras
            ],
        }
