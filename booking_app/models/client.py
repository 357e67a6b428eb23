# booking_app/models/client.py
from sqlalchemy import Column, String, Integer, DateTime, ForeignKey
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base


class Client(Base):
    __tablename__ = "clients"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False, index=True)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False, default="")
    email = Column(String(255), nullable=True)
    phone = Column(String(30), nullable=True)

    # Visit counters, bumped by every booking
    total_visits = Column(Integer, default=0, nullable=False)
    last_visit = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()
