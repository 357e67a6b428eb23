# booking_app/models/schedule.py
from sqlalchemy import Column, String, Integer, Boolean, Date, DateTime, ForeignKey, Index, UniqueConstraint, text
from sqlalchemy import Uuid
from sqlalchemy.sql import func
import uuid
from booking_app.models.base import Base
from booking_app.models.types import TimeOfDayType


class WorkSchedule(Base):
    """
    Weekly working hours, either for the whole business (user_id is NULL)
    or for a single employee. A missing row means "no policy configured",
    which is not the same as is_working=False.
    """
    __tablename__ = "work_schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Uuid(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)

    day_of_week = Column(Integer, nullable=False)  # 0=Sunday, 6=Saturday
    is_working = Column(Boolean, default=True, nullable=False)
    start_time = Column(TimeOfDayType, nullable=False)
    end_time = Column(TimeOfDayType, nullable=False)
    break_start = Column(TimeOfDayType, nullable=True)
    break_end = Column(TimeOfDayType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("tenant_id", "user_id", "day_of_week", name="uq_work_schedules_employee_day"),
        # NULLs never collide in a unique constraint, so business rows need their own index
        Index(
            "uq_work_schedules_business_day",
            "tenant_id",
            "day_of_week",
            unique=True,
            postgresql_where=text("user_id IS NULL"),
            sqlite_where=text("user_id IS NULL"),
        ),
    )


class Holiday(Base):
    """Date-specific closure: full day, or a blocked window when start/end are set"""
    __tablename__ = "holidays"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    tenant_id = Column(Uuid(as_uuid=True), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False)

    date = Column(Date, nullable=False)
    name = Column(String(200), nullable=False)
    is_full_day = Column(Boolean, default=True, nullable=False)
    start_time = Column(TimeOfDayType, nullable=True)
    end_time = Column(TimeOfDayType, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("ix_holidays_tenant_date", "tenant_id", "date"),
    )
