# booking_app/repositories/scheduling_repository.py
"""
Data access for the scheduling engine.

Every query the availability and booking code needs lives here so the
services can be exercised against any Session (PostgreSQL in production,
SQLite in tests).
"""
from datetime import date, datetime
from typing import Iterable, List, Optional, Sequence
from uuid import UUID

from sqlalchemy.orm import Session

from booking_app.models.appointment import Appointment, AppointmentStatus, INACTIVE_STATUSES
from booking_app.models.client import Client
from booking_app.models.extra import Extra, AppointmentExtra
from booking_app.models.schedule import WorkSchedule, Holiday
from booking_app.models.service import Service
from booking_app.services.scheduling.scope import BusinessScope, EmployeeScope, Scope


class SchedulingRepository:
    """SQLAlchemy-backed repository for schedules, holidays and appointments"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Policy lookups
    # ------------------------------------------------------------------

    def get_work_schedule(self, tenant_id: UUID, scope: Scope, day_of_week: int) -> Optional[WorkSchedule]:
        query = self.db.query(WorkSchedule).filter(
            WorkSchedule.tenant_id == tenant_id,
            WorkSchedule.day_of_week == day_of_week,
        )

        if isinstance(scope, EmployeeScope):
            query = query.filter(WorkSchedule.user_id == scope.employee_id)
        elif isinstance(scope, BusinessScope):
            query = query.filter(WorkSchedule.user_id.is_(None))
        else:
            raise TypeError(f"Unknown schedule scope: {scope!r}")

        return query.first()

    def get_holidays(self, tenant_id: UUID, day: date) -> List[Holiday]:
        return self.db.query(Holiday).filter(
            Holiday.tenant_id == tenant_id,
            Holiday.date == day,
        ).all()

    # ------------------------------------------------------------------
    # Appointments
    # ------------------------------------------------------------------

    def get_active_appointments(
            self,
            tenant_id: UUID,
            employee_id: UUID,
            day: date,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[Appointment]:
        """Appointments that still occupy the employee's time on ``day``"""
        query = self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.employee_id == employee_id,
            Appointment.date == day,
            Appointment.status.notin_(INACTIVE_STATUSES),
        )

        if exclude_appointment_id:
            query = query.filter(Appointment.id != exclude_appointment_id)

        return query.order_by(Appointment.start_time.asc()).all()

    def get_appointment(self, tenant_id: UUID, appointment_id: UUID) -> Optional[Appointment]:
        return self.db.query(Appointment).filter(
            Appointment.id == appointment_id,
            Appointment.tenant_id == tenant_id,
        ).first()

    def list_appointments(
            self,
            tenant_id: UUID,
            start_date: date,
            end_date: date,
            employee_id: Optional[UUID] = None,
            statuses: Optional[Sequence[AppointmentStatus]] = None
    ) -> List[Appointment]:
        query = self.db.query(Appointment).filter(
            Appointment.tenant_id == tenant_id,
            Appointment.date >= start_date,
            Appointment.date <= end_date,
        )

        if employee_id:
            query = query.filter(Appointment.employee_id == employee_id)
        if statuses:
            query = query.filter(Appointment.status.in_(list(statuses)))

        return query.order_by(Appointment.date.asc(), Appointment.start_time.asc()).all()

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def get_service(self, tenant_id: UUID, service_id: UUID) -> Optional[Service]:
        return self.db.query(Service).filter(
            Service.id == service_id,
            Service.tenant_id == tenant_id,
        ).first()

    def get_extras(self, tenant_id: UUID, extra_ids: Iterable[UUID]) -> List[Extra]:
        ids = list(extra_ids)
        if not ids:
            return []
        return self.db.query(Extra).filter(
            Extra.id.in_(ids),
            Extra.tenant_id == tenant_id,
            Extra.is_active.is_(True),
        ).all()

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def add(self, instance) -> None:
        self.db.add(instance)

    def flush(self) -> None:
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()

    def refresh(self, instance) -> None:
        self.db.refresh(instance)

    def replace_appointment_extras(self, appointment: Appointment, items: List[AppointmentExtra]) -> None:
        """Drop every existing extra row of the appointment and attach ``items``"""
        self.db.query(AppointmentExtra).filter(
            AppointmentExtra.appointment_id == appointment.id
        ).delete(synchronize_session=False)
        self.db.expire(appointment, ["extras"])

        for item in items:
            item.appointment_id = appointment.id
            self.db.add(item)

    def increment_client_visits(self, client_id: UUID, visited_at: datetime) -> None:
        self.db.query(Client).filter(Client.id == client_id).update(
            {
                Client.total_visits: Client.total_visits + 1,
                Client.last_visit: visited_at,
            },
            synchronize_session=False,
        )
