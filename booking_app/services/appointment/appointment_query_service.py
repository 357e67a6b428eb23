# ============================================================================
# booking_app/services/appointment/appointment_query_service.py
# Read-only appointment queries - no FastAPI dependencies
# ============================================================================
from collections import Counter
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence
from uuid import UUID

from booking_app.models.appointment import Appointment, AppointmentStatus
from booking_app.repositories.scheduling_repository import SchedulingRepository


def _rate(part: int, total: int) -> float:
    return (part / total) * 100 if total > 0 else 0.0


class AppointmentQueryService:
    """Service layer for appointment listings and statistics."""

    def __init__(self, repository: SchedulingRepository):
        self.repository = repository

    def list_by_date_range(
            self,
            tenant_id: UUID,
            start_date: date,
            end_date: date,
            employee_id: Optional[UUID] = None,
            statuses: Optional[Sequence[AppointmentStatus]] = None
    ) -> List[Appointment]:
        """Appointments between two dates (inclusive), ordered by date then start time."""
        return self.repository.list_appointments(tenant_id, start_date, end_date, employee_id, statuses)

    def get_stats(self, tenant_id: UUID, start_date: date, end_date: date) -> Dict[str, Any]:
        appointments = self.repository.list_appointments(tenant_id, start_date, end_date)

        statuses = Counter(appt.status for appt in appointments)
        total = len(appointments)
        completed = statuses[AppointmentStatus.COMPLETED]
        canceled = statuses[AppointmentStatus.CANCELED]
        no_show = statuses[AppointmentStatus.NO_SHOW]
        pending = statuses[AppointmentStatus.PENDING] + statuses[AppointmentStatus.CONFIRMED]

        revenue = sum(
            (Decimal(appt.price) for appt in appointments if appt.status == AppointmentStatus.COMPLETED),
            Decimal("0"),
        )

        by_day = Counter(appt.date.isoformat() for appt in appointments)
        by_employee = Counter(str(appt.employee_id) for appt in appointments)

        return {
            "total": total,
            "completed": completed,
            "canceled": canceled,
            "no_show": no_show,
            "pending": pending,
            "revenue": float(revenue),
            "completion_rate": _rate(completed, total),
            "cancellation_rate": _rate(canceled, total),
            "no_show_rate": _rate(no_show, total),
            "by_day": dict(by_day),
            "by_employee": dict(by_employee),
        }
