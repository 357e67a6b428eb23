# booking_app/services/scheduling/conflict_service.py
"""
Availability decision for a single candidate booking.

Checks run in a fixed order and stop at the first failure, whose reason is
returned to the caller:

0. no full-day holiday on the date
1. employee works that day
2. candidate fits the employee's working window
3. candidate misses the employee's break
4. no partial holiday blocks the candidate
5. no active appointment of the employee overlaps the candidate
"""
import logging
from datetime import date
from typing import Iterable, List, Optional, Union
from uuid import UUID

from booking_app.models.appointment import Appointment
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.services.scheduling.schedule_resolver import ScheduleResolver
from booking_app.services.scheduling.scope import EmployeeScope
from booking_app.services.scheduling.time_utils import Interval, TimeOfDay

logger = logging.getLogger(__name__)

REASON_NOT_WORKING = "Employee does not work this day"
REASON_OUTSIDE_HOURS = "Outside working hours"
REASON_BREAK = "Conflicts with break"


class AvailabilityResult:
    """Outcome of an availability check"""

    __slots__ = ("available", "reason")

    def __init__(self, available: bool, reason: Optional[str] = None):
        self.available = available
        self.reason = reason

    def __bool__(self):
        return self.available

    def to_dict(self):
        result = {"available": self.available}
        if self.reason:
            result["reason"] = self.reason
        return result

    def __repr__(self):
        return f"AvailabilityResult(available={self.available}, reason={self.reason!r})"


AVAILABLE = AvailabilityResult(True)


def appointment_interval(appointment: Appointment) -> Interval:
    return Interval.from_times(appointment.start_time, appointment.end_time)


def find_overlapping(candidate: Interval, appointments: Iterable[Appointment]) -> List[Appointment]:
    """Appointments whose occupied interval overlaps ``candidate``"""
    return [appt for appt in appointments if appointment_interval(appt).overlaps(candidate)]


class ConflictService:
    """Decides whether an employee can take a booking at a given time"""

    def __init__(self, repository: SchedulingRepository, resolver: Optional[ScheduleResolver] = None):
        self.repository = repository
        self.resolver = resolver or ScheduleResolver(repository)

    def find_conflicts(
            self,
            tenant_id: UUID,
            employee_id: UUID,
            day: date,
            candidate: Interval,
            exclude_appointment_id: Optional[UUID] = None
    ) -> List[Appointment]:
        appointments = self.repository.get_active_appointments(
            tenant_id, employee_id, day, exclude_appointment_id
        )
        return find_overlapping(candidate, appointments)

    def check_availability(
            self,
            tenant_id: UUID,
            employee_id: UUID,
            day: date,
            start_time: Union[str, TimeOfDay],
            duration_minutes: int,
            exclude_appointment_id: Optional[UUID] = None
    ) -> AvailabilityResult:
        start = TimeOfDay.parse(start_time)
        candidate = Interval.starting_at(start, duration_minutes)

        holidays = self.resolver.resolve_holidays(tenant_id, day)

        # A full-day holiday closes the date whatever the other policies say
        if holidays and holidays[0].full_day:
            return self._reject(employee_id, day, start, f"Holiday: {holidays[0].name}")

        schedule = self.resolver.resolve(tenant_id, EmployeeScope(employee_id), day)
        if not schedule.is_available:
            return self._reject(employee_id, day, start, REASON_NOT_WORKING)

        if not schedule.window.contains(candidate):
            return self._reject(employee_id, day, start, REASON_OUTSIDE_HOURS)

        if schedule.overlaps_break(candidate):
            return self._reject(employee_id, day, start, REASON_BREAK)

        for holiday in holidays:
            if holiday.blocks(candidate):
                return self._reject(employee_id, day, start, f"Blocked time: {holiday.name}")

        conflicts = self.find_conflicts(tenant_id, employee_id, day, candidate, exclude_appointment_id)
        if conflicts:
            conflict = conflicts[0]
            client_name = conflict.client.full_name if conflict.client else "another client"
            return self._reject(
                employee_id, day, start,
                f"Conflicts with appointment of {client_name} at {conflict.start_time}"
            )

        return AVAILABLE

    @staticmethod
    def _reject(employee_id, day, start, reason: str) -> AvailabilityResult:
        logger.info(f"Slot {day} {start} rejected for employee {employee_id}: {reason}")
        return AvailabilityResult(False, reason)
