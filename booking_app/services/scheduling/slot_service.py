# booking_app/services/scheduling/slot_service.py
"""
Slot enumeration for booking UIs.

Only hard blocks (business break, blocking holiday, existing appointment)
make a slot unavailable. Soft policy violations keep the slot bookable and
attach a warning so staff can decide.
"""
import logging
from datetime import date
from typing import Dict, List, Optional
from uuid import UUID

from booking_app.config.settings import Settings, get_settings
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.schemas.scheduling import SlotWarning, TimeSlot
from booking_app.services.scheduling.conflict_service import find_overlapping
from booking_app.services.scheduling.schedule_resolver import ScheduleResolver
from booking_app.services.scheduling.scope import BUSINESS, EmployeeScope
from booking_app.services.scheduling.time_utils import Interval, format_minutes, to_minutes

logger = logging.getLogger(__name__)

MSG_BUSINESS_CLOSED = "Business is closed this day"
MSG_NO_EMPLOYEE_SCHEDULE = "Employee has no schedule for this day"
MSG_EMPLOYEE_UNAVAILABLE = "Employee is not available at this time"
MSG_OUTSIDE_BUSINESS_HOURS = "Outside business hours"


class SlotService:
    """Generates the day's candidate slots for one employee"""

    def __init__(
            self,
            repository: SchedulingRepository,
            resolver: Optional[ScheduleResolver] = None,
            settings: Optional[Settings] = None
    ):
        self.repository = repository
        self.resolver = resolver or ScheduleResolver(repository)
        self.settings = settings or get_settings()

    def generate_slots(
            self,
            tenant_id: UUID,
            employee_id: UUID,
            day: date,
            service_duration: int,
            interval: Optional[int] = None
    ) -> List[TimeSlot]:
        if interval is None:
            interval = self.settings.DEFAULT_SLOT_INTERVAL
        if interval <= 0:
            raise ValueError("Slot interval must be positive")
        if service_duration <= 0:
            raise ValueError("Service duration must be positive")

        holidays = self.resolver.resolve_holidays(tenant_id, day)
        if holidays and holidays[0].full_day:
            logger.info(f"No slots on {day} for tenant {tenant_id}: holiday {holidays[0].name}")
            return []

        business = self.resolver.resolve(tenant_id, BUSINESS, day)

        if business.exists and not business.is_working:
            return self._closed_day_slots(interval)

        if business.is_available:
            business_window = business.window
        else:
            business_window = Interval(
                to_minutes(self.settings.DEFAULT_DISPLAY_START),
                to_minutes(self.settings.DEFAULT_DISPLAY_END),
            )

        employee = self.resolver.resolve(tenant_id, EmployeeScope(employee_id), day)
        appointments = self.repository.get_active_appointments(tenant_id, employee_id, day)
        blocked_windows = [h for h in holidays if not h.full_day]

        slots: Dict[int, TimeSlot] = {}

        start = business_window.start
        while start + service_duration <= business_window.end:
            candidate = Interval.starting_at(start, service_duration)
            time = format_minutes(start)

            if business.overlaps_break(candidate):
                slots[start] = TimeSlot(time=time, available=False)
            elif any(h.blocks(candidate) for h in blocked_windows):
                slots[start] = TimeSlot(time=time, available=False)
            elif find_overlapping(candidate, appointments):
                slots[start] = TimeSlot(time=time, available=False)
            elif not employee.is_available:
                slots[start] = TimeSlot(
                    time=time,
                    available=True,
                    warning=SlotWarning.NO_EMPLOYEE_SCHEDULE,
                    warning_message=MSG_NO_EMPLOYEE_SCHEDULE,
                )
            elif not employee.window.contains(candidate) or employee.overlaps_break(candidate):
                slots[start] = TimeSlot(
                    time=time,
                    available=True,
                    warning=SlotWarning.NO_EMPLOYEE_SCHEDULE,
                    warning_message=MSG_EMPLOYEE_UNAVAILABLE,
                )
            else:
                slots[start] = TimeSlot(time=time, available=True)

            start += interval

        for minutes in self._padding_starts(business_window, service_duration, interval):
            # Regular slots win when both grids land on the same minute
            if minutes not in slots:
                slots[minutes] = TimeSlot(
                    time=format_minutes(minutes),
                    available=True,
                    warning=SlotWarning.OUTSIDE_BUSINESS_HOURS,
                    warning_message=MSG_OUTSIDE_BUSINESS_HOURS,
                )

        return [slots[minutes] for minutes in sorted(slots)]

    def _closed_day_slots(self, interval: int) -> List[TimeSlot]:
        start = to_minutes(self.settings.CLOSED_DAY_START)
        end = to_minutes(self.settings.CLOSED_DAY_END)

        slots = []
        minutes = start
        while minutes <= end:
            slots.append(TimeSlot(
                time=format_minutes(minutes),
                available=True,
                warning=SlotWarning.OUTSIDE_BUSINESS_HOURS,
                warning_message=MSG_BUSINESS_CLOSED,
            ))
            minutes += interval
        return slots

    def _padding_starts(self, business_window: Interval, service_duration: int, interval: int) -> List[int]:
        """Start minutes offered before opening and after closing"""
        padding_start = to_minutes(self.settings.PADDING_START)
        before_limit = to_minutes(self.settings.PADDING_BEFORE_LIMIT)
        padding_end = to_minutes(self.settings.PADDING_END)

        starts = []

        minutes = padding_start
        while minutes < business_window.start and minutes + service_duration <= before_limit:
            starts.append(minutes)
            minutes += interval

        minutes = business_window.end
        while minutes + service_duration <= padding_end:
            starts.append(minutes)
            minutes += interval

        return starts
