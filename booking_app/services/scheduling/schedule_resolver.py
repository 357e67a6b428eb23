# booking_app/services/scheduling/schedule_resolver.py
"""
Resolves the policy layers that apply to a single date: weekly working
hours (business-wide or per employee) and the holiday calendar.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.services.scheduling.scope import Scope
from booking_app.services.scheduling.time_utils import Interval


def day_of_week(day: date) -> int:
    """0=Sunday .. 6=Saturday (``date.weekday()`` starts on Monday)"""
    return (day.weekday() + 1) % 7


class ResolvedSchedule:
    """Effective hours of one scope on one date"""

    __slots__ = ("exists", "is_working", "window", "break_window")

    def __init__(
            self,
            exists: bool,
            is_working: bool = False,
            window: Optional[Interval] = None,
            break_window: Optional[Interval] = None
    ):
        self.exists = exists
        self.is_working = is_working
        self.window = window
        self.break_window = break_window

    @property
    def is_available(self) -> bool:
        return self.exists and self.is_working and self.window is not None

    def overlaps_break(self, candidate: Interval) -> bool:
        return self.break_window is not None and self.break_window.overlaps(candidate)

    def __repr__(self):
        return (
            f"ResolvedSchedule(exists={self.exists}, is_working={self.is_working}, "
            f"window={self.window}, break_window={self.break_window})"
        )


NO_SCHEDULE = ResolvedSchedule(exists=False)


class ResolvedHoliday:
    """A holiday on the date; ``window`` is None for full-day closures"""

    __slots__ = ("name", "full_day", "window")

    def __init__(self, name: str, full_day: bool, window: Optional[Interval] = None):
        self.name = name
        self.full_day = full_day
        self.window = window

    def blocks(self, candidate: Interval) -> bool:
        if self.full_day:
            return True
        return self.window is not None and self.window.overlaps(candidate)

    def __repr__(self):
        return f"ResolvedHoliday(name={self.name!r}, full_day={self.full_day}, window={self.window})"


class ScheduleResolver:
    """Turns stored WorkSchedule/Holiday rows into minute intervals for a date"""

    def __init__(self, repository: SchedulingRepository):
        self.repository = repository

    def resolve(self, tenant_id: UUID, scope: Scope, day: date) -> ResolvedSchedule:
        schedule = self.repository.get_work_schedule(tenant_id, scope, day_of_week(day))

        if schedule is None:
            return NO_SCHEDULE

        if not schedule.is_working:
            return ResolvedSchedule(exists=True, is_working=False)

        break_window = None
        if schedule.break_start is not None and schedule.break_end is not None:
            break_window = Interval.from_times(schedule.break_start, schedule.break_end)

        return ResolvedSchedule(
            exists=True,
            is_working=True,
            window=Interval.from_times(schedule.start_time, schedule.end_time),
            break_window=break_window,
        )

    def resolve_holidays(self, tenant_id: UUID, day: date) -> List[ResolvedHoliday]:
        """All holidays on the date, full-day closures first"""
        resolved = []
        for holiday in self.repository.get_holidays(tenant_id, day):
            if holiday.is_full_day or holiday.start_time is None or holiday.end_time is None:
                resolved.append(ResolvedHoliday(holiday.name, full_day=True))
            else:
                resolved.append(ResolvedHoliday(
                    holiday.name,
                    full_day=False,
                    window=Interval.from_times(holiday.start_time, holiday.end_time),
                ))

        resolved.sort(key=lambda h: (not h.full_day, h.window.start if h.window else 0))
        return resolved

    def resolve_holiday(self, tenant_id: UUID, day: date) -> Optional[ResolvedHoliday]:
        holidays = self.resolve_holidays(tenant_id, day)
        return holidays[0] if holidays else None
