"""
Wall-clock time arithmetic.

Times are tenant-local ``HH:MM`` strings at the edges and integer
minutes-since-midnight inside the engine. ``TimeOfDay`` is built once at the
boundary so the rest of the code never re-parses strings.
"""
import re
from functools import total_ordering
from typing import Union

from booking_app.core.exceptions import DayRolloverError, MalformedTime

MINUTES_PER_DAY = 24 * 60

_HHMM = re.compile(r"^(\d{1,2}):(\d{2})$")


def to_minutes(value: str) -> int:
    """Parse a 24-hour ``HH:MM`` string into minutes since midnight."""
    if not isinstance(value, str):
        raise MalformedTime(f"Invalid time value: {value!r}")

    match = _HHMM.match(value.strip())
    if not match:
        raise MalformedTime(f"Invalid time format (expected HH:MM): {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise MalformedTime(f"Time out of range: {value!r}")

    return hours * 60 + minutes


def format_minutes(total: int) -> str:
    """Format minutes since midnight as zero-padded ``HH:MM``."""
    if total < 0 or total >= MINUTES_PER_DAY:
        raise DayRolloverError(f"{total} minutes is outside a single day")
    return f"{total // 60:02d}:{total % 60:02d}"


def add_minutes(value: str, duration: int) -> str:
    """Return ``value + duration`` as ``HH:MM``; never wraps past midnight."""
    total = to_minutes(value) + duration
    if total < 0 or total >= MINUTES_PER_DAY:
        raise DayRolloverError(
            f"{value} + {duration} min crosses midnight"
        )
    return format_minutes(total)


@total_ordering
class TimeOfDay:
    """Validated wall-clock time, stored as minutes since midnight"""

    __slots__ = ("minutes",)

    def __init__(self, minutes: int):
        if not isinstance(minutes, int) or minutes < 0 or minutes >= MINUTES_PER_DAY:
            raise MalformedTime(f"Invalid minutes since midnight: {minutes!r}")
        object.__setattr__(self, "minutes", minutes)

    def __setattr__(self, name, value):
        raise AttributeError("TimeOfDay is immutable")

    @classmethod
    def parse(cls, value: Union[str, "TimeOfDay"]) -> "TimeOfDay":
        if isinstance(value, TimeOfDay):
            return value
        return cls(to_minutes(value))

    def plus(self, duration: int) -> "TimeOfDay":
        total = self.minutes + duration
        if total < 0 or total >= MINUTES_PER_DAY:
            raise DayRolloverError(f"{self} + {duration} min crosses midnight")
        return TimeOfDay(total)

    def __str__(self) -> str:
        return format_minutes(self.minutes)

    def __repr__(self) -> str:
        return f"TimeOfDay('{self}')"

    def __eq__(self, other) -> bool:
        if isinstance(other, TimeOfDay):
            return self.minutes == other.minutes
        return NotImplemented

    def __lt__(self, other) -> bool:
        if isinstance(other, TimeOfDay):
            return self.minutes < other.minutes
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.minutes)


class Interval:
    """Half-open interval ``[start, end)`` in minutes since midnight"""

    __slots__ = ("start", "end")

    def __init__(self, start: int, end: int):
        if end < start:
            raise ValueError(f"Interval end {end} precedes start {start}")
        self.start = start
        self.end = end

    @classmethod
    def from_times(cls, start: Union[str, TimeOfDay], end: Union[str, TimeOfDay]) -> "Interval":
        return cls(TimeOfDay.parse(start).minutes, TimeOfDay.parse(end).minutes)

    @classmethod
    def starting_at(cls, start: Union[str, TimeOfDay, int], duration: int) -> "Interval":
        if not isinstance(start, int):
            start = TimeOfDay.parse(start).minutes
        return cls(start, start + duration)

    def overlaps(self, other: "Interval") -> bool:
        # Touching ends (self.end == other.start) do not overlap
        return self.start < other.end and other.start < self.end

    def contains(self, other: "Interval") -> bool:
        return self.start <= other.start and other.end <= self.end

    def __eq__(self, other) -> bool:
        if isinstance(other, Interval):
            return (self.start, self.end) == (other.start, other.end)
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self.start, self.end))

    def __repr__(self) -> str:
        return f"Interval({self.start}, {self.end})"
