# booking_app/models/types.py
"""Column types shared across models"""
from sqlalchemy import String
from sqlalchemy.types import TypeDecorator

from booking_app.services.scheduling.time_utils import TimeOfDay


class TimeOfDayType(TypeDecorator):
    """Stores a TimeOfDay as an ``HH:MM`` string; zero padding keeps text order == time order"""

    impl = String(5)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(TimeOfDay.parse(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return TimeOfDay.parse(value)
