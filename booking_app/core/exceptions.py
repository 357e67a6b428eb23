"""Domain errors raised by the scheduling engine and booking transaction"""
from typing import Optional


class BookingError(Exception):
    """Base class for all booking/scheduling failures"""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ServiceNotFound(BookingError):
    status_code = 404

    def __init__(self, service_id):
        super().__init__(f"Service not found: {service_id}")
        self.service_id = service_id


class AppointmentNotFound(BookingError):
    status_code = 404

    def __init__(self, appointment_id):
        super().__init__(f"Appointment not found: {appointment_id}")
        self.appointment_id = appointment_id


class SlotUnavailable(BookingError):
    """The requested slot failed the availability check"""

    status_code = 409

    def __init__(self, reason: Optional[str] = None):
        self.reason = reason or "Time slot not available"
        super().__init__(self.reason)


class InvalidStatusTransition(BookingError):
    status_code = 409

    def __init__(self, current_status: str, new_status: str):
        super().__init__(f"Cannot change status from {current_status} to {new_status}")
        self.current_status = current_status
        self.new_status = new_status


class MalformedTime(BookingError, ValueError):
    """Input time string is not a 24-hour HH:MM value"""

    status_code = 422


class DayRolloverError(MalformedTime):
    """Computed time falls outside the same calendar day"""
