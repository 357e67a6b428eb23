import pytest

from booking_app.models import AppointmentStatus
from booking_app.schemas.scheduling import SlotWarning
from booking_app.services.scheduling.slot_service import (
    MSG_BUSINESS_CLOSED,
    MSG_EMPLOYEE_UNAVAILABLE,
    MSG_NO_EMPLOYEE_SCHEDULE,
    MSG_OUTSIDE_BUSINESS_HOURS,
    SlotService,
)
from booking_app.services.scheduling.time_utils import to_minutes

from conftest import MONDAY


@pytest.fixture
def slots(repository):
    return SlotService(repository)


def by_time(result):
    return {slot.time: slot for slot in result}


class TestNoPolicies:
    def test_default_window_with_employee_warning(self, slots, tenant, employee):
        result = slots.generate_slots(tenant.id, employee.id, MONDAY, 30)
        table = by_time(result)

        main = [s for s in result if to_minutes("08:00") <= s.minutes < to_minutes("20:00")]
        assert [s.time for s in main][0] == "08:00"
        assert [s.time for s in main][-1] == "19:30"
        assert len(main) == 24
        assert all(s.available and s.warning == SlotWarning.NO_EMPLOYEE_SCHEDULE for s in main)
        assert table["08:00"].warning_message == MSG_NO_EMPLOYEE_SCHEDULE

    def test_padding_around_default_window(self, slots, tenant, employee):
        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        for time in ("07:00", "07:30", "20:00", "20:30", "21:00", "21:30"):
            assert table[time].available
            assert table[time].warning == SlotWarning.OUTSIDE_BUSINESS_HOURS
            assert table[time].warning_message == MSG_OUTSIDE_BUSINESS_HOURS
        assert "22:00" not in table
        assert "06:30" not in table

    def test_output_sorted_and_unique(self, slots, tenant, employee):
        result = slots.generate_slots(tenant.id, employee.id, MONDAY, 45, interval=15)
        minutes = [s.minutes for s in result]

        assert minutes == sorted(minutes)
        assert len(minutes) == len(set(minutes))


class TestWithBusinessHours:
    @pytest.fixture(autouse=True)
    def business(self, make_schedule):
        return make_schedule(user_id=None, start="09:00", end="17:00", break_start="13:00", break_end="14:00")

    def test_business_break_is_hard_block(self, slots, tenant, employee):
        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert not table["13:00"].available
        assert not table["13:30"].available
        assert table["13:00"].warning is None
        assert table["12:30"].available

    def test_slot_spanning_into_break_is_blocked(self, slots, tenant, employee):
        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 60))

        assert not table["12:30"].available

    def test_appointment_is_hard_block(self, slots, tenant, employee, make_schedule, make_appointment):
        make_schedule(user_id=employee.id, start="09:00", end="17:00")
        make_appointment(start="10:00", duration=60)

        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert not table["10:00"].available
        assert not table["10:30"].available
        assert table["11:00"].available and table["11:00"].warning is None
        assert table["09:30"].available

    def test_canceled_appointment_does_not_block(self, slots, tenant, employee, make_schedule, make_appointment):
        make_schedule(user_id=employee.id)
        make_appointment(start="10:00", duration=30, status=AppointmentStatus.CANCELED)

        assert by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))["10:00"].available

    def test_outside_employee_window_warns(self, slots, tenant, employee, make_schedule):
        make_schedule(user_id=employee.id, start="10:00", end="15:00", break_start="12:00", break_end="12:30")

        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert table["09:00"].available
        assert table["09:00"].warning == SlotWarning.NO_EMPLOYEE_SCHEDULE
        assert table["09:00"].warning_message == MSG_EMPLOYEE_UNAVAILABLE
        assert table["12:00"].warning == SlotWarning.NO_EMPLOYEE_SCHEDULE
        assert table["15:30"].warning == SlotWarning.NO_EMPLOYEE_SCHEDULE
        assert table["10:00"].warning is None
        assert table["14:30"].warning is None

    def test_employee_day_off_warns(self, slots, tenant, employee, make_schedule):
        make_schedule(user_id=employee.id, is_working=False)

        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert table["10:00"].available
        assert table["10:00"].warning_message == MSG_NO_EMPLOYEE_SCHEDULE

    def test_padding_before_open_and_after_close(self, slots, tenant, employee):
        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert table["07:00"].warning == SlotWarning.OUTSIDE_BUSINESS_HOURS
        assert table["08:30"].warning == SlotWarning.OUTSIDE_BUSINESS_HOURS
        assert table["17:00"].warning == SlotWarning.OUTSIDE_BUSINESS_HOURS
        assert table["21:30"].warning == SlotWarning.OUTSIDE_BUSINESS_HOURS
        assert "22:00" not in table

    def test_last_main_slot_fits_before_close(self, slots, tenant, employee):
        result = slots.generate_slots(tenant.id, employee.id, MONDAY, 60)
        main = [s for s in result if s.warning != SlotWarning.OUTSIDE_BUSINESS_HOURS]

        assert main[-1].time == "16:00"

    def test_partial_holiday_blocks_slots(self, slots, tenant, employee, make_holiday):
        make_holiday(name="Inventory", start="15:00", end="16:00")

        table = by_time(slots.generate_slots(tenant.id, employee.id, MONDAY, 30))

        assert not table["15:00"].available
        assert not table["15:30"].available
        assert table["16:00"].available

    def test_full_day_holiday_returns_nothing(self, slots, tenant, employee, make_holiday):
        make_holiday(name="Founders day")

        assert slots.generate_slots(tenant.id, employee.id, MONDAY, 30) == []


class TestClosedDay:
    def test_closed_business_day_offers_reduced_grid(self, slots, tenant, employee, make_schedule):
        make_schedule(user_id=None, is_working=False)
        make_schedule(user_id=employee.id)

        result = slots.generate_slots(tenant.id, employee.id, MONDAY, 30, interval=60)

        assert [s.time for s in result] == [f"{h:02d}:00" for h in range(9, 19)]
        assert all(s.available for s in result)
        assert all(s.warning == SlotWarning.OUTSIDE_BUSINESS_HOURS for s in result)
        assert result[0].warning_message == MSG_BUSINESS_CLOSED


class TestArguments:
    def test_default_interval_is_thirty_minutes(self, slots, tenant, employee):
        result = slots.generate_slots(tenant.id, employee.id, MONDAY, 30)

        assert result[1].minutes - result[0].minutes == 30

    @pytest.mark.parametrize("duration,interval", [(0, 30), (30, 0), (30, -15)])
    def test_rejects_non_positive_values(self, slots, tenant, employee, duration, interval):
        with pytest.raises(ValueError):
            slots.generate_slots(tenant.id, employee.id, MONDAY, duration, interval=interval)
