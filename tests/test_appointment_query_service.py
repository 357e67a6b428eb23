import pytest

from booking_app.models import AppointmentStatus
from booking_app.services.appointment.appointment_query_service import AppointmentQueryService

from conftest import MONDAY


@pytest.fixture
def queries(repository):
    return AppointmentQueryService(repository)


class TestListByDateRange:
    def test_ordered_by_date_then_time(self, queries, tenant, make_appointment, next_day):
        late = make_appointment(start="15:00")
        tomorrow = make_appointment(start="09:00", day=next_day)
        early = make_appointment(start="09:00")

        result = queries.list_by_date_range(tenant.id, MONDAY, next_day)

        assert [a.id for a in result] == [early.id, late.id, tomorrow.id]

    def test_range_is_inclusive_and_bounded(self, queries, tenant, make_appointment, next_day):
        make_appointment(day=next_day)

        assert queries.list_by_date_range(tenant.id, MONDAY, MONDAY) == []
        assert len(queries.list_by_date_range(tenant.id, next_day, next_day)) == 1

    def test_filters_by_status(self, queries, tenant, make_appointment):
        make_appointment(start="09:00", status=AppointmentStatus.CANCELED)
        kept = make_appointment(start="10:00", status=AppointmentStatus.COMPLETED)

        result = queries.list_by_date_range(tenant.id, MONDAY, MONDAY, statuses=[AppointmentStatus.COMPLETED])

        assert [a.id for a in result] == [kept.id]

    def test_filters_by_employee(self, db, queries, tenant, employee, make_appointment):
        from booking_app.models import User

        colleague = User(tenant_id=tenant.id, first_name="Rui")
        db.add(colleague)
        db.commit()
        make_appointment(employee_id=colleague.id)
        mine = make_appointment(start="11:00")

        result = queries.list_by_date_range(tenant.id, MONDAY, MONDAY, employee_id=employee.id)

        assert [a.id for a in result] == [mine.id]


class TestStats:
    def test_empty_range(self, queries, tenant):
        stats = queries.get_stats(tenant.id, MONDAY, MONDAY)

        assert stats["total"] == 0
        assert stats["revenue"] == 0.0
        assert stats["completion_rate"] == 0.0
        assert stats["cancellation_rate"] == 0.0
        assert stats["no_show_rate"] == 0.0

    def test_counts_revenue_and_rates(self, queries, tenant, employee, make_appointment, next_day):
        make_appointment(start="09:00", status=AppointmentStatus.COMPLETED, price="40.00")
        make_appointment(start="10:00", status=AppointmentStatus.COMPLETED, price="25.50")
        make_appointment(start="11:00", status=AppointmentStatus.CANCELED, price="99.00")
        make_appointment(start="12:00", status=AppointmentStatus.NO_SHOW)
        make_appointment(start="13:00", status=AppointmentStatus.PENDING)
        make_appointment(start="09:00", status=AppointmentStatus.CONFIRMED, day=next_day)
        make_appointment(start="10:00", status=AppointmentStatus.RESCHEDULED, day=next_day)
        make_appointment(start="11:00", status=AppointmentStatus.CONFIRMED, day=next_day)

        stats = queries.get_stats(tenant.id, MONDAY, next_day)

        assert stats["total"] == 8
        assert stats["completed"] == 2
        assert stats["canceled"] == 1
        assert stats["no_show"] == 1
        assert stats["pending"] == 3
        assert stats["revenue"] == pytest.approx(65.5)
        assert stats["completion_rate"] == pytest.approx(25.0)
        assert stats["cancellation_rate"] == pytest.approx(12.5)
        assert stats["no_show_rate"] == pytest.approx(12.5)
        assert stats["by_day"] == {MONDAY.isoformat(): 5, next_day.isoformat(): 3}
        assert stats["by_employee"] == {str(employee.id): 8}
