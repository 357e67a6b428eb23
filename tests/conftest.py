import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("BOOKING_LOCK_BACKEND", "memory")

from datetime import date, timedelta
from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from booking_app.models import (
    Appointment,
    AppointmentStatus,
    Base,
    Client,
    Extra,
    Holiday,
    Service,
    Tenant,
    User,
    WorkSchedule,
)
from booking_app.repositories.scheduling_repository import SchedulingRepository
from booking_app.services.appointment.appointment_service import AppointmentService
from booking_app.services.appointment.booking_lock import InProcessBookingLock
from booking_app.services.notification.notifier import Notifier
from booking_app.services.scheduling.schedule_resolver import day_of_week
from booking_app.services.scheduling.time_utils import TimeOfDay
from booking_app.services.webhook.dispatcher import WebhookDispatcher

# A Monday
MONDAY = date(2026, 10, 19)


class RecordingNotifier(Notifier):
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def notify(self, appointment_id, event_type, channel):
        self.calls.append((appointment_id, event_type, channel))
        if self.fail:
            raise RuntimeError("broker down")


class RecordingWebhookDispatcher(WebhookDispatcher):
    def __init__(self, fail=False):
        self.calls = []
        self.fail = fail

    def dispatch(self, appointment_id, previous_status=None):
        self.calls.append((appointment_id, previous_status))
        if self.fail:
            raise RuntimeError("broker down")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(bind=engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def repository(db):
    return SchedulingRepository(db)


@pytest.fixture
def tenant(db):
    tenant = Tenant(name="Studio Nord", slug="studio-nord")
    db.add(tenant)
    db.commit()
    return tenant


@pytest.fixture
def employee(db, tenant):
    employee = User(tenant_id=tenant.id, first_name="Ana", last_name="Silva", email="ana@studio.test")
    db.add(employee)
    db.commit()
    return employee


@pytest.fixture
def client(db, tenant):
    client = Client(tenant_id=tenant.id, first_name="Marta", last_name="Lopes", email="marta@example.com")
    db.add(client)
    db.commit()
    return client


@pytest.fixture
def make_service(db, tenant):
    def _make(duration=30, price="40.00", buffer_before=0, buffer_after=0, requires_confirm=False, name="Haircut"):
        service = Service(
            tenant_id=tenant.id,
            name=name,
            duration=duration,
            price=Decimal(price),
            buffer_before=buffer_before,
            buffer_after=buffer_after,
            requires_confirm=requires_confirm,
        )
        db.add(service)
        db.commit()
        return service
    return _make


@pytest.fixture
def service(make_service):
    return make_service()


@pytest.fixture
def make_extra(db, tenant):
    def _make(price="5.00", name="Wash", is_active=True):
        extra = Extra(tenant_id=tenant.id, name=name, price=Decimal(price), is_active=is_active)
        db.add(extra)
        db.commit()
        return extra
    return _make


@pytest.fixture
def make_schedule(db, tenant):
    def _make(user_id=None, day=MONDAY, start="09:00", end="17:00",
              break_start=None, break_end=None, is_working=True):
        schedule = WorkSchedule(
            tenant_id=tenant.id,
            user_id=user_id,
            day_of_week=day_of_week(day),
            is_working=is_working,
            start_time=start,
            end_time=end,
            break_start=break_start,
            break_end=break_end,
        )
        db.add(schedule)
        db.commit()
        return schedule
    return _make


@pytest.fixture
def make_holiday(db, tenant):
    def _make(name="Bank holiday", day=MONDAY, start=None, end=None):
        holiday = Holiday(
            tenant_id=tenant.id,
            date=day,
            name=name,
            is_full_day=start is None,
            start_time=start,
            end_time=end,
        )
        db.add(holiday)
        db.commit()
        return holiday
    return _make


@pytest.fixture
def make_appointment(db, tenant, client, employee, service):
    """Insert an appointment row directly, bypassing availability checks"""
    def _make(start="10:00", duration=30, day=MONDAY, status=AppointmentStatus.CONFIRMED,
              employee_id=None, price="40.00"):
        start_time = TimeOfDay.parse(start)
        appointment = Appointment(
            tenant_id=tenant.id,
            client_id=client.id,
            employee_id=employee_id or employee.id,
            service_id=service.id,
            date=day,
            start_time=start_time,
            end_time=start_time.plus(duration),
            duration=duration,
            price=Decimal(price),
            status=status,
        )
        db.add(appointment)
        db.commit()
        return appointment
    return _make


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def webhook_dispatcher():
    return RecordingWebhookDispatcher()


@pytest.fixture
def booking_lock():
    return InProcessBookingLock(wait_seconds=1)


@pytest.fixture
def appointment_service(repository, notifier, webhook_dispatcher, booking_lock):
    return AppointmentService(repository, notifier, webhook_dispatcher, booking_lock=booking_lock)


@pytest.fixture
def next_day():
    return MONDAY + timedelta(days=1)
