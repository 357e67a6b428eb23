import uuid

import pytest
from fastapi.testclient import TestClient

from booking_app.api.dependencies import get_appointment_service
from booking_app.config.database import get_db
from booking_app.main import create_app

from conftest import MONDAY


@pytest.fixture
def api(db, appointment_service):
    app = create_app()

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_appointment_service] = lambda: appointment_service
    return TestClient(app)


@pytest.fixture
def headers(tenant):
    return {"X-Tenant-ID": str(tenant.id)}


@pytest.fixture(autouse=True)
def working_monday(employee, make_schedule):
    return make_schedule(user_id=employee.id, start="09:00", end="17:00", break_start="12:00", break_end="13:00")


@pytest.fixture
def booking_payload(client, employee, service):
    return {
        "client_id": str(client.id),
        "employee_id": str(employee.id),
        "service_id": str(service.id),
        "date": MONDAY.isoformat(),
        "start_time": "10:00",
    }


class TestHealth:
    def test_health(self, api):
        response = api.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_correlation_id_echoed(self, api):
        response = api.get("/health", headers={"X-Correlation-ID": "abc-123"})

        assert response.headers["X-Correlation-ID"] == "abc-123"


class TestAvailabilityEndpoints:
    def test_slots_by_duration(self, api, headers, employee):
        response = api.get("/api/v1/availability/slots", headers=headers, params={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "duration": 30,
        })

        assert response.status_code == 200
        slots = response.json()
        times = [slot["time"] for slot in slots]
        assert times == sorted(times)
        by_time = {slot["time"]: slot for slot in slots}
        assert by_time["10:00"] == {"time": "10:00", "available": True, "warning": None, "warning_message": None}
        assert by_time["07:00"]["warning"] == "OUTSIDE_BUSINESS_HOURS"

    def test_slots_by_service(self, api, headers, employee, make_service):
        service = make_service(duration=50, buffer_after=10)

        response = api.get("/api/v1/availability/slots", headers=headers, params={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "service_id": str(service.id),
            "interval": 60,
        })

        assert response.status_code == 200
        main = [s["time"] for s in response.json() if s["warning"] != "OUTSIDE_BUSINESS_HOURS"]
        assert main[-1] == "19:00"

    def test_slots_requires_duration_or_service(self, api, headers, employee):
        response = api.get("/api/v1/availability/slots", headers=headers, params={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(),
        })

        assert response.status_code == 422

    def test_slots_unknown_service(self, api, headers, employee):
        response = api.get("/api/v1/availability/slots", headers=headers, params={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "service_id": str(uuid.uuid4()),
        })

        assert response.status_code == 404

    def test_missing_tenant_header(self, api, employee):
        response = api.get("/api/v1/availability/slots", params={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "duration": 30,
        })

        assert response.status_code == 422

    def test_check(self, api, headers, employee):
        response = api.post("/api/v1/availability/check", headers=headers, json={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "start_time": "12:15", "duration": 30,
        })

        assert response.status_code == 200
        assert response.json() == {"available": False, "reason": "Conflicts with break"}

    def test_check_malformed_time(self, api, headers, employee):
        response = api.post("/api/v1/availability/check", headers=headers, json={
            "employee_id": str(employee.id), "date": MONDAY.isoformat(), "start_time": "25:00", "duration": 30,
        })

        assert response.status_code == 422


class TestAppointmentEndpoints:
    def test_create(self, api, headers, booking_payload):
        response = api.post("/api/v1/appointments", headers=headers, json=booking_payload)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "CONFIRMED"
        assert body["end_time"] == "10:30"
        assert body["price"] == 40.0

    def test_create_conflict_is_409(self, api, headers, booking_payload):
        api.post("/api/v1/appointments", headers=headers, json=booking_payload)

        response = api.post("/api/v1/appointments", headers=headers, json=booking_payload)

        assert response.status_code == 409
        assert response.json()["detail"].startswith("Conflicts with appointment of Marta Lopes")

    def test_create_unknown_service_is_404(self, api, headers, booking_payload):
        booking_payload["service_id"] = str(uuid.uuid4())

        assert api.post("/api/v1/appointments", headers=headers, json=booking_payload).status_code == 404

    def test_create_rollover_is_422(self, api, headers, booking_payload, make_service):
        booking_payload["service_id"] = str(make_service(duration=120).id)
        booking_payload["start_time"] = "23:00"

        assert api.post("/api/v1/appointments", headers=headers, json=booking_payload).status_code == 422

    def test_reschedule_and_cancel(self, api, headers, booking_payload):
        appointment_id = api.post("/api/v1/appointments", headers=headers, json=booking_payload).json()["id"]

        moved = api.patch(f"/api/v1/appointments/{appointment_id}", headers=headers, json={"start_time": "14:00"})
        assert moved.status_code == 200
        assert moved.json()["start_time"] == "14:00"

        canceled = api.post(
            f"/api/v1/appointments/{appointment_id}/cancel",
            headers={**headers, "X-User-ID": "staff-7"},
            json={"reason": "Client request"},
        )
        assert canceled.status_code == 200
        assert canceled.json()["status"] == "CANCELED"
        assert canceled.json()["canceled_by"] == "staff-7"

    def test_terminal_transition_is_409(self, api, headers, booking_payload):
        appointment_id = api.post("/api/v1/appointments", headers=headers, json=booking_payload).json()["id"]
        api.post(f"/api/v1/appointments/{appointment_id}/cancel", headers=headers, json={})

        response = api.patch(f"/api/v1/appointments/{appointment_id}", headers=headers, json={"status": "CONFIRMED"})

        assert response.status_code == 409

    def test_update_missing_is_404(self, api, headers):
        response = api.patch(f"/api/v1/appointments/{uuid.uuid4()}", headers=headers, json={"notes": "x"})

        assert response.status_code == 404

    @pytest.mark.parametrize("field", ["client_id", "payment_status"])
    def test_update_null_required_field_is_422(self, api, headers, booking_payload, field):
        appointment_id = api.post("/api/v1/appointments", headers=headers, json=booking_payload).json()["id"]

        response = api.patch(f"/api/v1/appointments/{appointment_id}", headers=headers, json={field: None})

        assert response.status_code == 422

    def test_other_tenant_cannot_see_appointment(self, api, db, booking_payload, headers):
        from booking_app.models import Tenant

        appointment_id = api.post("/api/v1/appointments", headers=headers, json=booking_payload).json()["id"]
        other = Tenant(name="Other", slug="other")
        db.add(other)
        db.commit()

        response = api.patch(
            f"/api/v1/appointments/{appointment_id}",
            headers={"X-Tenant-ID": str(other.id)},
            json={"notes": "x"},
        )

        assert response.status_code == 404

    def test_list_and_stats(self, api, headers, booking_payload):
        api.post("/api/v1/appointments", headers=headers, json=booking_payload)
        booking_payload["start_time"] = "11:00"
        api.post("/api/v1/appointments", headers=headers, json=booking_payload)
        params = {"start_date": MONDAY.isoformat(), "end_date": MONDAY.isoformat()}

        listed = api.get("/api/v1/appointments", headers=headers, params=params)
        stats = api.get("/api/v1/appointments/stats", headers=headers, params=params)

        assert [a["start_time"] for a in listed.json()] == ["10:00", "11:00"]
        assert stats.json()["total"] == 2
        assert stats.json()["pending"] == 2

    def test_list_rejects_reversed_range(self, api, headers):
        response = api.get("/api/v1/appointments", headers=headers, params={
            "start_date": "2026-10-20", "end_date": "2026-10-19",
        })

        assert response.status_code == 422
