import json

import httpx
import pytest

from booking_app.models import AppointmentStatus, WebhookEvent
from booking_app.services.webhook.webhook_service import WebhookService, event_for_status


@pytest.fixture
def webhook_tenant(db, tenant):
    tenant.webhook_url = "https://hooks.example.com/booking"
    tenant.webhook_secret = "s3cret"
    tenant.webhook_active = True
    db.commit()
    return tenant


def mock_client(handler):
    return httpx.Client(transport=httpx.MockTransport(handler))


class TestEventForStatus:
    def test_created_when_no_previous_status(self):
        assert event_for_status(AppointmentStatus.CONFIRMED) == "appointment.created"

    @pytest.mark.parametrize("status,event", [
        (AppointmentStatus.CONFIRMED, "appointment.confirmed"),
        (AppointmentStatus.CANCELED, "appointment.canceled"),
        (AppointmentStatus.COMPLETED, "appointment.completed"),
        (AppointmentStatus.NO_SHOW, "appointment.no_show"),
        (AppointmentStatus.RESCHEDULED, "appointment.rescheduled"),
        (AppointmentStatus.PENDING, "appointment.updated"),
    ])
    def test_status_mapping(self, status, event):
        assert event_for_status(status, AppointmentStatus.PENDING) == event


class TestCreateEvent:
    def test_skipped_when_webhooks_inactive(self, db, tenant, make_appointment):
        appointment = make_appointment()
        service = WebhookService(db, http_client=mock_client(lambda request: httpx.Response(200)))

        assert service.create_appointment_event(appointment.id) is None
        assert db.query(WebhookEvent).count() == 0

    def test_payload_shape(self, db, webhook_tenant, make_appointment):
        appointment = make_appointment(status=AppointmentStatus.CANCELED)
        service = WebhookService(db, http_client=mock_client(lambda request: httpx.Response(200)))

        event = service.create_appointment_event(appointment.id, AppointmentStatus.CONFIRMED)

        assert event.event_type == "appointment.canceled"
        assert event.status == "pending"
        payload = event.event_data
        assert payload["event"] == "appointment.canceled"
        assert payload["tenant"] == {
            "id": str(webhook_tenant.id),
            "slug": "studio-nord",
            "name": "Studio Nord",
        }
        assert payload["data"]["appointment"]["id"] == str(appointment.id)
        assert payload["data"]["appointment"]["start_time"] == "10:00"
        assert payload["data"]["client"]["name"] == "Marta Lopes"
        assert payload["data"]["previous_status"] == "CONFIRMED"


class TestDeliver:
    def test_signed_delivery(self, db, webhook_tenant, make_appointment):
        captured = {}

        def handler(request):
            captured["body"] = request.content.decode()
            captured["headers"] = request.headers
            return httpx.Response(200, text="ok")

        service = WebhookService(db, http_client=mock_client(handler))
        event = service.create_appointment_event(make_appointment().id)

        assert service.deliver(event) is True

        assert event.status == "delivered"
        assert event.attempts == 1
        assert event.response_status_code == 200
        assert captured["headers"]["X-Webhook-Event"] == "appointment.created"
        assert captured["headers"]["X-Tenant-Id"] == str(webhook_tenant.id)
        assert WebhookService.verify_signature(captured["body"], captured["headers"]["X-Webhook-Signature"], "s3cret")
        assert json.loads(captured["body"])["event"] == "appointment.created"

    def test_failure_schedules_retry(self, db, webhook_tenant, make_appointment):
        service = WebhookService(db, http_client=mock_client(lambda request: httpx.Response(503, text="down")))
        event = service.create_appointment_event(make_appointment().id)

        assert service.deliver(event) is False

        assert event.status == "pending"
        assert event.next_retry_at is not None
        assert event.error_message.startswith("HTTP 503")

    def test_network_error_is_recorded(self, db, webhook_tenant, make_appointment):
        def handler(request):
            raise httpx.ConnectError("connection refused")

        service = WebhookService(db, http_client=mock_client(handler))
        event = service.create_appointment_event(make_appointment().id)

        assert service.deliver(event) is False
        assert "connection refused" in event.error_message

    def test_gives_up_after_max_attempts(self, db, webhook_tenant, make_appointment):
        service = WebhookService(db, http_client=mock_client(lambda request: httpx.Response(500)))
        event = service.create_appointment_event(make_appointment().id)
        event.max_attempts = 2
        db.commit()

        service.deliver(event)
        service.deliver(event)

        assert event.status == "failed"
        assert event.failed_at is not None
        assert event.next_retry_at is None


class TestSignature:
    def test_sign_and_verify(self):
        signature = WebhookService.sign_payload('{"a": 1}', "key")

        assert signature.startswith("sha256=")
        assert WebhookService.verify_signature('{"a": 1}', signature, "key")
        assert not WebhookService.verify_signature('{"a": 2}', signature, "key")


class TestCeleryWebhookDispatcher:
    def test_queues_task_with_previous_status(self):
        import uuid
        from unittest import mock

        from booking_app.services.webhook.dispatcher import CeleryWebhookDispatcher

        appointment_id = uuid.uuid4()
        with mock.patch("booking_app.tasks.webhook_tasks.deliver_appointment_webhook.delay") as delay:
            CeleryWebhookDispatcher().dispatch(appointment_id, AppointmentStatus.PENDING)

        delay.assert_called_once_with(str(appointment_id), "PENDING")
