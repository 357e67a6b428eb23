import uuid
from unittest import mock

import pytest

from booking_app.tasks import notification_tasks, webhook_tasks


@pytest.fixture
def session():
    return mock.Mock()


class TestNotificationTask:
    def test_sends_through_service(self, session):
        appointment_id = str(uuid.uuid4())

        with mock.patch.object(notification_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(notification_tasks, "NotificationService") as service_cls:
            service_cls.return_value.send_appointment_notification.return_value = True
            result = notification_tasks.send_appointment_notification(appointment_id, "APPOINTMENT_CREATED", "EMAIL")

        assert result == {"status": "sent", "appointment_id": appointment_id}
        args = service_cls.return_value.send_appointment_notification.call_args.args
        assert args[0] == uuid.UUID(appointment_id)
        assert args[1].value == "APPOINTMENT_CREATED"
        session.close.assert_called_once()

    def test_failure_propagates_for_retry(self, session):
        with mock.patch.object(notification_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(notification_tasks, "NotificationService") as service_cls:
            service_cls.return_value.send_appointment_notification.side_effect = ConnectionError("smtp down")

            with pytest.raises(ConnectionError):
                notification_tasks.send_appointment_notification(str(uuid.uuid4()), "APPOINTMENT_CREATED", "EMAIL")

        session.close.assert_called_once()


class TestWebhookTask:
    def test_skipped_without_event(self, session):
        with mock.patch.object(webhook_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(webhook_tasks, "WebhookService") as service_cls:
            service_cls.return_value.create_appointment_event.return_value = None
            result = webhook_tasks.deliver_appointment_webhook(str(uuid.uuid4()))

        assert result["status"] == "skipped"
        service_cls.return_value.deliver.assert_not_called()

    def test_passes_previous_status(self, session):
        appointment_id = str(uuid.uuid4())

        with mock.patch.object(webhook_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(webhook_tasks, "WebhookService") as service_cls:
            service_cls.return_value.deliver.return_value = True
            result = webhook_tasks.deliver_appointment_webhook(appointment_id, "PENDING")

        assert result["status"] == "delivered"
        args = service_cls.return_value.create_appointment_event.call_args.args
        assert args[0] == uuid.UUID(appointment_id)
        assert args[1].value == "PENDING"

    def test_failed_delivery_schedules_retry(self, session):
        event = mock.Mock(id=uuid.uuid4(), status="pending", attempts=2)

        with mock.patch.object(webhook_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(webhook_tasks, "WebhookService") as service_cls, \
                mock.patch.object(webhook_tasks.deliver_webhook_event, "apply_async") as apply_async:
            service_cls.return_value.create_appointment_event.return_value = event
            service_cls.return_value.deliver.return_value = False
            result = webhook_tasks.deliver_appointment_webhook(str(uuid.uuid4()))

        assert result["status"] == "pending"
        apply_async.assert_called_once_with(args=[str(event.id)], countdown=5 * 60)
        service_cls.return_value.close.assert_called_once()
        session.close.assert_called_once()

    def test_sweep_delivers_pending_events(self, session):
        events = [mock.Mock(), mock.Mock()]

        with mock.patch.object(webhook_tasks, "SessionLocal", return_value=session), \
                mock.patch.object(webhook_tasks, "WebhookService") as service_cls:
            service_cls.return_value.pending_events.return_value = events
            service_cls.return_value.deliver.side_effect = [True, False]
            result = webhook_tasks.retry_pending_webhooks()

        assert result == {"processed": 2, "delivered": 1}
