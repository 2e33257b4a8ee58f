"""
Tests for the webhook registration utility
"""
import json
from unittest.mock import MagicMock

import pytest

from hostpilot.lodgify import registration
from hostpilot.lodgify.registration import (
    deregister_all_webhooks,
    main,
    register_webhook,
)
from hostpilot.services.lodgify_api_service import (
    LodgifyAPIError,
    LodgifyAPIService,
    LodgifyConfigError,
)


@pytest.fixture
def service():
    return MagicMock(spec=LodgifyAPIService)


class TestRegister:
    def test_register_requires_url(self, service):
        with pytest.raises(LodgifyConfigError):
            register_webhook(service, "")

        service.subscribe_webhook.assert_not_called()

    def test_register_defaults_to_booking_change(self, service):
        service.subscribe_webhook.return_value = {"id": "wh-1"}

        assert register_webhook(service, "https://relay.test/hook") == {"id": "wh-1"}
        service.subscribe_webhook.assert_called_once_with(
            "https://relay.test/hook", "booking_change"
        )


class TestDeregister:
    def test_nothing_registered(self, service):
        service.list_webhooks.return_value = []

        report = deregister_all_webhooks(service)

        assert report.removed == []
        assert report.ok
        service.unsubscribe_webhook.assert_not_called()

    def test_failure_on_one_id_does_not_stop_the_rest(self, service):
        service.list_webhooks.return_value = [{"id": "a"}, {"id": "b"}, {"id": "c"}]

        def unsubscribe(webhook_id):
            if webhook_id == "b":
                raise LodgifyAPIError("Lodgify returned HTTP 500", status_code=500)
            return webhook_id != "c"

        service.unsubscribe_webhook.side_effect = unsubscribe

        report = deregister_all_webhooks(service)

        assert report.removed == ["a"]
        assert report.missing == ["c"]
        assert list(report.failed) == ["b"]
        assert not report.ok
        assert service.unsubscribe_webhook.call_count == 3


class TestCli:
    def test_subscribe_uses_configured_url(self, service, monkeypatch, capsys):
        monkeypatch.setattr(
            registration.settings, "lodgify_webhook_url", "https://relay.test/lodgify/webhook"
        )
        service.subscribe_webhook.return_value = {"id": "wh-1"}

        assert main(["subscribe"], service=service) == 0
        service.subscribe_webhook.assert_called_once_with(
            "https://relay.test/lodgify/webhook", "booking_change"
        )
        assert json.loads(capsys.readouterr().out) == {"id": "wh-1"}

    def test_subscribe_multiple_events_with_explicit_url(self, service):
        service.subscribe_webhook.return_value = {}

        code = main(
            [
                "subscribe",
                "--url",
                "https://other.test/hook",
                "--event",
                "booking_change",
                "--event",
                "guest_message_received",
            ],
            service=service,
        )

        assert code == 0
        assert [c.args[1] for c in service.subscribe_webhook.call_args_list] == [
            "booking_change",
            "guest_message_received",
        ]

    def test_list_prints_json(self, service, capsys):
        service.list_webhooks.return_value = [{"id": "a", "event": "booking_change"}]

        assert main(["list"], service=service) == 0
        assert json.loads(capsys.readouterr().out) == [
            {"id": "a", "event": "booking_change"}
        ]

    def test_cleanup_exit_code_reflects_failures(self, service):
        service.list_webhooks.return_value = [{"id": "a"}]
        service.unsubscribe_webhook.side_effect = LodgifyAPIError("boom", status_code=500)

        assert main(["cleanup"], service=service) == 1

    def test_upstream_error_returns_nonzero(self, service):
        service.list_webhooks.side_effect = LodgifyAPIError("boom", status_code=503)

        assert main(["list"], service=service) == 1
