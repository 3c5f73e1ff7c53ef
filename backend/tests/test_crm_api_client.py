from __future__ import annotations

import datetime as dt
import json

import httpx
import pytest

from lecrm.core.exceptions import CrmApiConnectionError, CrmApiEnvelopeError
from lecrm.integrations.crm_api import client as client_module
from lecrm.integrations.crm_api.client import CrmApiClient


def _client(handler, *, max_retries: int = 3) -> CrmApiClient:  # noqa: ANN001
    return CrmApiClient(
        base_url="https://crm.example.test/",
        token="secret",
        timeout=5,
        max_retries=max_retries,
        transport=httpx.MockTransport(handler),
    )


@pytest.fixture(autouse=True)
def _no_sleep(monkeypatch) -> None:  # noqa: ANN001
    monkeypatch.setattr(client_module.time, "sleep", lambda _seconds: None)


def test_unwraps_success_envelope_and_sends_bearer() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "data": [{"notification_type": "neglected_account"}]})

    snoozes = _client(handler).list_snoozes()

    assert snoozes == [{"notification_type": "neglected_account"}]
    assert seen[0].url.path == "/api/data/notificationSnoozes"
    assert seen[0].url.params["active_only"] == "true"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_failed_envelope_raises_with_upstream_message() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"success": False, "error": "user_not_found"})

    with pytest.raises(CrmApiEnvelopeError) as exc_info:
        _client(handler).get_user_notification_state("u-1")

    assert exc_info.value.message == "user_not_found"
    assert exc_info.value.details["path"] == "/api/data/userNotificationStates"


def test_non_json_body_is_an_envelope_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>oops</html>")

    with pytest.raises(CrmApiEnvelopeError):
        _client(handler).list_overdue_tasks()


def test_retries_transient_statuses() -> None:
    attempts: list[int] = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        if len(attempts) < 3:
            return httpx.Response(503, json={"success": False, "error": "busy"})
        return httpx.Response(200, json={"success": True, "data": {"atRiskAccounts": []}})

    assert _client(handler).get_all_notifications("u-1") == {"atRiskAccounts": []}
    assert len(attempts) == 3


def test_transport_errors_become_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(CrmApiConnectionError):
        _client(handler, max_retries=2).list_snoozes()


def test_snooze_write_posts_action_payload() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"success": True, "data": {"id": "s1"}})

    until = dt.datetime(2026, 4, 1, tzinfo=dt.timezone.utc)
    created = _client(handler).create_snooze(
        notification_type="renewal_reminder",
        related_account_id=None,
        snoozed_until=until,
        snoozed_by="u-1",
    )

    assert created == {"id": "s1"}
    assert bodies[0]["action"] == "snooze"
    assert bodies[0]["data"]["related_account_id"] is None
    assert bodies[0]["data"]["snoozed_until"] == until.isoformat()
