"""Client for the CRM data endpoints that answer with {success, data|error} envelopes."""

from __future__ import annotations

import datetime as dt
import logging
import time
from typing import Any

import httpx

from lecrm.core.config import settings
from lecrm.core.exceptions import CrmApiConnectionError, CrmApiEnvelopeError

logger = logging.getLogger(__name__)

RETRYABLE_STATUSES = {429, 500, 502, 503, 504}


class CrmApiClient:
    def __init__(
        self,
        *,
        base_url: str | None = None,
        token: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url if base_url is not None else settings.CRM_API_BASE_URL).rstrip("/")
        self.token = token if token is not None else settings.CRM_API_TOKEN
        self.timeout = timeout or settings.CRM_API_TIMEOUT_SECONDS
        self.max_retries = max(1, max_retries or settings.CRM_API_MAX_RETRIES)
        self.backoff_seconds = 0.5
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json", "Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.base_url}{path}"
        backoff = self.backoff_seconds
        with httpx.Client(timeout=self.timeout, headers=self._headers(), transport=self._transport) as client:
            for attempt in range(1, self.max_retries + 1):
                try:
                    response = client.request(method, url, **kwargs)
                except httpx.HTTPError as exc:
                    if attempt >= self.max_retries:
                        raise CrmApiConnectionError(str(exc) or "request_failed", path=path) from exc
                    time.sleep(backoff)
                    backoff *= 2
                    continue
                if response.status_code in RETRYABLE_STATUSES and attempt < self.max_retries:
                    logger.debug("Retrying %s %s after HTTP %s", method, path, response.status_code)
                    time.sleep(backoff)
                    backoff *= 2
                    continue
                return self._unwrap(response, path=path)
        raise CrmApiConnectionError("retries_exhausted", path=path)

    @staticmethod
    def _unwrap(response: httpx.Response, *, path: str) -> Any:
        try:
            body = response.json()
        except ValueError as exc:
            raise CrmApiEnvelopeError("invalid_json_response", path=path, status_code=response.status_code) from exc
        if not isinstance(body, dict):
            raise CrmApiEnvelopeError("invalid_envelope", path=path, status_code=response.status_code)
        if response.is_error or not body.get("success"):
            message = str(body.get("error") or f"HTTP {response.status_code}")
            raise CrmApiEnvelopeError(message, path=path, status_code=response.status_code)
        return body.get("data")

    # ----- reads -----

    def get_all_notifications(self, user_id: str) -> dict[str, Any]:
        data = self._request("GET", "/api/notifications", params={"type": "all", "user_id": user_id})
        return data if isinstance(data, dict) else {}

    def get_user_notification_state(self, user_id: str) -> dict[str, Any]:
        data = self._request("GET", "/api/data/userNotificationStates", params={"user_id": user_id})
        return data if isinstance(data, dict) else {}

    def list_snoozes(self, *, active_only: bool = True) -> list[dict[str, Any]]:
        params = {"active_only": "true"} if active_only else None
        data = self._request("GET", "/api/data/notificationSnoozes", params=params)
        return data if isinstance(data, list) else []

    def list_overdue_tasks(self) -> list[dict[str, Any]]:
        data = self._request("GET", "/api/data/tasks", params={"overdue_only": "true"})
        return data if isinstance(data, list) else []

    # ----- writes -----

    def update_notification(self, notification_id: str, **values: Any) -> dict[str, Any]:
        data = self._request("PUT", "/api/data/notifications", json={"id": notification_id, **values})
        return data if isinstance(data, dict) else {}

    def mark_all_notifications_read(self, user_id: str) -> Any:
        return self._request(
            "POST",
            "/api/data/notifications",
            json={"action": "mark_all_read", "data": {"user_id": user_id}},
        )

    def delete_notification(self, notification_id: str) -> Any:
        return self._request("DELETE", "/api/data/notifications", params={"id": notification_id})

    def update_user_notification_read(self, user_id: str, notification_id: str, *, is_read: bool = True) -> Any:
        return self._request(
            "POST",
            "/api/data/userNotificationStates",
            json={
                "action": "update_read",
                "data": {"user_id": user_id, "notification_id": notification_id, "is_read": is_read},
            },
        )

    def mark_all_user_notifications_read(self, user_id: str, notification_ids: list[str]) -> Any:
        return self._request(
            "POST",
            "/api/data/userNotificationStates",
            json={"action": "mark_all_read", "data": {"user_id": user_id, "notification_ids": notification_ids}},
        )

    def create_snooze(
        self,
        *,
        notification_type: str,
        related_account_id: str | None,
        snoozed_until: dt.datetime,
        snoozed_by: str | None = None,
    ) -> dict[str, Any]:
        data = self._request(
            "POST",
            "/api/data/notificationSnoozes",
            json={
                "action": "snooze",
                "data": {
                    "notification_type": notification_type,
                    "related_account_id": related_account_id,
                    "snoozed_until": snoozed_until.isoformat(),
                    "snoozed_by": snoozed_by,
                },
            },
        )
        return data if isinstance(data, dict) else {}
