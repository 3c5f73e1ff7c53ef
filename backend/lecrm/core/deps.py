"""Common FastAPI dependencies for resolving the acting user."""

from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from lecrm.core.config import settings
from lecrm.core.exceptions import AuthenticationException, ExpiredTokenError
from lecrm.core.security import ACCESS_TOKEN_TYPE, decode_token
from lecrm.db.session import SessionLocal
from lecrm.integrations.crm_api.client import CrmApiClient
from lecrm.services.notification_view import ApiNotificationSource, DbNotificationSource, NotificationViewService


def _extract_bearer_token(request: Request) -> str | None:
    authorization = request.headers.get("Authorization", "")
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    cleaned = token.strip()
    return cleaned or None


def get_current_actor_id(request: Request) -> str:
    token = _extract_bearer_token(request)
    if not token:
        raise AuthenticationException(
            "not_authenticated",
            error_code="NOT_AUTHENTICATED",
            status_code=401,
        )

    try:
        payload = decode_token(token)
    except ValueError as exc:
        if str(exc) == "expired_token":
            raise ExpiredTokenError("access_token_expired")
        raise AuthenticationException(
            "invalid_token",
            error_code="INVALID_TOKEN",
            status_code=401,
        )
    token_type = payload.get("type")
    if token_type and token_type != ACCESS_TOKEN_TYPE:
        raise AuthenticationException(
            "invalid_token",
            error_code="INVALID_TOKEN",
            status_code=401,
        )
    actor_id = str(payload.get("sub") or "").strip()
    if not actor_id:
        raise AuthenticationException(
            "invalid_token",
            error_code="INVALID_TOKEN",
            status_code=401,
        )
    return actor_id


@lru_cache(maxsize=1)
def get_notification_view_service() -> NotificationViewService:
    """Process-wide view service; its caches are shared across requests."""
    if settings.crm_api_ready:
        source = ApiNotificationSource(CrmApiClient())
    else:
        source = DbNotificationSource(SessionLocal)
    return NotificationViewService(source, config=settings)
