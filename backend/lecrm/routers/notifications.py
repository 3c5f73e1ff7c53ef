"""Notification bell endpoints: unified payload, grouped view and actor mutations."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Path, Query
from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.core.deps import get_current_actor_id, get_notification_view_service
from lecrm.core.exceptions import BadRequestError, MutationFailedError, NotFoundError
from lecrm.db.session import get_db
from lecrm.models.enums import CacheKey
from lecrm.schemas.notification import NotificationViewOut, SnoozeRequest
from lecrm.services.notification_sources import (
    build_all_payload,
    duplicate_to_dict,
    list_unresolved_duplicates,
    read_account_cache,
)
from lecrm.services.notification_view import NotificationViewService, snooze_until, unread_total
from lecrm.services.notification_view.mutations import MutationResult

router = APIRouter()

PAYLOAD_TYPES = {"all", "at-risk-accounts", "neglected-accounts", "duplicate-estimates"}


def _ok(result: MutationResult) -> dict[str, Any]:
    if not result.ok and result.status_code == 404:
        raise NotFoundError(result.error or "notification_not_found", details={"operation": result.name})
    if not result.ok:
        raise MutationFailedError(result.name, result.error or "notification_mutation_failed")
    return {"success": True, "data": {"operation": result.name}}


@router.get("")
def get_notifications(
    type: str = Query(default="all"),
    user_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    kind = (type or "all").strip().lower()
    if kind not in PAYLOAD_TYPES:
        raise BadRequestError("invalid_notification_payload_type", details={"type": type})

    now = utcnow()
    if kind == "all":
        if not (user_id or "").strip():
            raise BadRequestError("user_id_required")
        payload = build_all_payload(db, user_id=user_id.strip(), now=now)
        return {"success": True, **payload}
    if kind == "duplicate-estimates":
        return {"success": True, "data": [duplicate_to_dict(record) for record in list_unresolved_duplicates(db)]}

    key = CacheKey.at_risk_accounts if kind == "at-risk-accounts" else CacheKey.neglected_accounts
    accounts, stale = read_account_cache(db, key, now=now)
    return {"success": True, "data": accounts, "cache": {"stale": stale}}


@router.get("/view", response_model=NotificationViewOut)
def get_notification_view(
    actor_id: str = Depends(get_current_actor_id),
    service: NotificationViewService = Depends(get_notification_view_service),
) -> NotificationViewOut:
    groups = service.get_notification_view(actor_id)
    return NotificationViewOut.model_validate(
        {"unread_total": unread_total(groups), "groups": [group.to_dict() for group in groups]}
    )


@router.post("/read-all")
def read_all_notifications(
    actor_id: str = Depends(get_current_actor_id),
    service: NotificationViewService = Depends(get_notification_view_service),
) -> dict[str, Any]:
    return _ok(service.mutations.mark_all_as_read(actor_id))


@router.post("/snooze")
def snooze_notification(
    payload: SnoozeRequest = Body(...),
    actor_id: str = Depends(get_current_actor_id),
    service: NotificationViewService = Depends(get_notification_view_service),
) -> dict[str, Any]:
    until = payload.until or snooze_until(payload.unit, payload.duration)
    result = service.mutations.snooze(
        actor_id,
        payload.notification_type,
        payload.related_account_id,
        until,
        notification_id=payload.notification_id,
    )
    response = _ok(result)
    response["data"]["snoozed_until"] = until.isoformat()
    return response


@router.post("/{notification_id}/read")
def read_notification(
    notification_id: str = Path(..., min_length=1),
    actor_id: str = Depends(get_current_actor_id),
    service: NotificationViewService = Depends(get_notification_view_service),
) -> dict[str, Any]:
    return _ok(service.mutations.mark_as_read(actor_id, notification_id))


@router.delete("/{notification_id}")
def remove_notification(
    notification_id: str = Path(..., min_length=1),
    actor_id: str = Depends(get_current_actor_id),
    service: NotificationViewService = Depends(get_notification_view_service),
) -> dict[str, Any]:
    return _ok(service.mutations.delete(actor_id, notification_id))
