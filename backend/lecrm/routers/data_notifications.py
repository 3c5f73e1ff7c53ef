"""Row-level notification data endpoints used by the API-backed source and upstream jobs."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from lecrm.core.config import settings
from lecrm.core.exceptions import BadRequestError, NotFoundError
from lecrm.db.session import get_db
from lecrm.schemas.notification import NotificationAction, NotificationCreate, NotificationUpdate, UserIdPayload
from lecrm.services.notifications_service import (
    create_notification,
    delete_notification,
    list_notifications,
    mark_all_notifications_as_read,
    notification_to_dict,
    update_notification,
)

router = APIRouter()


@router.get("")
def get_notifications(
    user_id: str = Query(..., min_length=1),
    unread_only: bool = Query(default=False),
    limit: int | None = Query(default=None, ge=1, le=1000),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    records = list_notifications(
        db,
        user_id=user_id.strip(),
        unread_only=unread_only,
        limit=limit or settings.NOTIFICATION_LIST_LIMIT,
    )
    return {"success": True, "data": [notification_to_dict(record) for record in records]}


@router.post("")
def post_notification_action(
    payload: NotificationAction = Body(...),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    try:
        if payload.action == "create":
            body = NotificationCreate.model_validate(payload.data)
            record = create_notification(
                db,
                user_id=body.user_id,
                type=body.type.value,
                title=body.title,
                message=body.message,
                is_read=body.is_read,
                scheduled_for=body.scheduled_for,
                related_account_id=body.related_account_id,
                related_task_id=body.related_task_id,
                related_ticket_id=body.related_ticket_id,
            )
            return {"success": True, "data": notification_to_dict(record)}

        target = UserIdPayload.model_validate(payload.data)
    except ValidationError as exc:
        raise BadRequestError("invalid_notification_payload", details={"errors": exc.errors(include_url=False)})
    updated = mark_all_notifications_as_read(db, user_id=target.user_id)
    return {"success": True, "data": {"updated": updated}}


@router.put("")
def put_notification(
    payload: NotificationUpdate = Body(...),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    record = update_notification(db, notification_id=payload.id, values=payload.changes())
    if not record:
        raise NotFoundError("notification_not_found", details={"notification_id": payload.id})
    return {"success": True, "data": notification_to_dict(record)}


@router.delete("")
def remove_notification(
    id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    if not delete_notification(db, notification_id=id):
        raise NotFoundError("notification_not_found", details={"notification_id": id})
    return {"success": True, "data": {"id": id}}
