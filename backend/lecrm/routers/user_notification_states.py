"""Per-user bulk notification state endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import ValidationError
from sqlalchemy.orm import Session

from lecrm.core.exceptions import BadRequestError
from lecrm.db.session import get_db
from lecrm.schemas.notification import (
    UserNotificationMarkAllRead,
    UserNotificationReadUpdate,
    UserNotificationStateAction,
    UserNotificationStateUpsert,
)
from lecrm.services.user_notification_states import get_state, mark_all_read, state_to_dict, update_read, upsert_state

router = APIRouter()


@router.get("")
def get_user_state(
    user_id: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    user_id = user_id.strip()
    return {"success": True, "data": state_to_dict(get_state(db, user_id=user_id), user_id=user_id)}


@router.post("")
def post_user_state_action(
    payload: UserNotificationStateAction = Body(...),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    try:
        if payload.action == "upsert":
            body = UserNotificationStateUpsert.model_validate(payload.data)
            record = upsert_state(db, user_id=body.user_id, notifications=body.notifications)
        elif payload.action == "update_read":
            body = UserNotificationReadUpdate.model_validate(payload.data)
            record = update_read(
                db,
                user_id=body.user_id,
                notification_id=body.notification_id,
                is_read=body.is_read,
            )
        else:
            body = UserNotificationMarkAllRead.model_validate(payload.data)
            record = mark_all_read(db, user_id=body.user_id, notification_ids=body.notification_ids)
    except ValidationError as exc:
        raise BadRequestError("invalid_notification_state_payload", details={"errors": exc.errors(include_url=False)})
    return {"success": True, "data": state_to_dict(record, user_id=record.user_id)}
