"""Universal snooze data endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.orm import Session

from lecrm.core.sanitize import clean_optional_id
from lecrm.db.session import get_db
from lecrm.schemas.notification import SnoozeAction
from lecrm.services.notification_snoozes import ANY_ACCOUNT, delete_snoozes, list_snoozes, snooze_to_dict, upsert_snooze

router = APIRouter()


def _account_filter(value: str | None) -> Any:
    # absent: no filter; "null": universal snoozes only
    if value is None:
        return ANY_ACCOUNT
    return clean_optional_id(value)


@router.get("")
def get_snoozes(
    notification_type: str | None = Query(default=None),
    related_account_id: str | None = Query(default=None),
    active_only: bool = Query(default=False),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    records = list_snoozes(
        db,
        notification_type=(notification_type or "").strip() or None,
        related_account_id=_account_filter(related_account_id),
        active_only=active_only,
    )
    return {"success": True, "data": [snooze_to_dict(record) for record in records]}


@router.post("")
def post_snooze(
    payload: SnoozeAction = Body(...),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    body = payload.data
    record = upsert_snooze(
        db,
        notification_type=body.notification_type.value,
        related_account_id=body.related_account_id,
        snoozed_until=body.snoozed_until,
        snoozed_by=body.snoozed_by,
    )
    return {"success": True, "data": snooze_to_dict(record)}


@router.delete("")
def remove_snoozes(
    notification_type: str = Query(..., min_length=1),
    related_account_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    deleted = delete_snoozes(
        db,
        notification_type=notification_type.strip(),
        related_account_id=_account_filter(related_account_id),
    )
    return {"success": True, "data": {"deleted": deleted}}
