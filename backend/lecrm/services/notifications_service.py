"""Service helpers for notification rows: CRUD and read-state updates."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable

from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.models.notification import Notification

UPDATABLE_FIELDS = {
    "type",
    "title",
    "message",
    "is_read",
    "scheduled_for",
    "related_account_id",
    "related_task_id",
    "related_ticket_id",
}


def notification_to_dict(record: Notification) -> dict[str, Any]:
    return {
        "id": record.id,
        "user_id": record.user_id,
        "type": record.type,
        "title": record.title,
        "message": record.message,
        "is_read": record.is_read,
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "scheduled_for": record.scheduled_for.isoformat() if record.scheduled_for else None,
        "related_account_id": record.related_account_id,
        "related_task_id": record.related_task_id,
        "related_ticket_id": record.related_ticket_id,
    }


def list_notifications(
    db: Session,
    *,
    user_id: str,
    unread_only: bool = False,
    types: Iterable[str] | None = None,
    limit: int | None = 100,
) -> list[Notification]:
    query = db.query(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.is_read.is_(False))
    type_values = [str(value) for value in (types or [])]
    if type_values:
        query = query.filter(Notification.type.in_(type_values))
    query = query.order_by(Notification.created_at.desc())
    if limit:
        query = query.limit(limit)
    return query.all()


def create_notification(
    db: Session,
    *,
    user_id: str | None,
    type: str,
    title: str,
    message: str | None = None,
    is_read: bool = False,
    scheduled_for: dt.datetime | None = None,
    related_account_id: str | None = None,
    related_task_id: str | None = None,
    related_ticket_id: str | None = None,
    notification_id: str | None = None,
) -> Notification:
    record = Notification(
        user_id=user_id,
        type=type,
        title=title,
        message=message,
        is_read=is_read,
        scheduled_for=scheduled_for,
        related_account_id=related_account_id,
        related_task_id=related_task_id,
        related_ticket_id=related_ticket_id,
    )
    if notification_id:
        record.id = notification_id
    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def update_notification(db: Session, *, notification_id: str, values: dict[str, Any]) -> Notification | None:
    record = db.get(Notification, notification_id)
    if not record:
        return None
    changed = False
    for key, value in values.items():
        if key not in UPDATABLE_FIELDS:
            continue
        setattr(record, key, value)
        changed = True
    if changed:
        record.updated_at = utcnow()
        db.commit()
        db.refresh(record)
    return record


def mark_notification_as_read(
    db: Session,
    *,
    notification_id: str,
    user_id: str | None = None,
) -> Notification | None:
    record = db.get(Notification, notification_id)
    if not record:
        return None
    if user_id is not None and (record.user_id or "").strip() != user_id.strip():
        return None
    if not record.is_read:
        record.is_read = True
        record.updated_at = utcnow()
        db.commit()
        db.refresh(record)
    return record


def mark_all_notifications_as_read(db: Session, *, user_id: str) -> int:
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
        .update({"is_read": True, "updated_at": utcnow()}, synchronize_session=False)
    )
    db.commit()
    return int(updated or 0)


def delete_notification(db: Session, *, notification_id: str, user_id: str | None = None) -> bool:
    record = db.get(Notification, notification_id)
    if not record:
        return False
    if user_id is not None and (record.user_id or "").strip() != user_id.strip():
        return False
    db.delete(record)
    db.commit()
    return True
