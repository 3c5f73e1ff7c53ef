"""Service helpers for the per-user bulk notification state (JSON list)."""

from __future__ import annotations

from typing import Any, Iterable

from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.models.user_notification_state import UserNotificationState


def state_to_dict(record: UserNotificationState | None, *, user_id: str) -> dict[str, Any]:
    if record is None:
        now = utcnow().isoformat()
        return {"user_id": user_id, "notifications": [], "created_at": now, "updated_at": now}
    return {
        "user_id": record.user_id,
        "notifications": list(record.notifications or []),
        "created_at": record.created_at.isoformat() if record.created_at else None,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def get_state(db: Session, *, user_id: str) -> UserNotificationState | None:
    return db.get(UserNotificationState, user_id)


def _save(db: Session, *, user_id: str, notifications: list[dict[str, Any]]) -> UserNotificationState:
    record = db.get(UserNotificationState, user_id)
    if record is None:
        record = UserNotificationState(user_id=user_id, notifications=notifications)
        db.add(record)
    else:
        # reassign so the JSONB column is flagged dirty
        record.notifications = notifications
        record.updated_at = utcnow()
    db.commit()
    db.refresh(record)
    return record


def upsert_state(db: Session, *, user_id: str, notifications: Iterable[dict[str, Any]]) -> UserNotificationState:
    entries = [dict(entry) for entry in notifications if isinstance(entry, dict)]
    return _save(db, user_id=user_id, notifications=entries)


def update_read(db: Session, *, user_id: str, notification_id: str, is_read: bool = True) -> UserNotificationState:
    """Set the read flag of one entry; unknown ids get a read-marker entry."""
    record = db.get(UserNotificationState, user_id)
    entries = [dict(entry) for entry in (record.notifications if record else []) or []]
    found = False
    for entry in entries:
        if entry.get("id") == notification_id:
            entry["is_read"] = is_read
            found = True
    if not found:
        entries.append({"id": notification_id, "is_read": is_read})
    return _save(db, user_id=user_id, notifications=entries)


def mark_all_read(db: Session, *, user_id: str, notification_ids: Iterable[str] = ()) -> UserNotificationState:
    record = db.get(UserNotificationState, user_id)
    entries = [dict(entry) for entry in (record.notifications if record else []) or []]
    known: set[str] = set()
    for entry in entries:
        entry["is_read"] = True
        if entry.get("id"):
            known.add(str(entry["id"]))
    for notification_id in notification_ids:
        if notification_id and notification_id not in known:
            entries.append({"id": notification_id, "is_read": True})
            known.add(notification_id)
    return _save(db, user_id=user_id, notifications=entries)
