"""Service helpers for universal notification snoozes."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.models.notification_snooze import NotificationSnooze

logger = logging.getLogger(__name__)

# Sentinel for "no account filter"; None itself means "universal snooze".
ANY_ACCOUNT = object()


def snooze_to_dict(record: NotificationSnooze) -> dict[str, Any]:
    return {
        "id": record.id,
        "notification_type": record.notification_type,
        "related_account_id": record.related_account_id,
        "snoozed_until": record.snoozed_until.isoformat() if record.snoozed_until else None,
        "snoozed_by": record.snoozed_by,
        "updated_at": record.updated_at.isoformat() if record.updated_at else None,
    }


def _scoped_query(db: Session, *, notification_type: str | None, related_account_id: Any):
    query = db.query(NotificationSnooze)
    if notification_type:
        query = query.filter(NotificationSnooze.notification_type == notification_type)
    if related_account_id is not ANY_ACCOUNT:
        if related_account_id is None:
            query = query.filter(NotificationSnooze.related_account_id.is_(None))
        else:
            query = query.filter(NotificationSnooze.related_account_id == related_account_id)
    return query


def list_snoozes(
    db: Session,
    *,
    notification_type: str | None = None,
    related_account_id: Any = ANY_ACCOUNT,
    active_only: bool = False,
    now: dt.datetime | None = None,
) -> list[NotificationSnooze]:
    query = _scoped_query(db, notification_type=notification_type, related_account_id=related_account_id)
    if active_only:
        query = query.filter(NotificationSnooze.snoozed_until > (now or utcnow()))
    return query.order_by(NotificationSnooze.snoozed_until.desc()).all()


def upsert_snooze(
    db: Session,
    *,
    notification_type: str,
    related_account_id: str | None,
    snoozed_until: dt.datetime,
    snoozed_by: str | None = None,
) -> NotificationSnooze:
    # NULL account ids defeat a unique constraint, so the upsert is done by lookup.
    record = _scoped_query(
        db,
        notification_type=notification_type,
        related_account_id=related_account_id,
    ).first()
    if record is None:
        record = NotificationSnooze(
            notification_type=notification_type,
            related_account_id=related_account_id,
            snoozed_until=snoozed_until,
            snoozed_by=snoozed_by,
        )
        db.add(record)
    else:
        record.snoozed_until = snoozed_until
        record.snoozed_by = snoozed_by or record.snoozed_by
        record.updated_at = utcnow()
    db.commit()
    db.refresh(record)
    logger.info(
        "Snoozed %s for account=%s until %s",
        notification_type,
        related_account_id or "*",
        snoozed_until.isoformat(),
    )
    return record


def delete_snoozes(db: Session, *, notification_type: str, related_account_id: Any = ANY_ACCOUNT) -> int:
    deleted = _scoped_query(
        db,
        notification_type=notification_type,
        related_account_id=related_account_id,
    ).delete(synchronize_session=False)
    db.commit()
    return int(deleted or 0)
