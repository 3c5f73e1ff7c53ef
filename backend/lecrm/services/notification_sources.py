"""Database reads behind the unified notifications endpoint."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.models.duplicate_estimate import DuplicateAtRiskEstimate
from lecrm.models.enums import SYSTEM_TYPES, TASK_TYPES, TICKET_TYPES, CacheKey, TaskStatus
from lecrm.models.notification_cache import NotificationCache
from lecrm.models.task import Task
from lecrm.services.notifications_service import list_notifications, notification_to_dict

logger = logging.getLogger(__name__)


def read_account_cache(db: Session, key: CacheKey, *, now: dt.datetime) -> tuple[list[dict[str, Any]], bool]:
    """Return (accounts, stale); an expired or missing cache reads as empty."""
    record = db.get(NotificationCache, key.value)
    if record is None or not record.is_fresh(now):
        logger.info("Notification cache %s is stale or missing", key.value)
        return [], True
    return list(record.accounts), False


def duplicate_to_dict(record: DuplicateAtRiskEstimate) -> dict[str, Any]:
    return {
        "id": record.id,
        "account_id": record.account_id,
        "account_name": record.account_name,
        "division": record.division,
        "address": record.address,
        "estimate_ids": list(record.estimate_ids or []),
        "estimate_numbers": list(record.estimate_numbers or []),
        "contract_ends": list(record.contract_ends or []),
        "detected_at": record.detected_at.isoformat() if record.detected_at else None,
    }


def list_unresolved_duplicates(db: Session) -> list[DuplicateAtRiskEstimate]:
    return (
        db.query(DuplicateAtRiskEstimate)
        .filter(DuplicateAtRiskEstimate.resolved_at.is_(None))
        .order_by(DuplicateAtRiskEstimate.detected_at.desc())
        .all()
    )


def build_all_payload(db: Session, *, user_id: str, now: dt.datetime | None = None) -> dict[str, Any]:
    moment = now or utcnow()
    at_risk, at_risk_stale = read_account_cache(db, CacheKey.at_risk_accounts, now=moment)
    neglected, neglected_stale = read_account_cache(db, CacheKey.neglected_accounts, now=moment)

    def _rows(types: frozenset) -> list[dict[str, Any]]:
        records = list_notifications(db, user_id=user_id, types=[t.value for t in types], limit=None)
        return [notification_to_dict(record) for record in records]

    return {
        "data": {
            "atRiskAccounts": at_risk,
            "neglectedAccounts": neglected,
            "taskNotifications": _rows(TASK_TYPES),
            "systemNotifications": _rows(SYSTEM_TYPES),
            "ticketNotifications": _rows(TICKET_TYPES),
            "duplicateEstimates": [duplicate_to_dict(record) for record in list_unresolved_duplicates(db)],
        },
        "cache": {"atRiskStale": at_risk_stale, "neglectedStale": neglected_stale},
    }


def task_to_dict(record: Task, *, now: dt.datetime) -> dict[str, Any]:
    return {
        "id": record.id,
        "title": record.title,
        "status": record.status.value if record.status else None,
        "due_date": record.due_date.isoformat() if record.due_date else None,
        "assigned_to": record.assigned_to,
        "related_account_id": record.related_account_id,
        "is_overdue": record.is_overdue(now),
    }


def list_tasks(
    db: Session,
    *,
    overdue_only: bool = False,
    assigned_to: str | None = None,
    now: dt.datetime | None = None,
) -> list[Task]:
    moment = now or utcnow()
    query = db.query(Task)
    if overdue_only:
        query = query.filter(
            Task.due_date.is_not(None),
            Task.due_date < moment,
            Task.status != TaskStatus.completed,
        )
    records = query.order_by(Task.due_date.asc()).all()
    if assigned_to:
        needle = assigned_to.strip().lower()
        records = [
            record
            for record in records
            if needle in {email.strip().lower() for email in (record.assigned_to or "").split(",") if email.strip()}
        ]
    return records


def overdue_task_ids(db: Session, *, now: dt.datetime | None = None) -> set[str]:
    return {record.id for record in list_tasks(db, overdue_only=True, now=now)}
