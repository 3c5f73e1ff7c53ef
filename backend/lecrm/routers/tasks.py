"""Task reads needed by the notification view (overdue suppression)."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from lecrm.core.clock import utcnow
from lecrm.db.session import get_db
from lecrm.services.notification_sources import list_tasks, task_to_dict

router = APIRouter()


@router.get("")
def get_tasks(
    overdue_only: bool = Query(default=False),
    assigned_to: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    now = utcnow()
    records = list_tasks(db, overdue_only=overdue_only, assigned_to=assigned_to, now=now)
    return {"success": True, "data": [task_to_dict(record, now=now) for record in records]}
