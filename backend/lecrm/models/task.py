"""Task rows; the notification view only needs their due state."""

from __future__ import annotations

import datetime as dt
from uuid import uuid4

from sqlalchemy import DateTime, Enum, String
from sqlalchemy.orm import Mapped, mapped_column

from lecrm.core.clock import utcnow
from lecrm.db.base import Base
from lecrm.models.enums import TaskStatus


class Task(Base):
    __tablename__ = "tasks"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[TaskStatus] = mapped_column(
        Enum(TaskStatus, name="task_status", values_callable=lambda x: [e.value for e in x]),
        default=TaskStatus.todo,
    )
    due_date: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    # comma-separated emails, as stored by the CRM
    assigned_to: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    related_account_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)

    def is_overdue(self, now: dt.datetime) -> bool:
        if self.due_date is None or self.status == TaskStatus.completed:
            return False
        due = self.due_date
        if due.tzinfo is None:
            due = due.replace(tzinfo=dt.timezone.utc)
        return due < now
