"""Universal snooze rules keyed by (notification type, account)."""

from __future__ import annotations

import datetime as dt
from uuid import uuid4

from sqlalchemy import DateTime, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from lecrm.core.clock import utcnow
from lecrm.db.base import Base


class NotificationSnooze(Base):
    __tablename__ = "notification_snoozes"
    __table_args__ = (
        Index("ix_notification_snoozes_type_account", "notification_type", "related_account_id"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    notification_type: Mapped[str] = mapped_column(String(48), nullable=False)
    # NULL snoozes the type everywhere
    related_account_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    snoozed_until: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    snoozed_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )
