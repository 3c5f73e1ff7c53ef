"""Materialized account lists refreshed by the upstream notification job."""

from __future__ import annotations

import datetime as dt
from typing import Any

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from lecrm.core.clock import utcnow
from lecrm.db.base import Base


class NotificationCache(Base):
    __tablename__ = "notification_cache"

    cache_key: Mapped[str] = mapped_column(String(64), primary_key=True)
    cache_data: Mapped[dict[str, Any]] = mapped_column(JSONB, default=dict, nullable=False)
    expires_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    updated_at: Mapped[dt.datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def is_fresh(self, now: dt.datetime) -> bool:
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=dt.timezone.utc)
        return expires_at >= now

    @property
    def accounts(self) -> list[dict[str, Any]]:
        accounts = (self.cache_data or {}).get("accounts") or []
        return accounts if isinstance(accounts, list) else []
