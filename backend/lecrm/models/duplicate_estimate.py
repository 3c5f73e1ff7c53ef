"""Duplicate at-risk estimate detections (same division and address)."""

from __future__ import annotations

import datetime as dt
from uuid import uuid4

from sqlalchemy import DateTime, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from lecrm.core.clock import utcnow
from lecrm.db.base import Base


class DuplicateAtRiskEstimate(Base):
    __tablename__ = "duplicate_at_risk_estimates"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid4()))
    account_id: Mapped[str] = mapped_column(String(64), index=True, nullable=False)
    account_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    division: Mapped[str | None] = mapped_column(String(128), nullable=True)
    address: Mapped[str | None] = mapped_column(String(512), nullable=True)
    estimate_ids: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    estimate_numbers: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    contract_ends: Mapped[list[str]] = mapped_column(JSONB, default=list, nullable=False)
    detected_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), default=utcnow, nullable=False)
    resolved_at: Mapped[dt.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
