"""In-memory shapes shared by the aggregate, filter, group and sort stages."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

from lecrm.core.clock import utcnow
from lecrm.core.sanitize import clean_optional_id
from lecrm.models.enums import NotificationType

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def parse_timestamp(value: Any) -> dt.datetime | None:
    """Parse an ISO-8601 string or datetime; naive values are taken as UTC."""
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        parsed = value
    elif isinstance(value, dt.date):
        parsed = dt.datetime(value.year, value.month, value.day)
    else:
        raw = str(value).strip()
        if not raw:
            return None
        if raw.endswith("Z"):
            raw = raw[:-1] + "+00:00"
        try:
            parsed = dt.datetime.fromisoformat(raw)
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=dt.timezone.utc)
    return parsed


@dataclass
class NotificationItem:
    id: str
    type: NotificationType
    title: str = ""
    message: str = ""
    is_read: bool = False
    created_at: dt.datetime | None = None
    scheduled_for: dt.datetime | None = None
    related_account_id: str | None = None
    related_task_id: str | None = None
    related_ticket_id: str | None = None
    # None for bulk kinds, which are already scoped to the actor upstream.
    user_id: str | None = None
    link: str | None = None

    @property
    def display_at(self) -> dt.datetime | None:
        return self.scheduled_for or self.created_at

    @property
    def display_ms(self) -> int:
        moment = self.display_at or _EPOCH
        return int((moment - _EPOCH).total_seconds() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "title": self.title,
            "message": self.message,
            "is_read": self.is_read,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "scheduled_for": self.scheduled_for.isoformat() if self.scheduled_for else None,
            "related_account_id": self.related_account_id,
            "related_task_id": self.related_task_id,
            "related_ticket_id": self.related_ticket_id,
            "user_id": self.user_id,
            "link": self.link,
        }


@dataclass(frozen=True)
class SnoozeRule:
    notification_type: str
    related_account_id: str | None
    snoozed_until: dt.datetime | None

    @classmethod
    def from_record(cls, record: Any) -> "SnoozeRule":
        if isinstance(record, SnoozeRule):
            return record
        getter = record.get if isinstance(record, dict) else lambda key: getattr(record, key, None)
        return cls(
            notification_type=str(getter("notification_type") or "").strip(),
            related_account_id=clean_optional_id(getter("related_account_id")),
            # unparseable dates become None and never match
            snoozed_until=parse_timestamp(getter("snoozed_until")),
        )

    def is_active(self, now: dt.datetime) -> bool:
        return self.snoozed_until is not None and self.snoozed_until > now


@dataclass
class NotificationGroup:
    type: NotificationType
    notifications: list[NotificationItem] = field(default_factory=list)
    count: int = 0
    unread_count: int = 0

    @property
    def latest_ms(self) -> int:
        if not self.notifications:
            return 0
        return max(item.display_ms for item in self.notifications)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "count": self.count,
            "unread_count": self.unread_count,
            "notifications": [item.to_dict() for item in self.notifications],
        }


@dataclass
class NotificationSources:
    """Raw records as returned by the data source layer."""

    at_risk_accounts: list[dict[str, Any]] = field(default_factory=list)
    neglected_accounts: list[dict[str, Any]] = field(default_factory=list)
    task_notifications: list[dict[str, Any]] = field(default_factory=list)
    system_notifications: list[dict[str, Any]] = field(default_factory=list)
    ticket_notifications: list[dict[str, Any]] = field(default_factory=list)
    duplicate_estimates: list[dict[str, Any]] = field(default_factory=list)
    bulk_states: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_payload(cls, payload: dict[str, Any] | None, *, bulk_states: list[dict[str, Any]] | None = None) -> "NotificationSources":
        payload = payload or {}

        def _list(key: str) -> list[dict[str, Any]]:
            value = payload.get(key) or []
            return [row for row in value if isinstance(row, dict)] if isinstance(value, list) else []

        return cls(
            at_risk_accounts=_list("atRiskAccounts"),
            neglected_accounts=_list("neglectedAccounts"),
            task_notifications=_list("taskNotifications"),
            system_notifications=_list("systemNotifications"),
            ticket_notifications=_list("ticketNotifications"),
            duplicate_estimates=_list("duplicateEstimates"),
            bulk_states=[row for row in (bulk_states or []) if isinstance(row, dict)],
        )

    def to_payload(self) -> dict[str, list[dict[str, Any]]]:
        return {
            "atRiskAccounts": self.at_risk_accounts,
            "neglectedAccounts": self.neglected_accounts,
            "taskNotifications": self.task_notifications,
            "systemNotifications": self.system_notifications,
            "ticketNotifications": self.ticket_notifications,
            "duplicateEstimates": self.duplicate_estimates,
        }


@dataclass(frozen=True)
class ViewContext:
    """Explicit per-request context; replaces any ambient "current year" state."""

    now: dt.datetime
    effective_year: int

    @classmethod
    def current(cls, *, effective_year: int | None = None) -> "ViewContext":
        now = utcnow()
        return cls(now=now, effective_year=effective_year or now.year)
