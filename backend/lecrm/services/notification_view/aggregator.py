"""Merge heterogeneous notification sources into one normalized list."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Iterable

from lecrm.core.sanitize import clean_optional_id, clean_single_line
from lecrm.models.enums import BULK_TYPES, NotificationType
from lecrm.services.notification_view.cache import TTLCache
from lecrm.services.notification_view.constants import (
    AT_RISK_ID_PREFIX,
    DUPLICATE_ID_PREFIX,
    LOGGER_NAME,
    NEGLECTED_ID_PREFIX,
)
from lecrm.services.notification_view.sources import NotificationDataSource
from lecrm.services.notification_view.types import (
    NotificationItem,
    NotificationSources,
    ViewContext,
    parse_timestamp,
    utcnow,
)

logger = logging.getLogger(LOGGER_NAME)


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def build_link(item: NotificationItem, *, effective_year: int) -> str | None:
    if item.type == NotificationType.end_of_year_analysis:
        return f"/reports?year={effective_year}"
    if item.related_task_id:
        return "/tasks"
    if item.related_ticket_id:
        return f"/tickets/{item.related_ticket_id}"
    if item.related_account_id:
        return f"/accounts/{item.related_account_id}"
    return None


def normalize_row(record: dict[str, Any], *, context: ViewContext) -> NotificationItem | None:
    """Map a persisted per-user notification row; None when it is malformed."""
    notification_id = clean_optional_id(record.get("id"))
    notification_type = NotificationType.parse(record.get("type"))
    user_id = clean_optional_id(record.get("user_id"))
    if not notification_id or notification_type is None or user_id is None:
        logger.debug("Dropping malformed notification row: id=%s type=%s", record.get("id"), record.get("type"))
        return None
    item = NotificationItem(
        id=notification_id,
        type=notification_type,
        title=clean_single_line(record.get("title")),
        message=clean_single_line(record.get("message")),
        is_read=bool(record.get("is_read")),
        created_at=parse_timestamp(record.get("created_at")),
        scheduled_for=parse_timestamp(record.get("scheduled_for")),
        related_account_id=clean_optional_id(record.get("related_account_id")),
        related_task_id=clean_optional_id(record.get("related_task_id")),
        related_ticket_id=clean_optional_id(record.get("related_ticket_id")),
        user_id=user_id,
    )
    item.link = build_link(item, effective_year=context.effective_year)
    return item


def _account_fields(record: dict[str, Any]) -> tuple[str | None, str]:
    account_id = clean_optional_id(record.get("account_id") or record.get("id"))
    name = clean_single_line(record.get("account_name") or record.get("name")) or "Account"
    return account_id, name


def _synthetic_timestamp(record: dict[str, Any], context: ViewContext, *keys: str) -> dt.datetime:
    for key in keys:
        parsed = parse_timestamp(record.get(key))
        if parsed is not None:
            return parsed
    return context.now


def normalize_at_risk(record: dict[str, Any], *, context: ViewContext) -> NotificationItem | None:
    account_id, name = _account_fields(record)
    if not account_id:
        logger.debug("Dropping at-risk record without account id")
        return None
    days = _as_int(record.get("days_until_renewal"))
    if days is None:
        message = f"{name} has a contract renewal coming up"
    elif days == 0:
        message = f"{name} renews today"
    else:
        message = f"{name} renews in {_plural(days, 'day')}"
    item = NotificationItem(
        id=f"{AT_RISK_ID_PREFIX}{account_id}",
        type=NotificationType.renewal_reminder,
        title="Renewal Coming Up",
        message=message,
        created_at=_synthetic_timestamp(record, context, "created_at", "updated_at"),
        scheduled_for=None,
        related_account_id=account_id,
    )
    item.link = build_link(item, effective_year=context.effective_year)
    return item


def normalize_neglected(record: dict[str, Any], *, context: ViewContext) -> NotificationItem | None:
    account_id, name = _account_fields(record)
    if not account_id:
        logger.debug("Dropping neglected-account record without account id")
        return None
    days = _as_int(record.get("days_since_interaction"))
    if days is None:
        message = f"No interactions recorded with {name}"
    else:
        message = f"No interaction with {name} in {_plural(days, 'day')}"
    item = NotificationItem(
        id=f"{NEGLECTED_ID_PREFIX}{account_id}",
        type=NotificationType.neglected_account,
        title="Neglected Account",
        message=message,
        created_at=_synthetic_timestamp(record, context, "created_at", "updated_at"),
        related_account_id=account_id,
    )
    item.link = build_link(item, effective_year=context.effective_year)
    return item


def normalize_duplicate(record: dict[str, Any], *, context: ViewContext) -> NotificationItem | None:
    account_id, name = _account_fields(record)
    if not account_id:
        logger.debug("Dropping duplicate-estimate record without account id")
        return None
    estimates = record.get("estimate_numbers") or record.get("estimate_ids") or []
    count = len(estimates) if isinstance(estimates, list) else 0
    if count > 1:
        message = f"{name} has {count} at-risk estimates for the same division and address"
    else:
        message = f"{name} has duplicate at-risk estimates"
    item = NotificationItem(
        id=f"{DUPLICATE_ID_PREFIX}{account_id}",
        type=NotificationType.duplicate_at_risk_estimates,
        title="Duplicate At-Risk Estimates",
        message=message,
        created_at=_synthetic_timestamp(record, context, "detected_at", "created_at"),
        related_account_id=account_id,
    )
    item.link = build_link(item, effective_year=context.effective_year)
    return item


def normalize_bulk_state(record: dict[str, Any], *, context: ViewContext) -> NotificationItem | None:
    """Map a full bulk entry from the actor's notification state."""
    notification_id = clean_optional_id(record.get("id"))
    notification_type = NotificationType.parse(record.get("type"))
    if not notification_id or notification_type is None:
        logger.debug("Dropping malformed bulk notification entry: id=%s", record.get("id"))
        return None
    item = NotificationItem(
        id=notification_id,
        type=notification_type,
        title=clean_single_line(record.get("title")),
        message=clean_single_line(record.get("message")),
        is_read=bool(record.get("is_read")),
        created_at=parse_timestamp(record.get("created_at")) or context.now,
        scheduled_for=parse_timestamp(record.get("scheduled_for")),
        related_account_id=clean_optional_id(record.get("related_account_id")),
        related_task_id=clean_optional_id(record.get("related_task_id")),
        related_ticket_id=clean_optional_id(record.get("related_ticket_id")),
        user_id=None,
    )
    item.link = build_link(item, effective_year=context.effective_year)
    return item


def read_markers(bulk_states: Iterable[dict[str, Any]]) -> dict[str, bool]:
    markers: dict[str, bool] = {}
    for entry in bulk_states:
        notification_id = clean_optional_id(entry.get("id"))
        if notification_id and "is_read" in entry:
            markers[notification_id] = bool(entry.get("is_read"))
    return markers


def aggregate_notifications(sources: NotificationSources, *, context: ViewContext) -> list[NotificationItem]:
    """Flatten all sources into one list, first occurrence of an id wins."""
    items: list[NotificationItem] = []
    seen: set[str] = set()

    def _add(item: NotificationItem | None) -> None:
        if item is None or item.id in seen:
            return
        seen.add(item.id)
        items.append(item)

    for rows in (sources.task_notifications, sources.system_notifications, sources.ticket_notifications):
        for record in rows:
            _add(normalize_row(record, context=context))

    synthetic_start = len(items)
    for record in sources.at_risk_accounts:
        _add(normalize_at_risk(record, context=context))
    for record in sources.neglected_accounts:
        _add(normalize_neglected(record, context=context))
    for record in sources.duplicate_estimates:
        _add(normalize_duplicate(record, context=context))
    for record in sources.bulk_states:
        if record.get("type"):
            _add(normalize_bulk_state(record, context=context))

    markers = read_markers(sources.bulk_states)
    for item in items[synthetic_start:]:
        if item.id in markers:
            item.is_read = markers[item.id]
    return items


def is_bulk_notification(notification_id: str, notification_type: NotificationType | None = None) -> bool:
    """True when the read state of this notification lives in the per-user state."""
    if notification_type is not None and notification_type in BULK_TYPES:
        return True
    return notification_id.startswith((AT_RISK_ID_PREFIX, NEGLECTED_ID_PREFIX, DUPLICATE_ID_PREFIX))


class NotificationAggregator:
    """Per-actor cache in front of the data source; never raises on fetch."""

    def __init__(
        self,
        source: NotificationDataSource,
        *,
        ttl_seconds: int,
        context_factory: Callable[[], ViewContext] | None = None,
        clock: Callable[[], dt.datetime] = utcnow,
    ) -> None:
        self.source = source
        self._context_factory = context_factory or ViewContext.current
        self._cache: TTLCache[list[NotificationItem]] = TTLCache(
            "notification aggregate",
            ttl_seconds=ttl_seconds,
            fallback=list,
            clock=clock,
        )

    @staticmethod
    def _key(actor_id: str) -> str:
        return str(actor_id or "").strip()

    def _load(self, actor_id: str) -> list[NotificationItem]:
        sources = self.source.fetch_sources(actor_id)
        return aggregate_notifications(sources, context=self._context_factory())

    def get(self, actor_id: str) -> list[NotificationItem]:
        key = self._key(actor_id)
        if not key:
            return []
        return list(self._cache.get(key, lambda: self._load(key)))

    def invalidate(self, actor_id: str | None = None) -> None:
        self._cache.invalidate(None if actor_id is None else self._key(actor_id))

    def snapshot(self, actor_id: str) -> list[NotificationItem] | None:
        cached = self._cache.peek(self._key(actor_id))
        return list(cached) if cached is not None else None

    def restore(self, actor_id: str, snapshot: list[NotificationItem] | None) -> None:
        key = self._key(actor_id)
        if snapshot is None:
            self._cache.invalidate(key)
        else:
            self._cache.put(key, list(snapshot))

    def remove(self, actor_id: str, notification_id: str) -> bool:
        key = self._key(actor_id)
        cached = self._cache.peek(key)
        if cached is None:
            return False
        remaining = [item for item in cached if item.id != notification_id]
        if len(remaining) == len(cached):
            return False
        self._cache.put(key, remaining)
        return True

    def prepend(self, actor_id: str, item: NotificationItem) -> bool:
        """Insert a pushed notification; an id already cached is replaced in place."""
        key = self._key(actor_id)
        cached = self._cache.peek(key)
        if cached is None:
            return False
        for index, existing in enumerate(cached):
            if existing.id == item.id:
                updated = list(cached)
                updated[index] = item
                self._cache.put(key, updated)
                return True
        self._cache.put(key, [item, *cached])
        return True
