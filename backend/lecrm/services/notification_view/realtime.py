"""Apply database push events (row insert/update) to the aggregator cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from lecrm.core.sanitize import same_actor
from lecrm.services.notification_view.aggregator import NotificationAggregator, normalize_row
from lecrm.services.notification_view.constants import LOGGER_NAME, WATCHED_TABLES
from lecrm.services.notification_view.types import ViewContext

logger = logging.getLogger(LOGGER_NAME)

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"


@dataclass(frozen=True)
class PushEvent:
    table: str
    event_type: str
    record: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PushEvent":
        """Accept the subscription payload shape: {table, eventType, new}."""
        event_type = str(payload.get("eventType") or payload.get("event_type") or "").strip().lower()
        record = payload.get("new") or payload.get("record") or {}
        return cls(
            table=str(payload.get("table") or "").strip(),
            event_type=event_type,
            record=record if isinstance(record, dict) else {},
        )


def apply_push_event(
    aggregator: NotificationAggregator,
    actor_id: str,
    event: PushEvent,
    *,
    context_factory: Callable[[], ViewContext] = ViewContext.current,
) -> str:
    """Return what was done: "prepended", "invalidated" or "ignored"."""
    if event.table not in WATCHED_TABLES:
        return "ignored"

    if event.table == "notifications" and event.event_type == INSERT:
        owner = event.record.get("user_id")
        if owner is not None and not same_actor(owner, actor_id):
            return "ignored"
        item = normalize_row(event.record, context=context_factory())
        if item is not None and aggregator.prepend(actor_id, item):
            return "prepended"

    if event.table == "notifications" and event.event_type in (UPDATE, DELETE):
        owner = event.record.get("user_id")
        if owner is not None and not same_actor(owner, actor_id):
            return "ignored"

    logger.debug("Invalidating notification cache for %s after %s on %s", actor_id, event.event_type, event.table)
    aggregator.invalidate(actor_id)
    return "invalidated"
