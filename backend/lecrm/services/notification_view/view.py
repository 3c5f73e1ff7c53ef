"""Read path: aggregate -> filter -> group -> sort for one actor."""

from __future__ import annotations

import datetime as dt
from typing import Any, Callable

from lecrm.core.config import Settings, settings as default_settings
from lecrm.services.notification_view.aggregator import NotificationAggregator
from lecrm.services.notification_view.cache import TTLCache
from lecrm.services.notification_view.filters import filter_notifications
from lecrm.services.notification_view.grouping import group_notifications
from lecrm.services.notification_view.mutations import MutationCoordinator, NotificationMutations
from lecrm.services.notification_view.realtime import PushEvent, apply_push_event
from lecrm.services.notification_view.sorting import sort_groups
from lecrm.services.notification_view.sources import NotificationDataSource
from lecrm.services.notification_view.types import NotificationGroup, ViewContext, utcnow

_GLOBAL_KEY = "*"


class NotificationViewService:
    def __init__(
        self,
        source: NotificationDataSource,
        *,
        config: Settings | None = None,
        clock: Callable[[], dt.datetime] = utcnow,
        on_error: Callable[[str], None] | None = None,
    ) -> None:
        self.source = source
        self.config = config or default_settings
        self.clock = clock
        self.aggregator = NotificationAggregator(
            source,
            ttl_seconds=self.config.NOTIFICATION_CACHE_SECONDS,
            context_factory=self.context,
            clock=clock,
        )
        self._snoozes: TTLCache[list[dict[str, Any]]] = TTLCache(
            "snooze list",
            ttl_seconds=self.config.SNOOZE_CACHE_SECONDS,
            fallback=list,
            clock=clock,
        )
        self._overdue: TTLCache[set[str]] = TTLCache(
            "overdue task ids",
            ttl_seconds=self.config.TASK_CACHE_SECONDS,
            fallback=set,
            clock=clock,
        )
        self.mutations = NotificationMutations(source, MutationCoordinator(self.aggregator, on_error=on_error))
        self.mutations.coordinator.on_success = self._after_mutation

    def context(self) -> ViewContext:
        now = self.clock()
        return ViewContext(now=now, effective_year=self.config.effective_year(now))

    def _after_mutation(self, result) -> None:  # noqa: ANN001
        if result.name == "snooze_notification":
            self._snoozes.invalidate()

    def active_snoozes(self) -> list[dict[str, Any]]:
        return self._snoozes.get(_GLOBAL_KEY, self.source.fetch_active_snoozes)

    def overdue_task_ids(self) -> set[str]:
        return self._overdue.get(_GLOBAL_KEY, self.source.fetch_overdue_task_ids)

    def get_notification_view(self, actor_id: str) -> list[NotificationGroup]:
        notifications = self.aggregator.get(actor_id)
        snoozes = self.active_snoozes()
        overdue = self.overdue_task_ids()
        now = self.clock()
        universal = self.config.UNIVERSAL_SNOOZE_MATCHES_ALL

        visible = filter_notifications(
            notifications,
            actor_id,
            snoozes,
            overdue,
            now=now,
            universal_snooze_matches_all=universal,
        )
        groups = group_notifications(
            visible,
            snoozes=snoozes,
            now=now,
            universal_snooze_matches_all=universal,
        )
        return sort_groups(groups)

    def invalidate(self, actor_id: str | None = None) -> None:
        self.aggregator.invalidate(actor_id)
        if actor_id is None:
            self._snoozes.invalidate()
            self._overdue.invalidate()

    def apply_push_event(self, actor_id: str, event: PushEvent) -> str:
        """Route a realtime change to every cache it can stale."""
        outcome = apply_push_event(self.aggregator, actor_id, event, context_factory=self.context)
        if event.table == "notification_snoozes":
            self._snoozes.invalidate()
        elif event.table == "tasks":
            self._overdue.invalidate()
        return outcome
