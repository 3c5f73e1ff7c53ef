"""Notification mutations applied through one coordinator with optimistic rollback."""

from __future__ import annotations

import datetime as dt
import logging
from calendar import monthrange
from dataclasses import dataclass
from typing import Any, Callable

from lecrm.core.sanitize import clean_optional_id
from lecrm.models.enums import NotificationType, SnoozeUnit
from lecrm.services.notification_view.aggregator import NotificationAggregator, is_bulk_notification
from lecrm.services.notification_view.constants import (
    AT_RISK_ID_PREFIX,
    DUPLICATE_ID_PREFIX,
    LOGGER_NAME,
    NEGLECTED_ID_PREFIX,
)
from lecrm.services.notification_view.sources import NotificationDataSource
from lecrm.services.notification_view.types import NotificationItem, utcnow

logger = logging.getLogger(LOGGER_NAME)

FOREVER_YEARS = 100


def _add_months(moment: dt.datetime, months: int) -> dt.datetime:
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def snooze_until(unit: SnoozeUnit | str, duration: int = 1, *, now: dt.datetime | None = None) -> dt.datetime:
    """Resolve a snooze dialog choice into an absolute timestamp."""
    moment = now or utcnow()
    unit = SnoozeUnit(unit)
    amount = max(1, int(duration))
    if unit == SnoozeUnit.days:
        return moment + dt.timedelta(days=amount)
    if unit == SnoozeUnit.weeks:
        return moment + dt.timedelta(weeks=amount)
    if unit == SnoozeUnit.months:
        return _add_months(moment, amount)
    if unit == SnoozeUnit.years:
        return _add_months(moment, 12 * amount)
    return _add_months(moment, 12 * FOREVER_YEARS)


def synthetic_id_for(notification_type: NotificationType, account_id: str) -> str | None:
    if notification_type == NotificationType.renewal_reminder:
        return f"{AT_RISK_ID_PREFIX}{account_id}"
    if notification_type == NotificationType.neglected_account:
        return f"{NEGLECTED_ID_PREFIX}{account_id}"
    if notification_type == NotificationType.duplicate_at_risk_estimates:
        return f"{DUPLICATE_ID_PREFIX}{account_id}"
    return None


@dataclass
class MutationResult:
    name: str
    ok: bool
    error: str | None = None
    # status of the underlying application error, when it carried one
    status_code: int | None = None


@dataclass
class MutationCommand:
    """A forward write, an optional local optimistic change, and its compensation.

    ``optimistic`` runs before ``forward`` and returns the snapshot handed to
    ``inverse`` if ``forward`` fails.
    """

    name: str
    actor_id: str
    forward: Callable[[], Any]
    optimistic: Callable[[], Any] | None = None
    inverse: Callable[[Any], None] | None = None


class MutationCoordinator:
    def __init__(
        self,
        aggregator: NotificationAggregator,
        *,
        on_error: Callable[[str], None] | None = None,
        on_success: Callable[[MutationResult], None] | None = None,
    ) -> None:
        self.aggregator = aggregator
        self.on_error = on_error
        self.on_success = on_success

    def execute(self, command: MutationCommand) -> MutationResult:
        snapshot = command.optimistic() if command.optimistic else None
        try:
            command.forward()
        except Exception as exc:
            logger.warning("Notification mutation %s failed for %s: %s", command.name, command.actor_id, exc)
            if command.inverse is not None:
                command.inverse(snapshot)
            message = getattr(exc, "message", None) or str(exc) or "mutation_failed"
            if self.on_error is not None:
                self.on_error(f"Could not {command.name.replace('_', ' ')}: {message}")
            return MutationResult(
                name=command.name,
                ok=False,
                error=message,
                status_code=getattr(exc, "status_code", None),
            )

        self.aggregator.invalidate(command.actor_id)
        result = MutationResult(name=command.name, ok=True)
        if self.on_success is not None:
            self.on_success(result)
        return result


class NotificationMutations:
    def __init__(self, source: NotificationDataSource, coordinator: MutationCoordinator) -> None:
        self.source = source
        self.coordinator = coordinator

    @property
    def aggregator(self) -> NotificationAggregator:
        return self.coordinator.aggregator

    def _find_cached(self, actor_id: str, notification_id: str) -> NotificationItem | None:
        for item in self.aggregator.snapshot(actor_id) or []:
            if item.id == notification_id:
                return item
        return None

    def _read_writer(self, actor_id: str, notification_id: str, notification_type: NotificationType | None) -> Callable[[], None]:
        if notification_type is None:
            cached = self._find_cached(actor_id, notification_id)
            notification_type = cached.type if cached else None
        if is_bulk_notification(notification_id, notification_type):
            return lambda: self.source.mark_bulk_as_read(actor_id, notification_id)
        return lambda: self.source.mark_as_read(actor_id, notification_id)

    def mark_as_read(
        self,
        actor_id: str,
        notification_id: str,
        *,
        notification_type: NotificationType | None = None,
    ) -> MutationResult:
        return self.coordinator.execute(
            MutationCommand(
                name="mark_as_read",
                actor_id=actor_id,
                forward=self._read_writer(actor_id, notification_id, notification_type),
            )
        )

    def mark_all_as_read(self, actor_id: str) -> MutationResult:
        def _forward() -> None:
            self.source.mark_all_as_read(actor_id)
            bulk_ids = [
                item.id
                for item in self.aggregator.get(actor_id)
                if item.user_id is None and is_bulk_notification(item.id, item.type)
            ]
            if bulk_ids:
                self.source.mark_all_bulk_as_read(actor_id, bulk_ids)

        return self.coordinator.execute(MutationCommand(name="mark_all_as_read", actor_id=actor_id, forward=_forward))

    def delete(self, actor_id: str, notification_id: str) -> MutationResult:
        def _optimistic() -> list[NotificationItem] | None:
            snapshot = self.aggregator.snapshot(actor_id)
            self.aggregator.remove(actor_id, notification_id)
            return snapshot

        return self.coordinator.execute(
            MutationCommand(
                name="delete_notification",
                actor_id=actor_id,
                forward=lambda: self.source.delete_notification(actor_id, notification_id),
                optimistic=_optimistic,
                inverse=lambda snapshot: self.aggregator.restore(actor_id, snapshot),
            )
        )

    def snooze(
        self,
        actor_id: str,
        notification_type: NotificationType | str,
        related_account_id: str | None,
        until: dt.datetime,
        *,
        notification_id: str | None = None,
    ) -> MutationResult:
        """Snooze a (type, account) pair for everyone, then mark the origin read for the actor."""
        parsed_type = NotificationType(notification_type)
        account_id = clean_optional_id(related_account_id)
        if notification_id is None and account_id is not None:
            notification_id = synthetic_id_for(parsed_type, account_id)

        def _forward() -> None:
            self.source.create_snooze(
                notification_type=parsed_type.value,
                related_account_id=account_id,
                snoozed_until=until,
                snoozed_by=actor_id,
            )
            if notification_id:
                self._read_writer(actor_id, notification_id, parsed_type)()

        return self.coordinator.execute(MutationCommand(name="snooze_notification", actor_id=actor_id, forward=_forward))
