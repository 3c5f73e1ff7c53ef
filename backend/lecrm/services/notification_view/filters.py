"""Visibility rules: ownership, renewal sanity, overdue supersession, snoozes."""

from __future__ import annotations

import datetime as dt
from typing import Any, Iterable

from lecrm.core.sanitize import clean_optional_id, same_actor
from lecrm.models.enums import NotificationType
from lecrm.services.notification_view.constants import SNOOZE_EXEMPT_TYPES
from lecrm.services.notification_view.types import NotificationItem, SnoozeRule, utcnow


def normalize_snoozes(snoozes: Iterable[Any] | None) -> list[SnoozeRule]:
    if not snoozes:
        return []
    return [SnoozeRule.from_record(record) for record in snoozes]


def account_ids_match(snooze_account_id: str | None, notification_account_id: str | None) -> bool:
    # both-null is a match; null never matches a concrete id
    return clean_optional_id(snooze_account_id) == clean_optional_id(notification_account_id)


def is_snoozed(
    item: NotificationItem,
    snoozes: Iterable[SnoozeRule],
    *,
    now: dt.datetime,
    universal_snooze_matches_all: bool = False,
) -> bool:
    for rule in snoozes:
        if rule.notification_type != item.type.value:
            continue
        if not rule.is_active(now):
            continue
        if rule.related_account_id is None and universal_snooze_matches_all:
            return True
        if account_ids_match(rule.related_account_id, item.related_account_id):
            return True
    return False


def is_visible(
    item: NotificationItem,
    actor_id: str,
    snoozes: list[SnoozeRule],
    overdue_task_ids: set[str],
    *,
    now: dt.datetime,
    universal_snooze_matches_all: bool = False,
) -> bool:
    if item.user_id is not None and not same_actor(item.user_id, actor_id):
        return False

    if item.type == NotificationType.renewal_reminder and clean_optional_id(item.related_account_id) is None:
        return False

    if (
        item.type == NotificationType.task_assigned
        and item.related_task_id is not None
        and item.related_task_id in overdue_task_ids
    ):
        return False

    if item.type in SNOOZE_EXEMPT_TYPES:
        return True

    return not is_snoozed(
        item,
        snoozes,
        now=now,
        universal_snooze_matches_all=universal_snooze_matches_all,
    )


def filter_notifications(
    notifications: Iterable[NotificationItem],
    actor_id: str,
    active_snoozes: Iterable[Any] | None,
    overdue_task_ids: Iterable[str] | None,
    *,
    now: dt.datetime | None = None,
    universal_snooze_matches_all: bool = False,
) -> list[NotificationItem]:
    """Return the notifications visible to ``actor_id``, preserving input order.

    A snooze list that has not loaded yet (``None`` or empty) hides nothing.
    """
    moment = now or utcnow()
    snoozes = normalize_snoozes(active_snoozes)
    overdue = {str(task_id).strip() for task_id in (overdue_task_ids or []) if task_id is not None}
    return [
        item
        for item in notifications
        if is_visible(
            item,
            actor_id,
            snoozes,
            overdue,
            now=moment,
            universal_snooze_matches_all=universal_snooze_matches_all,
        )
    ]
