"""Bucket visible notifications by kind and compute badge counts."""

from __future__ import annotations

import datetime as dt
from functools import cmp_to_key
from typing import Any, Iterable

from lecrm.core.sanitize import clean_optional_id
from lecrm.models.enums import NotificationType
from lecrm.services.notification_view.constants import TIE_WINDOW_MS, UNIQUE_ACCOUNT_TYPES
from lecrm.services.notification_view.filters import is_snoozed, normalize_snoozes
from lecrm.services.notification_view.types import NotificationGroup, NotificationItem, SnoozeRule, utcnow


def _compare_items(left: NotificationItem, right: NotificationItem) -> int:
    delta = right.display_ms - left.display_ms
    if abs(delta) < TIE_WINDOW_MS and left.is_read != right.is_read:
        return 1 if left.is_read else -1
    if delta != 0:
        return 1 if delta > 0 else -1
    if left.id == right.id:
        return 0
    return -1 if left.id < right.id else 1


def sort_bucket(items: Iterable[NotificationItem]) -> list[NotificationItem]:
    """Newest first; near-simultaneous items put unread before read."""
    return sorted(items, key=cmp_to_key(_compare_items))


def _unique_account_counts(
    items: list[NotificationItem],
    snoozes: list[SnoozeRule],
    *,
    now: dt.datetime,
    universal_snooze_matches_all: bool,
) -> tuple[int, int]:
    accounts: set[str] = set()
    unread_accounts: set[str] = set()
    for item in items:
        account_id = clean_optional_id(item.related_account_id)
        if account_id is None:
            continue
        # already filtered upstream, checked again so counts never include snoozed accounts
        if is_snoozed(item, snoozes, now=now, universal_snooze_matches_all=universal_snooze_matches_all):
            continue
        accounts.add(account_id)
        if not item.is_read:
            unread_accounts.add(account_id)
    count = len(accounts)
    return count, min(len(unread_accounts), count)


def group_notifications(
    visible: Iterable[NotificationItem],
    *,
    snoozes: Iterable[Any] | None = None,
    now: dt.datetime | None = None,
    universal_snooze_matches_all: bool = False,
) -> list[NotificationGroup]:
    """Group by type in first-seen order; ordering across groups is the sorter's job."""
    moment = now or utcnow()
    rules = normalize_snoozes(snoozes)
    buckets: dict[NotificationType, list[NotificationItem]] = {}
    for item in visible:
        buckets.setdefault(item.type, []).append(item)

    groups: list[NotificationGroup] = []
    for notification_type, items in buckets.items():
        ordered = sort_bucket(items)
        if notification_type in UNIQUE_ACCOUNT_TYPES:
            count, unread = _unique_account_counts(
                ordered,
                rules,
                now=moment,
                universal_snooze_matches_all=universal_snooze_matches_all,
            )
        else:
            count = len(ordered)
            unread = sum(1 for item in ordered if not item.is_read)
        groups.append(
            NotificationGroup(
                type=notification_type,
                notifications=ordered,
                count=count,
                unread_count=unread,
            )
        )
    return groups
