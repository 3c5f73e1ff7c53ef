from __future__ import annotations

import datetime as dt

from lecrm.models.enums import NotificationType
from lecrm.services.notification_view.grouping import group_notifications, sort_bucket
from lecrm.services.notification_view.types import NotificationItem

NOW = dt.datetime(2026, 3, 10, 12, 0, tzinfo=dt.timezone.utc)


def _neglected(account_id: str, *, is_read: bool = False, notification_id: str | None = None) -> NotificationItem:
    return NotificationItem(
        id=notification_id or f"neglected_{account_id}",
        type=NotificationType.neglected_account,
        is_read=is_read,
        created_at=NOW,
        related_account_id=account_id,
    )


def test_neglected_accounts_count_unique_accounts() -> None:
    visible = [
        _neglected("A", notification_id="n1"),
        _neglected("A", notification_id="n2"),
        _neglected("B", is_read=True),
        _neglected("C"),
    ]

    groups = group_notifications(visible, now=NOW)

    assert len(groups) == 1
    group = groups[0]
    assert group.type == NotificationType.neglected_account
    assert group.count == 3
    assert group.unread_count == 2
    assert len(group.notifications) == 4


def test_unique_account_counts_skip_snoozed_accounts() -> None:
    snoozes = [
        {
            "notification_type": "neglected_account",
            "related_account_id": "C",
            "snoozed_until": (NOW + dt.timedelta(days=1)).isoformat(),
        }
    ]
    groups = group_notifications([_neglected("A"), _neglected("C")], snoozes=snoozes, now=NOW)

    assert groups[0].count == 1
    assert groups[0].unread_count == 1


def test_row_kinds_count_every_item() -> None:
    visible = [
        NotificationItem(id=f"t{i}", type=NotificationType.task_reminder, user_id="u", is_read=i % 2 == 0, created_at=NOW)
        for i in range(5)
    ]

    group = group_notifications(visible, now=NOW)[0]

    assert group.count == 5
    assert group.unread_count == 2


def test_count_is_never_below_unread_count() -> None:
    visible = [
        _neglected("A", notification_id="a1"),
        _neglected("A", notification_id="a2"),
        NotificationItem(id="r1", type=NotificationType.renewal_reminder, created_at=NOW, related_account_id="A"),
        NotificationItem(id="x1", type=NotificationType.bug_report, user_id="u", created_at=NOW),
    ]

    for group in group_notifications(visible, now=NOW):
        assert group.count >= group.unread_count


def test_bucket_orders_newest_first_and_unread_first_within_tie_window() -> None:
    older = NotificationItem(
        id="old", type=NotificationType.bug_report, user_id="u", created_at=NOW - dt.timedelta(minutes=5)
    )
    read_now = NotificationItem(id="read", type=NotificationType.bug_report, user_id="u", is_read=True, created_at=NOW)
    unread_close = NotificationItem(
        id="unread",
        type=NotificationType.bug_report,
        user_id="u",
        created_at=NOW - dt.timedelta(milliseconds=400),
    )

    assert [item.id for item in sort_bucket([older, read_now, unread_close])] == ["unread", "read", "old"]


def test_scheduled_for_takes_precedence_over_created_at() -> None:
    scheduled = NotificationItem(
        id="s",
        type=NotificationType.task_reminder,
        user_id="u",
        created_at=NOW - dt.timedelta(days=3),
        scheduled_for=NOW + dt.timedelta(hours=1),
    )
    plain = NotificationItem(id="p", type=NotificationType.task_reminder, user_id="u", created_at=NOW)

    assert [item.id for item in sort_bucket([plain, scheduled])] == ["s", "p"]


def test_renewals_for_one_account_count_once() -> None:
    visible = [
        NotificationItem(id="r1", type=NotificationType.renewal_reminder, is_read=True, created_at=NOW, related_account_id="acct-1"),
        NotificationItem(id="r2", type=NotificationType.renewal_reminder, created_at=NOW, related_account_id="acct-1"),
    ]

    group = group_notifications(visible, now=NOW)[0]

    assert (group.count, group.unread_count) == (1, 1)
