from __future__ import annotations

import datetime as dt

from lecrm.models.enums import NotificationType
from lecrm.services.notification_view.sorting import sort_groups, type_priority, unread_total
from lecrm.services.notification_view.types import NotificationGroup, NotificationItem

NOW = dt.datetime(2026, 3, 10, 12, 0, tzinfo=dt.timezone.utc)


def _group(notification_type: NotificationType, *, minutes_ago: int = 0, count: int = 1, unread: int = 0) -> NotificationGroup:
    item = NotificationItem(
        id=f"{notification_type.value}-{minutes_ago}",
        type=notification_type,
        created_at=NOW - dt.timedelta(minutes=minutes_ago),
    )
    return NotificationGroup(type=notification_type, notifications=[item], count=count, unread_count=unread)


def test_groups_follow_fixed_type_priority() -> None:
    groups = [
        _group(NotificationType.task_assigned),
        _group(NotificationType.renewal_reminder, minutes_ago=600),
        _group(NotificationType.end_of_year_analysis),
        _group(NotificationType.bug_report),
    ]

    ordered = [group.type for group in sort_groups(groups)]

    assert ordered == [
        NotificationType.renewal_reminder,
        NotificationType.bug_report,
        NotificationType.task_assigned,
        NotificationType.end_of_year_analysis,
    ]


def test_equal_priority_falls_back_to_latest_then_unread_then_count() -> None:
    comment = _group(NotificationType.ticket_comment, minutes_ago=10)
    status_change = _group(NotificationType.ticket_status_change, minutes_ago=1)
    assigned = _group(NotificationType.ticket_assigned, minutes_ago=10, unread=1)
    archived = _group(NotificationType.ticket_archived, minutes_ago=10, unread=1, count=3)

    ordered = [group.type for group in sort_groups([comment, assigned, status_change, archived])]

    assert ordered == [
        NotificationType.ticket_status_change,
        NotificationType.ticket_archived,
        NotificationType.ticket_assigned,
        NotificationType.ticket_comment,
    ]


def test_unknown_types_sort_last() -> None:
    assert type_priority("something_new") == 99
    assert type_priority(NotificationType.duplicate_at_risk_estimates) == 99
    assert type_priority("bug_report") == 2.5


def test_unread_total_sums_group_badges() -> None:
    groups = [_group(NotificationType.bug_report, unread=2, count=2), _group(NotificationType.task_reminder, unread=3, count=4)]

    assert unread_total(groups) == 5
    assert unread_total([]) == 0
