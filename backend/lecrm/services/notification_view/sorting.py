"""Order notification groups for display."""

from __future__ import annotations

from typing import Iterable

from lecrm.models.enums import NotificationType
from lecrm.services.notification_view.constants import TYPE_PRIORITY, UNKNOWN_PRIORITY
from lecrm.services.notification_view.types import NotificationGroup


def type_priority(notification_type: NotificationType | str) -> float:
    parsed = NotificationType.parse(notification_type)
    if parsed is None:
        return UNKNOWN_PRIORITY
    return TYPE_PRIORITY.get(parsed, UNKNOWN_PRIORITY)


def sort_groups(groups: Iterable[NotificationGroup]) -> list[NotificationGroup]:
    return sorted(
        groups,
        key=lambda group: (
            type_priority(group.type),
            -group.latest_ms,
            -group.unread_count,
            -group.count,
        ),
    )


def unread_total(groups: Iterable[NotificationGroup]) -> int:
    return sum(group.unread_count for group in groups)
