"""Notification bell pipeline: aggregate, filter, group and sort per actor."""

from __future__ import annotations

from lecrm.services.notification_view.aggregator import NotificationAggregator, aggregate_notifications
from lecrm.services.notification_view.filters import filter_notifications, is_snoozed
from lecrm.services.notification_view.grouping import group_notifications
from lecrm.services.notification_view.mutations import (
    MutationCommand,
    MutationCoordinator,
    MutationResult,
    NotificationMutations,
    snooze_until,
)
from lecrm.services.notification_view.realtime import PushEvent, apply_push_event
from lecrm.services.notification_view.sorting import sort_groups, unread_total
from lecrm.services.notification_view.sources import ApiNotificationSource, DbNotificationSource, NotificationDataSource
from lecrm.services.notification_view.types import (
    NotificationGroup,
    NotificationItem,
    NotificationSources,
    SnoozeRule,
    ViewContext,
)
from lecrm.services.notification_view.view import NotificationViewService

__all__ = [
    "ApiNotificationSource",
    "DbNotificationSource",
    "MutationCommand",
    "MutationCoordinator",
    "MutationResult",
    "NotificationAggregator",
    "NotificationDataSource",
    "NotificationGroup",
    "NotificationItem",
    "NotificationMutations",
    "NotificationSources",
    "NotificationViewService",
    "PushEvent",
    "SnoozeRule",
    "ViewContext",
    "aggregate_notifications",
    "apply_push_event",
    "filter_notifications",
    "group_notifications",
    "is_snoozed",
    "snooze_until",
    "sort_groups",
    "unread_total",
]
