"""Convenience imports for Alembic metadata discovery."""

from lecrm.models.notification import Notification
from lecrm.models.notification_snooze import NotificationSnooze
from lecrm.models.user_notification_state import UserNotificationState
from lecrm.models.notification_cache import NotificationCache
from lecrm.models.duplicate_estimate import DuplicateAtRiskEstimate
from lecrm.models.task import Task

__all__ = [
    "DuplicateAtRiskEstimate",
    "Notification",
    "NotificationCache",
    "NotificationSnooze",
    "Task",
    "UserNotificationState",
]
