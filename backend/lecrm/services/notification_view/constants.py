"""Fixed tables for the notification view pipeline."""

from __future__ import annotations

from lecrm.models.enums import NotificationType

LOGGER_NAME = "lecrm.notification_view"

AT_RISK_ID_PREFIX = "at_risk_"
NEGLECTED_ID_PREFIX = "neglected_"
DUPLICATE_ID_PREFIX = "duplicate_"
SYNTHETIC_ID_PREFIXES = (AT_RISK_ID_PREFIX, NEGLECTED_ID_PREFIX, DUPLICATE_ID_PREFIX)

# Lower sorts first.
TYPE_PRIORITY: dict[NotificationType, float] = {
    NotificationType.renewal_reminder: 1,
    NotificationType.neglected_account: 2,
    NotificationType.bug_report: 2.5,
    NotificationType.ticket_opened: 2.5,
    NotificationType.task_overdue: 3,
    NotificationType.ticket_comment: 3.5,
    NotificationType.ticket_status_change: 3.5,
    NotificationType.ticket_assigned: 3.5,
    NotificationType.ticket_archived: 3.5,
    NotificationType.task_assigned: 4,
    NotificationType.task_due_today: 5,
    NotificationType.task_reminder: 6,
    NotificationType.end_of_year_analysis: 7,
}
UNKNOWN_PRIORITY = 99

UNIQUE_ACCOUNT_TYPES = frozenset({NotificationType.renewal_reminder, NotificationType.neglected_account})
SNOOZE_EXEMPT_TYPES = frozenset(
    {
        NotificationType.task_assigned,
        NotificationType.task_overdue,
        NotificationType.task_due_today,
        NotificationType.task_reminder,
        NotificationType.bug_report,
    }
)

# Items this close in time are ordered unread-first instead of by timestamp.
TIE_WINDOW_MS = 1000

# Tables whose changes can alter an actor's view.
WATCHED_TABLES = frozenset(
    {
        "notifications",
        "notification_cache",
        "notification_snoozes",
        "user_notification_states",
        "duplicate_at_risk_estimates",
        "tasks",
    }
)
