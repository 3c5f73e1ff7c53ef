"""Shared enum values used by the database models, schemas and the notification view."""

from __future__ import annotations

import enum


class NotificationType(str, enum.Enum):
    task_assigned = "task_assigned"
    task_overdue = "task_overdue"
    task_due_today = "task_due_today"
    task_reminder = "task_reminder"
    renewal_reminder = "renewal_reminder"
    neglected_account = "neglected_account"
    bug_report = "bug_report"
    ticket_opened = "ticket_opened"
    ticket_comment = "ticket_comment"
    ticket_status_change = "ticket_status_change"
    ticket_assigned = "ticket_assigned"
    ticket_archived = "ticket_archived"
    end_of_year_analysis = "end_of_year_analysis"
    duplicate_at_risk_estimates = "duplicate_at_risk_estimates"

    @classmethod
    def parse(cls, value: object) -> "NotificationType | None":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip())
        except ValueError:
            return None


TASK_TYPES = frozenset(
    {
        NotificationType.task_assigned,
        NotificationType.task_overdue,
        NotificationType.task_due_today,
        NotificationType.task_reminder,
    }
)
TICKET_TYPES = frozenset(
    {
        NotificationType.ticket_opened,
        NotificationType.ticket_comment,
        NotificationType.ticket_status_change,
        NotificationType.ticket_assigned,
        NotificationType.ticket_archived,
    }
)
SYSTEM_TYPES = frozenset(
    {
        NotificationType.bug_report,
        NotificationType.end_of_year_analysis,
        NotificationType.duplicate_at_risk_estimates,
    }
)
# Materialized per user upstream; these never carry a user_id.
BULK_TYPES = frozenset({NotificationType.renewal_reminder, NotificationType.neglected_account})


class TaskStatus(str, enum.Enum):
    todo = "todo"
    in_progress = "in_progress"
    blocked = "blocked"
    completed = "completed"


class SnoozeUnit(str, enum.Enum):
    days = "days"
    weeks = "weeks"
    months = "months"
    years = "years"
    forever = "forever"


class CacheKey(str, enum.Enum):
    at_risk_accounts = "at-risk-accounts"
    neglected_accounts = "neglected-accounts"
