from __future__ import annotations

import datetime as dt

from lecrm.core.config import Settings
from lecrm.models.enums import NotificationType
from lecrm.services.notification_view import NotificationViewService, unread_total
from lecrm.services.notification_view.realtime import PushEvent
from lecrm.services.notification_view.types import NotificationSources

NOW = dt.datetime(2026, 3, 10, 12, 0, tzinfo=dt.timezone.utc)
FUTURE = (NOW + dt.timedelta(days=30)).isoformat()


class _FakeSource:
    def __init__(self) -> None:
        self.snoozes: list[dict] = []
        self.overdue: set[str] = set()
        self.snooze_fetches = 0
        self.fail_snoozes = False
        self.fail_tasks = False

    def fetch_sources(self, actor_id: str) -> NotificationSources:
        def row(notification_id: str, notification_type: str, user_id: str, **extra) -> dict:  # noqa: ANN003
            return {
                "id": notification_id,
                "type": notification_type,
                "title": notification_id,
                "user_id": user_id,
                "created_at": NOW.isoformat(),
                **extra,
            }

        return NotificationSources.from_payload(
            {
                "taskNotifications": [
                    row("ta", "task_assigned", actor_id, related_task_id="T1"),
                    row("tr", "task_reminder", actor_id),
                    row("foreign", "task_reminder", "someone-else"),
                ],
                "neglectedAccounts": [{"account_id": "A"}, {"account_id": "B"}],
                "atRiskAccounts": [{"account_id": "R", "days_until_renewal": 5}],
            }
        )

    def fetch_active_snoozes(self) -> list[dict]:
        self.snooze_fetches += 1
        if self.fail_snoozes:
            raise RuntimeError("snoozes unavailable")
        return list(self.snoozes)

    def fetch_overdue_task_ids(self) -> set[str]:
        if self.fail_tasks:
            raise RuntimeError("tasks unavailable")
        return set(self.overdue)

    def create_snooze(self, **kwargs) -> None:  # noqa: ANN003
        self.snoozes.append({**kwargs, "snoozed_until": kwargs["snoozed_until"].isoformat()})

    def mark_bulk_as_read(self, actor_id: str, notification_id: str) -> None:
        return None


def _service(source: _FakeSource, **overrides) -> NotificationViewService:  # noqa: ANN003
    config = Settings(EFFECTIVE_YEAR=2025, **overrides)
    return NotificationViewService(source, config=config, clock=lambda: NOW)


def _types(groups) -> list[NotificationType]:  # noqa: ANN001
    return [group.type for group in groups]


def test_view_groups_sorted_by_priority_and_owned_by_actor() -> None:
    service = _service(_FakeSource())

    groups = service.get_notification_view("u-1")

    assert _types(groups) == [
        NotificationType.renewal_reminder,
        NotificationType.neglected_account,
        NotificationType.task_assigned,
        NotificationType.task_reminder,
    ]
    for group in groups:
        for item in group.notifications:
            assert item.user_id is None or item.user_id == "u-1"
    assert unread_total(groups) == 5


def test_overdue_task_suppresses_assignment() -> None:
    source = _FakeSource()
    source.overdue = {"T1"}

    groups = _service(source).get_notification_view("u-1")

    assert NotificationType.task_assigned not in _types(groups)


def test_universal_neglected_snooze_is_strict_by_default() -> None:
    source = _FakeSource()
    source.snoozes = [{"notification_type": "neglected_account", "related_account_id": None, "snoozed_until": FUTURE}]

    groups = _service(source).get_notification_view("u-1")

    neglected = next(group for group in groups if group.type == NotificationType.neglected_account)
    assert neglected.count == 2


def test_universal_neglected_snooze_hides_all_when_enabled() -> None:
    source = _FakeSource()
    source.snoozes = [{"notification_type": "neglected_account", "related_account_id": None, "snoozed_until": FUTURE}]

    groups = _service(source, UNIVERSAL_SNOOZE_MATCHES_ALL=True).get_notification_view("u-1")

    assert NotificationType.neglected_account not in _types(groups)


def test_snooze_and_task_failures_fail_open() -> None:
    source = _FakeSource()
    source.fail_snoozes = True
    source.fail_tasks = True

    groups = _service(source).get_notification_view("u-1")

    assert NotificationType.task_assigned in _types(groups)
    assert NotificationType.neglected_account in _types(groups)


def test_view_is_stable_across_repeated_reads() -> None:
    service = _service(_FakeSource())

    first = [group.to_dict() for group in service.get_notification_view("u-1")]
    second = [group.to_dict() for group in service.get_notification_view("u-1")]

    assert first == second


def test_snooze_mutation_refreshes_snooze_cache() -> None:
    source = _FakeSource()
    service = _service(source)
    service.get_notification_view("u-1")
    assert source.snooze_fetches == 1

    result = service.mutations.snooze("u-1", "neglected_account", "A", NOW + dt.timedelta(days=7))

    assert result.ok
    groups = service.get_notification_view("u-1")
    assert source.snooze_fetches == 2
    neglected = next(group for group in groups if group.type == NotificationType.neglected_account)
    assert [item.related_account_id for item in neglected.notifications] == ["B"]


def test_snooze_push_event_refreshes_snooze_cache() -> None:
    source = _FakeSource()
    service = _service(source)
    service.get_notification_view("u-1")
    source.snoozes = [{"notification_type": "neglected_account", "related_account_id": "A", "snoozed_until": FUTURE}]

    outcome = service.apply_push_event(
        "u-1", PushEvent.from_payload({"table": "notification_snoozes", "eventType": "INSERT", "new": {}})
    )

    assert outcome == "invalidated"
    groups = service.get_notification_view("u-1")
    neglected = next(group for group in groups if group.type == NotificationType.neglected_account)
    assert [item.related_account_id for item in neglected.notifications] == ["B"]


def test_task_push_event_refreshes_overdue_ids() -> None:
    source = _FakeSource()
    service = _service(source)
    assert NotificationType.task_assigned in _types(service.get_notification_view("u-1"))
    source.overdue = {"T1"}

    service.apply_push_event("u-1", PushEvent(table="tasks", event_type="update", record={"id": "T1"}))

    assert NotificationType.task_assigned not in _types(service.get_notification_view("u-1"))


def test_unwatched_push_event_keeps_caches() -> None:
    source = _FakeSource()
    service = _service(source)
    service.get_notification_view("u-1")

    outcome = service.apply_push_event("u-1", PushEvent(table="audit_log", event_type="insert"))
    service.get_notification_view("u-1")

    assert outcome == "ignored"
    assert source.snooze_fetches == 1
