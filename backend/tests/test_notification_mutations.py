from __future__ import annotations

import datetime as dt

from lecrm.core.exceptions import NotFoundError
from lecrm.models.enums import NotificationType, SnoozeUnit
from lecrm.services.notification_view.aggregator import NotificationAggregator
from lecrm.services.notification_view.mutations import (
    MutationCommand,
    MutationCoordinator,
    NotificationMutations,
    snooze_until,
)
from lecrm.services.notification_view.types import NotificationSources, ViewContext

NOW = dt.datetime(2026, 1, 31, 9, 0, tzinfo=dt.timezone.utc)
CONTEXT = ViewContext(now=NOW, effective_year=2026)


class _FakeSource:
    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.fail_on: set[str] = set()
        self.fetches = 0

    def _record(self, name: str, *args) -> None:  # noqa: ANN002
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise RuntimeError(f"{name} rejected")

    def fetch_sources(self, actor_id: str) -> NotificationSources:
        self.fetches += 1
        return NotificationSources.from_payload(
            {
                "taskNotifications": [
                    {"id": "t1", "type": "task_assigned", "title": "Task", "user_id": actor_id, "created_at": NOW.isoformat()},
                    {"id": "t2", "type": "task_reminder", "title": "Task", "user_id": actor_id, "created_at": NOW.isoformat()},
                ],
                "neglectedAccounts": [{"account_id": "A"}],
                "atRiskAccounts": [{"account_id": "R"}],
            }
        )

    def mark_as_read(self, actor_id: str, notification_id: str) -> None:
        self._record("mark_as_read", actor_id, notification_id)

    def mark_bulk_as_read(self, actor_id: str, notification_id: str) -> None:
        self._record("mark_bulk_as_read", actor_id, notification_id)

    def mark_all_as_read(self, actor_id: str) -> None:
        self._record("mark_all_as_read", actor_id)

    def mark_all_bulk_as_read(self, actor_id: str, notification_ids: list[str]) -> None:
        self._record("mark_all_bulk_as_read", actor_id, sorted(notification_ids))

    def delete_notification(self, actor_id: str, notification_id: str) -> None:
        self._record("delete_notification", actor_id, notification_id)

    def create_snooze(self, *, notification_type, related_account_id, snoozed_until, snoozed_by) -> None:  # noqa: ANN001
        self._record("create_snooze", notification_type, related_account_id, snoozed_until, snoozed_by)


def _mutations(source: _FakeSource, toasts: list[str] | None = None) -> NotificationMutations:
    aggregator = NotificationAggregator(source, ttl_seconds=60, context_factory=lambda: CONTEXT, clock=lambda: NOW)
    on_error = toasts.append if toasts is not None else None
    return NotificationMutations(source, MutationCoordinator(aggregator, on_error=on_error))


def _ids(mutations: NotificationMutations) -> list[str]:
    return [item.id for item in mutations.aggregator.get("u-1")]


def test_failed_delete_rolls_back_and_raises_a_toast() -> None:
    source = _FakeSource()
    source.fail_on.add("delete_notification")
    toasts: list[str] = []
    mutations = _mutations(source, toasts)
    assert "t1" in _ids(mutations)

    seen_during_forward: list[list[str]] = []
    original_delete = source.delete_notification

    def observing_delete(actor_id: str, notification_id: str) -> None:
        seen_during_forward.append(_ids(mutations))
        original_delete(actor_id, notification_id)

    source.delete_notification = observing_delete  # type: ignore[method-assign]
    result = mutations.delete("u-1", "t1")

    assert not result.ok
    assert "t1" not in seen_during_forward[0]
    assert "t1" in _ids(mutations)
    assert len(toasts) == 1
    assert toasts[0].startswith("Could not delete notification")
    assert source.fetches == 1


def test_successful_delete_invalidates_the_actor_cache() -> None:
    source = _FakeSource()
    mutations = _mutations(source)
    mutations.aggregator.get("u-1")

    result = mutations.delete("u-1", "t1")

    assert result.ok
    assert ("delete_notification", "u-1", "t1") in source.calls
    mutations.aggregator.get("u-1")
    assert source.fetches == 2


def test_mark_as_read_routes_rows_and_bulk_ids() -> None:
    source = _FakeSource()
    mutations = _mutations(source)

    assert mutations.mark_as_read("u-1", "t1").ok
    assert mutations.mark_as_read("u-1", "neglected_A").ok
    assert mutations.mark_as_read("u-1", "x9", notification_type=NotificationType.renewal_reminder).ok

    assert source.calls == [
        ("mark_as_read", "u-1", "t1"),
        ("mark_bulk_as_read", "u-1", "neglected_A"),
        ("mark_bulk_as_read", "u-1", "x9"),
    ]


def test_mark_all_as_read_covers_rows_and_current_bulk_ids() -> None:
    source = _FakeSource()
    mutations = _mutations(source)

    assert mutations.mark_all_as_read("u-1").ok

    assert source.calls == [
        ("mark_all_as_read", "u-1"),
        ("mark_all_bulk_as_read", "u-1", ["at_risk_R", "neglected_A"]),
    ]


def test_snooze_bulk_kind_marks_synthetic_id_read() -> None:
    source = _FakeSource()
    mutations = _mutations(source)
    until = NOW + dt.timedelta(days=7)

    result = mutations.snooze("u-1", "neglected_account", "A", until)

    assert result.ok
    assert source.calls == [
        ("create_snooze", "neglected_account", "A", until, "u-1"),
        ("mark_bulk_as_read", "u-1", "neglected_A"),
    ]


def test_snooze_duplicate_kind_marks_synthetic_id_read() -> None:
    source = _FakeSource()
    mutations = _mutations(source)
    until = NOW + dt.timedelta(days=7)

    result = mutations.snooze("u-1", "duplicate_at_risk_estimates", "A", until)

    assert result.ok
    assert source.calls == [
        ("create_snooze", "duplicate_at_risk_estimates", "A", until, "u-1"),
        ("mark_bulk_as_read", "u-1", "duplicate_A"),
    ]


def test_failed_result_carries_upstream_status_code() -> None:
    class _MissingRowSource(_FakeSource):
        def delete_notification(self, actor_id: str, notification_id: str) -> None:
            raise NotFoundError("notification_not_found")

    result = _mutations(_MissingRowSource()).delete("u-1", "t1")

    assert result.ok is False
    assert result.status_code == 404
    assert result.error == "notification_not_found"


def test_snooze_row_kind_marks_row_read() -> None:
    source = _FakeSource()
    mutations = _mutations(source)
    until = NOW + dt.timedelta(days=1)

    mutations.snooze("u-1", NotificationType.end_of_year_analysis, None, until, notification_id="e1")

    assert source.calls[-1] == ("mark_as_read", "u-1", "e1")


def test_failed_snooze_does_not_mark_read() -> None:
    source = _FakeSource()
    source.fail_on.add("create_snooze")
    toasts: list[str] = []
    mutations = _mutations(source, toasts)

    result = mutations.snooze("u-1", "neglected_account", "A", NOW)

    assert not result.ok
    assert [call[0] for call in source.calls] == ["create_snooze"]
    assert toasts == ["Could not snooze notification: create_snooze rejected"]


def test_coordinator_runs_inverse_with_optimistic_snapshot() -> None:
    source = _FakeSource()
    aggregator = NotificationAggregator(source, ttl_seconds=60, context_factory=lambda: CONTEXT, clock=lambda: NOW)
    restored: list[object] = []

    def failing() -> None:
        raise ValueError("nope")

    result = MutationCoordinator(aggregator).execute(
        MutationCommand(
            name="custom",
            actor_id="u-1",
            forward=failing,
            optimistic=lambda: "snapshot",
            inverse=restored.append,
        )
    )

    assert result.error == "nope"
    assert restored == ["snapshot"]


def test_snooze_until_units() -> None:
    assert snooze_until(SnoozeUnit.days, 3, now=NOW) == NOW + dt.timedelta(days=3)
    assert snooze_until("weeks", 2, now=NOW) == NOW + dt.timedelta(weeks=2)
    assert snooze_until("months", 1, now=NOW) == dt.datetime(2026, 2, 28, 9, 0, tzinfo=dt.timezone.utc)
    assert snooze_until("years", 1, now=NOW) == dt.datetime(2027, 1, 31, 9, 0, tzinfo=dt.timezone.utc)
    assert snooze_until("forever", now=NOW).year == 2126
