"""Data source layer: where the notification view reads from and writes to."""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any, Callable, Protocol

from sqlalchemy.orm import Session

from lecrm.core.exceptions import NotFoundError
from lecrm.db.session import session_scope
from lecrm.integrations.crm_api.client import CrmApiClient
from lecrm.services import notification_snoozes, notification_sources, notifications_service, user_notification_states
from lecrm.services.notification_view.constants import LOGGER_NAME
from lecrm.services.notification_view.types import NotificationSources

logger = logging.getLogger(LOGGER_NAME)


class NotificationDataSource(Protocol):
    def fetch_sources(self, actor_id: str) -> NotificationSources: ...

    def fetch_active_snoozes(self) -> list[dict[str, Any]]: ...

    def fetch_overdue_task_ids(self) -> set[str]: ...

    def mark_as_read(self, actor_id: str, notification_id: str) -> None: ...

    def mark_bulk_as_read(self, actor_id: str, notification_id: str) -> None: ...

    def mark_all_as_read(self, actor_id: str) -> None: ...

    def mark_all_bulk_as_read(self, actor_id: str, notification_ids: list[str]) -> None: ...

    def delete_notification(self, actor_id: str, notification_id: str) -> None: ...

    def create_snooze(
        self,
        *,
        notification_type: str,
        related_account_id: str | None,
        snoozed_until: dt.datetime,
        snoozed_by: str | None,
    ) -> None: ...


class ApiNotificationSource:
    """Reads and writes through the remote envelope endpoints."""

    def __init__(self, client: CrmApiClient | None = None) -> None:
        self.client = client or CrmApiClient()

    def fetch_sources(self, actor_id: str) -> NotificationSources:
        payload = self.client.get_all_notifications(actor_id)
        try:
            state = self.client.get_user_notification_state(actor_id)
        except Exception as exc:
            logger.warning("Notification state unavailable for %s, showing items without read markers: %s", actor_id, exc)
            state = {}
        return NotificationSources.from_payload(payload, bulk_states=state.get("notifications") or [])

    def fetch_active_snoozes(self) -> list[dict[str, Any]]:
        return self.client.list_snoozes(active_only=True)

    def fetch_overdue_task_ids(self) -> set[str]:
        return {str(task["id"]) for task in self.client.list_overdue_tasks() if task.get("id")}

    def mark_as_read(self, actor_id: str, notification_id: str) -> None:
        self.client.update_notification(notification_id, is_read=True)

    def mark_bulk_as_read(self, actor_id: str, notification_id: str) -> None:
        self.client.update_user_notification_read(actor_id, notification_id, is_read=True)

    def mark_all_as_read(self, actor_id: str) -> None:
        self.client.mark_all_notifications_read(actor_id)

    def mark_all_bulk_as_read(self, actor_id: str, notification_ids: list[str]) -> None:
        self.client.mark_all_user_notifications_read(actor_id, notification_ids)

    def delete_notification(self, actor_id: str, notification_id: str) -> None:
        self.client.delete_notification(notification_id)

    def create_snooze(
        self,
        *,
        notification_type: str,
        related_account_id: str | None,
        snoozed_until: dt.datetime,
        snoozed_by: str | None,
    ) -> None:
        self.client.create_snooze(
            notification_type=notification_type,
            related_account_id=related_account_id,
            snoozed_until=snoozed_until,
            snoozed_by=snoozed_by,
        )


class DbNotificationSource:
    """Reads and writes the local database; one short session per call."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self.session_factory = session_factory

    def fetch_sources(self, actor_id: str) -> NotificationSources:
        with session_scope(self.session_factory) as db:
            payload = notification_sources.build_all_payload(db, user_id=actor_id)
            try:
                state = user_notification_states.get_state(db, user_id=actor_id)
            except Exception as exc:
                logger.warning(
                    "Notification state unavailable for %s, showing items without read markers: %s", actor_id, exc
                )
                db.rollback()
                state = None
            bulk = list(state.notifications or []) if state else []
        return NotificationSources.from_payload(payload["data"], bulk_states=bulk)

    def fetch_active_snoozes(self) -> list[dict[str, Any]]:
        with session_scope(self.session_factory) as db:
            records = notification_snoozes.list_snoozes(db, active_only=True)
            return [notification_snoozes.snooze_to_dict(record) for record in records]

    def fetch_overdue_task_ids(self) -> set[str]:
        with session_scope(self.session_factory) as db:
            return notification_sources.overdue_task_ids(db)

    def mark_as_read(self, actor_id: str, notification_id: str) -> None:
        with session_scope(self.session_factory) as db:
            record = notifications_service.mark_notification_as_read(
                db, notification_id=notification_id, user_id=actor_id
            )
        if record is None:
            raise NotFoundError("notification_not_found", details={"notification_id": notification_id})

    def mark_bulk_as_read(self, actor_id: str, notification_id: str) -> None:
        with session_scope(self.session_factory) as db:
            user_notification_states.update_read(db, user_id=actor_id, notification_id=notification_id, is_read=True)

    def mark_all_as_read(self, actor_id: str) -> None:
        with session_scope(self.session_factory) as db:
            notifications_service.mark_all_notifications_as_read(db, user_id=actor_id)

    def mark_all_bulk_as_read(self, actor_id: str, notification_ids: list[str]) -> None:
        with session_scope(self.session_factory) as db:
            user_notification_states.mark_all_read(db, user_id=actor_id, notification_ids=notification_ids)

    def delete_notification(self, actor_id: str, notification_id: str) -> None:
        with session_scope(self.session_factory) as db:
            deleted = notifications_service.delete_notification(db, notification_id=notification_id, user_id=actor_id)
        if not deleted:
            raise NotFoundError("notification_not_found", details={"notification_id": notification_id})

    def create_snooze(
        self,
        *,
        notification_type: str,
        related_account_id: str | None,
        snoozed_until: dt.datetime,
        snoozed_by: str | None,
    ) -> None:
        with session_scope(self.session_factory) as db:
            notification_snoozes.upsert_snooze(
                db,
                notification_type=notification_type,
                related_account_id=related_account_id,
                snoozed_until=snoozed_until,
                snoozed_by=snoozed_by,
            )
