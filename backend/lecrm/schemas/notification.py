"""Pydantic schemas for notifications, snoozes and per-user notification state."""

from __future__ import annotations

import datetime as dt
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from lecrm.core.sanitize import clean_multiline, clean_optional_id, clean_single_line
from lecrm.models.enums import NotificationType, SnoozeUnit


class NotificationCreate(BaseModel):
    user_id: str | None = None
    type: NotificationType
    title: str = Field(..., min_length=1, max_length=255)
    message: str | None = Field(default=None, max_length=5000)
    is_read: bool = False
    scheduled_for: dt.datetime | None = None
    related_account_id: str | None = None
    related_task_id: str | None = None
    related_ticket_id: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: str) -> str:
        return clean_single_line(value)

    @field_validator("message", mode="before")
    @classmethod
    def normalize_message(cls, value: str | None) -> str | None:
        cleaned = clean_multiline(value)
        return cleaned or None

    @field_validator("user_id", "related_account_id", "related_task_id", "related_ticket_id", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> str | None:
        return clean_optional_id(value)


class NotificationUpdate(BaseModel):
    id: str = Field(..., min_length=1)
    type: NotificationType | None = None
    title: str | None = Field(default=None, max_length=255)
    message: str | None = Field(default=None, max_length=5000)
    is_read: bool | None = None
    scheduled_for: dt.datetime | None = None
    related_account_id: str | None = None
    related_task_id: str | None = None
    related_ticket_id: str | None = None

    @field_validator("title", mode="before")
    @classmethod
    def normalize_title(cls, value: str | None) -> str | None:
        cleaned = clean_single_line(value)
        return cleaned or None

    @field_validator("related_account_id", "related_task_id", "related_ticket_id", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> str | None:
        return clean_optional_id(value)

    def changes(self) -> dict[str, Any]:
        values = self.model_dump(exclude={"id"}, exclude_unset=True)
        if isinstance(values.get("type"), NotificationType):
            values["type"] = values["type"].value
        return values


class NotificationAction(BaseModel):
    action: Literal["create", "mark_all_read"]
    data: dict[str, Any] = Field(default_factory=dict)


class UserIdPayload(BaseModel):
    user_id: str = Field(..., min_length=1)

    @field_validator("user_id", mode="before")
    @classmethod
    def normalize_user_id(cls, value: Any) -> str:
        return clean_single_line(value)


class SnoozeCreate(BaseModel):
    notification_type: NotificationType
    related_account_id: str | None = None
    snoozed_until: dt.datetime
    snoozed_by: str | None = None

    @field_validator("related_account_id", "snoozed_by", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> str | None:
        return clean_optional_id(value)


class SnoozeAction(BaseModel):
    action: Literal["snooze"]
    data: SnoozeCreate


class SnoozeRequest(BaseModel):
    """Body of the actor-facing snooze endpoint; either ``until`` or a unit/duration."""

    notification_type: NotificationType
    related_account_id: str | None = None
    notification_id: str | None = None
    unit: SnoozeUnit | None = None
    duration: int = Field(default=1, ge=1, le=1000)
    until: dt.datetime | None = None

    @field_validator("related_account_id", "notification_id", mode="before")
    @classmethod
    def normalize_ids(cls, value: Any) -> str | None:
        return clean_optional_id(value)

    @model_validator(mode="after")
    def require_window(self) -> "SnoozeRequest":
        if self.until is None and self.unit is None:
            raise ValueError("until_or_unit_required")
        return self


class UserNotificationStateUpsert(BaseModel):
    user_id: str = Field(..., min_length=1)
    notifications: list[dict[str, Any]] = Field(default_factory=list)


class UserNotificationReadUpdate(BaseModel):
    user_id: str = Field(..., min_length=1)
    notification_id: str = Field(..., min_length=1)
    is_read: bool = True


class UserNotificationMarkAllRead(BaseModel):
    user_id: str = Field(..., min_length=1)
    notification_ids: list[str] = Field(default_factory=list)


class UserNotificationStateAction(BaseModel):
    action: Literal["upsert", "update_read", "mark_all_read"]
    data: dict[str, Any] = Field(default_factory=dict)


class NotificationItemOut(BaseModel):
    id: str
    type: str
    title: str
    message: str
    is_read: bool
    created_at: str | None = None
    scheduled_for: str | None = None
    related_account_id: str | None = None
    related_task_id: str | None = None
    related_ticket_id: str | None = None
    user_id: str | None = None
    link: str | None = None


class NotificationGroupOut(BaseModel):
    type: str
    count: int
    unread_count: int
    notifications: list[NotificationItemOut]


class NotificationViewOut(BaseModel):
    unread_total: int
    groups: list[NotificationGroupOut]
