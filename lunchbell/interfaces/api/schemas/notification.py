"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, StrictBool

from lunchbell.domain.entities import (
    DeliveryMethod,
    NotificationCategory,
    NotificationFrequency,
)

MESSAGE_MAX_LENGTH = 500


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    id: str
    user_id: int | None = None
    category: NotificationCategory
    message: str
    read: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class NotificationList(BaseModel):
    notifications: list[NotificationRead]


class NotificationReadUpdate(BaseModel):
    """Body used to flip the read flag of a notification."""

    read: StrictBool


class NotificationCreate(BaseModel):
    """Send a notification to one user, or to everyone when ``user_id`` is omitted."""

    user_id: int | None = Field(default=None, ge=1)
    category: NotificationCategory
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)


class SystemNotificationCreate(BaseModel):
    """Broadcast a notification, or target ``user_ids`` when provided."""

    category: NotificationCategory
    message: str = Field(..., min_length=1, max_length=MESSAGE_MAX_LENGTH)
    user_ids: list[int] | None = Field(
        default=None, description="Recipients; omitted or empty means everyone"
    )


class DispatchRead(BaseModel):
    in_app: bool
    email: bool
    notification: NotificationRead | None = None


class SystemDispatchRead(BaseModel):
    notifications: list[NotificationRead]
    count: int
    emailed_user_ids: list[int] = Field(default_factory=list)
    skipped_user_ids: list[int] = Field(default_factory=list)


class NotificationCountsRead(BaseModel):
    total: int
    unread: int


class MarkAllReadRead(BaseModel):
    updated: int
    failed: list[str] = Field(default_factory=list)


class SystemStatsRead(BaseModel):
    total: int
    system: int
    unread: int


class SystemOverviewRead(BaseModel):
    stats: SystemStatsRead
    recent: list[NotificationRead]


class NotificationPreferencesPayload(BaseModel):
    """Full preference document; updates replace every field."""

    order_reminders: StrictBool
    order_confirmations: StrictBool
    order_modifications: StrictBool
    menu_updates: StrictBool
    delivery_method: DeliveryMethod
    frequency: NotificationFrequency

    model_config = ConfigDict(from_attributes=True, extra="forbid")


__all__ = [
    "DispatchRead",
    "MarkAllReadRead",
    "NotificationCountsRead",
    "NotificationCreate",
    "NotificationList",
    "NotificationPreferencesPayload",
    "NotificationRead",
    "NotificationReadUpdate",
    "SystemDispatchRead",
    "SystemNotificationCreate",
    "SystemOverviewRead",
    "SystemStatsRead",
]
