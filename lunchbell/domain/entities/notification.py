"""Domain entity representing a stored notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationCategory(str, Enum):
    """Kinds of events a notification can describe."""

    ORDER_REMINDER = "order_reminder"
    ORDER_CONFIRMED = "order_confirmed"
    ORDER_MODIFIED = "order_modified"
    MENU_UPDATED = "menu_updated"


@dataclass
class Notification:
    """Message delivered to one user or, when ``user_id`` is ``None``, to everyone.

    Only ``read`` changes after creation.
    """

    id: str | None
    user_id: int | None
    category: NotificationCategory
    message: str
    read: bool = False
    created_at: datetime | None = None

    @property
    def is_broadcast(self) -> bool:
        """Return ``True`` when the notification is not bound to a user."""

        return self.user_id is None

    def is_owned_by(self, user_id: int) -> bool:
        """Return ``True`` when the notification is scoped to ``user_id``."""

        return self.user_id is not None and self.user_id == user_id


__all__ = ["Notification", "NotificationCategory"]
