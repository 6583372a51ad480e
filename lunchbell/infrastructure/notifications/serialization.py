"""Wire representation of notifications for list responses and stream frames."""

from __future__ import annotations

import json
from typing import Any, Iterable

from lunchbell.domain.entities import Notification, NotificationCategory


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``notification``."""

    return {
        "id": notification.id,
        "user_id": notification.user_id,
        "category": NotificationCategory(notification.category).value,
        "message": notification.message,
        "read": notification.read,
        "created_at": notification.created_at.isoformat()
        if notification.created_at
        else None,
    }


def format_sse_frame(notifications: Iterable[Notification]) -> str:
    """Encode ``notifications`` as one ``text/event-stream`` data frame."""

    payload = {"notifications": [serialize_notification(n) for n in notifications]}
    return f"data: {json.dumps(payload)}\n\n"


__all__ = ["format_sse_frame", "serialize_notification"]
