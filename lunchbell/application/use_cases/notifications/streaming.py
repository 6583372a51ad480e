"""Wire a :class:`NotificationStream` to the notification store."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from sqlalchemy.orm import Session

from lunchbell.config import get_settings
from lunchbell.infrastructure.notifications import NotificationStream

from .listing import list_notifications, list_notifications_since


def open_notification_stream(
    user_id: int,
    *,
    session_factory: Callable[[], Session],
    initial_limit: int | None = None,
    tick_seconds: float | None = None,
) -> NotificationStream:
    """Build a stream for ``user_id``.

    Each query opens its own short-lived session and reloads the user's
    preferences, so a preference change affects the next tick.
    """

    settings = get_settings()

    def fetch_recent(limit: int):
        with session_factory() as session:
            return list_notifications(session, user_id, limit=limit)

    def fetch_since(since: datetime | None):
        with session_factory() as session:
            return list_notifications_since(session, user_id, since=since)

    return NotificationStream(
        fetch_recent=fetch_recent,
        fetch_since=fetch_since,
        initial_limit=initial_limit or settings.stream_initial_limit,
        tick_seconds=tick_seconds or settings.stream_tick_seconds,
    )


__all__ = ["open_notification_stream"]
