"""Read paths over the notification store."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from sqlalchemy.orm import Session

from lunchbell.application.errors import NotFoundError, UnauthorizedError, ValidationError
from lunchbell.config import get_settings
from lunchbell.domain.entities import Notification, NotificationPreferences
from lunchbell.domain.preference_filter import visible_broadcast_categories
from lunchbell.infrastructure.repositories import NotificationRepository, UserRepository


@dataclass(frozen=True)
class NotificationCounts:
    total: int
    unread: int


@dataclass(frozen=True)
class SystemNotificationStats:
    total: int
    system: int
    unread: int
    recent: list[Notification] = field(default_factory=list)


def require_caller(user_id: int | None) -> int:
    if user_id is None:
        raise UnauthorizedError()
    return user_id


def load_preferences(session: Session, user_id: int | None) -> NotificationPreferences:
    """Return the stored preferences of ``user_id`` or raise :class:`NotFoundError`."""

    user_id = require_caller(user_id)
    preferences = UserRepository(session).get_preferences(user_id)
    if preferences is None:
        raise NotFoundError("User not found")
    return preferences


def list_notifications(
    session: Session,
    user_id: int,
    *,
    unread_only: bool = False,
    limit: int | None = None,
) -> Sequence[Notification]:
    """Return the user's own records plus the broadcasts they may see, newest first.

    Broadcast filtering happens inside the query so ``limit`` counts visible
    records only.
    """

    if limit is None:
        limit = get_settings().notification_list_limit
    if limit <= 0:
        raise ValidationError("Limit must be a positive integer")

    preferences = load_preferences(session, user_id)
    return NotificationRepository(session).list_for_recipient(
        user_id,
        broadcast_categories=visible_broadcast_categories(preferences),
        unread_only=unread_only,
        limit=limit,
    )


def list_notifications_since(
    session: Session,
    user_id: int,
    *,
    since: datetime | None,
    limit: int | None = None,
) -> Sequence[Notification]:
    """Return visible records created strictly after ``since``, oldest first."""

    preferences = load_preferences(session, user_id)
    return NotificationRepository(session).list_for_recipient(
        user_id,
        broadcast_categories=visible_broadcast_categories(preferences),
        since=since,
        limit=limit,
        ascending=True,
    )


def get_notification_counts(session: Session, user_id: int) -> NotificationCounts:
    preferences = load_preferences(session, user_id)
    repository = NotificationRepository(session)
    categories = visible_broadcast_categories(preferences)
    return NotificationCounts(
        total=repository.count_for_recipient(user_id, broadcast_categories=categories),
        unread=repository.count_for_recipient(
            user_id, broadcast_categories=categories, unread_only=True
        ),
    )


def get_system_stats(session: Session, *, recent_limit: int = 10) -> SystemNotificationStats:
    """Counters and latest records across every user, for administrators."""

    repository = NotificationRepository(session)
    return SystemNotificationStats(
        total=repository.count_all(),
        system=repository.count_broadcast(),
        unread=repository.count_unread(),
        recent=list(repository.list_recent(limit=recent_limit)),
    )


__all__ = [
    "NotificationCounts",
    "SystemNotificationStats",
    "get_notification_counts",
    "get_system_stats",
    "list_notifications",
    "list_notifications_since",
    "load_preferences",
    "require_caller",
]
