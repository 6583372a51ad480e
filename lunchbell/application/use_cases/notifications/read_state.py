"""Mark notifications read or unread and delete them, enforcing ownership."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lunchbell.application.errors import (
    ForbiddenError,
    NotFoundError,
    NotificationError,
    ValidationError,
)
from lunchbell.domain.entities import Notification
from lunchbell.domain.preference_filter import visible_broadcast_categories
from lunchbell.infrastructure.repositories import NotificationRepository

from .listing import load_preferences, require_caller

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkAllReadResult:
    updated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def parse_notification_id(value: object) -> str:
    """Return the canonical form of a notification id or raise :class:`ValidationError`."""

    try:
        return UUID(str(value)).hex
    except (TypeError, ValueError) as exc:
        raise ValidationError("Invalid notification ID") from exc


def set_read(
    session: Session, notification_id: object, user_id: int, read: bool
) -> Notification:
    """Set the read flag of a notification the user is allowed to touch.

    Broadcast notifications can be marked by any user; records scoped to
    another user raise :class:`ForbiddenError`.
    """

    if not isinstance(read, bool):
        raise ValidationError("Read status must be a boolean")
    require_caller(user_id)
    canonical_id = parse_notification_id(notification_id)

    repository = NotificationRepository(session)
    notification = repository.get(canonical_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    if not notification.is_broadcast and not notification.is_owned_by(user_id):
        raise ForbiddenError()

    return repository.set_read(canonical_id, read)


def mark_all_read(session: Session, user_id: int) -> MarkAllReadResult:
    """Mark every unread notification visible to the user as read.

    Each record is updated on its own; a failure is logged and the rest
    still get marked.
    """

    preferences = load_preferences(session, user_id)
    pending = NotificationRepository(session).list_for_recipient(
        user_id,
        broadcast_categories=visible_broadcast_categories(preferences),
        unread_only=True,
        limit=None,
    )

    updated: list[str] = []
    failed: list[str] = []
    for notification in pending:
        try:
            set_read(session, notification.id, user_id, True)
        except (NotificationError, SQLAlchemyError) as exc:
            logger.warning("Could not mark notification %s as read: %s", notification.id, exc)
            session.rollback()
            failed.append(notification.id)
        else:
            updated.append(notification.id)
    return MarkAllReadResult(updated=updated, failed=failed)


def delete_notification(session: Session, notification_id: object, user_id: int) -> None:
    """Delete a notification scoped to the caller; broadcasts cannot be deleted."""

    require_caller(user_id)
    canonical_id = parse_notification_id(notification_id)
    repository = NotificationRepository(session)
    notification = repository.get(canonical_id)
    if notification is None:
        raise NotFoundError("Notification not found")
    if not notification.is_owned_by(user_id):
        raise ForbiddenError()
    repository.delete(canonical_id)


__all__ = [
    "MarkAllReadResult",
    "delete_notification",
    "mark_all_read",
    "parse_notification_id",
    "set_read",
]
