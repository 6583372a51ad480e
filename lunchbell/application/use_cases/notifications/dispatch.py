"""Create notifications and send their emails according to user preferences."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lunchbell.application.errors import NotFoundError, ValidationError
from lunchbell.domain.entities import Notification, NotificationCategory, User
from lunchbell.domain.preference_filter import should_deliver
from lunchbell.infrastructure import email as email_delivery
from lunchbell.infrastructure.repositories import NotificationRepository, UserRepository
from lunchbell.utils import now_in_app_timezone

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 500

EmailSender = Callable[[User, NotificationCategory, str], bool]


@dataclass(frozen=True)
class DispatchResult:
    """Channels that actually fired for one recipient."""

    in_app: bool = False
    email: bool = False
    notification: Notification | None = None


@dataclass(frozen=True)
class BroadcastResult:
    """Outcome of a system-wide notification."""

    notification: Notification
    emailed_user_ids: list[int] = field(default_factory=list)


@dataclass(frozen=True)
class BulkDispatchResult:
    """Outcome of a notification sent to an explicit list of users."""

    results: dict[int, DispatchResult] = field(default_factory=dict)
    skipped: list[int] = field(default_factory=list)

    @property
    def notifications(self) -> list[Notification]:
        return [r.notification for r in self.results.values() if r.notification is not None]

    @property
    def emailed_user_ids(self) -> list[int]:
        return [user_id for user_id, r in self.results.items() if r.email]


def normalize_category(category: NotificationCategory | str) -> NotificationCategory:
    try:
        return NotificationCategory(category)
    except ValueError as exc:
        raise ValidationError("Invalid notification type") from exc


def normalize_message(message: str) -> str:
    text = (message or "").strip()
    if not text:
        raise ValidationError("Notification message is required")
    if len(text) > MAX_MESSAGE_LENGTH:
        raise ValidationError(
            f"Notification message cannot exceed {MAX_MESSAGE_LENGTH} characters"
        )
    return text


def notify_user(
    session: Session,
    *,
    user_id: int,
    category: NotificationCategory | str,
    message: str,
    email_sender: EmailSender | None = None,
) -> DispatchResult:
    """Deliver a notification to one user through the channels they chose."""

    category = normalize_category(category)
    message = normalize_message(message)

    user = UserRepository(session).get(user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return _deliver_to_user(session, user, category, message, email_sender)


def notify_broadcast(
    session: Session,
    *,
    category: NotificationCategory | str,
    message: str,
    email_sender: EmailSender | None = None,
) -> BroadcastResult:
    """Store one system-wide notification and email the users who want it.

    In-app visibility of the broadcast is decided per reader when they fetch
    their notifications, so no per-user copy is stored.
    """

    category = normalize_category(category)
    message = normalize_message(message)

    notification = NotificationRepository(session).create(
        Notification(
            id=None,
            user_id=None,
            category=category,
            message=message,
            read=False,
            created_at=now_in_app_timezone(),
        )
    )
    logger.info("Broadcast %s notification %s created", category.value, notification.id)

    emailed: list[int] = []
    for user in UserRepository(session).list_active():
        preferences = user.notification_preferences
        if not preferences.delivery_method.includes_email:
            continue
        if not should_deliver(preferences, category):
            continue
        if _send_email(email_sender, user, category, message):
            emailed.append(user.id)

    return BroadcastResult(notification=notification, emailed_user_ids=emailed)


def notify_users(
    session: Session,
    *,
    user_ids: Iterable[int],
    category: NotificationCategory | str,
    message: str,
    email_sender: EmailSender | None = None,
) -> BulkDispatchResult:
    """Deliver one notification per listed user; failures skip that user only."""

    category = normalize_category(category)
    message = normalize_message(message)

    results: dict[int, DispatchResult] = {}
    skipped: list[int] = []
    for user_id in dict.fromkeys(user_ids):
        try:
            results[user_id] = notify_user(
                session,
                user_id=user_id,
                category=category,
                message=message,
                email_sender=email_sender,
            )
        except NotFoundError:
            logger.warning("Skipping notification for unknown user %s", user_id)
            skipped.append(user_id)
        except Exception:
            logger.exception("Failed to notify user %s; continuing with the batch", user_id)
            session.rollback()
            skipped.append(user_id)

    return BulkDispatchResult(results=results, skipped=skipped)


def _deliver_to_user(
    session: Session,
    user: User,
    category: NotificationCategory,
    message: str,
    email_sender: EmailSender | None,
) -> DispatchResult:
    preferences = user.notification_preferences
    if not user.is_active or not should_deliver(preferences, category):
        logger.debug(
            "User %s does not receive %s notifications", user.id, category.value
        )
        return DispatchResult()

    notification: Notification | None = None
    if preferences.delivery_method.includes_in_app:
        try:
            notification = NotificationRepository(session).create(
                Notification(
                    id=None,
                    user_id=user.id,
                    category=category,
                    message=message,
                    read=False,
                    created_at=now_in_app_timezone(),
                )
            )
        except SQLAlchemyError:
            logger.exception("Failed to store in-app notification for user %s", user.id)
            session.rollback()

    emailed = False
    if preferences.delivery_method.includes_email:
        emailed = _send_email(email_sender, user, category, message)

    return DispatchResult(
        in_app=notification is not None, email=emailed, notification=notification
    )


def _send_email(
    email_sender: EmailSender | None,
    user: User,
    category: NotificationCategory,
    message: str,
) -> bool:
    sender = (
        email_sender
        if email_sender is not None
        else email_delivery.send_notification_email
    )
    try:
        sent = bool(sender(user, category, message))
    except Exception:
        logger.exception("Failed to send %s email to user %s", category.value, user.id)
        return False
    if not sent:
        logger.warning("Email for %s notification was not sent to user %s", category.value, user.id)
    return sent


__all__ = [
    "BroadcastResult",
    "BulkDispatchResult",
    "DispatchResult",
    "EmailSender",
    "MAX_MESSAGE_LENGTH",
    "normalize_category",
    "normalize_message",
    "notify_broadcast",
    "notify_user",
    "notify_users",
]
