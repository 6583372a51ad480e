"""Notifications emitted by business actions and scheduled jobs.

These hooks are called after the triggering action already succeeded, so
every dispatch failure is logged here and never reaches the caller.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta

from sqlalchemy.orm import Session

from lunchbell.application.errors import ValidationError
from lunchbell.config import get_settings
from lunchbell.domain.entities import ADMIN_ROLES, NotificationCategory
from lunchbell.infrastructure.repositories import NotificationRepository, UserRepository
from lunchbell.utils import ensure_app_timezone, now_in_app_timezone, start_of_day

from .dispatch import (
    BroadcastResult,
    BulkDispatchResult,
    DispatchResult,
    EmailSender,
    notify_broadcast,
    notify_user,
    notify_users,
)

logger = logging.getLogger(__name__)

DAILY_REMINDER_MESSAGE = "Please place your lunch order for today!"
DEFAULT_MENU_MESSAGE = "A new menu has been posted"

_ORDER_ACTIONS = {
    "created": "placed a new",
    "updated": "modified their",
    "cancelled": "cancelled their",
}


def notify_order_status_changed(
    session: Session,
    *,
    user_id: int,
    order_date: date,
    status: str,
    email_sender: EmailSender | None = None,
) -> DispatchResult | None:
    """Tell an order owner that an admin changed the status of their order."""

    category = (
        NotificationCategory.ORDER_CONFIRMED
        if status == "confirmed"
        else NotificationCategory.ORDER_MODIFIED
    )
    message = f"Your order for {order_date:%a %b %d %Y} has been {status}"
    try:
        return notify_user(
            session,
            user_id=user_id,
            category=category,
            message=message,
            email_sender=email_sender,
        )
    except Exception:
        logger.exception("Failed to notify user %s about order status %s", user_id, status)
        session.rollback()
        return None


def notify_menu_updated(
    session: Session,
    *,
    message: str = DEFAULT_MENU_MESSAGE,
    email_sender: EmailSender | None = None,
) -> BroadcastResult | None:
    """Broadcast that a new menu was published."""

    try:
        return notify_broadcast(
            session,
            category=NotificationCategory.MENU_UPDATED,
            message=message,
            email_sender=email_sender,
        )
    except Exception:
        logger.exception("Failed to broadcast menu update")
        session.rollback()
        return None


def notify_admins_of_order_modification(
    session: Session,
    *,
    user_name: str,
    order_details: str,
    modification_type: str,
    email_sender: EmailSender | None = None,
) -> BulkDispatchResult | None:
    """Notify every admin and superuser that a user created or changed an order."""

    action = _ORDER_ACTIONS.get(modification_type)
    if action is None:
        raise ValidationError(f"Unknown order modification type: {modification_type}")

    try:
        admin_ids = UserRepository(session).list_ids_by_roles(ADMIN_ROLES)
        if not admin_ids:
            return BulkDispatchResult()
        return notify_users(
            session,
            user_ids=admin_ids,
            category=NotificationCategory.ORDER_MODIFIED,
            message=f"{user_name} {action} order: {order_details}",
            email_sender=email_sender,
        )
    except Exception:
        logger.exception("Failed to notify admins about an order change by %s", user_name)
        session.rollback()
        return None


def should_send_daily_reminder(now: datetime) -> bool:
    """Return ``True`` on weekdays once the configured reminder time has passed."""

    settings = get_settings()
    local = ensure_app_timezone(now)
    if local.weekday() >= 5:
        return False
    reminder_at = local.replace(
        hour=settings.daily_reminder_hour,
        minute=settings.daily_reminder_minute,
        second=0,
        microsecond=0,
    )
    return local >= reminder_at


def has_reminder_been_sent_today(session: Session, now: datetime) -> bool:
    today = start_of_day(now)
    return NotificationRepository(session).exists_in_range(
        NotificationCategory.ORDER_REMINDER,
        start=today,
        end=today + timedelta(days=1),
    )


def send_daily_order_reminder(
    session: Session,
    *,
    now: datetime | None = None,
    email_sender: EmailSender | None = None,
) -> BroadcastResult | None:
    """Broadcast the daily order reminder at most once per day."""

    now = now or now_in_app_timezone()
    if not should_send_daily_reminder(now):
        return None
    if has_reminder_been_sent_today(session, now):
        logger.debug("Daily reminder already sent for %s", now.date())
        return None
    try:
        return notify_broadcast(
            session,
            category=NotificationCategory.ORDER_REMINDER,
            message=DAILY_REMINDER_MESSAGE,
            email_sender=email_sender,
        )
    except Exception:
        logger.exception("Failed to broadcast the daily order reminder")
        session.rollback()
        return None


def cleanup_old_notifications(
    session: Session, *, days_old: int | None = None, now: datetime | None = None
) -> int:
    """Delete notifications older than ``days_old`` days and return how many."""

    days = days_old if days_old is not None else get_settings().notification_retention_days
    cutoff = (now or now_in_app_timezone()) - timedelta(days=days)
    deleted = NotificationRepository(session).delete_older_than(cutoff)
    if deleted:
        logger.info("Removed %d notifications older than %d days", deleted, days)
    return deleted


def run_scheduled_jobs(
    session: Session,
    *,
    now: datetime | None = None,
    email_sender: EmailSender | None = None,
) -> dict[str, str]:
    """Run the periodic notification jobs and describe what each one did."""

    now = now or now_in_app_timezone()
    results: dict[str, str] = {}

    reminder = send_daily_order_reminder(session, now=now, email_sender=email_sender)
    results["order_reminder"] = (
        "Order reminder sent" if reminder is not None else "Not time or already sent"
    )

    deleted = cleanup_old_notifications(session, now=now)
    results["cleanup"] = f"Removed {deleted} old notifications"
    return results


__all__ = [
    "DAILY_REMINDER_MESSAGE",
    "cleanup_old_notifications",
    "has_reminder_been_sent_today",
    "notify_admins_of_order_modification",
    "notify_menu_updated",
    "notify_order_status_changed",
    "run_scheduled_jobs",
    "send_daily_order_reminder",
    "should_send_daily_reminder",
]
