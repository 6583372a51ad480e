"""Decide whether a notification reaches a user given their preferences.

The same rules run at two points: when a targeted notification is dispatched
and when broadcast notifications are fetched. Both call :func:`should_deliver`
so a given (preferences, category) pair always gets the same answer.
"""

from __future__ import annotations

from .entities import (
    Notification,
    NotificationCategory,
    NotificationFrequency,
    NotificationPreferences,
)

IMPORTANT_CATEGORIES = frozenset(
    {
        NotificationCategory.ORDER_REMINDER,
        NotificationCategory.ORDER_CONFIRMED,
        NotificationCategory.ORDER_MODIFIED,
    }
)


def is_important(category: NotificationCategory) -> bool:
    """Return ``True`` for categories delivered under ``important_only``."""

    return NotificationCategory(category) in IMPORTANT_CATEGORIES


def category_enabled(
    preferences: NotificationPreferences, category: NotificationCategory
) -> bool:
    """Return the per-category toggle for ``category``."""

    category = NotificationCategory(category)
    if category is NotificationCategory.ORDER_REMINDER:
        return preferences.order_reminders
    if category is NotificationCategory.ORDER_CONFIRMED:
        return preferences.order_confirmations
    if category is NotificationCategory.ORDER_MODIFIED:
        return preferences.order_modifications
    return preferences.menu_updates


def should_deliver(
    preferences: NotificationPreferences, category: NotificationCategory
) -> bool:
    """Return whether a notification of ``category`` should reach the user."""

    if preferences.frequency is NotificationFrequency.NONE:
        return False
    if preferences.frequency is NotificationFrequency.IMPORTANT_ONLY and not is_important(
        category
    ):
        return False
    return category_enabled(preferences, category)


def visible_broadcast_categories(
    preferences: NotificationPreferences,
) -> frozenset[NotificationCategory]:
    """Return the broadcast categories the user is allowed to see."""

    return frozenset(
        category for category in NotificationCategory if should_deliver(preferences, category)
    )


def is_visible(preferences: NotificationPreferences, notification: Notification) -> bool:
    """Fetch-time check applied to a stored notification.

    Records scoped to the user already passed :func:`should_deliver` when they
    were dispatched; broadcasts are checked against the current preferences so
    a preference change also changes which broadcasts are shown.
    """

    if not notification.is_broadcast:
        return True
    return should_deliver(preferences, notification.category)


__all__ = [
    "IMPORTANT_CATEGORIES",
    "category_enabled",
    "is_important",
    "is_visible",
    "should_deliver",
    "visible_broadcast_categories",
]
