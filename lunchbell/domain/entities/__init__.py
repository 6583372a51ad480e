"""Domain entities exposed by the application."""

from .notification import Notification, NotificationCategory
from .notification_preferences import (
    DeliveryMethod,
    NotificationFrequency,
    NotificationPreferences,
)
from .user import ADMIN_ROLES, ROLE_ADMIN, ROLE_SUPERUSER, ROLE_USER, ROLES, User

__all__ = [
    "ADMIN_ROLES",
    "DeliveryMethod",
    "Notification",
    "NotificationCategory",
    "NotificationFrequency",
    "NotificationPreferences",
    "ROLE_ADMIN",
    "ROLE_SUPERUSER",
    "ROLE_USER",
    "ROLES",
    "User",
]
