"""Domain entity representing a user."""

from dataclasses import dataclass, field
from datetime import datetime

from .notification_preferences import NotificationPreferences

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLE_SUPERUSER = "superuser"
ROLES = (ROLE_USER, ROLE_ADMIN, ROLE_SUPERUSER)
ADMIN_ROLES = (ROLE_ADMIN, ROLE_SUPERUSER)


@dataclass
class User:
    """Core attributes describing an application user."""

    id: int | None
    name: str
    email: str
    password: str
    role: str = ROLE_USER
    is_active: bool = True
    created_at: datetime | None = None
    last_login: datetime | None = None
    notification_preferences: NotificationPreferences = field(
        default_factory=NotificationPreferences
    )

    def is_admin(self) -> bool:
        """Return ``True`` for administrators and superusers."""

        return self.role.lower() in ADMIN_ROLES
