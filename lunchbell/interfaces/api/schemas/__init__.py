from .auth import SignupRequest, Token
from .notification import (
    DispatchRead,
    MarkAllReadRead,
    NotificationCountsRead,
    NotificationCreate,
    NotificationList,
    NotificationPreferencesPayload,
    NotificationRead,
    NotificationReadUpdate,
    SystemDispatchRead,
    SystemNotificationCreate,
    SystemOverviewRead,
    SystemStatsRead,
)
from .user import UserCreate, UserRead

__all__ = [
    "DispatchRead",
    "MarkAllReadRead",
    "NotificationCountsRead",
    "NotificationCreate",
    "NotificationList",
    "NotificationPreferencesPayload",
    "NotificationRead",
    "NotificationReadUpdate",
    "SignupRequest",
    "SystemDispatchRead",
    "SystemNotificationCreate",
    "SystemOverviewRead",
    "SystemStatsRead",
    "Token",
    "UserCreate",
    "UserRead",
]
