"""Public helpers for creating, reading and streaming notifications."""

from .dispatch import (
    BroadcastResult,
    BulkDispatchResult,
    DispatchResult,
    notify_broadcast,
    notify_user,
    notify_users,
)
from .events import (
    cleanup_old_notifications,
    notify_admins_of_order_modification,
    notify_menu_updated,
    notify_order_status_changed,
    run_scheduled_jobs,
    send_daily_order_reminder,
)
from .listing import (
    NotificationCounts,
    SystemNotificationStats,
    get_notification_counts,
    get_system_stats,
    list_notifications,
    list_notifications_since,
)
from .preferences import get_preferences, update_preferences
from .read_state import (
    MarkAllReadResult,
    delete_notification,
    mark_all_read,
    parse_notification_id,
    set_read,
)
from .streaming import open_notification_stream

__all__ = [
    "BroadcastResult",
    "BulkDispatchResult",
    "DispatchResult",
    "MarkAllReadResult",
    "NotificationCounts",
    "SystemNotificationStats",
    "cleanup_old_notifications",
    "delete_notification",
    "get_notification_counts",
    "get_preferences",
    "get_system_stats",
    "list_notifications",
    "list_notifications_since",
    "mark_all_read",
    "notify_admins_of_order_modification",
    "notify_broadcast",
    "notify_menu_updated",
    "notify_order_status_changed",
    "notify_user",
    "notify_users",
    "open_notification_stream",
    "parse_notification_id",
    "run_scheduled_jobs",
    "send_daily_order_reminder",
    "set_read",
    "update_preferences",
]
