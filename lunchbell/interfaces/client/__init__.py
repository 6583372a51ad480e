"""HTTP client helpers that keep a local notification feed in sync."""

from .feed import NotificationFeed
from .sync import NotificationSyncClient, PollTransport, StreamTransport

__all__ = [
    "NotificationFeed",
    "NotificationSyncClient",
    "PollTransport",
    "StreamTransport",
]
