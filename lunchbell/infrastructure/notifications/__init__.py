"""Realtime notification helpers for the infrastructure layer."""

from .registry import StreamRegistry
from .serialization import format_sse_frame, serialize_notification
from .stream import NotificationStream

__all__ = [
    "NotificationStream",
    "StreamRegistry",
    "format_sse_frame",
    "serialize_notification",
]
