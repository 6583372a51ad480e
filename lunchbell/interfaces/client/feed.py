"""Client-side view of a user's notifications."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping

NotificationPayload = Mapping[str, Any]


def _created_at(item: NotificationPayload) -> datetime:
    value = item.get("created_at")
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


class NotificationFeed:
    """Notifications as the client shows them, newest first.

    ``replace`` is used with full polling results and ``merge`` with stream
    frames. Merging is keyed by id, so a frame applied twice changes nothing.
    """

    def __init__(self, items: Iterable[NotificationPayload] = ()) -> None:
        self._items: dict[str, dict[str, Any]] = {}
        self.merge(items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, notification_id: object) -> bool:
        return notification_id in self._items

    @property
    def items(self) -> list[dict[str, Any]]:
        return sorted(
            self._items.values(),
            key=lambda item: (_created_at(item), item["id"]),
            reverse=True,
        )

    @property
    def ids(self) -> list[str]:
        return [item["id"] for item in self.items]

    @property
    def unread_count(self) -> int:
        return sum(1 for item in self._items.values() if not item.get("read"))

    def replace(self, items: Iterable[NotificationPayload]) -> None:
        """Discard the current view and keep only ``items``."""

        self._items = {}
        self.merge(items)

    def merge(self, items: Iterable[NotificationPayload]) -> None:
        """Insert new records and overwrite known ones with the incoming copy."""

        for item in items:
            self._items[str(item["id"])] = dict(item)


__all__ = ["NotificationFeed", "NotificationPayload"]
