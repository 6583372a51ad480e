"""Server side of the notification event stream.

A stream first sends a bounded snapshot of the most recent records, then on
every tick asks for records created strictly after its watermark and sends
only that delta. Empty ticks produce no frame.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import AsyncIterator, Awaitable, Callable, Sequence

import anyio
from anyio import to_thread

from lunchbell.domain.entities import Notification

from .serialization import format_sse_frame

logger = logging.getLogger(__name__)

FetchRecent = Callable[[int], Sequence[Notification]]
FetchSince = Callable[[datetime | None], Sequence[Notification]]
DisconnectCheck = Callable[[], Awaitable[bool]]


class NotificationStream:
    """One client's incremental view over the notification store.

    ``fetch_recent(limit)`` returns the newest visible records and
    ``fetch_since(watermark)`` the visible records created after
    ``watermark``. Both are blocking and run in a worker thread.
    """

    def __init__(
        self,
        *,
        fetch_recent: FetchRecent,
        fetch_since: FetchSince,
        initial_limit: int = 10,
        tick_seconds: float = 5.0,
    ) -> None:
        self._fetch_recent = fetch_recent
        self._fetch_since = fetch_since
        self._initial_limit = initial_limit
        self._tick_seconds = tick_seconds
        self._closed = anyio.Event()
        self.watermark: datetime | None = None

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def close(self) -> None:
        """Stop the stream after the current tick."""

        self._closed.set()

    async def snapshot(self) -> list[Notification]:
        """Return the initial batch and move the watermark past it."""

        batch = list(await to_thread.run_sync(self._fetch_recent, self._initial_limit))
        self._advance(batch)
        return batch

    async def poll(self) -> list[Notification]:
        """Return records newer than the watermark, oldest first."""

        since = self.watermark
        rows = await to_thread.run_sync(self._fetch_since, since)
        batch = [
            row
            for row in rows
            if since is None or (row.created_at is not None and row.created_at > since)
        ]
        batch.sort(key=lambda n: (n.created_at, n.id or ""))
        self._advance(batch)
        return batch

    async def frames(self, is_disconnected: DisconnectCheck | None = None) -> AsyncIterator[str]:
        """Yield encoded frames until the client leaves or the stream is closed."""

        yield format_sse_frame(await self.snapshot())

        while not self.closed:
            with anyio.move_on_after(self._tick_seconds):
                await self._closed.wait()
            if self.closed:
                break
            if is_disconnected is not None and await is_disconnected():
                logger.debug("Client disconnected from notification stream")
                break
            batch = await self.poll()
            if batch:
                yield format_sse_frame(batch)

    def _advance(self, batch: Sequence[Notification]) -> None:
        stamps = [n.created_at for n in batch if n.created_at is not None]
        if not stamps:
            return
        newest = max(stamps)
        if self.watermark is None or newest > self.watermark:
            self.watermark = newest


__all__ = ["NotificationStream"]
