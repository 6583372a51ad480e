"""Keep a :class:`NotificationFeed` current against the notification API.

The event stream is the primary channel. When it fails or the server ends
it, the client switches to polling the list endpoint until stopped.
"""

from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Callable

import anyio
import httpx

from .feed import NotificationFeed

logger = logging.getLogger(__name__)

STREAM_PATH = "/notifications/stream"
LIST_PATH = "/notifications/"
DEFAULT_POLL_INTERVAL = 30.0
DEFAULT_POLL_LIMIT = 20


def _auth_headers(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class StreamTransport:
    """Read ``text/event-stream`` frames and yield their notification lists."""

    def __init__(self, client: httpx.AsyncClient, token: str, *, path: str = STREAM_PATH) -> None:
        self._client = client
        self._token = token
        self._path = path

    async def frames(self) -> AsyncIterator[list[dict[str, Any]]]:
        headers = {**_auth_headers(self._token), "Accept": "text/event-stream"}
        async with self._client.stream(
            "GET", self._path, headers=headers, timeout=None
        ) as response:
            response.raise_for_status()
            data_lines: list[str] = []
            async for line in response.aiter_lines():
                if line.startswith(":"):
                    continue
                if line.startswith("data:"):
                    data_lines.append(line[len("data:"):].lstrip())
                    continue
                if line == "" and data_lines:
                    payload = json.loads("\n".join(data_lines))
                    data_lines = []
                    yield payload.get("notifications", [])


class PollTransport:
    """Fetch the full list from the list endpoint."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        *,
        path: str = LIST_PATH,
        limit: int = DEFAULT_POLL_LIMIT,
    ) -> None:
        self._client = client
        self._token = token
        self._path = path
        self._limit = limit

    async def fetch(self) -> list[dict[str, Any]]:
        response = await self._client.get(
            self._path, headers=_auth_headers(self._token), params={"limit": self._limit}
        )
        response.raise_for_status()
        return response.json()["notifications"]


class NotificationSyncClient:
    """Drive a feed from the stream, falling back to polling.

    ``run()`` returns after ``stop()`` is called; every pending sleep and
    open request is cancelled with it.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        token: str,
        *,
        feed: NotificationFeed | None = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        poll_limit: int = DEFAULT_POLL_LIMIT,
        on_update: Callable[[NotificationFeed], None] | None = None,
    ) -> None:
        self.feed = feed if feed is not None else NotificationFeed()
        self.stream = StreamTransport(client, token)
        self.poll = PollTransport(client, token, limit=poll_limit)
        self.poll_interval = poll_interval
        self.on_update = on_update
        self.mode = "idle"
        self._stopped = False
        self._scope: anyio.CancelScope | None = None

    async def run(self) -> None:
        if self._stopped:
            self.mode = "stopped"
            return
        with anyio.CancelScope() as scope:
            self._scope = scope
            await self._consume_stream()
            if not self._stopped:
                await self._poll_forever()
        self.mode = "stopped"

    def stop(self) -> None:
        """Cancel the stream or the polling timer."""

        self._stopped = True
        if self._scope is not None:
            self._scope.cancel()

    async def _consume_stream(self) -> None:
        self.mode = "stream"
        try:
            async for batch in self.stream.frames():
                self.feed.merge(batch)
                self._changed()
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.warning("Notification stream failed, falling back to polling: %s", exc)
        else:
            logger.info("Notification stream ended, falling back to polling")

    async def _poll_forever(self) -> None:
        self.mode = "poll"
        while True:
            try:
                items = await self.poll.fetch()
            except (httpx.HTTPError, ValueError, KeyError) as exc:
                logger.warning("Polling notifications failed: %s", exc)
            else:
                self.feed.replace(items)
                self._changed()
            await anyio.sleep(self.poll_interval)

    def _changed(self) -> None:
        if self.on_update is not None:
            self.on_update(self.feed)


__all__ = [
    "NotificationSyncClient",
    "PollTransport",
    "StreamTransport",
]
