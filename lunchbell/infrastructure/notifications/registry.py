"""Bookkeeping for open notification streams."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import TYPE_CHECKING, DefaultDict, Set

if TYPE_CHECKING:  # pragma: no cover
    from .stream import NotificationStream

logger = logging.getLogger(__name__)


class StreamRegistry:
    """Track active streams grouped by user so they can be closed together.

    One instance is created per application in the FastAPI lifespan and
    closed on shutdown.
    """

    def __init__(self) -> None:
        self._streams: DefaultDict[int, Set["NotificationStream"]] = defaultdict(set)

    def register(self, user_id: int, stream: "NotificationStream") -> None:
        """Add ``stream`` to the pool for ``user_id``."""

        self._streams[user_id].add(stream)
        logger.debug("Stream opened for user %s (%d active)", user_id, len(self._streams[user_id]))

    def unregister(self, user_id: int, stream: "NotificationStream") -> None:
        """Remove ``stream`` from the pool for ``user_id``."""

        streams = self._streams.get(user_id)
        if streams is None:
            return
        streams.discard(stream)
        if not streams:
            self._streams.pop(user_id, None)
        logger.debug("Stream closed for user %s", user_id)

    def active_count(self, user_id: int | None = None) -> int:
        """Return the number of open streams, optionally for a single user."""

        if user_id is not None:
            return len(self._streams.get(user_id, ()))
        return sum(len(streams) for streams in self._streams.values())

    def close_user(self, user_id: int) -> None:
        """Ask every stream of ``user_id`` to finish."""

        for stream in list(self._streams.get(user_id, ())):
            stream.close()

    def close_all(self) -> None:
        """Ask every open stream to finish; used at application shutdown."""

        for streams in list(self._streams.values()):
            for stream in list(streams):
                stream.close()


__all__ = ["StreamRegistry"]
