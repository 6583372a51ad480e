"""Tests for the incremental notification stream and its registry."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import anyio
import pytest

from lunchbell.application.use_cases.notifications import (
    open_notification_stream,
    update_preferences,
)
from lunchbell.domain.entities import (
    Notification,
    NotificationCategory,
    NotificationPreferences,
)
from lunchbell.infrastructure.database import SessionLocal
from lunchbell.infrastructure.notifications import (
    NotificationStream,
    StreamRegistry,
    format_sse_frame,
)

BASE_TIME = datetime(2024, 3, 4, 12, 0, tzinfo=timezone.utc)


class FakeStore:
    """In-memory stand-in for the two queries a stream runs."""

    def __init__(self) -> None:
        self.records: list[Notification] = []
        self.since_calls: list[datetime | None] = []

    def add(self, seconds: int, user_id: int | None = 1) -> Notification:
        record = Notification(
            id=uuid4().hex,
            user_id=user_id,
            category=NotificationCategory.ORDER_CONFIRMED,
            message=f"at {seconds}",
            created_at=BASE_TIME + timedelta(seconds=seconds),
        )
        self.records.append(record)
        return record

    def fetch_recent(self, limit: int) -> list[Notification]:
        ordered = sorted(self.records, key=lambda n: n.created_at, reverse=True)
        return ordered[:limit]

    def fetch_since(self, since: datetime | None) -> list[Notification]:
        self.since_calls.append(since)
        return [n for n in self.records if since is None or n.created_at > since]

    def stream(self, **kwargs) -> NotificationStream:
        kwargs.setdefault("tick_seconds", 0.01)
        return NotificationStream(
            fetch_recent=self.fetch_recent, fetch_since=self.fetch_since, **kwargs
        )


def _decode(frame: str) -> list[dict]:
    assert frame.startswith("data: ")
    assert frame.endswith("\n\n")
    return json.loads(frame[len("data: "):])["notifications"]


@pytest.mark.anyio
async def test_snapshot_is_bounded_by_the_initial_limit():
    store = FakeStore()
    for seconds in range(15):
        store.add(seconds)
    stream = store.stream(initial_limit=10)

    batch = await stream.snapshot()

    assert len(batch) == 10
    assert stream.watermark == BASE_TIME + timedelta(seconds=14)


@pytest.mark.anyio
async def test_watermark_never_decreases_and_nothing_is_resent():
    store = FakeStore()
    store.add(0)
    stream = store.stream()
    sent = await stream.snapshot()
    seen = {n.id for n in sent}
    batches = [sent]

    for seconds in (5, 3, 9):
        store.add(seconds)
        batch = await stream.poll()
        batches.append(batch)
        assert not seen & {n.id for n in batch}
        seen.update(n.id for n in batch)

    for previous, since in zip(batches, store.since_calls):
        if previous:
            assert since >= max(n.created_at for n in previous)
    assert batches[2] == []
    assert stream.watermark == BASE_TIME + timedelta(seconds=9)


@pytest.mark.anyio
async def test_poll_returns_oldest_first():
    store = FakeStore()
    stream = store.stream()
    await stream.snapshot()
    later = store.add(20)
    earlier = store.add(10)

    batch = await stream.poll()

    assert [n.id for n in batch] == [earlier.id, later.id]


@pytest.mark.anyio
async def test_empty_snapshot_leaves_watermark_unset():
    store = FakeStore()
    stream = store.stream()

    assert await stream.snapshot() == []
    assert stream.watermark is None

    record = store.add(1)
    assert [n.id for n in await stream.poll()] == [record.id]
    assert store.since_calls == [None]


@pytest.mark.anyio
async def test_frames_skip_empty_ticks_and_stop_on_close():
    store = FakeStore()
    first = store.add(0)
    stream = store.stream()
    frames: list[str] = []

    async def consume() -> None:
        async for frame in stream.frames():
            frames.append(frame)

    async with anyio.create_task_group() as tg:
        tg.start_soon(consume)
        with anyio.fail_after(2):
            while len(store.since_calls) < 3:
                await anyio.sleep(0.01)
        assert len(frames) == 1
        second = store.add(1)
        with anyio.fail_after(2):
            while len(frames) < 2:
                await anyio.sleep(0.01)
        stream.close()

    assert [n["id"] for n in _decode(frames[0])] == [first.id]
    assert [n["id"] for n in _decode(frames[1])] == [second.id]
    assert stream.closed


@pytest.mark.anyio
async def test_frames_end_when_the_client_disconnects():
    store = FakeStore()
    stream = store.stream()

    async def disconnected() -> bool:
        return True

    with anyio.fail_after(2):
        frames = [frame async for frame in stream.frames(disconnected)]

    assert frames == [format_sse_frame([])]
    assert store.since_calls == []


@pytest.mark.anyio
async def test_database_stream_applies_current_preferences(make_user, add_notification):
    user = make_user()
    own = add_notification(user_id=user.id, minutes_ago=5)
    stream = open_notification_stream(
        user.id, session_factory=SessionLocal, tick_seconds=0.01
    )

    assert [n.id for n in await stream.snapshot()] == [own.id]

    menu = add_notification(user_id=None, category=NotificationCategory.MENU_UPDATED)
    assert [n.id for n in await stream.poll()] == [menu.id]

    with SessionLocal() as session:
        update_preferences(session, user.id, NotificationPreferences(menu_updates=False))
    add_notification(user_id=None, category=NotificationCategory.MENU_UPDATED)
    assert await stream.poll() == []


@pytest.mark.anyio
async def test_registry_tracks_and_closes_streams():
    store = FakeStore()
    registry = StreamRegistry()
    streams = [store.stream(), store.stream(), store.stream()]
    registry.register(1, streams[0])
    registry.register(1, streams[1])
    registry.register(2, streams[2])

    assert registry.active_count() == 3
    assert registry.active_count(1) == 2

    registry.close_user(1)
    assert streams[0].closed and streams[1].closed
    assert not streams[2].closed

    registry.unregister(1, streams[0])
    registry.unregister(1, streams[1])
    assert registry.active_count(1) == 0

    registry.close_all()
    assert streams[2].closed


def test_frame_format():
    record = Notification(
        id="abc",
        user_id=None,
        category=NotificationCategory.MENU_UPDATED,
        message="New menu posted",
        read=False,
        created_at=BASE_TIME,
    )

    frame = format_sse_frame([record])

    assert _decode(frame) == [
        {
            "id": "abc",
            "user_id": None,
            "category": "menu_updated",
            "message": "New menu posted",
            "read": False,
            "created_at": "2024-03-04T12:00:00+00:00",
        }
    ]
