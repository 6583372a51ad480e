"""Tests for the stream-first notification sync client."""

from __future__ import annotations

import json

import anyio
import httpx
import pytest

from lunchbell.interfaces.client import NotificationSyncClient


def _item(id_: str, minute: int) -> dict:
    return {
        "id": id_,
        "user_id": 1,
        "category": "order_confirmed",
        "message": id_,
        "read": False,
        "created_at": f"2024-03-04T12:{minute:02d}:00+00:00",
    }


def _frame(*items: dict) -> str:
    return f"data: {json.dumps({'notifications': list(items)})}\n\n"


def _http_client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://test")


@pytest.mark.anyio
async def test_stream_frames_are_merged_then_polling_takes_over():
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.path == "/notifications/stream":
            body = _frame(_item("a", 1)) + ": keep-alive\n\n" + _frame(_item("b", 2), _item("a", 1))
            return httpx.Response(
                200, headers={"content-type": "text/event-stream"}, content=body.encode()
            )
        return httpx.Response(200, json={"notifications": [_item("c", 3)]})

    snapshots: list[list[str]] = []

    async with _http_client(handler) as http:
        sync = NotificationSyncClient(http, "token-1", poll_interval=0.01)

        def on_update(feed):
            snapshots.append(feed.ids)
            if sync.mode == "poll":
                sync.stop()

        sync.on_update = on_update
        with anyio.fail_after(2):
            await sync.run()

    assert snapshots == [["a"], ["b", "a"], ["c"]]
    assert sync.mode == "stopped"
    assert requests[0].headers["Authorization"] == "Bearer token-1"
    assert requests[1].url.path == "/notifications/"
    assert requests[1].url.params["limit"] == "20"


@pytest.mark.anyio
async def test_failed_stream_falls_back_to_polling(caplog):
    polls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal polls
        if request.url.path == "/notifications/stream":
            return httpx.Response(401, json={"detail": "Unauthorized"})
        polls += 1
        return httpx.Response(200, json={"notifications": [_item(f"p{polls}", polls)]})

    async with _http_client(handler) as http:
        sync = NotificationSyncClient(http, "token", poll_interval=0.01)

        def on_update(feed):
            if polls >= 3:
                sync.stop()

        sync.on_update = on_update
        with caplog.at_level("WARNING"), anyio.fail_after(2):
            await sync.run()

    assert polls == 3
    assert sync.feed.ids == ["p3"]
    assert "falling back to polling" in caplog.text


@pytest.mark.anyio
async def test_polling_errors_do_not_stop_the_loop():
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        if request.url.path == "/notifications/stream":
            return httpx.Response(503)
        calls += 1
        if calls == 1:
            return httpx.Response(500)
        return httpx.Response(200, json={"notifications": [_item("ok", 1)]})

    async with _http_client(handler) as http:
        sync = NotificationSyncClient(http, "token", poll_interval=0.01)
        sync.on_update = lambda feed: sync.stop()
        with anyio.fail_after(2):
            await sync.run()

    assert calls == 2
    assert sync.feed.ids == ["ok"]


@pytest.mark.anyio
async def test_stop_before_run_makes_no_requests():
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    async with _http_client(handler) as http:
        sync = NotificationSyncClient(http, "token")
        sync.stop()
        with anyio.fail_after(1):
            await sync.run()

    assert sync.mode == "stopped"
    assert len(sync.feed) == 0
