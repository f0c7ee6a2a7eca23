from __future__ import annotations

import asyncio

import httpx
import pytest

from twitter_api_client.core.async_pagination import AsyncCursorStream
from twitter_api_client.core.cursor_shared import CursorState
from twitter_api_client.core.errors import (
    TwitterDecodeError,
    TwitterProtocolError,
    TwitterServerError,
)
from twitter_api_client.core.models import ItemOrder
from twitter_api_client.core.page_codec import decode_int_id
from tests.shared.payloads import make_ids_payload, page_response, rate_limited_response
from tests.shared.transport import (
    AsyncRecordingSleeper,
    FakeClock,
    SequencedHandler,
    build_config,
    make_async_session,
)

URL = "https://api.twitter.com/1.1/followers/ids.json?user_id=17076641"


def _stream(handler, *, clock=None, sleeper=None, item_order=ItemOrder.FORWARD):
    config = build_config(item_order=item_order, max_attempts=1)
    return AsyncCursorStream(
        make_async_session(handler, config=config),
        URL,
        decode_int_id,
        config=config.pagination,
        clock=clock,
        sleeper=sleeper or AsyncRecordingSleeper(),
    )


class _BlockingSleeper:
    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def __call__(self, seconds: float) -> None:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


class _HangingHandler:
    """Handler whose request never completes until cancelled."""

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        raise AssertionError("unreachable")


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("order", "expected"),
    [(ItemOrder.FORWARD, [1, 2, 3, 4]), (ItemOrder.REVERSE, [3, 2, 1, 4])],
    ids=["forward", "reverse"],
)
async def test_stream_yields_every_item_once_then_terminates(order: ItemOrder, expected: list[int]):
    handler = SequencedHandler(
        [
            page_response([1, 2, 3], next_cursor="123", prev_cursor="0"),
            page_response([4], next_cursor="0", prev_cursor="123"),
        ]
    )
    stream = _stream(handler, item_order=order)

    assert await stream.collect() == expected
    assert handler.cursors() == [None, "123"]
    assert stream.state is CursorState.DONE
    assert stream.next_cursor == "0"
    assert stream.prev_cursor == "123"
    with pytest.raises(StopAsyncIteration):
        await anext(stream)
    assert handler.calls == 2


@pytest.mark.asyncio
async def test_stream_requests_pages_on_demand():
    handler = SequencedHandler(
        [page_response([1], next_cursor="a"), page_response([2], next_cursor="0")]
    )
    stream = _stream(handler)
    assert handler.calls == 0
    assert await anext(stream) == 1
    assert handler.calls == 1
    assert stream.state is CursorState.IDLE
    assert await anext(stream) == 2
    assert handler.calls == 2


@pytest.mark.asyncio
async def test_stream_follows_empty_pages_without_extra_pulls():
    handler = SequencedHandler(
        [
            page_response([], next_cursor="a"),
            page_response([], next_cursor="b"),
            page_response([5], next_cursor="0"),
        ]
    )
    stream = _stream(handler)
    assert await anext(stream) == 5
    assert handler.cursors() == [None, "a", "b"]


@pytest.mark.asyncio
async def test_stream_backs_off_until_reset_then_retries_same_cursor(clock: FakeClock):
    sleeper = AsyncRecordingSleeper(clock)
    reset_at = int(clock.now) + 5
    handler = SequencedHandler(
        [
            rate_limited_response(reset_at),
            httpx.Response(200, json=make_ids_payload([9], next_cursor="0", prev_cursor="0")),
        ],
        clock=clock,
    )
    stream = _stream(handler, clock=clock, sleeper=sleeper)

    assert await stream.collect() == [9]
    assert sleeper.sleeps == [5.0]
    assert handler.cursors() == [None, None]
    assert handler.request_times[0] < reset_at
    assert handler.request_times[1] >= reset_at


@pytest.mark.asyncio
async def test_stream_keeps_waiting_if_woken_before_reset(clock: FakeClock):
    reset_at = int(clock.now) + 10
    sleeps: list[float] = []

    async def early_sleeper(seconds: float) -> None:
        sleeps.append(seconds)
        clock.advance(seconds / 2 if len(sleeps) == 1 else seconds)

    handler = SequencedHandler(
        [rate_limited_response(reset_at), page_response([1], next_cursor="0")],
        clock=clock,
    )
    stream = _stream(handler, clock=clock, sleeper=early_sleeper)

    assert await stream.collect() == [1]
    assert sleeps == [10.0, 5.0]
    assert handler.request_times[1] >= reset_at


@pytest.mark.asyncio
async def test_stream_retries_immediately_for_past_reset(clock: FakeClock):
    sleeper = AsyncRecordingSleeper(clock)
    handler = SequencedHandler(
        [rate_limited_response(int(clock.now) - 1), page_response([2], next_cursor="0")],
        clock=clock,
    )
    assert await _stream(handler, clock=clock, sleeper=sleeper).collect() == [2]
    assert sleeper.sleeps == []


@pytest.mark.asyncio
async def test_stream_rate_limit_on_later_page_keeps_cursor(clock: FakeClock):
    sleeper = AsyncRecordingSleeper(clock)
    handler = SequencedHandler(
        [
            page_response([1], next_cursor="c1"),
            rate_limited_response(int(clock.now) + 60),
            rate_limited_response(int(clock.now) + 90),
            page_response([2], next_cursor="0"),
        ],
        clock=clock,
    )
    stream = _stream(handler, clock=clock, sleeper=sleeper)
    assert await stream.collect() == [1, 2]
    assert handler.cursors() == [None, "c1", "c1", "c1"]
    assert sleeper.sleeps == [60.0, 30.0]


@pytest.mark.asyncio
async def test_stream_delivers_error_once_and_keeps_emitted_items():
    handler = SequencedHandler(
        [
            page_response([1], next_cursor="n"),
            httpx.Response(200, content=b"{not json"),
        ]
    )
    stream = _stream(handler)
    assert await anext(stream) == 1
    with pytest.raises(TwitterDecodeError):
        await anext(stream)
    assert stream.state is CursorState.DONE
    with pytest.raises(StopAsyncIteration):
        await anext(stream)


@pytest.mark.asyncio
async def test_stream_decoder_failure_ends_stream():
    handler = SequencedHandler(
        [
            httpx.Response(200, json={"users": [{"x": 1}], "next_cursor_str": "0"}),
            httpx.Response(200, json={"users": [{"id": 7}], "next_cursor_str": "0"}),
        ]
    )
    config = build_config()
    stream = AsyncCursorStream(
        make_async_session(handler, config=config),
        URL,
        lambda value: value["id"],
        config=config.pagination,
    )
    with pytest.raises(TwitterDecodeError):
        await anext(stream)
    assert stream.state is CursorState.DONE
    assert await stream.collect() == []
    assert handler.calls == 1


@pytest.mark.asyncio
async def test_stream_detects_cursor_loop_after_emitting_page():
    handler = SequencedHandler(
        [page_response([1], next_cursor="same"), page_response([2], next_cursor="same")]
    )
    stream = _stream(handler)
    assert await anext(stream) == 1
    assert await anext(stream) == 2
    with pytest.raises(TwitterProtocolError, match="loop"):
        await anext(stream)
    assert handler.calls == 2
    assert stream.state is CursorState.DONE


@pytest.mark.asyncio
async def test_stream_enforces_max_pages_after_emitting_last_page():
    handler = SequencedHandler(
        [page_response([1], next_cursor="a"), page_response([2], next_cursor="b")]
    )
    config = build_config(max_pages=2)
    stream = AsyncCursorStream(
        make_async_session(handler, config=config),
        URL,
        decode_int_id,
        config=config.pagination,
    )
    emitted = []
    with pytest.raises(TwitterProtocolError, match="max_pages"):
        async for item in stream:
            emitted.append(item)
    assert emitted == [1, 2]
    assert handler.calls == 2


@pytest.mark.asyncio
async def test_stream_surfaces_server_error_as_terminal():
    handler = SequencedHandler([httpx.Response(503)])
    stream = _stream(handler)
    with pytest.raises(TwitterServerError):
        await anext(stream)
    assert await stream.collect() == []


@pytest.mark.asyncio
async def test_aclose_cancels_in_flight_request():
    handler = _HangingHandler()
    stream = _stream(handler)

    pull = asyncio.create_task(anext(stream))
    await handler.started.wait()
    assert stream.state is CursorState.AWAITING_PAGE
    assert stream.has_pending

    await stream.aclose()

    with pytest.raises(StopAsyncIteration):
        await pull
    assert handler.cancelled is True
    assert stream.state is CursorState.DONE
    assert stream.has_pending is False


@pytest.mark.asyncio
async def test_aclose_cancels_backoff_timer(clock: FakeClock):
    sleeper = _BlockingSleeper()
    handler = SequencedHandler([rate_limited_response(int(clock.now) + 900)], clock=clock)
    stream = _stream(handler, clock=clock, sleeper=sleeper)

    pull = asyncio.create_task(anext(stream))
    await sleeper.started.wait()
    assert stream.state is CursorState.BACKOFF

    await stream.aclose()

    with pytest.raises(StopAsyncIteration):
        await pull
    assert sleeper.cancelled is True
    assert handler.calls == 1


@pytest.mark.asyncio
async def test_cancelling_consumer_task_cancels_request_and_finishes_stream():
    handler = _HangingHandler()
    stream = _stream(handler)

    pull = asyncio.create_task(anext(stream))
    await handler.started.wait()
    pull.cancel()

    with pytest.raises(asyncio.CancelledError):
        await pull
    assert handler.cancelled is True
    assert stream.state is CursorState.DONE
    with pytest.raises(StopAsyncIteration):
        await anext(stream)


@pytest.mark.asyncio
async def test_concurrent_pulls_on_one_stream_are_rejected():
    handler = _HangingHandler()
    stream = _stream(handler)

    pull = asyncio.create_task(anext(stream))
    await handler.started.wait()

    with pytest.raises(RuntimeError, match="already awaiting"):
        await anext(stream)

    await stream.aclose()
    with pytest.raises(StopAsyncIteration):
        await pull


@pytest.mark.asyncio
async def test_independent_streams_share_session_concurrently():
    def handler(request: httpx.Request) -> httpx.Response:
        cursor = request.url.params.get("cursor")
        user_id = int(request.url.params["user_id"])
        if cursor is None:
            return page_response([user_id * 10, user_id * 10 + 1], next_cursor=f"{user_id}-2")
        return page_response([user_id * 10 + 2], next_cursor="0")

    config = build_config()
    session = make_async_session(handler, config=config)
    streams = [
        AsyncCursorStream(
            session,
            f"https://api.twitter.com/1.1/followers/ids.json?user_id={user_id}",
            decode_int_id,
            config=config.pagination,
        )
        for user_id in (1, 2)
    ]

    results = await asyncio.gather(*(stream.collect() for stream in streams))

    assert results == [[10, 11, 12], [20, 21, 22]]


@pytest.mark.asyncio
async def test_stream_context_manager_closes_stream():
    handler = SequencedHandler([page_response([1, 2], next_cursor="x")])
    async with _stream(handler) as stream:
        assert await anext(stream) == 1
    assert stream.state is CursorState.DONE
    assert await stream.collect() == []
    assert handler.calls == 1
