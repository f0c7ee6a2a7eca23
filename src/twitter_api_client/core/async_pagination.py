"""Async cursor stream over paginated list endpoints.

The stream is a small state machine driven by the consumer's pulls:

* ``IDLE`` with buffered items emits one item per pull.
* ``IDLE`` with an empty buffer either finishes (terminal cursor ``"0"``) or
  requests the page behind ``next_cursor`` and moves to ``AWAITING_PAGE``.
* A 429 answer moves to ``BACKOFF`` until the advertised reset time, then the
  same cursor is requested again.
* Errors, exhaustion and :meth:`AsyncCursorStream.aclose` end in ``DONE``.

The in-flight request or backoff timer runs as a pending task owned by the
stream, so closing the stream from anywhere cancels it.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from types import TracebackType
from typing import Generic, TypeVar

import httpx

from ..config import PaginationConfig
from .cursor_shared import CursorProgress, CursorState
from .errors import TwitterApiError
from .models import Page, PageSuccess
from .page_codec import ItemDecoder, decode_page
from .retry import rate_limit_wait_seconds
from .session import AsyncSession

logger = logging.getLogger("twitter_api_client")

T = TypeVar("T")
R = TypeVar("R")


class AsyncCursorStream(Generic[T]):
    """Async iterator yielding the items of every page behind a cursored URL."""

    def __init__(
        self,
        session: AsyncSession,
        url: httpx.URL | str,
        item_decoder: ItemDecoder[T],
        *,
        config: PaginationConfig | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
        guard: Callable[[], None] | None = None,
    ) -> None:
        config = config or PaginationConfig()
        self._session = session
        self._url = httpx.URL(url)
        self._item_decoder = item_decoder
        self._clock = clock or time.time
        self._sleep = sleeper or asyncio.sleep
        self._guard = guard
        self._progress: CursorProgress[T] = CursorProgress(
            item_order=config.item_order,
            max_pages=config.max_pages,
        )
        self._state = CursorState.IDLE
        self._pending: asyncio.Future | None = None
        self._pulling = False
        self._closed_by_consumer = False

    @property
    def state(self) -> CursorState:
        return self._state

    @property
    def url(self) -> httpx.URL:
        return self._url

    @property
    def next_cursor(self) -> str | None:
        return self._progress.next_cursor

    @property
    def prev_cursor(self) -> str | None:
        return self._progress.prev_cursor

    @property
    def pages_fetched(self) -> int:
        return self._progress.pages_fetched

    @property
    def has_pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    def __aiter__(self) -> "AsyncCursorStream[T]":
        return self

    async def __anext__(self) -> T:
        if self._pulling:
            raise RuntimeError("anext(): cursor stream is already awaiting the next item")
        if self._guard is not None and self._state is not CursorState.DONE:
            self._guard()
        self._pulling = True
        try:
            return await self._advance()
        finally:
            self._pulling = False

    async def collect(self) -> list[T]:
        return [item async for item in self]

    async def aclose(self) -> None:
        if self._state is not CursorState.DONE:
            logger.debug("cursor closed url=%s state=%s", self._url, self._state.value)
        self._closed_by_consumer = True
        pending = self._pending
        if pending is not None and not pending.done():
            pending.cancel()
        self._finish()

    async def __aenter__(self) -> "AsyncCursorStream[T]":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.aclose()
        return False

    async def _advance(self) -> T:
        while True:
            if self._state is CursorState.DONE:
                raise StopAsyncIteration
            if self._progress.has_items:
                return self._progress.pop_item()
            if self._progress.exhausted:
                self._finish()
                raise StopAsyncIteration
            try:
                self._progress.ensure_can_fetch()
                page = await self._fetch_next_page()
                self._progress.accept_page(page)
            except TwitterApiError:
                self._finish()
                raise
            except asyncio.CancelledError:
                self._finish()
                task = asyncio.current_task()
                # aclose() from another task cancels only the pending work.
                if self._closed_by_consumer and task is not None and task.cancelling() == 0:
                    raise StopAsyncIteration from None
                raise
            self._state = CursorState.IDLE

    async def _fetch_next_page(self) -> Page[T]:
        cursor = self._progress.next_cursor
        while True:
            result = await self._run_pending(
                self._session.transport.fetch_page(
                    self._url,
                    cursor=cursor,
                    bearer_token=self._session.bearer_token,
                ),
                CursorState.AWAITING_PAGE,
            )
            if isinstance(result, PageSuccess):
                page = decode_page(result.body, self._item_decoder)
                logger.info(
                    "page received url=%s cursor=%s items=%s next_cursor=%s",
                    self._url,
                    cursor,
                    len(page.items),
                    page.next_cursor,
                )
                return page

            wait = rate_limit_wait_seconds(result.reset_at, self._clock())
            logger.warning(
                "rate limited url=%s cursor=%s reset_at=%s wait_seconds=%.3f",
                self._url,
                cursor,
                result.reset_at,
                wait,
            )
            while wait > 0:
                await self._run_pending(self._sleep(wait), CursorState.BACKOFF)
                wait = rate_limit_wait_seconds(result.reset_at, self._clock())

    async def _run_pending(self, work: Awaitable[R], state: CursorState) -> R:
        self._state = state
        self._pending = asyncio.ensure_future(work)
        try:
            return await self._pending
        finally:
            self._pending = None

    def _finish(self) -> None:
        self._progress.discard()
        self._state = CursorState.DONE


__all__ = [
    "AsyncCursorStream",
]
