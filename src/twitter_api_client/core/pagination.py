"""Blocking cursor iteration over paginated list endpoints."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from types import TracebackType
from typing import Generic, TypeVar

import httpx

from ..config import PaginationConfig
from .cursor_shared import CursorProgress, CursorState
from .errors import TwitterApiError
from .models import Page, PageSuccess
from .page_codec import ItemDecoder, decode_page
from .retry import rate_limit_wait_seconds
from .session import Session

logger = logging.getLogger("twitter_api_client")

T = TypeVar("T")


class CursorIterator(Generic[T]):
    """Iterator yielding the items of every page behind a cursored URL.

    Pages are requested lazily, one at a time. A 429 response blocks until the
    advertised reset time and then re-requests the same cursor.
    """

    def __init__(
        self,
        session: Session,
        url: httpx.URL | str,
        item_decoder: ItemDecoder[T],
        *,
        config: PaginationConfig | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
        guard: Callable[[], None] | None = None,
    ) -> None:
        config = config or PaginationConfig()
        self._session = session
        self._url = httpx.URL(url)
        self._item_decoder = item_decoder
        self._clock = clock or time.time
        self._sleep = sleeper or time.sleep
        self._guard = guard
        self._progress: CursorProgress[T] = CursorProgress(
            item_order=config.item_order,
            max_pages=config.max_pages,
        )
        self._state = CursorState.IDLE

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

    def __iter__(self) -> "CursorIterator[T]":
        return self

    def __next__(self) -> T:
        if self._guard is not None and self._state is not CursorState.DONE:
            self._guard()
        while True:
            if self._state is CursorState.DONE:
                raise StopIteration
            if self._progress.has_items:
                return self._progress.pop_item()
            if self._progress.exhausted:
                self._finish()
                raise StopIteration
            try:
                self._progress.ensure_can_fetch()
                page = self._fetch_next_page()
                self._progress.accept_page(page)
            except TwitterApiError:
                self._finish()
                raise
            self._state = CursorState.IDLE

    def collect(self) -> list[T]:
        return list(self)

    def close(self) -> None:
        if self._state is not CursorState.DONE:
            logger.debug("cursor closed url=%s state=%s", self._url, self._state.value)
        self._finish()

    def __enter__(self) -> "CursorIterator[T]":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close()
        return False

    def _fetch_next_page(self) -> Page[T]:
        cursor = self._progress.next_cursor
        while True:
            self._state = CursorState.AWAITING_PAGE
            result = self._session.transport.fetch_page(
                self._url,
                cursor=cursor,
                bearer_token=self._session.bearer_token,
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
                self._state = CursorState.BACKOFF
                self._sleep(wait)
                wait = rate_limit_wait_seconds(result.reset_at, self._clock())

    def _finish(self) -> None:
        self._progress.discard()
        self._state = CursorState.DONE


__all__ = [
    "CursorIterator",
]
