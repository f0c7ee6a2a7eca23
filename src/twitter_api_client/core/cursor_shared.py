"""Cursor bookkeeping shared by the sync and async cursor streams."""

from __future__ import annotations

from collections import deque
from enum import Enum
from typing import Generic, TypeVar

from .errors import TwitterProtocolError
from .models import ItemOrder, Page

T = TypeVar("T")

TERMINAL_CURSOR = "0"


class CursorState(str, Enum):
    IDLE = "idle"
    AWAITING_PAGE = "awaiting_page"
    BACKOFF = "backoff"
    DONE = "done"


class CursorProgress(Generic[T]):
    """Buffered items and cursor position of one stream.

    ``next_cursor`` is ``None`` until the first page arrives. The buffer only
    ever holds the items of the most recent page.
    """

    def __init__(self, *, item_order: ItemOrder, max_pages: int) -> None:
        self.next_cursor: str | None = None
        self.prev_cursor: str | None = None
        self.pages_fetched = 0
        self._item_order = item_order
        self._max_pages = max_pages
        self._buffer: deque[T] = deque()
        self._seen_cursors: set[str] = set()
        self._violation: TwitterProtocolError | None = None

    @property
    def has_items(self) -> bool:
        return bool(self._buffer)

    @property
    def exhausted(self) -> bool:
        return self.next_cursor == TERMINAL_CURSOR

    def pop_item(self) -> T:
        if self._item_order is ItemOrder.REVERSE:
            return self._buffer.pop()
        return self._buffer.popleft()

    def accept_page(self, page: Page[T]) -> None:
        """Buffer ``page`` and advance the cursors.

        A repeated cursor or a page count at ``max_pages`` does not reject the
        page; it blocks the next fetch through :meth:`ensure_can_fetch`.
        """
        next_cursor = page.next_cursor
        self.pages_fetched += 1
        if next_cursor != TERMINAL_CURSOR:
            if next_cursor in self._seen_cursors:
                self._violation = TwitterProtocolError(f"cursor loop detected at {next_cursor!r}")
            elif self.pages_fetched >= self._max_pages:
                self._violation = TwitterProtocolError("Exceeded pagination guardrail (max_pages)")
            self._seen_cursors.add(next_cursor)

        self._buffer = deque(page.items)
        self.next_cursor = next_cursor
        self.prev_cursor = page.prev_cursor

    def ensure_can_fetch(self) -> None:
        if self._violation is not None:
            raise self._violation

    def discard(self) -> None:
        self._buffer.clear()


__all__ = [
    "TERMINAL_CURSOR",
    "CursorState",
    "CursorProgress",
]
