"""Core value models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ItemOrder(str, Enum):
    """Order in which a stream emits the items of one page."""

    FORWARD = "forward"
    REVERSE = "reverse"


@dataclass(slots=True, frozen=True)
class Credentials:
    key: str
    secret: str = field(repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.key, str) or not isinstance(self.secret, str):
            raise TypeError("key and secret must be str")


@dataclass(slots=True, frozen=True)
class Page(Generic[T]):
    items: tuple[T, ...] = ()
    next_cursor: str = ""
    prev_cursor: str = ""


@dataclass(slots=True, frozen=True)
class PageSuccess:
    body: bytes = field(repr=False)


@dataclass(slots=True, frozen=True)
class PageRateLimited:
    reset_at: int


PageResult = PageSuccess | PageRateLimited


__all__ = [
    "ItemOrder",
    "Credentials",
    "Page",
    "PageSuccess",
    "PageRateLimited",
    "PageResult",
]
