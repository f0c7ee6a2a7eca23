"""Authenticated sessions shared by cursor streams."""

from __future__ import annotations

from dataclasses import dataclass, field

from .async_transport import AsyncTransport
from .transport import SyncTransport


@dataclass(slots=True, frozen=True)
class Session:
    """Bearer token plus the transport it was obtained through.

    Read-only once built. Re-authenticating produces a new session; streams
    that already borrowed the old one keep using it.
    """

    bearer_token: str = field(repr=False)
    transport: SyncTransport


@dataclass(slots=True, frozen=True)
class AsyncSession:
    """Async counterpart of :class:`Session`."""

    bearer_token: str = field(repr=False)
    transport: AsyncTransport


__all__ = [
    "Session",
    "AsyncSession",
]
