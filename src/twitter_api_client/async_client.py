"""Public async client entrypoint."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from types import TracebackType
from typing import Any

from .client_shared import build_resource_url, validate_client_config
from .config import TwitterClientConfig
from .core.async_auth import aauthenticate
from .core.async_pagination import AsyncCursorStream
from .core.async_transport import AsyncTransport
from .core.errors import TwitterAuthError, TwitterClientClosedError
from .core.models import Credentials
from .core.page_codec import ItemDecoder, decode_int_id
from .core.session import AsyncSession
from .social_graph.async_service import AsyncSocialGraphService


class AsyncTwitterClient:
    """Public async Twitter API client."""

    def __init__(
        self,
        *,
        config: TwitterClientConfig | None = None,
        transport: AsyncTransport | None = None,
        session: AsyncSession | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
    ) -> None:
        self._config = config or TwitterClientConfig()
        validate_client_config(self._config)

        if transport is None and session is not None:
            transport = session.transport
        self._transport = transport or AsyncTransport(self._config)
        self._session = session
        self._clock = clock
        self._sleep = sleeper
        self._closed = False
        self.social_graph = AsyncSocialGraphService(self._open_cursor)

    @classmethod
    async def authenticate(
        cls,
        credentials: Credentials,
        *,
        config: TwitterClientConfig | None = None,
        transport: AsyncTransport | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], Awaitable[None]] | None = None,
    ) -> "AsyncTwitterClient":
        client = cls(config=config, transport=transport, clock=clock, sleeper=sleeper)
        try:
            await client.refresh_session(credentials)
        except Exception:
            await client.close()
            raise
        return client

    @property
    def session(self) -> AsyncSession:
        self._ensure_open()
        if self._session is None:
            raise TwitterAuthError("client is not authenticated")
        return self._session

    async def refresh_session(self, credentials: Credentials) -> AsyncSession:
        self._ensure_open()
        self._session = await aauthenticate(self._transport, credentials)
        return self._session

    def cursor(
        self,
        resource_path: str,
        *,
        params: Mapping[str, str] | None = None,
        item_decoder: ItemDecoder[Any] = decode_int_id,
    ) -> AsyncCursorStream[Any]:
        url = build_resource_url(self._config, resource_path, params)
        return AsyncCursorStream(
            self.session,
            url,
            item_decoder,
            config=self._config.pagination,
            clock=self._clock,
            sleeper=self._sleep,
            guard=self._ensure_open,
        )

    def _open_cursor(
        self,
        resource_path: str,
        params: Mapping[str, str],
        item_decoder: ItemDecoder[Any],
    ) -> AsyncCursorStream[Any]:
        return self.cursor(resource_path, params=params, item_decoder=item_decoder)

    def _ensure_open(self) -> None:
        if self._closed:
            raise TwitterClientClosedError("AsyncTwitterClient is already closed")

    async def close(self) -> None:
        if self._closed:
            return
        await self._transport.close()
        self._closed = True

    async def __aenter__(self) -> "AsyncTwitterClient":
        self._ensure_open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        await self.close()
        return False


__all__ = [
    "AsyncTwitterClient",
]
