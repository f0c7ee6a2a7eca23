"""Public client entrypoint."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from types import TracebackType
from typing import Any

from .client_shared import build_resource_url, validate_client_config
from .config import TwitterClientConfig
from .core.auth import authenticate
from .core.errors import TwitterAuthError, TwitterClientClosedError
from .core.models import Credentials
from .core.page_codec import ItemDecoder, decode_int_id
from .core.pagination import CursorIterator
from .core.session import Session
from .core.transport import SyncTransport
from .social_graph.service import SocialGraphService


class TwitterClient:
    """Public Twitter API client."""

    def __init__(
        self,
        *,
        config: TwitterClientConfig | None = None,
        transport: SyncTransport | None = None,
        session: Session | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> None:
        self._config = config or TwitterClientConfig()
        validate_client_config(self._config)

        if transport is None and session is not None:
            transport = session.transport
        self._transport = transport or SyncTransport(self._config)
        self._session = session
        self._clock = clock
        self._sleep = sleeper
        self._closed = False
        self.social_graph = SocialGraphService(self._open_cursor)

    @classmethod
    def authenticate(
        cls,
        credentials: Credentials,
        *,
        config: TwitterClientConfig | None = None,
        transport: SyncTransport | None = None,
        clock: Callable[[], float] | None = None,
        sleeper: Callable[[float], None] | None = None,
    ) -> "TwitterClient":
        """Build a client and run the client-credentials exchange."""

        client = cls(config=config, transport=transport, clock=clock, sleeper=sleeper)
        try:
            client.refresh_session(credentials)
        except Exception:
            client.close()
            raise
        return client

    @property
    def session(self) -> Session:
        self._ensure_open()
        if self._session is None:
            raise TwitterAuthError("client is not authenticated")
        return self._session

    def refresh_session(self, credentials: Credentials) -> Session:
        """Authenticate again and replace the session used for new cursors."""

        self._ensure_open()
        self._session = authenticate(self._transport, credentials)
        return self._session

    def cursor(
        self,
        resource_path: str,
        *,
        params: Mapping[str, str] | None = None,
        item_decoder: ItemDecoder[Any] = decode_int_id,
    ) -> CursorIterator[Any]:
        url = build_resource_url(self._config, resource_path, params)
        return CursorIterator(
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
    ) -> CursorIterator[Any]:
        return self.cursor(resource_path, params=params, item_decoder=item_decoder)

    def _ensure_open(self) -> None:
        if self._closed:
            raise TwitterClientClosedError("TwitterClient is already closed")

    def close(self) -> None:
        if self._closed:
            return
        self._transport.close()
        self._closed = True

    def __enter__(self) -> "TwitterClient":
        self._ensure_open()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> bool:
        self.close()
        return False


__all__ = [
    "TwitterClient",
]
