"""Sync HTTP transport: token exchange and single-page fetches."""

from __future__ import annotations

import logging
import random
import time
from collections.abc import Callable, Mapping
from typing import Protocol

import httpx

from ..config import TwitterClientConfig
from .errors import TwitterTransportError, classify_http_error
from .models import Credentials, PageRateLimited, PageResult, PageSuccess
from .response_parsing import parse_error_payload
from .retry import is_retryable_http_status
from .transport_shared import (
    TOKEN_REQUEST_BODY,
    build_bearer_headers,
    build_default_headers,
    build_default_timeout,
    build_page_url,
    build_token_headers,
    compute_backoff_seconds,
    parse_rate_limit_reset,
    should_retry_attempt,
)

logger = logging.getLogger("twitter_api_client")


class SyncTransportClient(Protocol):
    def build_request(self, method: str, url: httpx.URL, *, headers: Mapping[str, str]) -> httpx.Request: ...
    def send(self, request: httpx.Request, *, stream: bool = False) -> httpx.Response: ...
    def post(self, url: str, **kwargs: object) -> httpx.Response: ...
    def close(self) -> None: ...


class SyncTransport:
    """Blocking transport for the Twitter API."""

    def __init__(
        self,
        config: TwitterClientConfig,
        *,
        client: SyncTransportClient | None = None,
        sleeper: Callable[[float], None] | None = None,
        clock: Callable[[], float] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config
        self._sleep = sleeper or time.sleep
        self._clock = clock or time.monotonic
        self._rng = rng or random.Random()
        self._closed = False

        self._owns_client = client is None
        self._client = client or httpx.Client(
            headers=build_default_headers(config),
            timeout=build_default_timeout(config),
        )

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_client:
            self._client.close()

    def request_token(self, credentials: Credentials) -> tuple[int, bytes]:
        """POST the client-credentials grant; returns ``(http_status, body)``."""

        self._ensure_open()
        token_url = self._config.token_url
        logger.debug("token request start url=%s", token_url)
        try:
            response = self._client.post(
                token_url,
                content=TOKEN_REQUEST_BODY,
                headers=build_token_headers(),
                auth=httpx.BasicAuth(credentials.key, credentials.secret),
            )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as exc:
            raise TwitterTransportError("invalid token URL", cause="uri") from exc
        except httpx.HTTPError as exc:
            logger.error("token request network error error=%s", exc.__class__.__name__)
            raise TwitterTransportError("network/transport error", cause="network") from exc
        logger.debug("token response received http_status=%s", response.status_code)
        return response.status_code, response.content

    def fetch_page(
        self,
        url: httpx.URL | str,
        *,
        cursor: str | None,
        bearer_token: str,
    ) -> PageResult:
        self._ensure_open()
        try:
            request = self._client.build_request(
                "GET",
                build_page_url(url, cursor),
                headers=build_bearer_headers(bearer_token),
            )
        except httpx.InvalidURL as exc:
            raise TwitterTransportError("invalid page URL", cause="uri") from exc

        started_at = self._clock()
        attempt = 0
        while True:
            attempt += 1
            logger.debug("page request start url=%s cursor=%s attempt=%s", url, cursor, attempt)
            try:
                http_status, headers, body = self._send(request)
            except httpx.UnsupportedProtocol as exc:
                raise TwitterTransportError("unsupported URL scheme", cause="uri") from exc
            except httpx.HTTPError as exc:
                if should_retry_attempt(
                    config=self._config,
                    attempt=attempt,
                    started_at=started_at,
                    now=self._clock(),
                ):
                    logger.warning(
                        "page request network error; retrying url=%s attempt=%s error=%s",
                        url,
                        attempt,
                        exc.__class__.__name__,
                    )
                    self._sleep(self._backoff(attempt))
                    continue
                logger.error(
                    "page request network error; giving up url=%s attempt=%s error=%s",
                    url,
                    attempt,
                    exc.__class__.__name__,
                )
                raise TwitterTransportError("network/transport error", cause="network") from exc

            logger.debug(
                "page response received url=%s attempt=%s http_status=%s",
                url,
                attempt,
                http_status,
            )
            if body is None:
                return PageRateLimited(reset_at=parse_rate_limit_reset(headers))
            if 200 <= http_status < 300:
                return PageSuccess(body=body)

            mapped_error = classify_http_error(parse_error_payload(body), http_status=http_status)
            if is_retryable_http_status(http_status) and should_retry_attempt(
                config=self._config,
                attempt=attempt,
                started_at=started_at,
                now=self._clock(),
            ):
                logger.warning(
                    "page request transient failure; retrying url=%s attempt=%s http_status=%s",
                    url,
                    attempt,
                    http_status,
                )
                self._sleep(self._backoff(attempt))
                continue

            logger.error(
                "page request failed url=%s attempt=%s http_status=%s",
                url,
                attempt,
                http_status,
            )
            raise mapped_error

    def _send(self, request: httpx.Request) -> tuple[int, httpx.Headers, bytes | None]:
        # The body of a 429 response is left unread.
        response = self._client.send(request, stream=True)
        try:
            if response.status_code == 429:
                return response.status_code, response.headers, None
            return response.status_code, response.headers, response.read()
        finally:
            response.close()

    def _backoff(self, attempt: int) -> float:
        return compute_backoff_seconds(config=self._config, attempt=attempt, rng=self._rng)

    def _ensure_open(self) -> None:
        if self._closed:
            raise TwitterTransportError("transport is already closed")


__all__ = [
    "SyncTransport",
]
