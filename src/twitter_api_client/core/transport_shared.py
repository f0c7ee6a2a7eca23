"""Shared helpers for sync/async transport implementations."""

from __future__ import annotations

import random
from collections.abc import Mapping

import httpx

from ..config import TwitterClientConfig
from .errors import TwitterProtocolError
from .retry import can_retry, next_backoff_seconds

RATE_LIMIT_RESET_HEADER = "x-rate-limit-reset"
TOKEN_CONTENT_TYPE = "application/x-www-form-urlencoded; charset=utf-8"
TOKEN_REQUEST_BODY = b"grant_type=client_credentials"


def build_default_headers(config: TwitterClientConfig) -> Mapping[str, str]:
    return {
        "Accept-Encoding": "gzip",
        "User-Agent": config.user_agent,
    }


def build_default_timeout(config: TwitterClientConfig) -> httpx.Timeout:
    return httpx.Timeout(
        connect=config.transport.timeout_connect_seconds,
        read=config.transport.timeout_read_seconds,
        write=config.transport.timeout_write_seconds,
        pool=config.transport.timeout_pool_seconds,
    )


def build_bearer_headers(bearer_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {bearer_token}"}


def build_token_headers() -> dict[str, str]:
    return {"Content-Type": TOKEN_CONTENT_TYPE}


def build_page_url(url: httpx.URL | str, cursor: str | None) -> httpx.URL:
    """Clone ``url`` and append the cursor query parameter when one is given."""

    page_url = httpx.URL(url)
    if cursor is None:
        return page_url
    return page_url.copy_add_param("cursor", cursor)


def parse_rate_limit_reset(headers: Mapping[str, str]) -> int:
    raw = headers.get(RATE_LIMIT_RESET_HEADER)
    if raw is None:
        raise TwitterProtocolError(
            f"429 response is missing the {RATE_LIMIT_RESET_HEADER} header",
            http_status=429,
        )
    text = raw.strip()
    if not (text.isascii() and text.isdigit()):
        raise TwitterProtocolError(
            f"{RATE_LIMIT_RESET_HEADER} header is not an integer: {raw!r}",
            http_status=429,
        )
    return int(text)


def should_retry_attempt(
    *,
    config: TwitterClientConfig,
    attempt: int,
    started_at: float,
    now: float,
) -> bool:
    return can_retry(
        attempt=attempt,
        max_attempts=config.retry.max_attempts,
        started_at=started_at,
        now=now,
        total_budget_seconds=config.retry.total_retry_budget_seconds,
    )


def compute_backoff_seconds(
    *,
    config: TwitterClientConfig,
    attempt: int,
    rng: random.Random,
) -> float:
    return next_backoff_seconds(
        attempt_index=attempt - 1,
        max_backoff_seconds=config.retry.max_backoff_seconds,
        rng=rng,
    )


__all__ = [
    "RATE_LIMIT_RESET_HEADER",
    "TOKEN_CONTENT_TYPE",
    "TOKEN_REQUEST_BODY",
    "build_default_headers",
    "build_default_timeout",
    "build_bearer_headers",
    "build_token_headers",
    "build_page_url",
    "parse_rate_limit_reset",
    "should_retry_attempt",
    "compute_backoff_seconds",
]
