"""Error types and status mapping."""

from __future__ import annotations

from collections.abc import Mapping


def _to_int(value: object) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
    return None


def _first_error(payload: Mapping[str, object] | None) -> Mapping[str, object] | None:
    if not isinstance(payload, Mapping):
        return None
    errors = payload.get("errors")
    if not isinstance(errors, list) or not errors:
        return None
    first = errors[0]
    return first if isinstance(first, Mapping) else None


def extract_error_message(payload: Mapping[str, object] | None) -> str | None:
    entry = _first_error(payload)
    if entry is None:
        return None
    value = entry.get("message")
    return str(value) if value is not None else None


def extract_error_code(payload: Mapping[str, object] | None) -> int | None:
    entry = _first_error(payload)
    if entry is None:
        return None
    return _to_int(entry.get("code"))


class TwitterApiError(Exception):
    """Base exception for this package."""

    def __init__(
        self,
        message: str,
        *,
        http_status: int | None = None,
        api_code: int | None = None,
        cause: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.http_status = http_status
        self.api_code = api_code
        self.cause = cause


class TwitterTransportError(TwitterApiError):
    """Network/transport-level failure."""


class TwitterClientClosedError(TwitterApiError):
    """Raised when client is used after close."""


class TwitterValidationError(TwitterApiError):
    """Invalid configuration or query."""


class TwitterAuthError(TwitterApiError):
    """Credentials or bearer token rejected by the service."""


class TwitterProtocolError(TwitterApiError):
    """Response shape violates the client/server contract."""


class TwitterDecodeError(TwitterProtocolError):
    """Page body could not be decoded into the expected items."""


class TwitterHttpError(TwitterApiError):
    """Unexpected non-success HTTP status."""


class TwitterServerError(TwitterHttpError):
    """Server-side failure (5xx)."""


def classify_http_error(
    payload: Mapping[str, object] | None,
    *,
    http_status: int,
) -> TwitterApiError | None:
    """Map a list-endpoint HTTP status to a domain exception."""

    if 200 <= http_status < 300:
        return None

    message = extract_error_message(payload) or f"request failed with HTTP {http_status}"
    api_code = extract_error_code(payload)

    if http_status == 401:
        return TwitterAuthError(message, http_status=http_status, api_code=api_code)
    if http_status >= 500:
        return TwitterServerError(
            message,
            http_status=http_status,
            api_code=api_code,
            cause="server_transient",
        )
    return TwitterHttpError(message, http_status=http_status, api_code=api_code)


__all__ = [
    "TwitterApiError",
    "TwitterTransportError",
    "TwitterClientClosedError",
    "TwitterValidationError",
    "TwitterAuthError",
    "TwitterProtocolError",
    "TwitterDecodeError",
    "TwitterHttpError",
    "TwitterServerError",
    "extract_error_message",
    "extract_error_code",
    "classify_http_error",
]
