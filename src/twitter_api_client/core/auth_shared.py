"""Token response handling shared by sync/async authentication."""

from __future__ import annotations

from collections.abc import Mapping

from .errors import TwitterAuthError, TwitterProtocolError, extract_error_code
from .response_parsing import parse_json_object


def parse_token_response(body: bytes, *, http_status: int) -> str:
    """Return the bearer token, or raise the error the token endpoint reported."""

    payload = parse_json_object(body, http_status=http_status)
    if http_status == 200:
        return _extract_bearer_token(payload)

    errors = payload.get("errors")
    if not isinstance(errors, list):
        raise TwitterProtocolError(
            "token error response has no errors array",
            http_status=http_status,
        )
    if len(errors) != 1:
        raise TwitterProtocolError(
            f"token error response must contain exactly one error, got {len(errors)}",
            http_status=http_status,
        )
    entry = errors[0]
    message = entry.get("message") if isinstance(entry, Mapping) else None
    if not isinstance(message, str):
        raise TwitterProtocolError(
            "token error entry has no message",
            http_status=http_status,
        )
    raise TwitterAuthError(
        message,
        http_status=http_status,
        api_code=extract_error_code(payload),
    )


def _extract_bearer_token(payload: Mapping[str, object]) -> str:
    token_type = payload.get("token_type")
    if token_type != "bearer":
        raise TwitterProtocolError(
            f"unexpected token_type {token_type!r}",
            http_status=200,
        )
    token = payload.get("access_token")
    if not isinstance(token, str) or token == "":
        raise TwitterProtocolError("access_token is missing", http_status=200)
    return token


__all__ = [
    "parse_token_response",
]
