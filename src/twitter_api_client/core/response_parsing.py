"""Shared response body parsing helpers."""

from __future__ import annotations

import json
from collections.abc import Mapping

from .errors import TwitterProtocolError


def parse_json_object(
    body: bytes | str,
    *,
    http_status: int | None,
    error_cls: type[TwitterProtocolError] = TwitterProtocolError,
) -> dict[str, object]:
    """Parse a response body that must be a JSON object with string keys."""

    try:
        payload = json.loads(body)
    except ValueError as exc:
        raise error_cls("response body is not valid JSON", http_status=http_status) from exc

    if not isinstance(payload, dict):
        raise error_cls("response JSON root must be an object", http_status=http_status)
    return payload


def parse_error_payload(body: bytes) -> Mapping[str, object] | None:
    """Best-effort parse of an error body; ``None`` when it is not a JSON object."""

    if not body:
        return None
    try:
        payload = json.loads(body)
    except ValueError:
        return None
    return payload if isinstance(payload, dict) else None


__all__ = [
    "parse_json_object",
    "parse_error_payload",
]
