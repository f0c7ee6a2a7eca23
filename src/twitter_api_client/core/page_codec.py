"""Decoding of cursor page bodies.

A page is a JSON object with two well-known cursor keys and one array field
named after the resource (``ids``, ``users``, ...). The array key is not known
up front, so decoding runs in two passes: the cursor keys are extracted first,
then every remaining list-valued key is tried against the item decoder.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TypeVar

from .errors import TwitterDecodeError
from .models import Page
from .response_parsing import parse_json_object

T = TypeVar("T")

ItemDecoder = Callable[[object], T]

NEXT_CURSOR_KEY = "next_cursor_str"
PREV_CURSOR_KEYS: tuple[str, ...] = ("prev_cursor_str", "previous_cursor_str")


def decode_int_id(value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"expected integer id, got {type(value).__name__}")
    return value


def decode_str_id(value: object) -> str:
    if not isinstance(value, str):
        raise TypeError(f"expected string id, got {type(value).__name__}")
    return value


def decode_object(value: object) -> dict[str, object]:
    if not isinstance(value, dict):
        raise TypeError(f"expected JSON object, got {type(value).__name__}")
    return value


def decode_items(values: Sequence[object], item_decoder: ItemDecoder[T]) -> tuple[T, ...]:
    return tuple(item_decoder(value) for value in values)


def _as_cursor(key: str, value: object) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TwitterDecodeError(f"{key} must be a string")
    return value


def decode_page(raw_body: bytes | str, item_decoder: ItemDecoder[T]) -> Page[T]:
    payload = parse_json_object(raw_body, http_status=None, error_cls=TwitterDecodeError)

    next_cursor = _as_cursor(NEXT_CURSOR_KEY, payload.get(NEXT_CURSOR_KEY))
    prev_cursor = ""
    for key in PREV_CURSOR_KEYS:
        if key in payload:
            prev_cursor = _as_cursor(key, payload[key])

    items: tuple[T, ...] | None = None
    rejected: list[str] = []
    for key, value in payload.items():
        if key == NEXT_CURSOR_KEY or key in PREV_CURSOR_KEYS:
            continue
        if not isinstance(value, list):
            continue
        try:
            items = decode_items(value, item_decoder)
        except Exception:  # item decoders are caller-supplied
            rejected.append(key)

    if items is None and rejected:
        raise TwitterDecodeError(
            "no array field matches the expected item type: " + ", ".join(sorted(rejected))
        )

    return Page(items=items or (), next_cursor=next_cursor, prev_cursor=prev_cursor)


__all__ = [
    "ItemDecoder",
    "NEXT_CURSOR_KEY",
    "PREV_CURSOR_KEYS",
    "decode_int_id",
    "decode_str_id",
    "decode_object",
    "decode_items",
    "decode_page",
]
