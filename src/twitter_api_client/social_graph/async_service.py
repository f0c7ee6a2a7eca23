"""Social graph listings (async)."""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from ..core.async_pagination import AsyncCursorStream
from ..core.page_codec import ItemDecoder, decode_int_id, decode_object
from .params import (
    FOLLOWER_IDS_PATH,
    FOLLOWERS_LIST_PATH,
    FRIEND_IDS_PATH,
    FRIENDS_LIST_PATH,
    build_ids_params,
    build_list_params,
)
from .queries import RelationshipQuery
from .service import coerce_query

AsyncCursorOpener = Callable[[str, Mapping[str, str], ItemDecoder[Any]], AsyncCursorStream[Any]]


class AsyncSocialGraphService:
    """Async cursor listings of who a user follows and who follows them."""

    def __init__(self, open_cursor: AsyncCursorOpener) -> None:
        self._open_cursor = open_cursor

    def iter_friend_ids(self, query: RelationshipQuery | int | str) -> AsyncCursorStream[int]:
        params = build_ids_params(coerce_query(query))
        return self._open_cursor(FRIEND_IDS_PATH, params, decode_int_id)

    def iter_follower_ids(self, query: RelationshipQuery | int | str) -> AsyncCursorStream[int]:
        params = build_ids_params(coerce_query(query))
        return self._open_cursor(FOLLOWER_IDS_PATH, params, decode_int_id)

    def iter_friends(
        self, query: RelationshipQuery | int | str
    ) -> AsyncCursorStream[dict[str, object]]:
        params = build_list_params(coerce_query(query))
        return self._open_cursor(FRIENDS_LIST_PATH, params, decode_object)

    def iter_followers(
        self, query: RelationshipQuery | int | str
    ) -> AsyncCursorStream[dict[str, object]]:
        params = build_list_params(coerce_query(query))
        return self._open_cursor(FOLLOWERS_LIST_PATH, params, decode_object)


__all__ = [
    "AsyncSocialGraphService",
]
