"""Endpoint paths and query-parameter builders for the social graph."""

from __future__ import annotations

from ..core.errors import TwitterValidationError
from .queries import RelationshipQuery

FRIEND_IDS_PATH = "1.1/friends/ids.json"
FOLLOWER_IDS_PATH = "1.1/followers/ids.json"
FRIENDS_LIST_PATH = "1.1/friends/list.json"
FOLLOWERS_LIST_PATH = "1.1/followers/list.json"

MAX_IDS_COUNT = 5000
MAX_LIST_COUNT = 200


def _validate_relationship_query(query: RelationshipQuery, *, max_count: int) -> None:
    if (query.user_id is None) == (query.screen_name is None):
        raise TwitterValidationError("exactly one of user_id or screen_name is required")
    if query.user_id is not None and query.user_id <= 0:
        raise TwitterValidationError("user_id must be positive")
    if query.screen_name is not None and query.screen_name.strip().lstrip("@") == "":
        raise TwitterValidationError("screen_name must not be blank")
    if query.count is not None and not 1 <= query.count <= max_count:
        raise TwitterValidationError(f"count must be between 1 and {max_count}")


def _build_relationship_params(query: RelationshipQuery) -> dict[str, str]:
    params: dict[str, str] = {}
    if query.user_id is not None:
        params["user_id"] = str(query.user_id)
    if query.screen_name is not None:
        params["screen_name"] = query.screen_name.strip().lstrip("@")
    if query.count is not None:
        params["count"] = str(query.count)
    return params


def build_ids_params(query: RelationshipQuery) -> dict[str, str]:
    _validate_relationship_query(query, max_count=MAX_IDS_COUNT)
    return _build_relationship_params(query)


def build_list_params(query: RelationshipQuery) -> dict[str, str]:
    _validate_relationship_query(query, max_count=MAX_LIST_COUNT)
    params = _build_relationship_params(query)
    params["skip_status"] = "true"
    return params


__all__ = [
    "FRIEND_IDS_PATH",
    "FOLLOWER_IDS_PATH",
    "FRIENDS_LIST_PATH",
    "FOLLOWERS_LIST_PATH",
    "MAX_IDS_COUNT",
    "MAX_LIST_COUNT",
    "build_ids_params",
    "build_list_params",
]
