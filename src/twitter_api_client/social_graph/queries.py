"""Query models."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True, frozen=True)
class RelationshipQuery:
    """Whose friends/followers to list: exactly one of ``user_id`` or ``screen_name``."""

    user_id: int | None = None
    screen_name: str | None = None
    count: int | None = None

    def __post_init__(self) -> None:
        if self.user_id is not None and (
            isinstance(self.user_id, bool) or not isinstance(self.user_id, int)
        ):
            raise TypeError("user_id must be int")
        if self.screen_name is not None and not isinstance(self.screen_name, str):
            raise TypeError("screen_name must be str")
        if self.count is not None and (isinstance(self.count, bool) or not isinstance(self.count, int)):
            raise TypeError("count must be int")

    @classmethod
    def for_user_id(cls, user_id: int, *, count: int | None = None) -> "RelationshipQuery":
        return cls(user_id=user_id, count=count)

    @classmethod
    def for_screen_name(cls, screen_name: str, *, count: int | None = None) -> "RelationshipQuery":
        return cls(screen_name=screen_name, count=count)


__all__ = [
    "RelationshipQuery",
]
