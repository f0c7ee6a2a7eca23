"""Public social graph API."""

from .queries import RelationshipQuery

__all__ = [
    "RelationshipQuery",
]
