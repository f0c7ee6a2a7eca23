"""Client configuration."""

from __future__ import annotations

from dataclasses import dataclass, field

from .core.models import ItemOrder


@dataclass(slots=True, frozen=True)
class TransportConfig:
    """Transport-related settings."""

    timeout_connect_seconds: float = 5.0
    timeout_read_seconds: float = 30.0
    timeout_write_seconds: float = 30.0
    timeout_pool_seconds: float = 5.0

    def validate(self) -> None:
        for field_name in (
            "timeout_connect_seconds",
            "timeout_read_seconds",
            "timeout_write_seconds",
            "timeout_pool_seconds",
        ):
            if getattr(self, field_name) <= 0:
                raise ValueError(f"transport.{field_name} must be > 0")


@dataclass(slots=True, frozen=True)
class RetryConfig:
    """Retry settings for network errors and 5xx responses on page requests."""

    max_attempts: int = 3
    max_backoff_seconds: float = 30.0
    total_retry_budget_seconds: float = 120.0

    def validate(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("retry.max_attempts must be >= 1")
        if self.max_backoff_seconds < 0:
            raise ValueError("retry.max_backoff_seconds must be >= 0")
        if self.total_retry_budget_seconds < 0:
            raise ValueError("retry.total_retry_budget_seconds must be >= 0")


@dataclass(slots=True, frozen=True)
class PaginationConfig:
    """Cursor stream settings."""

    item_order: ItemOrder = ItemOrder.FORWARD
    max_pages: int = 10_000

    def validate(self) -> None:
        if not isinstance(self.item_order, ItemOrder):
            raise ValueError("pagination.item_order must be ItemOrder")
        if self.max_pages < 1:
            raise ValueError("pagination.max_pages must be >= 1")


@dataclass(slots=True, frozen=True)
class TwitterClientConfig:
    """Runtime configuration for the Twitter client."""

    api_base_url: str = "https://api.twitter.com"
    token_path: str = "oauth2/token"
    user_agent: str = "twitter-api-client/0.1.0"

    transport: TransportConfig = field(default_factory=TransportConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)

    @property
    def token_url(self) -> str:
        return self.resource_url(self.token_path)

    def resource_url(self, path: str) -> str:
        return self.api_base_url.rstrip("/") + "/" + path.lstrip("/")

    def validate(self) -> None:
        if not self.api_base_url:
            raise ValueError("api_base_url must not be empty")
        if not self.token_path:
            raise ValueError("token_path must not be empty")
        self.transport.validate()
        self.retry.validate()
        self.pagination.validate()


__all__ = [
    "TransportConfig",
    "RetryConfig",
    "PaginationConfig",
    "TwitterClientConfig",
]
