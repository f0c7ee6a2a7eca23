"""Public package exports for Twitter API client."""

from .async_client import AsyncTwitterClient
from .client import TwitterClient
from .config import TwitterClientConfig
from .core.models import Credentials, ItemOrder

__all__ = ["TwitterClient", "AsyncTwitterClient", "TwitterClientConfig", "Credentials", "ItemOrder"]
