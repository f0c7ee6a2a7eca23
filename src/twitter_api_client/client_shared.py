"""Shared helpers for sync/async client bootstrap."""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from .config import TwitterClientConfig
from .core.errors import TwitterValidationError


def validate_client_config(config: TwitterClientConfig) -> None:
    try:
        config.validate()
    except ValueError as exc:
        raise TwitterValidationError(str(exc)) from exc


def build_resource_url(
    config: TwitterClientConfig,
    resource_path: str,
    params: Mapping[str, str] | None = None,
) -> httpx.URL:
    try:
        url = httpx.URL(config.resource_url(resource_path))
    except httpx.InvalidURL as exc:
        raise TwitterValidationError(f"invalid resource URL for {resource_path!r}") from exc
    if params:
        url = url.copy_merge_params(dict(params))
    return url


__all__ = [
    "validate_client_config",
    "build_resource_url",
]
