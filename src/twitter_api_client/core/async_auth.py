"""OAuth2 client-credentials authentication (async)."""

from __future__ import annotations

import logging

from .async_transport import AsyncTransport
from .auth_shared import parse_token_response
from .errors import TwitterAuthError
from .models import Credentials
from .session import AsyncSession

logger = logging.getLogger("twitter_api_client")


async def aauthenticate(transport: AsyncTransport, credentials: Credentials) -> AsyncSession:
    http_status, body = await transport.request_token(credentials)
    try:
        token = parse_token_response(body, http_status=http_status)
    except TwitterAuthError as exc:
        logger.error("authentication rejected http_status=%s message=%s", http_status, exc.message)
        raise
    logger.info("authentication succeeded")
    return AsyncSession(bearer_token=token, transport=transport)


__all__ = [
    "aauthenticate",
]
