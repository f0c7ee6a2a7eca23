"""OAuth2 client-credentials authentication (sync)."""

from __future__ import annotations

import logging

from .auth_shared import parse_token_response
from .errors import TwitterAuthError
from .models import Credentials
from .session import Session
from .transport import SyncTransport

logger = logging.getLogger("twitter_api_client")


def authenticate(transport: SyncTransport, credentials: Credentials) -> Session:
    """Exchange application credentials for a bearer-token session.

    Not retried: a rejected exchange raises :class:`TwitterAuthError` and the
    caller decides whether to try again.
    """

    http_status, body = transport.request_token(credentials)
    try:
        token = parse_token_response(body, http_status=http_status)
    except TwitterAuthError as exc:
        logger.error("authentication rejected http_status=%s message=%s", http_status, exc.message)
        raise
    logger.info("authentication succeeded")
    return Session(bearer_token=token, transport=transport)


__all__ = [
    "authenticate",
]
