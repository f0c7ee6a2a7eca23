from __future__ import annotations

import os

import pytest

from twitter_api_client import AsyncTwitterClient, Credentials, TwitterClient
from twitter_api_client.core.errors import TwitterAuthError

pytestmark = pytest.mark.live

KNOWN_USER_ID = 17076641


def _require_live_flag() -> None:
    if os.getenv("TWITTER_RUN_LIVE") != "1":
        pytest.skip("Set TWITTER_RUN_LIVE=1 to run live contract tests")


def _live_credentials() -> Credentials:
    key = os.getenv("TWITTER_API_KEY")
    secret = os.getenv("TWITTER_API_SECRET")
    if not key or not secret:
        pytest.skip("Set TWITTER_API_KEY and TWITTER_API_SECRET to run live contract tests")
    return Credentials(key=key, secret=secret)


def test_live_authenticate_rejects_bogus_credentials():
    _require_live_flag()
    with pytest.raises(TwitterAuthError):
        TwitterClient.authenticate(Credentials(key="foo", secret="bar"))


def test_live_list_friend_ids_contract_minimum():
    _require_live_flag()
    with TwitterClient.authenticate(_live_credentials()) as client:
        iterator = client.social_graph.iter_friend_ids(KNOWN_USER_ID)
        first = next(iterator)
        iterator.close()

    assert isinstance(first, int)


@pytest.mark.asyncio
async def test_live_list_follower_ids_contract_minimum():
    _require_live_flag()
    client = await AsyncTwitterClient.authenticate(_live_credentials())
    async with client:
        async with client.social_graph.iter_follower_ids(KNOWN_USER_ID) as stream:
            first = await anext(stream)

    assert isinstance(first, int)
