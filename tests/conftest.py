"""
Shared fixtures: a controllable clock, a credentialed registry and a
ConnectionManager whose network collaborators are mocks.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from connectors.models import AccountProfile, TokenSet
from connectors.profiles import ProfileFetcher
from connectors.registry import ProviderRegistry
from connectors.state import StateCodec
from connectors.store import ConnectionStore
from connectors.token_client import TokenExchangeClient
from connectors.token_manager import ConnectionManager

START_MS = 1_700_000_000_000
MINUTE_MS = 60 * 1000

TEST_ENV = {
    "GITHUB_CLIENT_ID": "gh-client",
    "GITHUB_CLIENT_SECRET": "gh-secret",
    "GOOGLE_CLIENT_ID": "google-client",
    "GOOGLE_CLIENT_SECRET": "google-secret",
    "REDDIT_CLIENT_ID": "reddit-client",
    "REDDIT_CLIENT_SECRET": "reddit-secret",
}


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start: int = START_MS):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def registry():
    return ProviderRegistry.from_environment(TEST_ENV)


@pytest.fixture
def store(clock):
    return ConnectionStore(clock=clock)


@pytest.fixture
def codec(clock):
    return StateCodec(clock=clock)


@pytest.fixture
def token_client():
    client = MagicMock(spec=TokenExchangeClient)
    client.exchange_authorization_code = AsyncMock(
        return_value=TokenSet(access_token="tok1", refresh_token="r1", expires_in=3600)
    )
    client.refresh_access_token = AsyncMock(
        return_value=TokenSet(access_token="tok2", expires_in=3600)
    )
    return client


@pytest.fixture
def github_profile():
    fetcher = MagicMock(spec=ProfileFetcher)
    fetcher.fetch = AsyncMock(
        return_value=AccountProfile(id="42", name="Mona", username="octocat", email="mona@example.com")
    )
    return fetcher


@pytest.fixture
def manager(registry, store, token_client, codec, github_profile, clock):
    return ConnectionManager(
        registry=registry,
        store=store,
        token_client=token_client,
        state_codec=codec,
        profile_fetchers={"github": github_profile},
        default_redirect_uri=lambda provider: f"https://app.test/{provider}/callback",
        clock=clock,
    )
