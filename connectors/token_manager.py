"""
Connection manager — authorize / callback / get-token / disconnect.

This is the single interface that route handlers and API clients use to
connect accounts and obtain a currently valid access token for a given
user + provider (+ account) combination.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union
from urllib.parse import urlencode

import httpx

from connectors.errors import (
    ExchangeError,
    MissingRedirectUriError,
    NoSuchAccountError,
    ProfileFetchError,
    ProviderMismatchError,
)
from connectors.models import Account, AccountData, AccountProfile
from connectors.profiles import ProfileFetcher
from connectors.registry import ProviderRegistry
from connectors.state import StateCodec
from connectors.store import ConnectionStore, expires_at
from connectors.token_client import TokenExchangeClient

logger = logging.getLogger(__name__)

# Fixed for every provider; tokens this close to expiry are refreshed first.
STALENESS_MARGIN_MS = 5 * 60 * 1000

# Sent on every authorization URL to ask for a refresh token.
_OFFLINE_PARAMS = {
    "response_type": "code",
    "access_type": "offline",
    "prompt": "consent",
}


def _now_ms() -> int:
    return int(time.time() * 1000)


def is_stale(account: Account, now_ms: int) -> bool:
    """True when ``account`` expires within the staleness margin. No expiry = never stale."""
    if account.expires_at_ms is None:
        return False
    return now_ms >= account.expires_at_ms - STALENESS_MARGIN_MS


class ConnectionManager:
    """Composes registry, state codec, token client, profile fetchers and store."""

    def __init__(
        self,
        registry: ProviderRegistry,
        store: ConnectionStore,
        token_client: TokenExchangeClient,
        state_codec: StateCodec,
        profile_fetchers: Mapping[str, ProfileFetcher],
        *,
        default_redirect_uri: Optional[Callable[[str], str]] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self.registry = registry
        self.store = store
        self._token_client = token_client
        self._state_codec = state_codec
        self._profile_fetchers = dict(profile_fetchers)
        self._default_redirect_uri = default_redirect_uri
        self._http = http_client
        self._clock = clock
        self._refresh_locks: Dict[Tuple[str, str, str], asyncio.Lock] = {}

    # ── Providers ───────────────────────────────────────────────────────

    def list_providers(self) -> List[Dict[str, object]]:
        return self.registry.list_providers()

    def redirect_uri_for(self, provider_id: str) -> str:
        if self._default_redirect_uri is None:
            raise MissingRedirectUriError(provider_id)
        return self._default_redirect_uri(provider_id)

    # ── OAuth flow ──────────────────────────────────────────────────────

    def build_authorization_url(
        self, provider_id: str, user_id: str, redirect_uri: str
    ) -> str:
        """Build the provider's authorization URL carrying a freshly minted state."""
        provider = self.registry.get_configured(provider_id)
        params = {
            "client_id": provider.client_id,
            "redirect_uri": redirect_uri,
            "scope": provider.scope,
            "state": self._state_codec.encode(user_id, provider_id),
            **_OFFLINE_PARAMS,
            **provider.extra_authorize_params,
        }
        separator = "&" if "?" in provider.authorization_endpoint else "?"
        return f"{provider.authorization_endpoint}{separator}{urlencode(params)}"

    async def complete_callback(
        self,
        provider_id: str,
        code: str,
        state: str,
        redirect_uri: Optional[str] = None,
    ) -> Account:
        """
        Finish the authorization-code flow and store the account.

        Nothing is stored unless the state, the code exchange and the
        profile lookup all succeed.
        """
        self.registry.get(provider_id)

        decoded = self._state_codec.decode(state)
        if decoded.provider_id != provider_id:
            raise ProviderMismatchError(provider_id, decoded.provider_id)

        provider = self.registry.get_configured(provider_id)
        tokens = await self._token_client.exchange_authorization_code(
            provider, code, redirect_uri or self.redirect_uri_for(provider_id)
        )
        profile = await self._fetch_profile(provider_id, tokens.access_token)

        bucket = self.store.add_or_update(
            decoded.user_id,
            provider_id,
            AccountData(
                provider_account_id=profile.id,
                access_token=tokens.access_token,
                refresh_token=tokens.refresh_token,
                expires_at_ms=expires_at(self._clock(), tokens),
                display_name=profile.name,
                email=profile.email,
                username=profile.username,
            ),
        )
        account = next(a for a in bucket if a.provider_account_id == profile.id)
        logger.info(
            "OAuth connected: user=%s provider=%s account=%s",
            decoded.user_id,
            provider_id,
            account.id,
        )
        return account

    async def _fetch_profile(self, provider_id: str, access_token: str) -> AccountProfile:
        fetcher = self._profile_fetchers.get(provider_id)
        if fetcher is None:
            raise ProfileFetchError(provider_id, "no profile fetcher registered")
        return await fetcher.fetch(provider_id, access_token, self._http)

    # ── Tokens ──────────────────────────────────────────────────────────

    async def get_valid_access_token(
        self,
        user_id: str,
        provider_id: str,
        account_id: Optional[str] = None,
    ) -> str:
        """
        Return a non-stale access token, refreshing it first if needed.

        Without ``account_id`` the first-added account of the bucket is
        used. A failed refresh raises and leaves the stored account as it was.
        """
        provider = self.registry.get(provider_id)
        account = self.store.find(user_id, provider_id, account_id)
        if account is None:
            if account_id is None:
                raise NoSuchAccountError(f"No {provider_id} account connected", provider_id)
            raise NoSuchAccountError(f"{provider_id} account {account_id} not found", provider_id)

        if not is_stale(account, self._clock()):
            return account.access_token

        lock = self._refresh_locks.setdefault((user_id, provider_id, account.id), asyncio.Lock())
        async with lock:
            # Another caller may have refreshed while we waited
            if not is_stale(account, self._clock()):
                return account.access_token

            if not account.refresh_token:
                raise ExchangeError(provider_id, "token expired and no refresh token available")

            try:
                tokens = await self._token_client.refresh_access_token(
                    provider, account.refresh_token
                )
            except ExchangeError as exc:
                logger.warning(
                    "Token refresh failed for %s/%s account %s: %s",
                    provider_id,
                    user_id,
                    account.id,
                    exc.cause,
                )
                raise

            self.store.apply_refresh(account, tokens)
            logger.info("Refreshed %s token for user %s", provider_id, user_id)
            return account.access_token

    # ── Account management ──────────────────────────────────────────────

    def list_connections(
        self, user_id: str, provider_id: Optional[str] = None
    ) -> Union[Dict[str, List[Account]], List[Account]]:
        if provider_id is not None:
            self.registry.get(provider_id)
        return self.store.list(user_id, provider_id)

    def disconnect(self, user_id: str, provider_id: str, account_id: str) -> bool:
        """Remove one account. False when it did not exist."""
        self.registry.get(provider_id)
        removed = self.store.remove(user_id, provider_id, account_id)
        if removed:
            self._refresh_locks.pop((user_id, provider_id, account_id), None)
            logger.info("Disconnected %s account %s for user %s", provider_id, account_id, user_id)
        return removed
