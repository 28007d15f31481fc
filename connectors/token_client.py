"""
TokenExchangeClient — the two OAuth2 token-endpoint grants.

Stateless: one POST in, one ``TokenSet`` out. Failures are raised as
``ExchangeError`` and never retried here.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from connectors.errors import ExchangeError, MissingCredentialsError
from connectors.models import ProviderConfig, TokenSet

logger = logging.getLogger(__name__)

_HEADERS = {"Accept": "application/json"}  # GitHub answers form-encoded otherwise


def _parse_expires_in(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return None


class TokenExchangeClient:
    """POSTs ``application/x-www-form-urlencoded`` grants to a provider's token endpoint."""

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 10.0,
    ) -> None:
        self._http = http_client
        self._timeout = timeout

    async def exchange_authorization_code(
        self, provider: ProviderConfig, code: str, redirect_uri: str
    ) -> TokenSet:
        """Exchange an authorization code for tokens."""
        return await self._request_token(
            provider,
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": redirect_uri,
            },
        )

    async def refresh_access_token(
        self, provider: ProviderConfig, refresh_token: str
    ) -> TokenSet:
        """
        Use a refresh token to get a new access token.

        ``refresh_token`` on the result is None when the provider did not
        rotate it; the caller keeps the old one.
        """
        return await self._request_token(
            provider,
            {
                "grant_type": "refresh_token",
                "refresh_token": refresh_token,
            },
        )

    async def _request_token(self, provider: ProviderConfig, form: Dict[str, str]) -> TokenSet:
        if not provider.is_configured:
            raise MissingCredentialsError(provider.id)

        data = {
            **form,
            "client_id": provider.client_id,
            "client_secret": provider.client_secret,
        }
        try:
            resp = await self._post(provider.token_endpoint, data)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "%s grant rejected by %s: HTTP %s",
                form["grant_type"],
                provider.id,
                exc.response.status_code,
            )
            raise ExchangeError(provider.id, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            logger.warning("%s grant to %s failed: %s", form["grant_type"], provider.id, exc)
            raise ExchangeError(provider.id, exc) from exc
        except ValueError as exc:
            raise ExchangeError(provider.id, "token response is not JSON") from exc

        if not isinstance(body, dict):
            raise ExchangeError(provider.id, "token response is not an object")
        # Some providers (GitHub) report grant errors with a 200
        if "error" in body:
            raise ExchangeError(provider.id, body.get("error_description") or body["error"])
        if not body.get("access_token"):
            raise ExchangeError(provider.id, "token response has no access_token")

        scope = body.get("scope")
        if isinstance(scope, list):
            scope = " ".join(str(s) for s in scope)

        try:
            return TokenSet(
                access_token=str(body["access_token"]),
                refresh_token=body.get("refresh_token") or None,
                expires_in=_parse_expires_in(body.get("expires_in")),
                token_type=body.get("token_type"),
                scope=scope,
            )
        except ValidationError as exc:
            fields = ", ".join(str(err["loc"][0]) for err in exc.errors())
            raise ExchangeError(provider.id, f"malformed token response: {fields}") from exc

    async def _post(self, url: str, data: Dict[str, Any]) -> httpx.Response:
        if self._http is not None:
            return await self._http.post(url, data=data, headers=_HEADERS)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await client.post(url, data=data, headers=_HEADERS)
