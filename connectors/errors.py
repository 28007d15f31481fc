"""
Connector errors.

Every failure in the OAuth core surfaces as a ``ConnectorError`` subclass so
the route layer can tell a rejected request from a provider outage.
"""

from __future__ import annotations

from typing import Optional


class ConnectorError(Exception):
    """Base exception for OAuth connector operations."""

    def __init__(self, message: str, provider_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider_id = provider_id


class UnknownProviderError(ConnectorError):
    """Raised when a provider id is not in the registry."""

    def __init__(self, provider_id: str) -> None:
        super().__init__(f"Provider '{provider_id}' is not supported", provider_id)


class MissingCredentialsError(ConnectorError):
    """Raised when a known provider has no client id / secret configured."""

    def __init__(self, provider_id: str) -> None:
        super().__init__(
            f"Provider '{provider_id}' has no client credentials configured",
            provider_id,
        )


class InvalidStateError(ConnectorError):
    """Raised when the OAuth ``state`` parameter cannot be decoded."""


class ProviderMismatchError(InvalidStateError):
    """Raised when a state minted for one provider arrives at another's callback."""

    def __init__(self, expected: str, actual: str) -> None:
        super().__init__(
            f"State was issued for '{actual}', not '{expected}'",
            expected,
        )
        self.state_provider_id = actual


class ExchangeError(ConnectorError):
    """Raised when a token endpoint rejects a code / refresh token or is unreachable."""

    def __init__(self, provider_id: str, cause: object) -> None:
        super().__init__(f"Token exchange with '{provider_id}' failed: {cause}", provider_id)
        self.cause = cause


class ProfileFetchError(ConnectorError):
    """Raised when the provider's profile endpoint fails or returns no account id."""

    def __init__(self, provider_id: str, cause: object) -> None:
        super().__init__(f"Profile lookup at '{provider_id}' failed: {cause}", provider_id)
        self.cause = cause


class NoSuchAccountError(ConnectorError):
    """Raised when no connected account matches the request."""


class MissingRedirectUriError(ConnectorError):
    """Raised when a callback needs a redirect URI and none is configured."""

    def __init__(self, provider_id: str) -> None:
        super().__init__(
            f"No redirect_uri given for '{provider_id}' and no default configured",
            provider_id,
        )
