"""
Data shapes shared by the connector modules.

All timestamps are integer milliseconds since the epoch.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ProviderConfig(BaseModel):
    """OAuth endpoints and client credentials for one provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    display_name: str
    authorization_endpoint: str
    token_endpoint: str
    scope: str  # provider-specific delimiter, sent as-is
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    extra_authorize_params: Dict[str, str] = Field(default_factory=dict)

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class AuthorizationState(BaseModel):
    """Decoded form of the ``state`` query parameter."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    provider_id: str
    issued_at_ms: int


class TokenSet(BaseModel):
    """Parsed token endpoint response."""

    access_token: str
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None  # seconds
    token_type: Optional[str] = None
    scope: Optional[str] = None


class AccountProfile(BaseModel):
    """The provider's own view of who the token belongs to."""

    id: str
    name: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None


class AccountData(BaseModel):
    """Fields handed to the store when an account is connected."""

    provider_account_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at_ms: Optional[int] = None
    display_name: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None


class Account(BaseModel):
    """One authorised external identity of a local user at one provider."""

    id: str
    provider_account_id: str
    access_token: str
    refresh_token: Optional[str] = None
    expires_at_ms: Optional[int] = None  # None = never expires
    created_at: int
    updated_at: int
    display_name: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None

    def public_dict(self) -> Dict[str, Any]:
        """Account fields safe to hand to a UI (no token material)."""
        return self.model_dump(exclude={"access_token", "refresh_token"})
