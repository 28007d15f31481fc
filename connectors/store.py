"""
ConnectionStore — in-memory ``user_id -> provider_id -> [Account]`` map.

Process-lifetime only. Buckets are created on the first connect and are
never deleted; removing the last account leaves an empty list.
"""

from __future__ import annotations

import logging
import secrets
import time
from typing import Callable, Dict, List, Optional, Union

from connectors.models import Account, AccountData, TokenSet

logger = logging.getLogger(__name__)

_PROFILE_FIELDS = ("display_name", "email", "username")


def _now_ms() -> int:
    return int(time.time() * 1000)


def _new_account_id() -> str:
    return secrets.token_hex(16)


def expires_at(now_ms: int, tokens: TokenSet) -> Optional[int]:
    """Absolute expiry of ``tokens`` issued at ``now_ms``; None when the provider gave none."""
    if tokens.expires_in is None:
        return None
    return now_ms + tokens.expires_in * 1000


class ConnectionStore:
    """Owns every mutation of connected accounts."""

    def __init__(
        self,
        clock: Callable[[], int] = _now_ms,
        id_factory: Callable[[], str] = _new_account_id,
    ) -> None:
        self._connections: Dict[str, Dict[str, List[Account]]] = {}
        self._clock = clock
        self._id_factory = id_factory

    def add_or_update(
        self, user_id: str, provider_id: str, account_data: AccountData
    ) -> List[Account]:
        """
        Insert an account, or merge into the one with the same
        ``provider_account_id``. Returns the whole bucket.

        On merge the new access token and expiry always replace the old
        ones; refresh token and profile fields only when provided.
        """
        bucket = self._connections.setdefault(user_id, {}).setdefault(provider_id, [])
        now = self._clock()

        existing = next(
            (a for a in bucket if a.provider_account_id == account_data.provider_account_id),
            None,
        )
        if existing is not None:
            existing.access_token = account_data.access_token
            existing.expires_at_ms = account_data.expires_at_ms
            if account_data.refresh_token:
                existing.refresh_token = account_data.refresh_token
            for field in _PROFILE_FIELDS:
                value = getattr(account_data, field)
                if value is not None:
                    setattr(existing, field, value)
            existing.updated_at = now
            logger.info("Updated %s connection %s for user %s", provider_id, existing.id, user_id)
        else:
            account = Account(
                id=self._id_factory(),
                created_at=now,
                updated_at=now,
                **account_data.model_dump(),
            )
            bucket.append(account)
            logger.info("Created %s connection %s for user %s", provider_id, account.id, user_id)

        return list(bucket)

    def list(
        self, user_id: str, provider_id: Optional[str] = None
    ) -> Union[Dict[str, List[Account]], List[Account]]:
        """
        All buckets of ``user_id`` keyed by provider, or one bucket when
        ``provider_id`` is given. Absent users / buckets come back empty.
        """
        user_connections = self._connections.get(user_id, {})
        if provider_id is not None:
            return list(user_connections.get(provider_id, []))
        return {p: list(accounts) for p, accounts in user_connections.items()}

    def find(
        self, user_id: str, provider_id: str, account_id: Optional[str] = None
    ) -> Optional[Account]:
        """The account with local id ``account_id``, or the first-added one when omitted."""
        bucket = self._connections.get(user_id, {}).get(provider_id, [])
        if account_id is None:
            return bucket[0] if bucket else None
        return next((a for a in bucket if a.id == account_id), None)

    def apply_refresh(self, account: Account, tokens: TokenSet) -> Account:
        """Write a refreshed token set onto a stored account in place."""
        now = self._clock()
        account.access_token = tokens.access_token
        if tokens.refresh_token:
            account.refresh_token = tokens.refresh_token
        account.expires_at_ms = expires_at(now, tokens)
        account.updated_at = now
        return account

    def remove(self, user_id: str, provider_id: str, account_id: str) -> bool:
        """True if an account with that local id existed and was removed."""
        bucket = self._connections.get(user_id, {}).get(provider_id)
        if not bucket:
            return False
        for index, account in enumerate(bucket):
            if account.id == account_id:
                del bucket[index]
                return True
        return False
