"""
OAuth ``state`` codec.

A state is ``user_id:provider_id:issued_at_ms`` in URL-safe base64. It is
trusted at face value on callback unless a secret is configured, in which
case an HMAC-SHA256 tag is appended and checked, and ``max_age_ms`` can
additionally bound how old a returned state may be.
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Callable, Optional

from connectors.errors import InvalidStateError
from connectors.models import AuthorizationState

_DELIMITER = ":"
_SIG_LENGTH = 16  # hex chars


def _now_ms() -> int:
    return int(time.time() * 1000)


class StateCodec:
    """Encode / decode the opaque state round-tripped through the provider."""

    def __init__(
        self,
        secret: Optional[str] = None,
        max_age_ms: Optional[int] = None,
        clock: Callable[[], int] = _now_ms,
    ) -> None:
        self._secret = secret.encode() if secret else None
        self._max_age_ms = max_age_ms if max_age_ms and max_age_ms > 0 else None
        self._clock = clock

    @property
    def signed(self) -> bool:
        return self._secret is not None

    def _sign(self, payload: str) -> str:
        return hmac.new(self._secret, payload.encode(), hashlib.sha256).hexdigest()[:_SIG_LENGTH]

    def encode(self, user_id: str, provider_id: str) -> str:
        for value in (user_id, provider_id):
            if not value or _DELIMITER in value:
                raise InvalidStateError(
                    f"State fields must be non-empty and free of {_DELIMITER!r}"
                )

        payload = _DELIMITER.join((user_id, provider_id, str(self._clock())))
        if self._secret is not None:
            payload = payload + _DELIMITER + self._sign(payload)
        return urlsafe_b64encode(payload.encode()).decode()

    def decode(self, token: str) -> AuthorizationState:
        """
        Reverse ``encode``.

        Raises ``InvalidStateError`` on bad encoding, wrong field count,
        a non-integer timestamp, a bad signature or an expired state.
        """
        if not token:
            raise InvalidStateError("Missing OAuth state")
        try:
            padded = token + "=" * (-len(token) % 4)
            decoded = urlsafe_b64decode(padded.encode()).decode("utf-8")
        except (binascii.Error, ValueError) as exc:
            raise InvalidStateError(f"Malformed OAuth state: {exc}") from exc

        parts = decoded.split(_DELIMITER)
        expected = 4 if self._secret is not None else 3
        if len(parts) != expected:
            raise InvalidStateError("Malformed OAuth state: wrong field count")

        if self._secret is not None:
            payload = _DELIMITER.join(parts[:3])
            if not hmac.compare_digest(parts[3], self._sign(payload)):
                raise InvalidStateError("OAuth state signature mismatch")

        user_id, provider_id, issued_at = parts[:3]
        if not user_id or not provider_id:
            raise InvalidStateError("Malformed OAuth state: empty field")
        try:
            issued_at_ms = int(issued_at)
        except ValueError:
            raise InvalidStateError("Malformed OAuth state: bad timestamp") from None

        if self._max_age_ms is not None and self._clock() - issued_at_ms > self._max_age_ms:
            raise InvalidStateError("OAuth state expired")

        return AuthorizationState(
            user_id=user_id,
            provider_id=provider_id,
            issued_at_ms=issued_at_ms,
        )
