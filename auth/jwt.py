"""
Bearer token creation and verification for the connector routes.

Tokens are ``base64(json payload).hmac_sha256_hex`` with a ``user_id`` and
an ``exp`` claim. The secret comes from ``config.jwt_secret``
(env var: ``JWT_SECRET``).
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import urlsafe_b64decode, urlsafe_b64encode
from typing import Optional

from fastapi import HTTPException, status

from config.settings import config


def _sign(raw: bytes) -> str:
    return hmac.new(config.jwt_secret.encode(), raw, hashlib.sha256).hexdigest()


def create_token(user_id: str, expires_in: Optional[int] = None) -> str:
    """Create a signed bearer token for ``user_id``."""
    lifetime = config.jwt_expiry_seconds if expires_in is None else expires_in
    raw = json.dumps({"user_id": user_id, "exp": int(time.time()) + lifetime}).encode()
    return urlsafe_b64encode(raw).decode() + "." + _sign(raw)


def verify_token(token: str) -> str:
    """
    Verify ``token`` and return its ``user_id``.

    Raises ``HTTPException(401)`` on a malformed, forged or expired token.
    """
    body, _, sig = token.partition(".")
    try:
        raw = urlsafe_b64decode(body.encode())
        if not sig or not hmac.compare_digest(sig, _sign(raw)):
            raise ValueError("bad signature")
        payload = json.loads(raw)
        if payload.get("exp", 0) < time.time():
            raise ValueError("token expired")
        return str(payload["user_id"])
    except (binascii.Error, ValueError, KeyError, AttributeError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid or expired token: {exc}",
        ) from exc
