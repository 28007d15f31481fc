"""
FastAPI dependencies (shared across routes).
"""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from auth.jwt import verify_token
from connectors.token_manager import ConnectionManager


def get_connection_manager(request: Request) -> ConnectionManager:
    """The manager built by ``main.create_app`` for this process."""
    return request.app.state.connection_manager


async def get_current_user_id(
    authorization: str = Header(..., alias="Authorization"),
) -> str:
    """
    Extract and verify the Bearer token from the Authorization header.
    Returns the authenticated user_id.
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing Bearer token",
        )
    return verify_token(authorization[7:])
