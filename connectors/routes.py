"""
Connector API routes — OAuth connect/callback, list connections, disconnect.

Route prefix: /api/v1/connectors
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from api.dependencies import get_connection_manager, get_current_user_id
from config.settings import config
from connectors.errors import ConnectorError
from connectors.models import Account
from connectors.token_manager import ConnectionManager

logger = logging.getLogger(__name__)

router = APIRouter(tags=["connectors"])


def _public(accounts: List[Account]) -> List[Dict[str, Any]]:
    return [a.public_dict() for a in accounts]


def _dashboard(**params: str) -> RedirectResponse:
    return RedirectResponse(
        f"{config.oauth_success_redirect}?{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )


# ── Routes ─────────────────────────────────────────────────────────────


@router.get("/providers")
async def list_providers(
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, Any]:
    """
    List all supported providers and whether they are configured.
    No auth required — used by frontend to show available connectors.
    """
    providers = manager.list_providers()
    return {"providers": providers, "total": len(providers)}


@router.get("/connections")
async def list_connections(
    user_id: str = Depends(get_current_user_id),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, Any]:
    """List all connected accounts of the authenticated user (no tokens)."""
    connections = {
        provider: _public(accounts)
        for provider, accounts in manager.list_connections(user_id).items()
    }
    return {
        "connections": connections,
        "total_providers": len(connections),
        "total_accounts": sum(len(a) for a in connections.values()),
    }


@router.get("/connections/{provider}")
async def list_provider_connections(
    provider: str,
    user_id: str = Depends(get_current_user_id),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, Any]:
    """List the user's accounts at one provider."""
    accounts = _public(manager.list_connections(user_id, provider))
    return {"provider": provider, "accounts": accounts, "total": len(accounts)}


@router.get("/{provider}/auth-url")
async def get_auth_url(
    provider: str,
    user_id: str = Depends(get_current_user_id),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, str]:
    """
    Get the OAuth authorization URL for a provider.

    Frontend should redirect the browser (or open a popup) to this URL.
    """
    auth_url = manager.build_authorization_url(provider, user_id, config.callback_url(provider))
    return {"auth_url": auth_url, "provider": provider}


@router.get("/{provider}/callback")
async def oauth_callback(
    provider: str,
    code: Optional[str] = Query(None),
    state: Optional[str] = Query(None),
    error: Optional[str] = Query(None),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> RedirectResponse:
    """
    OAuth callback — the provider redirects here after consent.

    Always answers with a redirect to the dashboard, carrying either
    ``connected``/``account`` or ``error``.
    """
    if error:
        return _dashboard(error=error)
    if not code or not state:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Authorization code or state missing",
        )

    try:
        account = await manager.complete_callback(
            provider, code, state, config.callback_url(provider)
        )
    except ConnectorError as exc:
        logger.warning("OAuth callback failed for %s: %s", provider, exc)
        return _dashboard(error=str(exc))

    return _dashboard(
        connected=provider,
        account=account.display_name or account.username or account.provider_account_id,
    )


@router.delete("/connections/{provider}/{account_id}")
async def delete_connection(
    provider: str,
    account_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, Any]:
    """Disconnect one account."""
    if not manager.disconnect(user_id, provider, account_id):
        raise HTTPException(status.HTTP_404_NOT_FOUND, "Account not found")
    return {"status": "disconnected", "provider": provider, "account_id": account_id}


@router.post("/connections/{provider}/{account_id}/refresh")
async def refresh_connection(
    provider: str,
    account_id: str,
    user_id: str = Depends(get_current_user_id),
    manager: ConnectionManager = Depends(get_connection_manager),
) -> Dict[str, Any]:
    """Make sure the account holds a valid token, refreshing it if stale."""
    await manager.get_valid_access_token(user_id, provider, account_id)
    return {"status": "valid", "provider": provider, "account_id": account_id}
