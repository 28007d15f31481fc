"""
OAuth connection service — application entry point.
"""

from __future__ import annotations

import logging
import sys
from typing import Mapping, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from config.settings import Settings, config
from connectors.profiles import default_profile_fetchers
from connectors.registry import ProviderRegistry
from connectors.routes import router as connectors_router
from connectors.state import StateCodec
from connectors.store import ConnectionStore
from connectors.token_client import TokenExchangeClient
from connectors.token_manager import ConnectionManager

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("httpcore", "httpx"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def build_connection_manager(
    settings: Settings,
    environ: Optional[Mapping[str, str]] = None,
) -> ConnectionManager:
    """Wire one process-wide manager and its in-memory store."""
    timeout = settings.http_timeout_seconds
    max_age_ms = settings.oauth_state_max_age_seconds * 1000
    codec = StateCodec(secret=settings.oauth_state_secret or None, max_age_ms=max_age_ms)
    if not codec.signed:
        logger.warning("OAUTH_STATE_SECRET not set — OAuth state values are unsigned")

    return ConnectionManager(
        registry=ProviderRegistry.from_environment(environ),
        store=ConnectionStore(),
        token_client=TokenExchangeClient(timeout=timeout),
        state_codec=codec,
        profile_fetchers=default_profile_fetchers(timeout),
        default_redirect_uri=settings.callback_url,
    )


def create_app(manager: Optional[ConnectionManager] = None) -> FastAPI:
    app = FastAPI(
        title="OAuth Connection Service",
        version="1.0.0",
        description="Per-user, multi-account OAuth connections with on-demand token refresh.",
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)

    app.state.connection_manager = manager or build_connection_manager(config)

    # Routes
    app.include_router(connectors_router, prefix="/api/v1/connectors")

    logger.info("Application ready to accept requests.")
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
