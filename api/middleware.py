"""
Global middleware and connector error → HTTP status mapping.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from connectors.errors import (
    ConnectorError,
    ExchangeError,
    InvalidStateError,
    MissingCredentialsError,
    MissingRedirectUriError,
    NoSuchAccountError,
    ProfileFetchError,
    UnknownProviderError,
)

logger = logging.getLogger(__name__)

# Checked in order; subclasses before their bases.
_STATUS_BY_ERROR = (
    (UnknownProviderError, status.HTTP_404_NOT_FOUND),
    (NoSuchAccountError, status.HTTP_404_NOT_FOUND),
    (MissingCredentialsError, status.HTTP_503_SERVICE_UNAVAILABLE),
    (InvalidStateError, status.HTTP_400_BAD_REQUEST),
    (ExchangeError, status.HTTP_502_BAD_GATEWAY),
    (ProfileFetchError, status.HTTP_502_BAD_GATEWAY),
    (MissingRedirectUriError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: ConnectorError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def register_middleware(app: FastAPI) -> None:
    """Attach request timing and the connector error handler."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        logger.debug("%s %s — %.3fs", request.method, request.url.path, elapsed)
        return response

    @app.exception_handler(ConnectorError)
    async def connector_error(request: Request, exc: ConnectorError) -> JSONResponse:
        code = status_for(exc)
        if code >= 500:
            logger.warning("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=code, content={"detail": str(exc)})
