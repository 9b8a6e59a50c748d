"""Translation of auth exceptions into JSON error responses.

Every `AuthError` already knows its code and HTTP status, so one handler
covers the whole hierarchy. Bodies look like::

    {"detail": "Invalid email or password", "code": "INVALID_CREDENTIALS"}

with extra keys for weak passwords (`errors`) and rate limits
(`reset_at`, `limit`).
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from agora_auth import (
    AuthError,
    ConfigError,
    RateLimitedError,
    RateLimitResult,
    WeakPasswordError,
)
from agora_auth.services import rate_limit_headers

logger = logging.getLogger(__name__)

INTERNAL_ERROR_CODE = "INTERNAL_ERROR"


def _create_error_response(
    status_code: int,
    message: str,
    code: str,
    headers: dict[str, str] | None = None,
    **extra,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "detail": message,
            "code": code,
            **extra,
        },
        headers=headers,
    )


def _headers_for(exc: AuthError) -> dict[str, str] | None:
    if exc.status_code == status.HTTP_401_UNAUTHORIZED:
        return {"WWW-Authenticate": "Bearer"}
    if isinstance(exc, RateLimitedError):
        return rate_limit_headers(
            RateLimitResult(
                limited=True,
                limit=exc.limit,
                remaining=0,
                reset_at=exc.reset_at,
            ),
        )
    return None


def setup_exception_handlers(app: FastAPI) -> None:
    """Install the error handlers on ``app``."""

    @app.exception_handler(ConfigError)
    async def config_exception_handler(
        request: Request,
        exc: ConfigError,
    ) -> JSONResponse:
        """Misconfiguration is a server fault; its message stays in the log."""
        logger.error(
            "Auth configuration error on %s %s: %s",
            request.method,
            request.url.path,
            exc.message,
        )
        return _create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="An internal error occurred",
            code=exc.code.value,
        )

    @app.exception_handler(AuthError)
    async def auth_exception_handler(
        request: Request,
        exc: AuthError,
    ) -> JSONResponse:
        logger.warning(
            "Auth exception on %s %s: %s (code=%s)",
            request.method,
            request.url.path,
            exc.message,
            exc.code.value,
        )

        extra = {}
        if isinstance(exc, WeakPasswordError):
            extra["errors"] = exc.errors
        elif isinstance(exc, RateLimitedError):
            extra.update(exc.details)

        return _create_error_response(
            status_code=exc.status_code,
            message=exc.message,
            code=exc.code.value,
            headers=_headers_for(exc),
            **extra,
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Last resort: log the traceback, answer with a generic 500."""
        logger.exception(
            "Unhandled exception on %s %s: %s",
            request.method,
            request.url.path,
            exc,
        )
        return _create_error_response(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            message="An internal error occurred",
            code=INTERNAL_ERROR_CODE,
        )
