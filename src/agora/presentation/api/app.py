"""Agora API application.

``create_app`` wires settings, logging, CORS, error mapping and the
versioned routers (``/api/v1/...``); ``/health`` stays unversioned for
load balancers. There is no module-level instance, start it with::

    uvicorn --factory agora.presentation.api.app:create_app
"""

import logging
import sys
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import AsyncIterator

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from agora.presentation.api.dependencies import app_engine, create_tables
from agora.presentation.api.exception_handlers import setup_exception_handlers
from agora.presentation.api.routers import auth_router
from agora_config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"
API_V1_PREFIX = "/api/v1"

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
OWN_LOGGERS = ("agora", "agora_auth", "agora_config")
NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine", "aiosqlite")

OPENAPI_TAGS = [
    {
        "name": "Authentication",
        "description": (
            "Buyer and seller sign-up, password login, token refresh, "
            "logout, password reset and email verification. Tokens are "
            "returned in the body and set as HttpOnly cookies; login, "
            "registration and token requests are rate limited per client."
        ),
    },
    {"name": "Health", "description": "Liveness check."},
]


@lru_cache(maxsize=1)
def _configure_logging(level_name: str) -> None:
    """Route log records to stdout; runs once per process and level."""
    level = getattr(logging, level_name.upper(), logging.INFO)
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    for name in OWN_LOGGERS:
        logging.getLogger(name).setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the auth tables on startup; release pools on shutdown."""
    logger.info("Agora API %s starting", API_VERSION)
    engine = app_engine(app)
    try:
        await create_tables(engine)
    except OSError as e:
        logger.critical("Database unreachable at startup: %s", e)
        raise SystemExit(1) from None

    yield

    store = getattr(app.state, "rate_limit_store", None)
    if store is not None:
        await store.close()
    await engine.dispose()
    logger.info("Agora API stopped")


def create_v1_router() -> APIRouter:
    router = APIRouter()
    router.include_router(auth_router, prefix="/auth", tags=["Authentication"])
    return router


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the API.

    Parameters
    ----------
    settings
        Explicit settings, mainly for tests; defaults to the environment.
        Every dependency, the database engine and the rate-limit store of
        this app are built from them.

    Returns
    -------
    The FastAPI application
    """
    active = settings or get_settings()
    _configure_logging(active.log_level)

    docs_enabled = active.debug
    app = FastAPI(
        title=f"{active.app_name} API",
        description="Authentication and session management for the marketplace.",
        version=API_VERSION,
        docs_url="/docs" if docs_enabled else None,
        redoc_url="/redoc" if docs_enabled else None,
        openapi_url="/openapi.json" if docs_enabled else None,
        openapi_tags=OPENAPI_TAGS,
        lifespan=lifespan,
    )
    app.state.settings = active

    app.add_middleware(
        CORSMiddleware,
        allow_origins=active.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(create_v1_router(), prefix=API_V1_PREFIX)

    @app.get("/health", tags=["Health"])
    async def health() -> dict:
        return {"status": "healthy", "version": API_VERSION}

    return app
