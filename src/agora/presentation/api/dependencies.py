"""FastAPI dependency injection for the Agora API.

Provides dependencies for:
- The settings the app was created with, and the database and rate-limit
  store built from them
- Auth services (JWT, passwords, sessions, rate limiting, account tokens)
- Verified token claims of the caller (``CurrentClaims``, ``require_roles``,
  ``require_permissions``)

``create_app`` puts its settings on ``app.state.settings``; the engine and
the rate-limit store are created from those settings on first use and kept
on ``app.state`` until shutdown.
"""

import logging
from datetime import timedelta
from typing import Annotated, AsyncGenerator, Callable

from fastapi import Depends, FastAPI, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from agora.application.services import (
    AccountTokenService,
    AttemptPolicy,
    AuthenticationService,
)
from agora_auth import (
    AuthorizationGate,
    JWTService,
    LoggingTokenDelivery,
    PasswordHashingService,
    Permission,
    RateLimiter,
    RateLimitStore,
    SessionService,
    TokenDelivery,
    TokenPayload,
    UserRole,
)
from agora_auth.persistence.sqlalchemy import (
    AuthBase,
    OneTimeTokenRepositorySQLAlchemy,
    RefreshSessionRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from agora_auth.services import build_rate_limit_store
from agora_config.settings import Settings

logger = logging.getLogger(__name__)

# Documents bearer auth in OpenAPI; the gate does the actual extraction
security = HTTPBearer(auto_error=False)


# -----------------------------------------------------------------------------
# Settings & App-scoped Resources
# -----------------------------------------------------------------------------


def get_api_settings(request: Request) -> Settings:
    """Settings the running app was created with."""
    return request.app.state.settings


SettingsDep = Annotated[Settings, Depends(get_api_settings)]


def app_engine(app: FastAPI) -> AsyncEngine:
    """
    Get the app's async database engine, creating it on first use.

    Returns
    -------
    AsyncEngine built from ``app.state.settings.database_url``
    """
    state = app.state
    if getattr(state, "engine", None) is None:
        state.engine = create_async_engine(
            state.settings.database_url,
            echo=False,
            pool_pre_ping=True,  # Verify connections before use
        )
        state.session_maker = async_sessionmaker(
            state.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return state.engine


def app_rate_limit_store(app: FastAPI) -> RateLimitStore:
    """Get the app's rate-limit store (Redis or in-memory), creating it on first use."""
    state = app.state
    if getattr(state, "rate_limit_store", None) is None:
        state.rate_limit_store = build_rate_limit_store(state.settings.redis_url)
    return state.rate_limit_store


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Database session dependency.

    Anything not committed by the route handler is rolled back when the
    session closes.

    Yields
    ------
    AsyncSession for database operations
    """
    app_engine(request.app)
    async with request.app.state.session_maker() as session:
        yield session


DBSession = Annotated[AsyncSession, Depends(get_db_session)]


async def create_tables(engine: AsyncEngine) -> None:
    """Create the auth tables if missing (idempotent)."""
    async with engine.begin() as conn:
        await conn.run_sync(AuthBase.metadata.create_all)


def get_rate_limit_store(request: Request) -> RateLimitStore:
    return app_rate_limit_store(request.app)


RateLimitStoreDep = Annotated[RateLimitStore, Depends(get_rate_limit_store)]


# -----------------------------------------------------------------------------
# Authentication Services
# -----------------------------------------------------------------------------


def get_jwt_service(settings: SettingsDep) -> JWTService:
    """Get JWT service configured with API settings."""
    return JWTService(
        secret_key=settings.jwt_secret_key.get_secret_value(),
        access_token_expire_minutes=settings.jwt_access_token_expire_minutes,
        refresh_token_expire_days=settings.jwt_refresh_token_expire_days,
    )


def get_password_service(settings: SettingsDep) -> PasswordHashingService:
    return PasswordHashingService(
        rounds=settings.password_bcrypt_rounds,
        require_complexity=settings.password_require_complexity,
    )


def get_token_delivery() -> TokenDelivery:
    """Transport for reset and verification tokens; override to plug in mail."""
    return LoggingTokenDelivery()


JWTServiceDep = Annotated[JWTService, Depends(get_jwt_service)]
PasswordServiceDep = Annotated[PasswordHashingService, Depends(get_password_service)]
TokenDeliveryDep = Annotated[TokenDelivery, Depends(get_token_delivery)]


def get_authorization_gate(jwt_service: JWTServiceDep) -> AuthorizationGate:
    return AuthorizationGate(jwt_service)


GateDep = Annotated[AuthorizationGate, Depends(get_authorization_gate)]


def get_session_service(
    session: DBSession,
    jwt_service: JWTServiceDep,
    settings: SettingsDep,
) -> SessionService:
    return SessionService(
        jwt_service=jwt_service,
        session_repository=RefreshSessionRepositorySQLAlchemy(session),
        user_repository=UserRepositorySQLAlchemy(session),
        rotate_refresh_tokens=settings.jwt_refresh_token_rotation,
    )


SessionServiceDep = Annotated[SessionService, Depends(get_session_service)]


def get_authentication_service(
    session: DBSession,
    settings: SettingsDep,
    store: RateLimitStoreDep,
    session_service: SessionServiceDep,
    password_service: PasswordServiceDep,
) -> AuthenticationService:
    """
    Get authentication service with all dependencies.

    This service orchestrates registration, login and session management.
    """
    return AuthenticationService(
        user_repository=UserRepositorySQLAlchemy(session),
        password_service=password_service,
        session_service=session_service,
        login_limiter=RateLimiter(store, namespace="login"),
        register_limiter=RateLimiter(store, namespace="register"),
        login_policy=AttemptPolicy(
            max_attempts=settings.rate_limit_login_max_attempts,
            window_seconds=settings.rate_limit_login_window_seconds,
        ),
        register_policy=AttemptPolicy(
            max_attempts=settings.rate_limit_register_max_attempts,
            window_seconds=settings.rate_limit_register_window_seconds,
        ),
    )


AuthService = Annotated[AuthenticationService, Depends(get_authentication_service)]


def get_account_token_service(
    session: DBSession,
    settings: SettingsDep,
    store: RateLimitStoreDep,
    session_service: SessionServiceDep,
    password_service: PasswordServiceDep,
    delivery: TokenDeliveryDep,
) -> AccountTokenService:
    return AccountTokenService(
        user_repository=UserRepositorySQLAlchemy(session),
        token_repository=OneTimeTokenRepositorySQLAlchemy(session),
        password_service=password_service,
        session_service=session_service,
        delivery=delivery,
        limiter=RateLimiter(store, namespace="account_token"),
        policy=AttemptPolicy(
            max_attempts=settings.rate_limit_password_reset_max_attempts,
            window_seconds=settings.rate_limit_password_reset_window_seconds,
        ),
        reset_token_ttl=timedelta(minutes=settings.password_reset_token_expire_minutes),
        verification_token_ttl=timedelta(
            hours=settings.email_verification_token_expire_hours,
        ),
    )


AccountTokens = Annotated[AccountTokenService, Depends(get_account_token_service)]


# -----------------------------------------------------------------------------
# Current Caller (JWT Authentication)
# -----------------------------------------------------------------------------


async def get_current_claims(
    request: Request,
    gate: GateDep,
    _credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> TokenPayload:
    """
    Verified access-token claims of the caller.

    Reads the ``access_token`` cookie or the ``Authorization: Bearer``
    header. Auth errors propagate to the exception handlers (401).
    """
    return gate.require_auth(request)


CurrentClaims = Annotated[TokenPayload, Depends(get_current_claims)]


def require_roles(*roles: UserRole | str) -> Callable:
    """
    Build a dependency that admits only callers holding one of ``roles``.

    Examples
    --------
    >>> @router.get("/admin/stats")
    ... async def stats(claims: Annotated[TokenPayload, Depends(require_roles("admin"))]):
    ...     ...
    """
    allowed = frozenset(UserRole.parse(role) for role in roles)

    async def _require_roles(
        request: Request,
        gate: GateDep,
        _credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ) -> TokenPayload:
        return gate.require_role(request, allowed)

    return _require_roles


def require_permissions(*permissions: Permission) -> Callable:
    """
    Build a dependency that admits only callers whose role grants every
    one of ``permissions``. Unauthenticated callers get 401, others 403.

    Examples
    --------
    >>> @router.post("/products")
    ... async def create(
    ...     claims: Annotated[TokenPayload, Depends(require_permissions(Permission.CREATE_PRODUCT))],
    ... ):
    ...     ...
    """
    required = frozenset(permissions)

    async def _require_permissions(
        request: Request,
        gate: GateDep,
        _credentials: HTTPAuthorizationCredentials | None = Depends(security),
    ) -> TokenPayload:
        return gate.require_permission(request, required)

    return _require_permissions

