"""Agora Auth - Authentication and authorization for the marketplace.

This package provides the auth subsystem independent of the HTTP
framework and the rest of the marketplace domain. It handles:
- Password hashing (bcrypt) and strength rules
- JWT access / refresh token creation and verification
- Revocable refresh sessions
- Attempt rate limiting (Redis or in-memory)
- Request authorization (token extraction, role and permission checks)
- Single-use password-reset and email-verification tokens

Architecture:
    agora_auth/
    ├── services/           # Password hashing, JWT, sessions, rate limiting, token delivery
    ├── repositories/       # Abstract interfaces
    ├── persistence/        # Implementations by technology
    │   ├── sqlalchemy/     # Users, refresh sessions, one-time tokens
    │   ├── redis/          # Shared rate-limit counters
    │   └── memory/         # Process-local rate-limit counters
    ├── gate.py             # Request authorization
    ├── roles.py            # Roles and permissions
    ├── schemas.py          # Data classes
    └── exceptions.py       # Auth exceptions

Usage:
    from agora_auth import AuthorizationGate, JWTService, UserRole

    gate = AuthorizationGate(JWTService(secret_key=...))
    payload = gate.require_role(request, [UserRole.ADMIN])
"""

from agora_auth.exceptions import (
    AuthError,
    ConfigError,
    EmailAlreadyExistsError,
    ErrorCode,
    ForbiddenError,
    InvalidCredentialsError,
    InvalidOneTimeTokenError,
    InvalidTokenError,
    MissingTokenError,
    RateLimitedError,
    SessionExpiredError,
    SessionNotFoundError,
    TokenExpiredError,
    UnauthorizedError,
    WeakPasswordError,
)
from agora_auth.gate import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, AuthorizationGate
from agora_auth.repositories import (
    OneTimeTokenData,
    OneTimeTokenRepository,
    RateLimitStore,
    RefreshSessionData,
    RefreshSessionRepository,
    UserData,
    UserRepository,
)
from agora_auth.roles import Permission, UserRole
from agora_auth.schemas import (
    RateLimitResult,
    TokenPair,
    TokenPayload,
    TokenPurpose,
    TokenType,
)
from agora_auth.services import (
    JWTService,
    LoggingTokenDelivery,
    PasswordHashingService,
    RateLimiter,
    SessionService,
    TokenDelivery,
)

__all__ = [
    # Services
    "PasswordHashingService",
    "JWTService",
    "SessionService",
    "RateLimiter",
    "TokenDelivery",
    "LoggingTokenDelivery",
    "AuthorizationGate",
    "ACCESS_TOKEN_COOKIE",
    "REFRESH_TOKEN_COOKIE",
    # Repositories (interfaces)
    "UserRepository",
    "RefreshSessionRepository",
    "RateLimitStore",
    "OneTimeTokenRepository",
    # Schemas
    "UserData",
    "RefreshSessionData",
    "OneTimeTokenData",
    "TokenPayload",
    "TokenPair",
    "TokenType",
    "TokenPurpose",
    "RateLimitResult",
    "UserRole",
    "Permission",
    # Exceptions
    "ErrorCode",
    "AuthError",
    "UnauthorizedError",
    "MissingTokenError",
    "InvalidTokenError",
    "TokenExpiredError",
    "SessionNotFoundError",
    "SessionExpiredError",
    "InvalidCredentialsError",
    "InvalidOneTimeTokenError",
    "ForbiddenError",
    "WeakPasswordError",
    "EmailAlreadyExistsError",
    "RateLimitedError",
    "ConfigError",
]
