"""Authentication services.

Provides password hashing, JWT token management, refresh sessions,
attempt rate limiting and the single-use token delivery port.
"""

from agora_auth.services.jwt_service import JWTService
from agora_auth.services.password_service import PasswordHashingService
from agora_auth.services.rate_limit_service import (
    RateLimiter,
    build_rate_limit_store,
    get_client_identifier,
    rate_limit_headers,
)
from agora_auth.services.session_service import SessionService, hash_token
from agora_auth.services.token_delivery import LoggingTokenDelivery, TokenDelivery

__all__ = [
    "PasswordHashingService",
    "JWTService",
    "SessionService",
    "RateLimiter",
    "TokenDelivery",
    "LoggingTokenDelivery",
    "build_rate_limit_store",
    "get_client_identifier",
    "hash_token",
    "rate_limit_headers",
]
