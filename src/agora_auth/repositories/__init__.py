"""Repository interfaces for agora_auth.

This package defines abstract repository interfaces that can be implemented
by different persistence technologies (SQLAlchemy, Redis, in-memory).

The implementations live in agora_auth.persistence.
"""

from agora_auth.repositories.one_time_token_repository import (
    OneTimeTokenData,
    OneTimeTokenRepository,
)
from agora_auth.repositories.rate_limit_store import RateLimitStore
from agora_auth.repositories.refresh_session_repository import (
    RefreshSessionData,
    RefreshSessionRepository,
)
from agora_auth.repositories.user_repository import UserData, UserRepository

__all__ = [
    "OneTimeTokenData",
    "OneTimeTokenRepository",
    "RateLimitStore",
    "RefreshSessionData",
    "RefreshSessionRepository",
    "UserData",
    "UserRepository",
]
