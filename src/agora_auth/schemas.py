"""Immutable values passed between the auth services and their callers."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from uuid import UUID

from agora_auth.roles import UserRole


class TokenType(str, Enum):
    """Discriminator embedded in every JWT."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenPurpose(str, Enum):
    """What a single-use account token may be redeemed for."""

    PASSWORD_RESET = "password_reset"
    EMAIL_VERIFICATION = "email_verification"


@dataclass(frozen=True)
class TokenPayload:
    """Claims of a token that passed verification.

    Attributes
    ----------
    user_id
        Subject (``sub`` claim)
    email
        E-mail at issue time
    role
        Marketplace role at issue time
    exp
        Expiry, timezone-aware UTC
    token_type
        Either access or refresh
    jti
        Unique token identifier
    name
        Optional display name
    """

    user_id: UUID
    email: str
    role: UserRole
    exp: datetime
    token_type: TokenType
    jti: str
    name: str | None = None

    def is_expired(self) -> bool:
        return datetime.now(tz=timezone.utc) >= self.exp

    def is_access_token(self) -> bool:
        return self.token_type == TokenType.ACCESS

    def is_refresh_token(self) -> bool:
        return self.token_type == TokenType.REFRESH


@dataclass(frozen=True)
class TokenPair:
    """Access and refresh token issued together for one session."""

    access_token: str
    refresh_token: str
    access_expires_in: int  # seconds
    refresh_expires_at: datetime


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of one rate-limit check."""

    limited: bool
    limit: int
    remaining: int
    reset_at: datetime
