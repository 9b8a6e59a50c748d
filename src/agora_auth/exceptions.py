"""Authentication exceptions and error codes.

These exceptions are raised by the agora_auth package and should be
caught and handled by the application or presentation layer. Each one
carries a stable error code and the HTTP status it maps to, so the API
layer can translate it without knowing the individual types.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for API clients.

    These codes are part of the public API contract. Should not be changed.
    """

    # Authentication (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    MISSING_TOKEN = "MISSING_TOKEN"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Authorization (403)
    FORBIDDEN = "FORBIDDEN"

    # Input (400 / 409)
    WEAK_PASSWORD = "WEAK_PASSWORD"
    INVALID_ONE_TIME_TOKEN = "INVALID_ONE_TIME_TOKEN"
    EMAIL_ALREADY_EXISTS = "EMAIL_ALREADY_EXISTS"

    # Abuse mitigation (429)
    RATE_LIMITED = "RATE_LIMITED"

    # Server misconfiguration (500)
    CONFIG_ERROR = "CONFIG_ERROR"


class AuthError(Exception):
    """Base exception for all authentication errors.

    Attributes
    ----------
    message
        Human-readable error message (safe for end users)
    code
        Stable error code for programmatic handling
    status_code
        HTTP status the presentation layer should answer with
    """

    code: ErrorCode = ErrorCode.UNAUTHORIZED
    status_code: int = 401

    def __init__(self, message: str = "Authentication error"):
        self.message = message
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"code={self.code.value!r})"
        )


class UnauthorizedError(AuthError):
    """Raised when no valid identity could be established."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class MissingTokenError(UnauthorizedError):
    """Raised when a request carries no bearer token at all."""

    code = ErrorCode.MISSING_TOKEN

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class InvalidTokenError(UnauthorizedError):
    """Raised when a JWT has a bad signature, bad structure or wrong type."""

    code = ErrorCode.INVALID_TOKEN

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class TokenExpiredError(UnauthorizedError):
    """Raised when a correctly signed JWT is past its expiry."""

    code = ErrorCode.TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class SessionNotFoundError(UnauthorizedError):
    """Raised when a refresh token has no persisted session (revoked or forged)."""

    code = ErrorCode.SESSION_NOT_FOUND

    def __init__(self, message: str = "Refresh token not found or has been revoked"):
        super().__init__(message)


class SessionExpiredError(UnauthorizedError):
    """Raised when the persisted refresh session is past its expiry."""

    code = ErrorCode.SESSION_EXPIRED

    def __init__(self, message: str = "Refresh token has expired"):
        super().__init__(message)


class InvalidCredentialsError(UnauthorizedError):
    """Raised when email or password is incorrect during login."""

    code = ErrorCode.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class ForbiddenError(AuthError):
    """Raised when an authenticated user lacks the required role."""

    code = ErrorCode.FORBIDDEN
    status_code = 403

    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


class WeakPasswordError(AuthError):
    """Raised when a password doesn't meet strength requirements."""

    code = ErrorCode.WEAK_PASSWORD
    status_code = 400

    def __init__(
        self,
        message: str = "Password does not meet requirements",
        errors: list[str] | None = None,
    ):
        self.errors = errors or [message]
        super().__init__(message)


class InvalidOneTimeTokenError(AuthError):
    """Raised when a reset or verification token is unknown, used or expired.

    The three cases are reported alike.
    """

    code = ErrorCode.INVALID_ONE_TIME_TOKEN
    status_code = 400

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


class EmailAlreadyExistsError(AuthError):
    """Raised when registering an email that already has an account."""

    code = ErrorCode.EMAIL_ALREADY_EXISTS
    status_code = 409

    def __init__(self, email: str):
        self.email = email
        super().__init__("Email address is already registered")


class RateLimitedError(AuthError):
    """Raised when a client exhausted its attempt budget for the window."""

    code = ErrorCode.RATE_LIMITED
    status_code = 429

    def __init__(
        self,
        reset_at: datetime,
        limit: int,
        message: str = "Too many attempts. Try again later.",
    ):
        self.reset_at = reset_at
        self.limit = limit
        super().__init__(message)

    @property
    def details(self) -> dict[str, Any]:
        return {"reset_at": self.reset_at.isoformat(), "limit": self.limit}


class ConfigError(AuthError):
    """Raised when the auth subsystem is misconfigured (e.g. no signing secret).

    Never downgraded to an anonymous request: callers must let it surface.
    """

    code = ErrorCode.CONFIG_ERROR
    status_code = 500

    def __init__(self, message: str = "Authentication is not configured"):
        super().__init__(message)
