"""Authentication schemas for request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field


class RegisterRequest(BaseModel):
    """Request schema for user registration.

    Strength rules are enforced by the service so that weak passwords are
    reported with the ``WEAK_PASSWORD`` code rather than a schema error.
    """

    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., max_length=128, description="Password")
    name: str | None = Field(default=None, max_length=100)
    role: str = Field(default="buyer", description="buyer or seller")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "seller@example.com",
                "password": "Str0ng!Passw0rd",
                "name": "Jane's Pottery",
                "role": "seller",
            },
        },
    )


class LoginRequest(BaseModel):
    """Request schema for user login."""

    email: EmailStr
    password: str = Field(..., max_length=128)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "seller@example.com",
                "password": "Str0ng!Passw0rd",
            },
        },
    )


class RefreshRequest(BaseModel):
    """Request schema for token refresh.

    The refresh token is optional in the body; when absent the server
    reads it from the HttpOnly cookie instead.
    """

    refresh_token: str | None = Field(
        default=None,
        validation_alias=AliasChoices("refresh_token", "refreshToken"),
        description="Refresh token (optional - can also be sent via HttpOnly cookie)",
    )


class LogoutRequest(RefreshRequest):
    """Request schema for logout.

    ``all_sessions`` revokes every session of the authenticated user.
    """

    all_sessions: bool = Field(
        default=False,
        validation_alias=AliasChoices("all_sessions", "allSessions"),
    )


class ChangePasswordRequest(BaseModel):
    """Request schema for changing a user's password."""

    current_password: str = Field(..., max_length=128)
    new_password: str = Field(..., max_length=128)


class ForgotPasswordRequest(BaseModel):
    """Request schema for asking for a password reset token."""

    email: EmailStr


class ResetPasswordRequest(BaseModel):
    """Request schema for setting a new password with a reset token."""

    token: str = Field(..., min_length=1, max_length=256)
    new_password: str = Field(
        ...,
        max_length=128,
        validation_alias=AliasChoices("new_password", "newPassword"),
    )


class EmailVerificationRequest(BaseModel):
    """Request schema for (re)sending an email verification token."""

    email: EmailStr


class VerifyEmailRequest(BaseModel):
    """Request schema for redeeming an email verification token."""

    token: str = Field(..., min_length=1, max_length=256)


class MessageResponse(BaseModel):
    """Response schema for requests whose outcome is deliberately not disclosed."""

    message: str


class UserResponse(BaseModel):
    """Response schema for user data."""

    id: UUID
    email: str
    name: str | None = None
    role: str
    email_verified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TokenResponse(BaseModel):
    """Response schema for token data."""

    access_token: str
    refresh_token: str
    token_type: str = Field(default="bearer")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    refresh_expires_at: datetime


class AuthResponse(TokenResponse):
    """Response schema for authentication (login/register)."""

    user: UserResponse

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "user": {
                    "id": "550e8400-e29b-41d4-a716-446655440000",
                    "email": "seller@example.com",
                    "name": "Jane's Pottery",
                    "role": "seller",
                    "email_verified": False,
                    "created_at": "2024-12-05T10:30:00Z",
                },
                "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                "token_type": "bearer",
                "expires_in": 900,
                "refresh_expires_at": "2024-12-12T10:30:00Z",
            },
        },
    )
