from agora.presentation.api.schemas.auth import (
    AuthResponse,
    ChangePasswordRequest,
    EmailVerificationRequest,
    ForgotPasswordRequest,
    LoginRequest,
    LogoutRequest,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserResponse,
    VerifyEmailRequest,
)

__all__ = [
    "AuthResponse",
    "ChangePasswordRequest",
    "EmailVerificationRequest",
    "ForgotPasswordRequest",
    "LoginRequest",
    "LogoutRequest",
    "MessageResponse",
    "RefreshRequest",
    "RegisterRequest",
    "ResetPasswordRequest",
    "TokenResponse",
    "UserResponse",
    "VerifyEmailRequest",
]
