"""Authentication router for accounts, sessions and single-use account tokens."""

import logging
from typing import Annotated

from fastapi import APIRouter, Cookie, Request, Response, status

from agora.presentation.api.dependencies import (
    AccountTokens,
    AuthService,
    CurrentClaims,
    DBSession,
    GateDep,
    SettingsDep,
)
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
from agora_auth import (
    ACCESS_TOKEN_COOKIE,
    REFRESH_TOKEN_COOKIE,
    MissingTokenError,
    SessionExpiredError,
    SessionNotFoundError,
    TokenPair,
    UnauthorizedError,
    UserData,
)
from agora_auth.services import get_client_identifier
from agora_auth.shared.time import utc_now
from agora_config.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter()

# Refresh cookie is only sent to the auth endpoints
AUTH_COOKIE_PATH = "/api/v1/auth"


def _set_auth_cookies(response: Response, tokens: TokenPair, settings: Settings) -> None:
    """Set the access token cookie and the HttpOnly refresh token cookie."""
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=tokens.access_token,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=tokens.access_expires_in,
        path="/",
        domain=settings.api_cookie_domain,
    )
    response.set_cookie(
        key=REFRESH_TOKEN_COOKIE,
        value=tokens.refresh_token,
        httponly=True,
        secure=settings.api_cookie_secure,
        samesite=settings.api_cookie_samesite,
        max_age=max(0, int((tokens.refresh_expires_at - utc_now()).total_seconds())),
        path=AUTH_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def _clear_auth_cookies(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=ACCESS_TOKEN_COOKIE,
        path="/",
        domain=settings.api_cookie_domain,
    )
    response.delete_cookie(
        key=REFRESH_TOKEN_COOKIE,
        path=AUTH_COOKIE_PATH,
        domain=settings.api_cookie_domain,
    )


def _user_response(user: UserData) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role.value,
        email_verified=user.email_verified,
        created_at=user.created_at,
    )


def _token_response(tokens: TokenPair) -> TokenResponse:
    return TokenResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.access_expires_in,
        refresh_expires_at=tokens.refresh_expires_at,
    )


def _auth_response(user: UserData, tokens: TokenPair) -> AuthResponse:
    return AuthResponse(
        user=_user_response(user),
        **_token_response(tokens).model_dump(),
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    responses={
        201: {"description": "User registered successfully"},
        400: {"description": "Weak password"},
        403: {"description": "Role cannot be self-assigned"},
        409: {"description": "Email already registered"},
        429: {"description": "Too many registrations from this client"},
    },
)
async def register(
    body: RegisterRequest,
    request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Create a buyer or seller account and sign it in.

    Tokens are returned in the body and set as cookies.
    """
    client_id = get_client_identifier(request, settings.api_trust_proxy_headers)
    user, tokens = await auth_service.register(
        email=body.email,
        password=body.password,
        client_id=client_id,
        name=body.name,
        role=body.role,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_id,
    )
    await session.commit()

    _set_auth_cookies(response, tokens, settings)
    return _auth_response(user, tokens)


@router.post(
    "/login",
    summary="Authenticate user",
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
        429: {"description": "Too many attempts"},
    },
)
async def login(
    body: LoginRequest,
    request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Authenticate with email and password.

    Attempts are limited per client; the counter is reset on success.
    """
    client_id = get_client_identifier(request, settings.api_trust_proxy_headers)
    user, tokens = await auth_service.login(
        email=body.email,
        password=body.password,
        client_id=client_id,
        user_agent=request.headers.get("user-agent"),
        ip_address=client_id,
    )
    await session.commit()

    _set_auth_cookies(response, tokens, settings)
    return _auth_response(user, tokens)


@router.post(
    "/refresh",
    summary="Refresh access token",
    responses={
        200: {"description": "New access token issued"},
        401: {"description": "Invalid, expired or revoked refresh token"},
    },
)
async def refresh(
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    body: RefreshRequest | None = None,
    refresh_token_cookie: Annotated[
        str | None,
        Cookie(alias=REFRESH_TOKEN_COOKIE),
    ] = None,
) -> TokenResponse:
    """
    Get a new access token using a valid refresh token.

    The refresh token is read from the body (``refreshToken`` or
    ``refresh_token``) or from the HttpOnly cookie.
    """
    token = (body.refresh_token if body else None) or refresh_token_cookie
    if not token:
        msg = "No refresh token provided"
        raise MissingTokenError(msg)

    try:
        tokens = await auth_service.refresh(token)
    except (SessionExpiredError, SessionNotFoundError):
        await session.commit()  # Persist removal of the dead session
        raise
    await session.commit()

    _set_auth_cookies(response, tokens, settings)
    return _token_response(tokens)


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Logout user",
    responses={
        204: {"description": "Logged out (idempotent)"},
        401: {"description": "all_sessions requested without a valid access token"},
    },
)
async def logout(
    request: Request,
    response: Response,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
    gate: GateDep,
    body: LogoutRequest | None = None,
    refresh_token_cookie: Annotated[
        str | None,
        Cookie(alias=REFRESH_TOKEN_COOKIE),
    ] = None,
) -> None:
    """
    Revoke the current session, or every session with ``all_sessions``.

    Revoking an unknown or already revoked session is not an error.
    """
    if body is not None and body.all_sessions:
        # Missing, expired and invalid tokens keep their own error codes
        claims = gate.require_auth(request)
        revoked = await auth_service.logout_everywhere(claims.user_id)
        logger.info("User %s logged out of %d session(s)", claims.user_id, revoked)
    else:
        token = (body.refresh_token if body else None) or refresh_token_cookie
        if token:
            await auth_service.logout(refresh_token=token)
    await session.commit()

    _clear_auth_cookies(response, settings)


@router.get(
    "/me",
    summary="Get current user",
    responses={
        200: {"description": "Current user data"},
        401: {"description": "Not authenticated"},
    },
)
async def get_me(claims: CurrentClaims, auth_service: AuthService) -> UserResponse:
    """Get the authenticated user's account."""
    user = await auth_service.get_user(claims.user_id)
    if user is None:
        msg = "User not found"
        raise UnauthorizedError(msg)
    return _user_response(user)


@router.post(
    "/change-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Change password",
    responses={
        204: {"description": "Password changed, all sessions revoked"},
        400: {"description": "New password too weak"},
        401: {"description": "Current password incorrect or not authenticated"},
    },
)
async def change_password(
    body: ChangePasswordRequest,
    response: Response,
    claims: CurrentClaims,
    auth_service: AuthService,
    session: DBSession,
    settings: SettingsDep,
) -> None:
    """
    Change the current user's password.

    Every refresh session of the user is revoked; clients must log in again
    once their access token expires.
    """
    await auth_service.change_password(
        user_id=claims.user_id,
        current_password=body.current_password,
        new_password=body.new_password,
    )
    await session.commit()

    _clear_auth_cookies(response, settings)


@router.post(
    "/forgot-password",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request password reset",
    responses={
        202: {"description": "If the email exists, a reset token has been sent"},
        429: {"description": "Too many requests from this client"},
    },
)
async def forgot_password(
    body: ForgotPasswordRequest,
    request: Request,
    account_tokens: AccountTokens,
    session: DBSession,
    settings: SettingsDep,
) -> MessageResponse:
    """Request a password reset token. The answer never reveals whether the email exists."""
    await account_tokens.request_password_reset(
        email=body.email,
        client_id=get_client_identifier(request, settings.api_trust_proxy_headers),
    )
    await session.commit()

    return MessageResponse(message="If the email exists, a reset token has been sent.")


@router.post(
    "/reset-password",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset password with token",
    responses={
        204: {"description": "Password reset, all sessions revoked"},
        400: {"description": "Invalid or expired token, or weak password"},
    },
)
async def reset_password(
    body: ResetPasswordRequest,
    response: Response,
    account_tokens: AccountTokens,
    session: DBSession,
    settings: SettingsDep,
) -> None:
    """
    Set a new password with a reset token.

    The token can be used once; every session of the user is revoked.
    """
    await account_tokens.reset_password(token=body.token, new_password=body.new_password)
    await session.commit()

    _clear_auth_cookies(response, settings)


@router.post(
    "/verify-email/request",
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request email verification",
    responses={
        202: {"description": "If the email awaits verification, a token has been sent"},
        429: {"description": "Too many requests from this client"},
    },
)
async def request_email_verification(
    body: EmailVerificationRequest,
    request: Request,
    account_tokens: AccountTokens,
    session: DBSession,
    settings: SettingsDep,
) -> MessageResponse:
    await account_tokens.request_email_verification(
        email=body.email,
        client_id=get_client_identifier(request, settings.api_trust_proxy_headers),
    )
    await session.commit()

    return MessageResponse(
        message="If the email awaits verification, a verification token has been sent.",
    )


@router.post(
    "/verify-email",
    summary="Verify email with token",
    responses={
        200: {"description": "Email verified"},
        400: {"description": "Invalid or expired token"},
    },
)
async def verify_email(
    body: VerifyEmailRequest,
    account_tokens: AccountTokens,
    session: DBSession,
) -> UserResponse:
    """Redeem a verification token and return the now verified account."""
    user = await account_tokens.verify_email(body.token)
    await session.commit()
    return _user_response(user)
