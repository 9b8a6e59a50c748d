"""Authentication service for user registration and login."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from uuid import UUID

from agora_auth import (
    EmailAlreadyExistsError,
    ForbiddenError,
    InvalidCredentialsError,
    PasswordHashingService,
    RateLimiter,
    SessionService,
    TokenPair,
    UserData,
    UserRole,
)
from agora_auth.roles import SELF_REGISTRATION_ROLES

if TYPE_CHECKING:
    from agora_auth.repositories import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptPolicy:
    """Attempts allowed per window for one rate-limited operation."""

    max_attempts: int
    window_seconds: int


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthenticationService:
    """
    Application service for user authentication.

    Orchestrates agora_auth infrastructure (password hashing, sessions,
    rate limiting) to provide:
    - User registration
    - Login with password
    - Token refresh and logout
    - Password change

    Repository writes are flushed but not committed; the caller commits
    once the whole operation succeeded.
    """

    def __init__(
        self,
        user_repository: UserRepository,
        password_service: PasswordHashingService,
        session_service: SessionService,
        login_limiter: RateLimiter,
        register_limiter: RateLimiter,
        login_policy: AttemptPolicy,
        register_policy: AttemptPolicy,
    ):
        self._user_repo = user_repository
        self._password_service = password_service
        self._session_service = session_service
        self._login_limiter = login_limiter
        self._register_limiter = register_limiter
        self._login_policy = login_policy
        self._register_policy = register_policy

    async def register(
        self,
        email: str,
        password: str,
        client_id: str,
        name: str | None = None,
        role: UserRole | str = UserRole.BUYER,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[UserData, TokenPair]:
        """
        Create an account and open its first session.

        Raises
        ------
        RateLimitedError
            If the client registered too often in the current window
        ForbiddenError
            If the requested role cannot be chosen at sign-up
        WeakPasswordError
            If the password fails the strength rules
        EmailAlreadyExistsError
            If the email is already registered
        """
        await self._register_limiter.enforce(
            client_id,
            self._register_policy.max_attempts,
            self._register_policy.window_seconds,
        )

        try:
            requested_role = UserRole.parse(role)
        except ValueError as e:
            msg = "Requested role is not available"
            raise ForbiddenError(msg) from e
        if requested_role not in SELF_REGISTRATION_ROLES:
            msg = f"Cannot self-register as {requested_role.value}"
            raise ForbiddenError(msg)

        self._password_service.validate_strength(password)

        email = normalize_email(email)
        if await self._user_repo.find_by_email(email) is not None:
            raise EmailAlreadyExistsError(email)

        user = await self._user_repo.create(
            email=email,
            password_hash=self._password_service.hash(password),
            role=requested_role,
            name=name,
        )
        tokens = await self._session_service.create_session(
            user,
            user_agent=user_agent,
            ip_address=ip_address,
        )

        logger.info("User registered: %s (role: %s)", user.id, user.role.value)
        return user, tokens

    async def login(
        self,
        email: str,
        password: str,
        client_id: str,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> tuple[UserData, TokenPair]:
        """
        Verify credentials and open a session.

        Unknown emails and wrong passwords fail identically.

        Raises
        ------
        RateLimitedError
            If the client exhausted its login attempts
        InvalidCredentialsError
            If email or password is wrong
        """
        await self._login_limiter.enforce(
            client_id,
            self._login_policy.max_attempts,
            self._login_policy.window_seconds,
        )

        user = await self._user_repo.find_by_email(normalize_email(email))
        if user is None or user.password_hash is None:
            self._password_service.verify_dummy(password)
            raise InvalidCredentialsError

        if not self._password_service.verify(password, user.password_hash):
            logger.info("Failed login for user: %s", user.id)
            raise InvalidCredentialsError

        await self._login_limiter.reset(client_id)

        if self._password_service.needs_rehash(user.password_hash):
            await self._user_repo.update_password_hash(
                user.id,
                self._password_service.hash(password),
            )
            logger.info("Upgraded password hash for user: %s", user.id)

        tokens = await self._session_service.create_session(
            user,
            user_agent=user_agent,
            ip_address=ip_address,
        )

        logger.info("User logged in: %s", user.id)
        return user, tokens

    async def refresh(self, refresh_token: str) -> TokenPair:
        return await self._session_service.refresh(refresh_token)

    async def logout(
        self,
        refresh_token: str | None = None,
        user_id: UUID | None = None,
    ) -> int:
        """Revoke one session by refresh token, or all sessions of a user."""
        deleted = await self._session_service.destroy_session(
            refresh_token=refresh_token,
            user_id=user_id,
        )
        logger.debug("Logout revoked %d session(s)", deleted)
        return deleted

    async def logout_everywhere(self, user_id: UUID) -> int:
        return await self._session_service.destroy_session(user_id=user_id)

    async def get_user(self, user_id: UUID) -> UserData | None:
        return await self._user_repo.find_by_id(user_id)

    async def change_password(
        self,
        user_id: UUID,
        current_password: str,
        new_password: str,
    ) -> int:
        """
        Replace the user's password and revoke every refresh session.

        Returns
        -------
        Number of sessions revoked

        Raises
        ------
        InvalidCredentialsError
            If the current password is wrong
        WeakPasswordError
            If the new password fails the strength rules
        """
        user = await self._user_repo.find_by_id(user_id)
        if user is None or not self._password_service.verify(
            current_password,
            user.password_hash,
        ):
            msg = "Current password is incorrect"
            raise InvalidCredentialsError(msg)

        self._password_service.validate_strength(new_password)

        await self._user_repo.update_password_hash(
            user_id,
            self._password_service.hash(new_password),
        )
        revoked = await self._session_service.destroy_session(user_id=user_id)

        logger.info("Password changed for user: %s", user_id)
        return revoked
