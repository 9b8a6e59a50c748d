"""Password reset and email verification through single-use tokens."""

from __future__ import annotations

import logging
import secrets
from datetime import timedelta
from typing import TYPE_CHECKING
from uuid import UUID

from agora.application.services.authentication_service import (
    AttemptPolicy,
    normalize_email,
)
from agora_auth import (
    InvalidOneTimeTokenError,
    OneTimeTokenData,
    PasswordHashingService,
    RateLimiter,
    SessionService,
    TokenDelivery,
    TokenPurpose,
    UserData,
)
from agora_auth.services import hash_token
from agora_auth.shared.time import utc_now

if TYPE_CHECKING:
    from agora_auth.repositories import OneTimeTokenRepository, UserRepository

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


class AccountTokenService:
    """
    Issues and redeems the tokens behind "forgot password" and "verify email".

    Requests never reveal whether an address is registered: unknown or
    already verified addresses return exactly like a successful request.
    Issuing a token invalidates the user's earlier tokens of the same
    purpose, and a token can be redeemed once.

    Repository writes are flushed but not committed; the caller commits.
    """

    def __init__(  # noqa: PLR0913
        self,
        user_repository: UserRepository,
        token_repository: OneTimeTokenRepository,
        password_service: PasswordHashingService,
        session_service: SessionService,
        delivery: TokenDelivery,
        limiter: RateLimiter,
        policy: AttemptPolicy,
        reset_token_ttl: timedelta = timedelta(hours=1),
        verification_token_ttl: timedelta = timedelta(hours=24),
    ):
        self._user_repo = user_repository
        self._token_repo = token_repository
        self._password_service = password_service
        self._session_service = session_service
        self._delivery = delivery
        self._limiter = limiter
        self._policy = policy
        self._ttl = {
            TokenPurpose.PASSWORD_RESET: reset_token_ttl,
            TokenPurpose.EMAIL_VERIFICATION: verification_token_ttl,
        }

    async def _enforce_limit(self, purpose: TokenPurpose, client_id: str) -> None:
        await self._limiter.enforce(
            f"{purpose.value}:{client_id}",
            self._policy.max_attempts,
            self._policy.window_seconds,
        )

    async def _issue(self, user: UserData, purpose: TokenPurpose) -> None:
        await self._token_repo.invalidate_all_for_user(user.id, purpose)

        raw_token = secrets.token_urlsafe(TOKEN_BYTES)
        expires_at = utc_now() + self._ttl[purpose]
        await self._token_repo.create(
            user_id=user.id,
            purpose=purpose,
            token_hash=hash_token(raw_token),
            expires_at=expires_at,
        )

        try:
            await self._delivery.deliver(user, purpose, raw_token, expires_at)
        except Exception:
            # The token stays valid; the user can ask again
            logger.exception("Delivery of %s token failed for user: %s", purpose.value, user.id)
            return
        logger.info("Issued %s token for user: %s", purpose.value, user.id)

    async def _redeem(self, token: str, purpose: TokenPurpose) -> OneTimeTokenData:
        record = await self._token_repo.find_valid_by_hash(hash_token(token), purpose)
        if record is None:
            logger.info("Rejected %s token (unknown, used or expired)", purpose.value)
            raise InvalidOneTimeTokenError
        return record

    async def _consume(self, record: OneTimeTokenData) -> None:
        # Only one of two concurrent redemptions flips used_at
        if not await self._token_repo.mark_used(record.id):
            raise InvalidOneTimeTokenError

    async def request_password_reset(self, email: str, client_id: str) -> None:
        """
        Issue a reset token if the email belongs to an account.

        Raises
        ------
        RateLimitedError
            If the client asked too often in the current window
        """
        await self._enforce_limit(TokenPurpose.PASSWORD_RESET, client_id)

        user = await self._user_repo.find_by_email(normalize_email(email))
        if user is None:
            logger.debug("Password reset requested for an unknown email")
            return

        await self._issue(user, TokenPurpose.PASSWORD_RESET)

    async def reset_password(self, token: str, new_password: str) -> UUID:
        """
        Set a new password with a reset token.

        The token is consumed, the user's other reset tokens are invalidated
        and every refresh session of the user is revoked.

        Returns
        -------
        ID of the user whose password was reset

        Raises
        ------
        InvalidOneTimeTokenError
            If the token is unknown, used or expired
        WeakPasswordError
            If the new password fails the strength rules; the token stays
            usable
        """
        record = await self._redeem(token, TokenPurpose.PASSWORD_RESET)
        self._password_service.validate_strength(new_password)
        await self._consume(record)

        updated = await self._user_repo.update_password_hash(
            record.user_id,
            self._password_service.hash(new_password),
        )
        if not updated:
            raise InvalidOneTimeTokenError

        await self._token_repo.invalidate_all_for_user(
            record.user_id,
            TokenPurpose.PASSWORD_RESET,
        )
        revoked = await self._session_service.destroy_session(user_id=record.user_id)

        logger.info(
            "Password reset for user %s; %d session(s) revoked",
            record.user_id,
            revoked,
        )
        return record.user_id

    async def request_email_verification(self, email: str, client_id: str) -> None:
        """Issue a verification token unless the address is unknown or already verified."""
        await self._enforce_limit(TokenPurpose.EMAIL_VERIFICATION, client_id)

        user = await self._user_repo.find_by_email(normalize_email(email))
        if user is None or user.email_verified:
            logger.debug("Verification requested for an unknown or verified email")
            return

        await self._issue(user, TokenPurpose.EMAIL_VERIFICATION)

    async def verify_email(self, token: str) -> UserData:
        """
        Mark the token owner's email as verified.

        Raises
        ------
        InvalidOneTimeTokenError
            If the token is unknown, used or expired, or its user is gone
        """
        record = await self._redeem(token, TokenPurpose.EMAIL_VERIFICATION)
        await self._consume(record)

        if not await self._user_repo.mark_email_verified(record.user_id):
            raise InvalidOneTimeTokenError
        await self._token_repo.invalidate_all_for_user(
            record.user_id,
            TokenPurpose.EMAIL_VERIFICATION,
        )

        user = await self._user_repo.find_by_id(record.user_id)
        if user is None:
            raise InvalidOneTimeTokenError

        logger.info("Email verified for user: %s", user.id)
        return user
