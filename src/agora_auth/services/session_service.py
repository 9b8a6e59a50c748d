"""Refresh-session management.

Issues token pairs and keeps the server-side record that makes refresh
tokens revocable. Only the SHA-256 hash of a refresh token is ever stored.
"""

from __future__ import annotations

import hashlib
import logging
from typing import TYPE_CHECKING
from uuid import UUID

from agora_auth.exceptions import (
    SessionExpiredError,
    SessionNotFoundError,
    TokenExpiredError,
)
from agora_auth.schemas import TokenPair, TokenType
from agora_auth.shared.time import utc_now

if TYPE_CHECKING:
    from agora_auth.repositories import (
        RefreshSessionRepository,
        UserData,
        UserRepository,
    )
    from agora_auth.services.jwt_service import JWTService

logger = logging.getLogger(__name__)


def hash_token(token: str) -> str:
    """Return the hex SHA-256 digest under which a refresh token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionService:
    """
    Session manager for access/refresh token pairs.

    - ``create_session`` issues both tokens and persists the refresh session
    - ``refresh`` exchanges a live refresh token for a new access token
    - ``destroy_session`` revokes one session or every session of a user

    Refresh tokens are not rotated unless ``rotate_refresh_tokens`` is set.
    With rotation, the old session row is deleted before the new one is
    written; a delete that affects no row means another request already
    consumed the token and the refresh fails.
    """

    def __init__(
        self,
        jwt_service: JWTService,
        session_repository: RefreshSessionRepository,
        user_repository: UserRepository,
        rotate_refresh_tokens: bool = False,
    ):
        self._jwt_service = jwt_service
        self._session_repo = session_repository
        self._user_repo = user_repository
        self._rotate = rotate_refresh_tokens

    @property
    def rotates_refresh_tokens(self) -> bool:
        return self._rotate

    def _access_expires_in(self) -> int:
        return int(self._jwt_service.access_expire.total_seconds())

    def _create_access_token(self, user: UserData) -> str:
        return self._jwt_service.create_access_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            name=user.name,
        )

    async def create_session(
        self,
        user: UserData,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> TokenPair:
        """
        Issue a token pair and persist the refresh session.

        Parameters
        ----------
        user
            The authenticated user
        user_agent
            Client user agent, stored for session listings
        ip_address
            Client address, stored for session listings

        Returns
        -------
        The new access and refresh tokens
        """
        access_token = self._create_access_token(user)
        refresh_token = self._jwt_service.create_refresh_token(
            user_id=user.id,
            email=user.email,
            role=user.role,
            name=user.name,
        )
        expires_at = utc_now() + self._jwt_service.refresh_expire

        await self._session_repo.create(
            user_id=user.id,
            token_hash=hash_token(refresh_token),
            expires_at=expires_at,
            user_agent=user_agent,
            ip_address=ip_address,
        )

        logger.debug("Refresh session created for user: %s", user.id)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            access_expires_in=self._access_expires_in(),
            refresh_expires_at=expires_at,
        )

    async def refresh(self, refresh_token: str) -> TokenPair:
        """
        Exchange a refresh token for a new access token.

        Raises
        ------
        InvalidTokenError
            If the token is malformed, badly signed or not a refresh token
        SessionNotFoundError
            If no session exists for the token (logged out, rotated, forged)
            or its user no longer exists
        SessionExpiredError
            If the token or its stored session is past its expiry; the
            session row is deleted
        """
        token_hash = hash_token(refresh_token)
        try:
            payload = self._jwt_service.verify_token(
                refresh_token,
                expected_type=TokenType.REFRESH,
            )
        except TokenExpiredError as e:
            # Signature and type were checked before exp
            if await self._session_repo.delete_by_token_hash(token_hash):
                logger.info("Expired refresh session removed (token past exp)")
            raise SessionExpiredError from e

        session = await self._session_repo.find_by_token_hash(token_hash)
        if session is None:
            logger.warning(
                "Refresh rejected (%s) for user: %s",
                SessionNotFoundError.code.value,
                payload.user_id,
            )
            raise SessionNotFoundError

        if session.is_expired(utc_now()):
            await self._session_repo.delete_by_token_hash(token_hash)
            logger.info("Expired refresh session removed for user: %s", session.user_id)
            raise SessionExpiredError

        user = await self._user_repo.find_by_id(session.user_id)
        if user is None:
            await self._session_repo.delete_by_token_hash(token_hash)
            msg = "User no longer exists"
            raise SessionNotFoundError(msg)

        if not self._rotate:
            return TokenPair(
                access_token=self._create_access_token(user),
                refresh_token=refresh_token,
                access_expires_in=self._access_expires_in(),
                refresh_expires_at=session.expires_at,
            )

        # The delete is the swap guard: only one concurrent refresh wins
        if not await self._session_repo.delete_by_token_hash(token_hash):
            raise SessionNotFoundError

        logger.debug("Rotating refresh token for user: %s", user.id)
        return await self.create_session(
            user,
            user_agent=session.user_agent,
            ip_address=session.ip_address,
        )

    async def destroy_session(
        self,
        refresh_token: str | None = None,
        user_id: UUID | None = None,
    ) -> int:
        """
        Revoke one session (by refresh token) or all sessions of a user.

        Exactly one selector must be given. Revoking something that does
        not exist is not an error.

        Returns
        -------
        Number of sessions deleted

        Raises
        ------
        ValueError
            If both or neither selector is given
        """
        if (refresh_token is None) == (user_id is None):
            msg = "Exactly one of refresh_token or user_id must be given"
            raise ValueError(msg)

        if refresh_token is not None:
            deleted = await self._session_repo.delete_by_token_hash(
                hash_token(refresh_token),
            )
            return 1 if deleted else 0

        return await self._session_repo.delete_all_for_user(user_id)

    async def cleanup_expired(self) -> int:
        """Bulk-delete every expired session; returns the number removed."""
        return await self._session_repo.cleanup_expired()
