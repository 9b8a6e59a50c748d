"""Abstract repository interface for single-use account tokens.

Password-reset and email-verification links carry a random token; only its
SHA-256 hash is stored, together with the purpose it was issued for.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from agora_auth.schemas import TokenPurpose


@dataclass(frozen=True)
class OneTimeTokenData:
    id: UUID
    user_id: UUID
    purpose: TokenPurpose
    token_hash: str
    expires_at: datetime
    used_at: datetime | None
    created_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_used(self) -> bool:
        return self.used_at is not None


class OneTimeTokenRepository(ABC):
    @abstractmethod
    async def create(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        token_hash: str,
        expires_at: datetime,
    ) -> OneTimeTokenData:
        pass

    @abstractmethod
    async def find_valid_by_hash(
        self,
        token_hash: str,
        purpose: TokenPurpose,
    ) -> OneTimeTokenData | None:
        """Find an unused, unexpired token issued for ``purpose``."""

    @abstractmethod
    async def mark_used(self, token_id: UUID) -> bool:
        """
        Consume a token.

        Returns
        -------
        False if the token was already used, so only one redemption wins
        """

    @abstractmethod
    async def invalidate_all_for_user(self, user_id: UUID, purpose: TokenPurpose) -> int:
        """Mark every unused token of the user for ``purpose`` as used."""

    @abstractmethod
    async def cleanup_expired(self) -> int:
        pass
