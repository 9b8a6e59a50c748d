"""Abstract repository interface for persisted refresh sessions."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True)
class RefreshSessionData:
    """A refresh token known to the server.

    Only the SHA-256 hash of the token is stored, so a database leak does
    not hand out usable refresh tokens.
    """

    id: UUID
    user_id: UUID
    token_hash: str
    expires_at: datetime
    created_at: datetime
    user_agent: str | None = None
    ip_address: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


class RefreshSessionRepository(ABC):
    @abstractmethod
    async def create(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> RefreshSessionData:
        pass

    @abstractmethod
    async def find_by_token_hash(self, token_hash: str) -> RefreshSessionData | None:
        pass

    @abstractmethod
    async def delete_by_token_hash(self, token_hash: str) -> bool:
        """Delete one session; False if nothing matched."""

    @abstractmethod
    async def delete_all_for_user(self, user_id: UUID) -> int:
        pass

    @abstractmethod
    async def cleanup_expired(self) -> int:
        pass
