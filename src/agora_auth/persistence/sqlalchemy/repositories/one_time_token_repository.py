"""SQLAlchemy implementation of OneTimeTokenRepository."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from agora_auth.persistence.sqlalchemy.models import OneTimeTokenModel
from agora_auth.repositories import OneTimeTokenData, OneTimeTokenRepository
from agora_auth.schemas import TokenPurpose
from agora_auth.shared.time import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class OneTimeTokenRepositorySQLAlchemy(OneTimeTokenRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_data(self, model: OneTimeTokenModel) -> OneTimeTokenData:
        return OneTimeTokenData(
            id=model.id,
            user_id=model.user_id,
            purpose=TokenPurpose(model.purpose),
            token_hash=model.token_hash,
            expires_at=ensure_tz_aware(model.expires_at),
            used_at=ensure_tz_aware(model.used_at) if model.used_at else None,
            created_at=ensure_tz_aware(model.created_at),
        )

    async def create(
        self,
        user_id: UUID,
        purpose: TokenPurpose,
        token_hash: str,
        expires_at: datetime,
    ) -> OneTimeTokenData:
        model = OneTimeTokenModel(
            user_id=user_id,
            purpose=purpose.value,
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=utc_now(),
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_data(model)

    async def find_valid_by_hash(
        self,
        token_hash: str,
        purpose: TokenPurpose,
    ) -> OneTimeTokenData | None:
        stmt = select(OneTimeTokenModel).where(
            OneTimeTokenModel.token_hash == token_hash,
            OneTimeTokenModel.purpose == purpose.value,
            OneTimeTokenModel.used_at.is_(None),
            OneTimeTokenModel.expires_at > utc_now(),
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def mark_used(self, token_id: UUID) -> bool:
        stmt = (
            update(OneTimeTokenModel)
            .where(
                OneTimeTokenModel.id == token_id,
                OneTimeTokenModel.used_at.is_(None),
            )
            .values(used_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return (result.rowcount or 0) > 0

    async def invalidate_all_for_user(self, user_id: UUID, purpose: TokenPurpose) -> int:
        stmt = (
            update(OneTimeTokenModel)
            .where(
                OneTimeTokenModel.user_id == user_id,
                OneTimeTokenModel.purpose == purpose.value,
                OneTimeTokenModel.used_at.is_(None),
            )
            .values(used_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        await self._session.flush()
        return result.rowcount or 0

    async def cleanup_expired(self) -> int:
        stmt = delete(OneTimeTokenModel).where(
            OneTimeTokenModel.expires_at <= utc_now(),
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0
        if deleted:
            logger.info("Cleaned up %d expired one-time token(s)", deleted)
        return deleted
