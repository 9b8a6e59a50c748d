"""SQLAlchemy implementation of RefreshSessionRepository."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from agora_auth.persistence.sqlalchemy.models import RefreshSessionModel
from agora_auth.repositories import RefreshSessionData, RefreshSessionRepository
from agora_auth.shared.time import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class RefreshSessionRepositorySQLAlchemy(RefreshSessionRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    def _to_data(self, model: RefreshSessionModel) -> RefreshSessionData:
        return RefreshSessionData(
            id=model.id,
            user_id=model.user_id,
            token_hash=model.token_hash,
            expires_at=ensure_tz_aware(model.expires_at),
            created_at=ensure_tz_aware(model.created_at),
            user_agent=model.user_agent,
            ip_address=model.ip_address,
        )

    async def create(
        self,
        user_id: UUID,
        token_hash: str,
        expires_at: datetime,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> RefreshSessionData:
        model = RefreshSessionModel(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            created_at=utc_now(),
            user_agent=user_agent[:512] if user_agent else None,
            ip_address=ip_address,
        )
        self._session.add(model)
        await self._session.flush()
        return self._to_data(model)

    async def find_by_token_hash(self, token_hash: str) -> RefreshSessionData | None:
        stmt = select(RefreshSessionModel).where(
            RefreshSessionModel.token_hash == token_hash,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def delete_by_token_hash(self, token_hash: str) -> bool:
        stmt = delete(RefreshSessionModel).where(
            RefreshSessionModel.token_hash == token_hash,
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        await self._session.flush()
        return (result.rowcount or 0) > 0

    async def delete_all_for_user(self, user_id: UUID) -> int:
        stmt = delete(RefreshSessionModel).where(
            RefreshSessionModel.user_id == user_id,
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0
        logger.info("Revoked %d refresh session(s) for user: %s", deleted, user_id)
        return deleted

    async def cleanup_expired(self) -> int:
        stmt = delete(RefreshSessionModel).where(
            RefreshSessionModel.expires_at <= utc_now(),
        ).execution_options(synchronize_session=False)
        result = await self._session.execute(stmt)
        await self._session.flush()
        deleted = result.rowcount or 0
        if deleted:
            logger.info("Cleaned up %d expired refresh session(s)", deleted)
        return deleted
