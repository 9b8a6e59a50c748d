"""SQLAlchemy implementation of UserRepository."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from agora_auth.persistence.sqlalchemy.models import UserModel
from agora_auth.repositories import UserData, UserRepository
from agora_auth.roles import UserRole
from agora_auth.shared.time import ensure_tz_aware, utc_now

logger = logging.getLogger(__name__)


class UserRepositorySQLAlchemy(UserRepository):
    """
    SQLAlchemy implementation of UserRepository.

    Writes are flushed but not committed; the caller owns the transaction.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session.

        Parameters
        ----------
        session
            SQLAlchemy async session
        """
        self._session = session

    def _to_data(self, model: UserModel) -> UserData:
        """Map SQLAlchemy model to data transfer object."""
        return UserData(
            id=model.id,
            email=model.email,
            password_hash=model.password_hash,
            role=UserRole.parse(model.role),
            name=model.name,
            email_verified=model.email_verified,
            created_at=ensure_tz_aware(model.created_at),
            updated_at=ensure_tz_aware(model.updated_at),
        )

    async def create(
        self,
        email: str,
        password_hash: str | None,
        role: UserRole,
        name: str | None = None,
        email_verified: bool = False,
    ) -> UserData:
        now = utc_now()
        model = UserModel(
            email=email,
            password_hash=password_hash,
            role=UserRole.parse(role).value,
            name=name,
            email_verified=email_verified,
            created_at=now,
            updated_at=now,
        )
        self._session.add(model)
        await self._session.flush()
        logger.info("Created user %s (role: %s)", model.id, model.role)
        return self._to_data(model)

    async def find_by_id(self, user_id: UUID) -> UserData | None:
        model = await self._session.get(UserModel, user_id)
        return self._to_data(model) if model else None

    async def find_by_email(self, email: str) -> UserData | None:
        stmt = select(UserModel).where(UserModel.email == email)
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return self._to_data(model) if model else None

    async def update_password_hash(self, user_id: UUID, password_hash: str) -> bool:
        model = await self._session.get(UserModel, user_id)
        if model is None:
            return False

        model.password_hash = password_hash
        model.updated_at = utc_now()
        await self._session.flush()
        logger.debug("Updated password hash for user: %s", user_id)
        return True

    async def mark_email_verified(self, user_id: UUID) -> bool:
        model = await self._session.get(UserModel, user_id)
        if model is None:
            return False

        model.email_verified = True
        model.updated_at = utc_now()
        await self._session.flush()
        return True

    async def count(self) -> int:
        stmt = select(func.count()).select_from(UserModel)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())
