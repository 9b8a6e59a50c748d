"""SessionService on SQLite: real tokens, real session rows."""

from datetime import timedelta

import pytest
import pytest_asyncio

from agora_auth.exceptions import SessionExpiredError
from agora_auth.persistence.sqlalchemy import (
    RefreshSessionRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from agora_auth.roles import UserRole
from agora_auth.services import JWTService, SessionService, hash_token
from agora_auth.shared.time import utc_now

SECRET = "test-secret-key-0123456789-abcdefghij"


@pytest_asyncio.fixture
async def user(db_session):
    repo = UserRepositorySQLAlchemy(db_session)
    return await repo.create("buyer@example.com", "$2b$04$hash", UserRole.BUYER)


class TestRefreshAgainstDatabase:
    def _service(self, db_session, jwt_service: JWTService) -> SessionService:
        return SessionService(
            jwt_service,
            RefreshSessionRepositorySQLAlchemy(db_session),
            UserRepositorySQLAlchemy(db_session),
        )

    @pytest.mark.asyncio
    async def test_live_session_refreshes(self, db_session, user):
        service = self._service(db_session, JWTService(secret_key=SECRET))
        pair = await service.create_session(user)

        refreshed = await service.refresh(pair.refresh_token)

        assert refreshed.refresh_token == pair.refresh_token
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        assert await repo.find_by_token_hash(hash_token(pair.refresh_token)) is not None

    @pytest.mark.asyncio
    async def test_expired_refresh_token_removes_stored_session(self, db_session, user):
        jwt_service = JWTService(secret_key=SECRET)
        service = self._service(db_session, jwt_service)
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        # Token and row both ran out, as they do once the lifetime has passed
        expired = jwt_service.create_refresh_token(
            user.id,
            user.email,
            user.role,
            expires_delta=timedelta(seconds=-1),
        )
        await repo.create(
            user_id=user.id,
            token_hash=hash_token(expired),
            expires_at=utc_now() - timedelta(seconds=1),
        )

        with pytest.raises(SessionExpiredError):
            await service.refresh(expired)

        assert await repo.find_by_token_hash(hash_token(expired)) is None

    @pytest.mark.asyncio
    async def test_other_sessions_survive_expiry_cleanup(self, db_session, user):
        jwt_service = JWTService(secret_key=SECRET)
        service = self._service(db_session, jwt_service)
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        live = await service.create_session(user)
        expired = jwt_service.create_refresh_token(
            user.id,
            user.email,
            user.role,
            expires_delta=timedelta(seconds=-1),
        )
        await repo.create(user.id, hash_token(expired), utc_now() - timedelta(seconds=1))

        with pytest.raises(SessionExpiredError):
            await service.refresh(expired)

        assert await repo.find_by_token_hash(hash_token(live.refresh_token)) is not None
