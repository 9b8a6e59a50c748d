"""Tests for RefreshSessionRepositorySQLAlchemy against SQLite."""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from agora_auth.persistence.sqlalchemy import (
    RefreshSessionRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from agora_auth.roles import UserRole
from agora_auth.shared.time import utc_now


@pytest_asyncio.fixture
async def users(db_session):
    repo = UserRepositorySQLAlchemy(db_session)
    first = await repo.create("first@example.com", "$2b$04$hash", UserRole.BUYER)
    second = await repo.create("second@example.com", "$2b$04$hash", UserRole.SELLER)
    return first, second


class TestRefreshSessionRepositorySQLAlchemy:
    @pytest.mark.asyncio
    async def test_create_and_find(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        expires_at = utc_now() + timedelta(days=7)

        created = await repo.create(
            user_id=users[0].id,
            token_hash="a" * 64,
            expires_at=expires_at,
            user_agent="Mozilla/5.0",
            ip_address="203.0.113.7",
        )
        found = await repo.find_by_token_hash("a" * 64)

        assert found == created
        assert found.user_id == users[0].id
        assert found.user_agent == "Mozilla/5.0"
        assert not found.is_expired(utc_now())

    @pytest.mark.asyncio
    async def test_unknown_hash_is_none(self, db_session):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)

        assert await repo.find_by_token_hash("f" * 64) is None

    @pytest.mark.asyncio
    async def test_long_user_agent_is_truncated(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)

        created = await repo.create(
            users[0].id,
            "a" * 64,
            utc_now() + timedelta(days=1),
            user_agent="x" * 2000,
        )

        assert len(created.user_agent) == 512

    @pytest.mark.asyncio
    async def test_token_hash_is_unique(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, "a" * 64, utc_now() + timedelta(days=1))

        with pytest.raises(IntegrityError):
            await repo.create(users[1].id, "a" * 64, utc_now() + timedelta(days=1))

    @pytest.mark.asyncio
    async def test_delete_by_token_hash(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, "a" * 64, utc_now() + timedelta(days=1))

        assert await repo.delete_by_token_hash("a" * 64)
        assert not await repo.delete_by_token_hash("a" * 64)
        assert await repo.find_by_token_hash("a" * 64) is None

    @pytest.mark.asyncio
    async def test_delete_all_for_user_keeps_other_users(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        expires_at = utc_now() + timedelta(days=1)
        await repo.create(users[0].id, "a" * 64, expires_at)
        await repo.create(users[0].id, "b" * 64, expires_at)
        await repo.create(users[1].id, "c" * 64, expires_at)

        assert await repo.delete_all_for_user(users[0].id) == 2

        assert await repo.find_by_token_hash("a" * 64) is None
        assert await repo.find_by_token_hash("b" * 64) is None
        assert await repo.find_by_token_hash("c" * 64) is not None

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, db_session, users):
        repo = RefreshSessionRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, "a" * 64, utc_now() - timedelta(minutes=1))
        await repo.create(users[0].id, "b" * 64, utc_now() - timedelta(days=1))
        await repo.create(users[1].id, "c" * 64, utc_now() + timedelta(days=1))

        assert await repo.cleanup_expired() == 2

        assert await repo.find_by_token_hash("c" * 64) is not None
        assert await repo.cleanup_expired() == 0

    @pytest.mark.asyncio
    async def test_expiry_survives_round_trip(self, session_maker, users, db_session):
        await db_session.commit()
        expires_at = utc_now() + timedelta(hours=1)

        async with session_maker() as session:
            await RefreshSessionRepositorySQLAlchemy(session).create(
                users[0].id,
                "a" * 64,
                expires_at,
            )
            await session.commit()

        async with session_maker() as session:
            found = await RefreshSessionRepositorySQLAlchemy(session).find_by_token_hash("a" * 64)

        assert found.expires_at == expires_at
        assert found.expires_at.tzinfo is not None
