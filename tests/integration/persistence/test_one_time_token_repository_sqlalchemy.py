"""Tests for OneTimeTokenRepositorySQLAlchemy against SQLite."""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.exc import IntegrityError

from agora_auth.persistence.sqlalchemy import (
    OneTimeTokenRepositorySQLAlchemy,
    UserRepositorySQLAlchemy,
)
from agora_auth.roles import UserRole
from agora_auth.schemas import TokenPurpose
from agora_auth.shared.time import utc_now

RESET = TokenPurpose.PASSWORD_RESET
VERIFY = TokenPurpose.EMAIL_VERIFICATION


@pytest_asyncio.fixture
async def users(db_session):
    repo = UserRepositorySQLAlchemy(db_session)
    first = await repo.create("first@example.com", "$2b$04$hash", UserRole.BUYER)
    second = await repo.create("second@example.com", "$2b$04$hash", UserRole.SELLER)
    return first, second


class TestOneTimeTokenRepositorySQLAlchemy:
    @pytest.mark.asyncio
    async def test_create_and_find_valid(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)

        created = await repo.create(users[0].id, RESET, "a" * 64, utc_now() + timedelta(hours=1))
        found = await repo.find_valid_by_hash("a" * 64, RESET)

        assert found == created
        assert found.purpose == RESET
        assert not found.is_used()
        assert not found.is_expired(utc_now())

    @pytest.mark.asyncio
    async def test_purpose_must_match(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, VERIFY, "a" * 64, utc_now() + timedelta(hours=1))

        assert await repo.find_valid_by_hash("a" * 64, RESET) is None
        assert await repo.find_valid_by_hash("a" * 64, VERIFY) is not None

    @pytest.mark.asyncio
    async def test_expired_token_is_not_valid(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, RESET, "a" * 64, utc_now() - timedelta(seconds=1))

        assert await repo.find_valid_by_hash("a" * 64, RESET) is None

    @pytest.mark.asyncio
    async def test_mark_used_succeeds_once(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        created = await repo.create(users[0].id, RESET, "a" * 64, utc_now() + timedelta(hours=1))

        assert await repo.mark_used(created.id)
        assert not await repo.mark_used(created.id)
        assert await repo.find_valid_by_hash("a" * 64, RESET) is None

    @pytest.mark.asyncio
    async def test_invalidate_all_for_user_is_scoped(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        expires_at = utc_now() + timedelta(hours=1)
        await repo.create(users[0].id, RESET, "a" * 64, expires_at)
        await repo.create(users[0].id, RESET, "b" * 64, expires_at)
        await repo.create(users[0].id, VERIFY, "c" * 64, expires_at)
        await repo.create(users[1].id, RESET, "d" * 64, expires_at)

        assert await repo.invalidate_all_for_user(users[0].id, RESET) == 2

        assert await repo.find_valid_by_hash("a" * 64, RESET) is None
        assert await repo.find_valid_by_hash("b" * 64, RESET) is None
        assert await repo.find_valid_by_hash("c" * 64, VERIFY) is not None
        assert await repo.find_valid_by_hash("d" * 64, RESET) is not None

    @pytest.mark.asyncio
    async def test_token_hash_is_unique(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, RESET, "a" * 64, utc_now() + timedelta(hours=1))

        with pytest.raises(IntegrityError):
            await repo.create(users[1].id, VERIFY, "a" * 64, utc_now() + timedelta(hours=1))

    @pytest.mark.asyncio
    async def test_cleanup_expired(self, db_session, users):
        repo = OneTimeTokenRepositorySQLAlchemy(db_session)
        await repo.create(users[0].id, RESET, "a" * 64, utc_now() - timedelta(minutes=1))
        await repo.create(users[0].id, VERIFY, "b" * 64, utc_now() + timedelta(hours=1))

        assert await repo.cleanup_expired() == 1
        assert await repo.find_valid_by_hash("b" * 64, VERIFY) is not None
