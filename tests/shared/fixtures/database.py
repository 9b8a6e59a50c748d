"""
SQLite-based database fixtures for repository and API tests.

Each test gets its own database file, so tests never share state.

Re-export the fixtures from a conftest.py to use them in a test package.
"""

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from agora_auth.persistence.sqlalchemy import AuthBase


@pytest_asyncio.fixture(scope="function")
async def async_engine(tmp_path):
    """Async engine on a fresh SQLite file with the auth tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'agora-test.db'}",
        echo=False,
        poolclass=NullPool,  # no connection outlives its test
    )
    async with engine.begin() as conn:
        await conn.run_sync(AuthBase.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_maker(async_engine):
    return async_sessionmaker(
        async_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_maker):
    """
    Session for one test; whatever it left uncommitted is rolled back.
    """
    async with session_maker() as session:
        yield session
        await session.rollback()
