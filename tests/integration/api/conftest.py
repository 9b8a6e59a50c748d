"""Fixtures for API tests: the real app on SQLite with in-memory rate limits."""

import httpx
import pytest
import pytest_asyncio

from agora.presentation.api import create_app
from agora.presentation.api.dependencies import (
    get_db_session,
    get_rate_limit_store,
    get_token_delivery,
)
from agora_auth.persistence.memory import InMemoryRateLimitStore
from agora_config.settings import Settings
from tests.shared.fixtures.database import async_engine, session_maker
from tests.shared.fixtures.delivery import RecordingTokenDelivery

__all__ = ["async_engine", "session_maker"]

TEST_JWT_SECRET = "api-test-jwt-secret-0123456789-abcdef"


@pytest.fixture
def api_settings() -> Settings:
    return Settings(
        _env_file=None,
        jwt_secret_key=TEST_JWT_SECRET,
        postgres_password="unused",
        api_cookie_secure=False,
        password_bcrypt_rounds=4,
        rate_limit_login_max_attempts=3,
        rate_limit_register_max_attempts=5,
        rate_limit_password_reset_max_attempts=3,
    )


@pytest.fixture
def rate_limit_store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture
def token_delivery() -> RecordingTokenDelivery:
    return RecordingTokenDelivery()


@pytest.fixture
def app(api_settings, session_maker, rate_limit_store, token_delivery):
    application = create_app(api_settings)

    async def _db_session():
        async with session_maker() as session:
            yield session

    application.dependency_overrides[get_db_session] = _db_session
    application.dependency_overrides[get_rate_limit_store] = lambda: rate_limit_store
    application.dependency_overrides[get_token_delivery] = lambda: token_delivery
    return application


@pytest_asyncio.fixture
async def client(app):
    """HTTP client against the app; lifespan is not run (tables come from SQLite fixture)."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
