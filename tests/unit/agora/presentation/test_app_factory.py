"""Tests for create_app: explicit settings reach every app-scoped resource."""

import pytest

from agora.presentation.api import create_app
from agora.presentation.api.dependencies import app_engine, app_rate_limit_store
from agora_auth.persistence.memory import InMemoryRateLimitStore
from agora_auth.persistence.redis import RedisRateLimitStore
from agora_config import clear_settings_cache
from agora_config.settings import Settings

SECRET = "factory-test-jwt-secret-0123456789-abcdef"


def _settings(**overrides) -> Settings:
    values = {
        "_env_file": None,
        "jwt_secret_key": SECRET,
        "postgres_password": "explicit-password",
        **overrides,
    }
    return Settings(**values)


class TestCreateAppSettings:
    def test_settings_are_kept_on_app_state(self):
        settings = _settings(app_name="Bazaar")

        app = create_app(settings)

        assert app.state.settings is settings
        assert app.title == "Bazaar API"

    @pytest.mark.asyncio
    async def test_engine_uses_explicit_database(self, monkeypatch):
        monkeypatch.setenv("POSTGRES_HOST", "localhost")
        app = create_app(_settings(postgres_host="db.explicit", postgres_db="agora_explicit"))

        engine = app_engine(app)

        assert engine.url.host == "db.explicit"
        assert engine.url.database == "agora_explicit"
        assert app_engine(app) is engine
        await engine.dispose()

    @pytest.mark.asyncio
    async def test_rate_limit_store_uses_explicit_redis(self, monkeypatch):
        monkeypatch.delenv("REDIS_URL", raising=False)
        app = create_app(_settings(redis_url="redis://redis.explicit:6379/0"))

        store = app_rate_limit_store(app)

        assert isinstance(store, RedisRateLimitStore)
        assert store.redis_url == "redis://redis.explicit:6379/0"
        assert app_rate_limit_store(app) is store
        await store.close()

    def test_without_redis_url_store_is_in_memory(self, monkeypatch):
        monkeypatch.setenv("REDIS_URL", "redis://from-env:6379/0")
        app = create_app(_settings(redis_url=None))

        assert isinstance(app_rate_limit_store(app), InMemoryRateLimitStore)

    @pytest.mark.asyncio
    async def test_environment_is_not_required(self, monkeypatch):
        monkeypatch.delenv("JWT_SECRET_KEY", raising=False)
        monkeypatch.delenv("POSTGRES_PASSWORD", raising=False)
        clear_settings_cache()
        app = create_app(_settings())

        engine = app_engine(app)
        app_rate_limit_store(app)

        assert engine.url.password == "explicit-password"
        await engine.dispose()

    def test_apps_do_not_share_resources(self):
        first = create_app(_settings(postgres_host="db-one"))
        second = create_app(_settings(postgres_host="db-two"))

        assert app_engine(first).url.host == "db-one"
        assert app_engine(second).url.host == "db-two"
