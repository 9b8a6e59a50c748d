"""Unit tests for RedisRateLimitStore failure handling (no live Redis)."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from agora_auth.persistence.memory import InMemoryRateLimitStore
from agora_auth.persistence.redis import RedisRateLimitStore


class TestRedisRateLimitStoreFallback:
    @pytest.mark.asyncio
    async def test_hit_falls_back_to_memory_on_redis_error(self):
        fallback = InMemoryRateLimitStore()
        store = RedisRateLimitStore("redis://localhost:6379/15", fallback=fallback)
        store._fixed_window = AsyncMock(side_effect=RedisConnectionError("down"))

        first, _ = await store.hit("login:1.2.3.4", 60)
        second, _ = await store.hit("login:1.2.3.4", 60)

        assert (first, second) == (1, 2)
        await store.close()

    @pytest.mark.asyncio
    async def test_hit_raises_without_fallback(self):
        store = RedisRateLimitStore("redis://localhost:6379/15")
        store._fixed_window = AsyncMock(side_effect=RedisConnectionError("down"))

        with pytest.raises(RedisConnectionError):
            await store.hit("login:1.2.3.4", 60)
        await store.close()

    @pytest.mark.asyncio
    async def test_reset_clears_fallback_even_when_redis_fails(self):
        fallback = InMemoryRateLimitStore()
        store = RedisRateLimitStore("redis://localhost:6379/15", fallback=fallback)
        store._fixed_window = AsyncMock(side_effect=RedisConnectionError("down"))
        store.client.delete = AsyncMock(side_effect=RedisConnectionError("down"))
        await store.hit("login:1.2.3.4", 60)

        await store.reset("login:1.2.3.4")

        count, _ = await fallback.hit("login:1.2.3.4", 60)
        assert count == 1
        await store.close()

    @pytest.mark.asyncio
    async def test_counter_comes_from_script_result(self):
        store = RedisRateLimitStore("redis://localhost:6379/15")
        store._fixed_window = AsyncMock(return_value=[3, 30_000])

        count, reset_at = await store.hit("login:1.2.3.4", 60)

        assert count == 3
        assert reset_at.tzinfo is not None
        kwargs = store._fixed_window.await_args.kwargs
        assert kwargs["args"] == [60_000]
        assert kwargs["keys"][0].startswith("rate:")
        assert "1.2.3.4" not in kwargs["keys"][0]
        await store.close()
