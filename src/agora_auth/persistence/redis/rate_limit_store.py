"""Redis-backed rate-limit store shared by all API processes."""

from __future__ import annotations

import hashlib
import logging
import time
from datetime import datetime, timezone
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from agora_auth.repositories import RateLimitStore

logger = logging.getLogger(__name__)


class RedisRateLimitStore(RateLimitStore):
    """Fixed-window counters in Redis.

    Increment and window start happen in one Lua script so concurrent
    requests from several processes never lose the expiry.
    """

    KEY_PREFIX = "rate"

    # Atomic increment; the first hit of a window sets the expiry
    _FIXED_WINDOW_SCRIPT = """
local count = redis.call('INCR', KEYS[1])
if count == 1 then
  redis.call('PEXPIRE', KEYS[1], ARGV[1])
end
local ttl = redis.call('PTTL', KEYS[1])
if ttl < 0 then
  redis.call('PEXPIRE', KEYS[1], ARGV[1])
  ttl = tonumber(ARGV[1])
end
return {count, ttl}
"""

    def __init__(
        self,
        redis_url: str,
        *,
        socket_timeout: float = 5.0,
        fallback: Optional[RateLimitStore] = None,
    ):
        """
        Parameters
        ----------
        redis_url
            Connection URL, e.g. ``redis://localhost:6379/0``
        socket_timeout
            Connect and command timeout in seconds
        fallback
            Store used when Redis is unreachable; errors propagate when None
        """
        self.redis_url = redis_url
        self.client = aioredis.from_url(
            redis_url,
            decode_responses=True,
            socket_timeout=socket_timeout,
            socket_connect_timeout=socket_timeout,
        )
        self._fixed_window = self.client.register_script(self._FIXED_WINDOW_SCRIPT)
        self._fallback = fallback

    @classmethod
    def _normalize_key(cls, key: str) -> str:
        """Hash keys so client-supplied identifiers cannot inject delimiters."""
        digest = hashlib.sha256(key.encode()).hexdigest()
        return f"{cls.KEY_PREFIX}:{digest}"

    async def hit(self, key: str, window_seconds: int) -> tuple[int, datetime]:
        window_ms = max(1, int(window_seconds * 1000))
        try:
            count, ttl_ms = await self._fixed_window(
                keys=[self._normalize_key(key)],
                args=[window_ms],
            )
        except RedisError as e:
            if self._fallback is None:
                raise
            logger.warning("Redis rate limit error, falling back to in-memory: %s", e)
            return await self._fallback.hit(key, window_seconds)

        reset_at = datetime.fromtimestamp(
            time.time() + int(ttl_ms) / 1000,
            tz=timezone.utc,
        )
        return int(count), reset_at

    async def reset(self, key: str) -> None:
        try:
            await self.client.delete(self._normalize_key(key))
        except RedisError as e:
            if self._fallback is None:
                raise
            logger.warning("Redis rate limit reset failed: %s", e)
        if self._fallback is not None:
            await self._fallback.reset(key)

    async def close(self) -> None:
        await self.client.aclose()
