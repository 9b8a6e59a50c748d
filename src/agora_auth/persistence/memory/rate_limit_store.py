"""Process-local rate-limit store.

Only suitable for a single API process or for tests: every process keeps
its own counters, so limits are multiplied by the number of instances.
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Callable

from agora_auth.repositories import RateLimitStore


class InMemoryRateLimitStore(RateLimitStore):
    """Fixed-window counters kept in a dict guarded by an asyncio lock."""

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        max_keys: int = 10_000,
    ):
        """
        Parameters
        ----------
        clock
            Returns the current UNIX time in seconds (injectable for tests)
        max_keys
            Upper bound on tracked keys; expired windows are purged first
            and the oldest windows dropped when still over the bound
        """
        self._clock = clock
        self._max_keys = max_keys
        self._buckets: dict[str, tuple[int, float]] = {}
        self._lock = asyncio.Lock()

    async def hit(self, key: str, window_seconds: int) -> tuple[int, datetime]:
        async with self._lock:
            now = self._clock()
            count, reset_ts = self._buckets.get(key, (0, 0.0))
            if reset_ts <= now:
                count, reset_ts = 0, now + window_seconds
            count += 1
            self._buckets[key] = (count, reset_ts)
            if len(self._buckets) > self._max_keys:
                self._evict(now)
        return count, datetime.fromtimestamp(reset_ts, tz=timezone.utc)

    async def reset(self, key: str) -> None:
        async with self._lock:
            self._buckets.pop(key, None)

    def _evict(self, now: float) -> None:
        expired = [k for k, (_, reset_ts) in self._buckets.items() if reset_ts <= now]
        for k in expired:
            del self._buckets[k]

        overflow = len(self._buckets) - self._max_keys
        if overflow > 0:
            oldest = sorted(self._buckets, key=lambda k: self._buckets[k][1])
            for k in oldest[:overflow]:
                del self._buckets[k]
