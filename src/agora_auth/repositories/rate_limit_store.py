"""Abstract store for rate-limit attempt counters."""

from abc import ABC, abstractmethod
from datetime import datetime


class RateLimitStore(ABC):
    """
    Counter storage behind the rate limiter.

    Production deployments with more than one process must use a shared
    implementation (Redis); the in-memory store only holds per process.
    """

    @abstractmethod
    async def hit(self, key: str, window_seconds: int) -> tuple[int, datetime]:
        """
        Record one attempt for ``key``.

        Starts a new fixed window when none is active.

        Returns
        -------
        Tuple of (attempt count in the current window, window reset time)
        """

    @abstractmethod
    async def reset(self, key: str) -> None:
        """Forget all attempts recorded for ``key``."""

    async def close(self) -> None:  # NOQA: B027
        """Release connections held by the store."""
