"""Attempt rate limiting for sensitive endpoints (login, registration).

Counters live in a pluggable ``RateLimitStore``: Redis when configured,
otherwise a process-local in-memory store.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from agora_auth.exceptions import RateLimitedError
from agora_auth.persistence.memory import InMemoryRateLimitStore
from agora_auth.schemas import RateLimitResult
from agora_auth.shared.time import utc_now

if TYPE_CHECKING:
    from starlette.requests import Request

    from agora_auth.repositories import RateLimitStore

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


class RateLimiter:
    """Fixed-window attempt counter for one namespace (e.g. ``login``).

    Examples
    --------
    >>> limiter = RateLimiter(InMemoryRateLimitStore(), namespace="login")
    >>> result = await limiter.check("203.0.113.7", max_attempts=5, window_seconds=60)
    >>> result.remaining
    4
    """

    def __init__(self, store: RateLimitStore, namespace: str):
        self._store = store
        self._namespace = namespace

    def _key(self, client_id: str) -> str:
        return f"{self._namespace}:{client_id or UNKNOWN_CLIENT}"

    async def check(
        self,
        client_id: str,
        max_attempts: int,
        window_seconds: int,
    ) -> RateLimitResult:
        """
        Record an attempt and report whether the client is over its budget.

        Parameters
        ----------
        client_id
            Client identifier, usually from ``get_client_identifier``
        max_attempts
            Attempts allowed per window; ``<= 0`` disables limiting
        window_seconds
            Window length in seconds

        Returns
        -------
        RateLimitResult; ``limited`` is True once the count exceeds
        ``max_attempts``
        """
        if max_attempts <= 0:
            return RateLimitResult(
                limited=False,
                limit=0,
                remaining=0,
                reset_at=utc_now(),
            )

        count, reset_at = await self._store.hit(self._key(client_id), window_seconds)
        limited = count > max_attempts
        if limited:
            logger.warning(
                "Rate limit exceeded for %s (%d/%d)",
                self._namespace,
                count,
                max_attempts,
            )
        return RateLimitResult(
            limited=limited,
            limit=max_attempts,
            remaining=max(0, max_attempts - count),
            reset_at=reset_at,
        )

    async def enforce(
        self,
        client_id: str,
        max_attempts: int,
        window_seconds: int,
    ) -> RateLimitResult:
        """Like ``check`` but raises ``RateLimitedError`` when limited."""
        result = await self.check(client_id, max_attempts, window_seconds)
        if result.limited:
            raise RateLimitedError(reset_at=result.reset_at, limit=result.limit)
        return result

    async def reset(self, client_id: str) -> None:
        """Clear the client's counter, e.g. after a successful login."""
        await self._store.reset(self._key(client_id))


def build_rate_limit_store(redis_url: str | None) -> RateLimitStore:
    """Create the store for the current deployment.

    Uses Redis (with an in-memory fallback for outages) when a URL is
    given, otherwise a process-local store.
    """
    if redis_url:
        # Imported lazily so deployments without Redis never touch the client
        from agora_auth.persistence.redis import RedisRateLimitStore

        logger.info("Using Redis rate limit store")
        return RedisRateLimitStore(redis_url, fallback=InMemoryRateLimitStore())

    logger.warning(
        "REDIS_URL not configured; using in-memory rate limiting "
        "(not shared between processes)",
    )
    return InMemoryRateLimitStore()


def get_client_identifier(request: Request, trust_proxy_headers: bool = False) -> str:
    """
    Derive the rate-limit identity of a request.

    Forwarding headers are only honoured behind a trusted reverse proxy;
    otherwise any client could pick its own identity.
    """
    if trust_proxy_headers:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            first = forwarded.split(",")[0].strip()
            if first:
                return first

        real_ip = request.headers.get("x-real-ip")
        if real_ip and real_ip.strip():
            return real_ip.strip()

    if request.client and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


def rate_limit_headers(result: RateLimitResult) -> dict[str, str]:
    """Build ``X-RateLimit-*`` (and ``Retry-After`` when limited) headers."""
    reset_epoch = math.ceil(result.reset_at.timestamp())
    headers = {
        "X-RateLimit-Limit": str(result.limit),
        "X-RateLimit-Remaining": str(result.remaining),
        "X-RateLimit-Reset": str(reset_epoch),
    }
    if result.limited:
        retry_after = math.ceil((result.reset_at - utc_now()).total_seconds())
        headers["Retry-After"] = str(max(1, retry_after))
    return headers
