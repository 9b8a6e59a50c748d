from agora_auth.persistence.redis.rate_limit_store import RedisRateLimitStore

__all__ = ["RedisRateLimitStore"]
