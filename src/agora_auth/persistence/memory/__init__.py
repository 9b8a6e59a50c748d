from agora_auth.persistence.memory.rate_limit_store import InMemoryRateLimitStore

__all__ = ["InMemoryRateLimitStore"]
