"""UTC helpers; every timestamp in agora_auth is timezone-aware."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


def ensure_tz_aware(dt: datetime) -> datetime:
    """Attach UTC to naive values read back from databases without tz support."""
    return dt if dt.tzinfo is not None else dt.replace(tzinfo=timezone.utc)
