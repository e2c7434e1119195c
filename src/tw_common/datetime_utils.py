"""UTC datetime utilities."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    """Return timezone-aware UTC now."""
    return datetime.now(timezone.utc)


def to_unix(dt: datetime) -> float:
    """Seconds since epoch for a tz-aware datetime (Redis ZSET scores)."""
    return dt.timestamp()
