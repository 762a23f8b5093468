"""
UTC time helpers.

SQLite hands timestamps back without tzinfo, so anything compared in Python
goes through ``as_utc`` first.
"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes, convert aware ones."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def is_expired(expiry_time: Optional[datetime], now: Optional[datetime] = None) -> bool:
    """
    Check if a timestamp has passed.

    Args:
        expiry_time: Expiration time (None never expires)
        now: Reference time, defaults to the current UTC time

    Returns:
        bool: True if ``expiry_time`` is not in the future
    """
    if expiry_time is None:
        return False
    return as_utc(expiry_time) <= (now or utcnow())
