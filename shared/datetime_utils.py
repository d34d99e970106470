"""
Date/time helpers.

MongoDB hands back naive datetimes unless the client is created with
``tz_aware=True``; everything in this project compares aware UTC values, so
stored timestamps pass through ensure_utc() before comparison.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional


def utcnow() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Return *value* as an aware UTC datetime.

    Naive datetimes (no ``tzinfo``) are assumed to be UTC. ``None`` passes
    through unchanged.
    """
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def minutes_from_now(minutes: int) -> datetime:
    """Return an aware UTC datetime *minutes* in the future."""
    return utcnow() + timedelta(minutes=minutes)
