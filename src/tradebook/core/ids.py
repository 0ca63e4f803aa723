"""Canonical ID and timestamp helpers.

Timestamp Rule
--------------
Records carry signed 64-bit nanosecond epoch integers.  Conversions to
``datetime`` always produce ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

_NS_PER_SECOND = 1_000_000_000


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for all internal entity IDs."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def now_ns() -> int:
    """Current UTC time as nanoseconds since epoch."""
    return datetime_to_ns(utc_now())


def ns_to_datetime(timestamp_ns: int) -> datetime:
    """Convert a nanosecond epoch timestamp to an aware UTC datetime."""
    seconds, remainder = divmod(int(timestamp_ns), _NS_PER_SECOND)
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(
        microsecond=remainder // 1000
    )


def datetime_to_ns(dt: datetime) -> int:
    """Convert a datetime to nanoseconds since epoch (naive = UTC)."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    delta = dt - datetime(1970, 1, 1, tzinfo=timezone.utc)
    return (
        delta.days * 86_400 * _NS_PER_SECOND
        + delta.seconds * _NS_PER_SECOND
        + delta.microseconds * 1000
    )
