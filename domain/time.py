"""
Domain timestamps.

Every instant the service stores (a principal's created_at, a lead's created_at
and call_date, and the `now` a status transition stamps) is a UTC timestamp.
Naive datetimes and non-zero offsets are rejected at construction, so nothing
downstream has to guess a zone.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone


def require_utc_timestamp(name: str, value: datetime) -> None:
    """
    Raise ValueError unless `value` is timezone-aware with a zero UTC offset.

    `name` is the field being checked and appears in the error message.
    """
    offset = value.utcoffset()
    if offset is None:
        raise ValueError(f"{name} must be timezone-aware (UTC)")
    if offset != timedelta(0):
        raise ValueError(f"{name} must be in UTC, got offset {offset}")


def utc_now() -> datetime:
    """Current time as an aware UTC datetime; the source of every stamped instant."""
    return datetime.now(timezone.utc)


__all__ = ["require_utc_timestamp", "utc_now"]
