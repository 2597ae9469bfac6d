"""
Shared helpers for the Supabase-backed repositories.

Keeps timestamp conversion and error translation in one place so every
repository surfaces store failures the same way: unique-constraint violations as
ConflictError, everything else as StoreError. Nothing here retries.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, List, Mapping

import httpx
from postgrest.exceptions import APIError

from domain.errors import ConflictError, StoreError

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def to_iso_utc(dt: datetime) -> str:
    """Convert a timezone-aware datetime to an ISO-8601 string in UTC."""

    if dt.tzinfo is None or dt.utcoffset() is None:
        raise ValueError("timestamps must be timezone-aware (UTC)")
    return dt.astimezone(timezone.utc).isoformat()


def parse_utc_datetime(value: Any) -> datetime:
    """
    Parse a Supabase timestamp into a timezone-aware UTC datetime.

    Supabase commonly returns ISO-8601 strings, sometimes with a trailing 'Z'.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        # Python's fromisoformat doesn't consistently accept 'Z' across versions.
        text = value.replace("Z", "+00:00")
        dt = datetime.fromisoformat(text)
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value)!r}")

    # A naive timestamp from the backend is interpreted as UTC so that the
    # domain model's UTC invariant is satisfied.
    if dt.tzinfo is None or dt.utcoffset() is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def execute(query: Any, action: str, conflict_message: str | None = None) -> Any:
    """
    Run a PostgREST query builder and return its response.

    Args:
        query: Supabase query builder (anything with .execute())
        action: Short description used in error messages ("fetch user")
        conflict_message: Message for ConflictError on a unique violation;
            when None a unique violation is reported as a StoreError

    Raises:
        ConflictError: Unique constraint violated and conflict_message given
        StoreError: Any other failure reported by, or reaching, the store
    """
    try:
        response = query.execute()
    except APIError as e:
        if conflict_message is not None and str(e.code) == UNIQUE_VIOLATION:
            raise ConflictError(conflict_message) from e
        raise StoreError(f"Failed to {action}: {e.message or e}") from e
    except httpx.HTTPError as e:
        raise StoreError(f"Failed to {action}: {e}") from e

    error = getattr(response, "error", None)
    if error:
        raise StoreError(f"Failed to {action}: {error}")
    return response


def rows_of(response: Any) -> List[Mapping[str, Any]]:
    return getattr(response, "data", None) or []


__all__ = [
    "UNIQUE_VIOLATION",
    "execute",
    "parse_utc_datetime",
    "rows_of",
    "to_iso_utc",
]
