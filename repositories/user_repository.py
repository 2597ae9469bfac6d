"""
User (principal) repository.

Provides persistence for Principal records. No authentication rules live here;
hashing happens before a record reaches `insert_user`.

The `users.email` column carries a UNIQUE constraint (see db/schema.sql). A
violation on insert surfaces as ConflictError, which is what callers rely on to
make federated lookup-or-create safe under concurrency.
"""

from __future__ import annotations

from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.principal import OAuthProvider, Principal, Role
from repositories import client
from repositories.supabase_helpers import execute, parse_utc_datetime, rows_of, to_iso_utc

_USERS_TABLE: str = "users"


def _user_to_row(principal: Principal) -> dict[str, Any]:
    """Convert a domain Principal to a Supabase row payload."""

    return {
        "user_id": str(principal.id),
        "name": principal.name,
        "email": principal.email,
        "password_hash": principal.password_hash,
        "role": principal.role.value,
        "oauth_provider": principal.oauth_provider.value if principal.oauth_provider else None,
        "oauth_id": principal.oauth_id,
        "created_at_utc": to_iso_utc(principal.created_at),
    }


def _row_to_user(row: Mapping[str, Any]) -> Principal:
    """Convert a Supabase row into a domain Principal."""

    provider = row.get("oauth_provider")
    return Principal(
        id=UUID(str(row["user_id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        role=Role(str(row["role"])),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        password_hash=row.get("password_hash") or None,
        oauth_provider=OAuthProvider(provider) if provider else None,
        oauth_id=row.get("oauth_id") or None,
    )


def _first_user(query: Any, action: str) -> Optional[Principal]:
    rows = rows_of(execute(query.limit(1), action))
    if not rows:
        return None
    return _row_to_user(rows[0])


def get_user_by_id(user_id: UUID) -> Optional[Principal]:
    """
    Get a principal by ID.

    Returns:
        Principal or None if not found
    """
    query = client.get_supabase().table(_USERS_TABLE).select("*").eq("user_id", str(user_id))
    return _first_user(query, "fetch user")


def get_user_by_email(email: str) -> Optional[Principal]:
    """
    Get a principal by email address.

    Example:
        principal = get_user_by_email("caller@example.com")
    """
    query = client.get_supabase().table(_USERS_TABLE).select("*").eq("email", email)
    return _first_user(query, "fetch user")


def get_users_by_ids(user_ids: List[UUID]) -> dict[UUID, Principal]:
    """Fetch several principals at once, keyed by id. Unknown ids are omitted."""
    if not user_ids:
        return {}
    query = (
        client.get_supabase()
        .table(_USERS_TABLE)
        .select("*")
        .in_("user_id", sorted({str(user_id) for user_id in user_ids}))
    )
    users = [_row_to_user(row) for row in rows_of(execute(query, "fetch users"))]
    return {user.id: user for user in users}


def insert_user(principal: Principal) -> None:
    """
    Insert a Principal.

    Raises:
        ConflictError: A principal with the same email already exists
        StoreError: Any other store failure
    """
    payload = _user_to_row(principal)
    execute(
        client.get_supabase().table(_USERS_TABLE).insert(payload),
        "insert user",
        conflict_message="Email already registered",
    )


def list_users() -> List[Principal]:
    """All principals, newest first."""
    query = (
        client.get_supabase()
        .table(_USERS_TABLE)
        .select("*")
        .order("created_at_utc", desc=True)
    )
    return [_row_to_user(row) for row in rows_of(execute(query, "list users"))]


def count_users_by_role(role: Role) -> int:
    query = (
        client.get_supabase()
        .table(_USERS_TABLE)
        .select("user_id", count="exact")
        .eq("role", role.value)
    )
    response = execute(query, "count users")
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


__all__ = [
    "get_user_by_id",
    "get_user_by_email",
    "get_users_by_ids",
    "insert_user",
    "list_users",
    "count_users_by_role",
]
