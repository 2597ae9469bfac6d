"""
Lead repository (persistence).

This module provides *only* persistence operations for the Lead domain entity.
No lifecycle rules (call_date stamping, which fields an update may touch) belong
here; those live in domain.lead_lifecycle.

Writes are column-scoped: `save_status` and `save_address` only ever send the
columns of their transition, so telecaller_id and created_at_utc are written
exactly once, by `insert_lead`.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Mapping, Optional, Sequence
from uuid import UUID

from domain.lead import Lead, LeadResponse, LeadStatus
from repositories import client
from repositories.supabase_helpers import execute, parse_utc_datetime, rows_of, to_iso_utc

# Supabase table name for Lead records.
# Keep this aligned with db/schema.sql.
_LEADS_TABLE: str = "leads"


def _lead_to_row(lead: Lead) -> dict[str, Any]:
    """Convert a domain Lead to a Supabase row payload."""

    return {
        "lead_id": str(lead.id),
        "name": lead.name,
        "email": lead.email,
        "phone": lead.phone,
        "address": lead.address,
        "status": lead.status.value,
        "response": lead.response.value if lead.response else None,
        "telecaller_id": str(lead.telecaller),
        "call_date_utc": to_iso_utc(lead.call_date) if lead.call_date else None,
        "created_at_utc": to_iso_utc(lead.created_at),
    }


def _row_to_lead(row: Mapping[str, Any]) -> Lead:
    """Convert a Supabase row into a domain Lead."""

    response = row.get("response")
    call_date = row.get("call_date_utc")
    return Lead(
        id=UUID(str(row["lead_id"])),
        name=str(row["name"]),
        email=str(row["email"]),
        phone=str(row["phone"]),
        address=str(row["address"]),
        telecaller=UUID(str(row["telecaller_id"])),
        created_at=parse_utc_datetime(row["created_at_utc"]),
        status=LeadStatus(str(row.get("status") or LeadStatus.NEW.value)),
        response=LeadResponse(response) if response else None,
        call_date=parse_utc_datetime(call_date) if call_date else None,
    )


def _update(lead_id: UUID, fields: dict[str, Any], action: str) -> Optional[Lead]:
    query = (
        client.get_supabase()
        .table(_LEADS_TABLE)
        .update(fields)
        .eq("lead_id", str(lead_id))
    )
    rows = rows_of(execute(query, action))
    if not rows:
        return None
    return _row_to_lead(rows[0])


def insert_lead(lead: Lead) -> None:
    """
    Insert a Lead into Supabase.

    Raises:
    - StoreError if Supabase returns an error response.
    """

    payload = _lead_to_row(lead)
    execute(client.get_supabase().table(_LEADS_TABLE).insert(payload), "insert lead")


def get_lead_by_id(lead_id: UUID) -> Lead | None:
    """
    Fetch a Lead by ID.

    Returns:
    - Lead if found
    - None if no record exists for the given ID
    """

    query = (
        client.get_supabase()
        .table(_LEADS_TABLE)
        .select("*")
        .eq("lead_id", str(lead_id))
        .limit(1)
    )
    rows = rows_of(execute(query, "fetch lead"))
    if not rows:
        return None
    return _row_to_lead(rows[0])


def list_leads(telecaller_id: UUID | None = None) -> List[Lead]:
    """
    List Leads, newest first.

    Args:
    - telecaller_id: restrict to leads owned by this principal; None lists all
    """

    query = client.get_supabase().table(_LEADS_TABLE).select("*")
    if telecaller_id is not None:
        query = query.eq("telecaller_id", str(telecaller_id))
    query = query.order("created_at_utc", desc=True)

    rows = rows_of(execute(query, "list leads"))
    return [_row_to_lead(row) for row in rows]


def save_status(lead: Lead) -> Optional[Lead]:
    """Persist the status transition columns of `lead`. Returns the stored row."""
    fields = {
        "status": lead.status.value,
        "response": lead.response.value if lead.response else None,
        "call_date_utc": to_iso_utc(lead.call_date) if lead.call_date else None,
    }
    return _update(lead.id, fields, "update lead status")


def save_address(lead: Lead) -> Optional[Lead]:
    """Persist only the address column of `lead`. Returns the stored row."""
    return _update(lead.id, {"address": lead.address}, "update lead address")


def delete_lead(lead_id: UUID) -> None:
    query = client.get_supabase().table(_LEADS_TABLE).delete().eq("lead_id", str(lead_id))
    execute(query, "delete lead")


def count_leads_by_status(statuses: Sequence[LeadStatus]) -> int:
    query = (
        client.get_supabase()
        .table(_LEADS_TABLE)
        .select("lead_id", count="exact")
        .in_("status", [status.value for status in statuses])
    )
    response = execute(query, "count leads")
    count = getattr(response, "count", None)
    return int(count) if count is not None else len(rows_of(response))


def list_connected_leads(since: datetime | None = None, limit: int | None = None) -> List[Lead]:
    """
    Connected leads ordered by call_date, most recent first.

    Args:
    - since: only calls with call_date at or after this instant
    - limit: maximum number of rows
    """

    query = (
        client.get_supabase()
        .table(_LEADS_TABLE)
        .select("*")
        .eq("status", LeadStatus.CONNECTED.value)
    )
    if since is not None:
        query = query.gte("call_date_utc", to_iso_utc(since))
    query = query.order("call_date_utc", desc=True)
    if limit is not None:
        query = query.limit(limit)

    rows = rows_of(execute(query, "list connected leads"))
    return [_row_to_lead(row) for row in rows]


__all__ = [
    "insert_lead",
    "get_lead_by_id",
    "list_leads",
    "save_status",
    "save_address",
    "delete_lead",
    "count_leads_by_status",
    "list_connected_leads",
]
