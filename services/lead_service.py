"""
Lead operations.

Every operation follows the same order:
1. role gate (where the operation has one)
2. fetch the lead, so an unknown id is NotFoundError
3. ownership / read-access check
4. lifecycle transition (pure) and a column-scoped write

Concurrent edits to the same lead are last-write-wins; nothing here locks.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional
from uuid import UUID

from domain.errors import NotFoundError
from domain.lead import Lead, require_text
from domain.lead_lifecycle import parse_status_payload, transition_status, update_address
from domain.principal import Principal, Role
from domain.time import utc_now
from repositories import lead_repository
from repositories.user_repository import get_users_by_ids
from services.authorization import require_ownership, require_read_access, require_role

logger = logging.getLogger(__name__)

# Fields a telecaller supplies when creating a lead; everything else is ignored.
CONTACT_FIELDS = ("name", "email", "phone", "address")


@dataclass(frozen=True, slots=True)
class LeadWithOwner:
    """A lead plus its owning principal, for admin-facing views."""

    lead: Lead
    owner: Optional[Principal] = None


def parse_lead_id(raw: str) -> UUID:
    try:
        return UUID(str(raw))
    except ValueError:
        raise NotFoundError(f"Lead not found with id of {raw}") from None


def _fetch(lead_id: str) -> Lead:
    parsed = parse_lead_id(lead_id)
    lead = lead_repository.get_lead_by_id(parsed)
    if lead is None:
        raise NotFoundError(f"Lead not found with id of {lead_id}")
    return lead


def _committed(stored: Optional[Lead], lead_id: UUID) -> Lead:
    if stored is None:
        # Deleted between the read and the write.
        raise NotFoundError(f"Lead not found with id of {lead_id}")
    return stored


def attach_owners(leads: List[Lead]) -> List[LeadWithOwner]:
    owners = get_users_by_ids([lead.telecaller for lead in leads])
    return [LeadWithOwner(lead=lead, owner=owners.get(lead.telecaller)) for lead in leads]


def list_leads(principal: Principal) -> List[LeadWithOwner]:
    """Telecallers see their own leads; admins see all leads with owner details."""
    if principal.role is Role.ADMIN:
        return attach_owners(lead_repository.list_leads())
    return [LeadWithOwner(lead=lead) for lead in lead_repository.list_leads(principal.id)]


def get_lead(principal: Principal, lead_id: str) -> LeadWithOwner:
    lead = _fetch(lead_id)
    require_read_access(principal, lead)
    return attach_owners([lead])[0]


def create_lead(principal: Principal, payload: Mapping[str, Any]) -> Lead:
    """
    Create a lead owned by `principal`.

    Any telecaller/status/response/call_date in the payload is ignored: new
    leads always start as status new, no response, no call date.
    """
    require_role(principal, [Role.TELECALLER])
    fields = {name: require_text(name, payload.get(name)) for name in CONTACT_FIELDS}
    lead = Lead(
        id=uuid.uuid4(),
        telecaller=principal.id,
        created_at=utc_now(),
        **fields,
    )
    lead_repository.insert_lead(lead)
    logger.info("Lead %s created by %s", lead.id, principal.id)
    return lead


def update_lead_address(principal: Principal, lead_id: str, payload: Mapping[str, Any]) -> Lead:
    require_role(principal, [Role.TELECALLER])
    lead = _fetch(lead_id)
    require_ownership(principal, lead)
    updated = update_address(lead, payload)
    return _committed(lead_repository.save_address(updated), lead.id)


def update_lead_status(principal: Principal, lead_id: str, payload: Mapping[str, Any]) -> Lead:
    """
    Apply a status/response transition.

    Enum values are validated before any write; an invalid value leaves the
    stored lead unchanged.
    """
    require_role(principal, [Role.TELECALLER])
    lead = _fetch(lead_id)
    require_ownership(principal, lead)
    new_status, new_response = parse_status_payload(payload)
    updated = transition_status(lead, new_status, new_response, utc_now())
    stored = _committed(lead_repository.save_status(updated), lead.id)
    logger.info("Lead %s status %s -> %s", lead.id, lead.status.value, stored.status.value)
    return stored


def delete_lead(principal: Principal, lead_id: str) -> None:
    require_role(principal, [Role.TELECALLER])
    lead = _fetch(lead_id)
    require_ownership(principal, lead)
    lead_repository.delete_lead(lead.id)
    logger.info("Lead %s deleted by %s", lead.id, principal.id)


__all__ = [
    "CONTACT_FIELDS",
    "LeadWithOwner",
    "attach_owners",
    "parse_lead_id",
    "list_leads",
    "get_lead",
    "create_lead",
    "update_lead_address",
    "update_lead_status",
    "delete_lead",
]
