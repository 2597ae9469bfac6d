"""
Domain: Lead entity.

A Lead is a prospective customer tracked by the telecaller who owns it.

Contract excerpts implemented here:
- name, email, phone and address are required contact fields.
- status is one of new / connected / not_connected (default new).
- response is one of the call outcomes below, or None (default None).
- telecaller is the owning principal; set at creation and immutable thereafter.
- call_date is nullable and only ever stamped by a status transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID

from .errors import ValidationError
from .time import require_utc_timestamp


class LeadStatus(str, Enum):
    NEW = "new"
    CONNECTED = "connected"
    NOT_CONNECTED = "not_connected"


class LeadResponse(str, Enum):
    DISCUSSED = "discussed"
    CALLBACK = "callback"
    INTERESTED = "interested"
    BUSY = "busy"
    RNR = "rnr"
    SWITCHED_OFF = "switched_off"


def parse_status(value: Any) -> LeadStatus:
    try:
        return LeadStatus(value)
    except ValueError:
        allowed = ", ".join(s.value for s in LeadStatus)
        raise ValidationError(f"Invalid status '{value}'. Allowed: {allowed}") from None


def parse_response(value: Any) -> Optional[LeadResponse]:
    """Empty values mean "no response recorded"."""
    if value is None or value == "":
        return None
    try:
        return LeadResponse(value)
    except ValueError:
        allowed = ", ".join(r.value for r in LeadResponse)
        raise ValidationError(f"Invalid response '{value}'. Allowed: {allowed}") from None


def require_text(name: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"Please add a {name}")
    return value.strip()


@dataclass(frozen=True, slots=True)
class Lead:
    """
    Pure domain entity for a Lead.

    Immutability:
    - The entity is frozen; changes go through domain.lead_lifecycle, which
      returns new instances and never touches telecaller or created_at.
    """

    id: UUID
    name: str
    email: str
    phone: str
    address: str
    telecaller: UUID
    created_at: datetime
    status: LeadStatus = LeadStatus.NEW
    response: Optional[LeadResponse] = None
    call_date: Optional[datetime] = None

    def __post_init__(self) -> None:
        for field_name in ("name", "email", "phone", "address"):
            require_text(field_name, getattr(self, field_name))
        if not isinstance(self.status, LeadStatus):
            raise ValidationError(f"status must be a LeadStatus, got {self.status!r}")
        if self.response is not None and not isinstance(self.response, LeadResponse):
            raise ValidationError(f"response must be a LeadResponse, got {self.response!r}")
        require_utc_timestamp("created_at", self.created_at)
        if self.call_date is not None:
            require_utc_timestamp("call_date", self.call_date)

    def is_owned_by(self, principal_id: UUID) -> bool:
        return self.telecaller == principal_id


__all__ = [
    "Lead",
    "LeadStatus",
    "LeadResponse",
    "parse_status",
    "parse_response",
    "require_text",
]
