"""
Domain: Lead lifecycle transitions (pure).

State machine over (status, response, call_date):
- Any status in LeadStatus may follow any other; there is no terminal state.
- call_date is stamped with the transition time exactly when the new status is
  connected. Moving to any other status leaves call_date as it was.
- response is independent of status.

Address updates are a separate, narrower transition that only ever reads the
address key of the incoming payload.

Neither transition can change telecaller, id or created_at: both build the new
entity with dataclasses.replace over an explicit field list.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Any, Mapping, Optional, Union

from .errors import ValidationError
from .lead import Lead, LeadResponse, LeadStatus, parse_response, parse_status, require_text
from .time import require_utc_timestamp


class _Unchanged:
    def __repr__(self) -> str:
        return "UNCHANGED"


# Sentinel for "the caller did not send a response value".
UNCHANGED = _Unchanged()

ResponseUpdate = Union[Optional[LeadResponse], _Unchanged]


def transition_status(
    lead: Lead,
    new_status: LeadStatus,
    new_response: ResponseUpdate,
    now: datetime,
) -> Lead:
    """
    Apply a status/response transition.

    Args:
        lead: Current lead state
        new_status: Target status (any LeadStatus)
        new_response: Target response, None to clear, or UNCHANGED to keep
        now: Transition time; becomes call_date when landing on connected

    Returns:
        New Lead with only status, response and call_date possibly changed
    """
    require_utc_timestamp("now", now)

    call_date = now if new_status is LeadStatus.CONNECTED else lead.call_date
    response = lead.response if new_response is UNCHANGED else new_response

    return replace(lead, status=new_status, response=response, call_date=call_date)


def parse_status_payload(payload: Mapping[str, Any]) -> tuple[LeadStatus, ResponseUpdate]:
    """
    Validate a raw status-update payload before anything is committed.

    A missing "response" key keeps the current response; an explicit null or
    empty string clears it.
    """
    if payload.get("status") is None:
        raise ValidationError("Please add a status")
    status = parse_status(payload["status"])
    response: ResponseUpdate = UNCHANGED
    if "response" in payload:
        response = parse_response(payload["response"])
    return status, response


def update_address(lead: Lead, payload: Mapping[str, Any]) -> Lead:
    """
    Apply an address-only update.

    Every key other than "address" is ignored, so a bulk payload carrying status,
    telecaller or call_date cannot overwrite protected fields.
    """
    address = require_text("address", payload.get("address"))
    return replace(lead, address=address)


__all__ = [
    "UNCHANGED",
    "transition_status",
    "parse_status_payload",
    "update_address",
]
