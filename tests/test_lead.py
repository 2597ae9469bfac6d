"""
Tests for `domain/lead.py`.

Covers contract rules:
- name, email, phone and address are required (non-blank) contact fields.
- status defaults to new; response and call_date default to None.
- status and response are closed sets; unknown values are rejected.
- created_at and call_date must be UTC timestamps.
- The entity is frozen.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone
from uuid import UUID

import pytest

from domain.errors import ValidationError
from domain.lead import (
    Lead,
    LeadResponse,
    LeadStatus,
    parse_response,
    parse_status,
    require_text,
)

LEAD_ID = UUID("00000000-0000-0000-0000-000000000001")
OWNER_ID = UUID("00000000-0000-0000-0000-0000000000aa")


def _lead(**overrides) -> Lead:
    fields = {
        "id": LEAD_ID,
        "name": "Ravi Kumar",
        "email": "ravi@example.com",
        "phone": "+91 98450 00000",
        "address": "12 MG Road",
        "telecaller": OWNER_ID,
        "created_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
    }
    fields.update(overrides)
    return Lead(**fields)


def test_lead_defaults() -> None:
    """Verify a new lead starts as new with no response and no call date."""

    lead = _lead()

    assert lead.status is LeadStatus.NEW
    assert lead.response is None
    assert lead.call_date is None


@pytest.mark.parametrize("field_name", ["name", "email", "phone", "address"])
def test_lead_contact_fields_required(field_name: str) -> None:
    """Verify blank contact fields are rejected with a field-specific message."""

    with pytest.raises(ValidationError) as excinfo:
        _lead(**{field_name: "   "})

    assert excinfo.value.message == f"Please add a {field_name}"


def test_lead_created_at_must_be_utc() -> None:
    """Verify created_at must be timezone-aware UTC (offset 0)."""

    with pytest.raises(ValueError):
        _lead(created_at=datetime(2025, 1, 1))

    with pytest.raises(ValueError):
        _lead(created_at=datetime(2025, 1, 1, tzinfo=timezone(timedelta(hours=5, minutes=30))))


def test_lead_call_date_must_be_utc_when_present() -> None:
    """Verify a non-null call_date must be UTC."""

    with pytest.raises(ValueError):
        _lead(status=LeadStatus.CONNECTED, call_date=datetime(2025, 1, 2))


def test_lead_rejects_raw_strings_for_enums() -> None:
    """Verify status and response must be enum members, not raw strings."""

    with pytest.raises(ValidationError):
        _lead(status="connected")

    with pytest.raises(ValidationError):
        _lead(response="busy")


def test_lead_is_immutable() -> None:
    """Verify the lead cannot be mutated in place."""

    lead = _lead()

    with pytest.raises(FrozenInstanceError):
        lead.telecaller = UUID("00000000-0000-0000-0000-0000000000bb")  # type: ignore[misc]


def test_lead_ownership() -> None:
    """Verify ownership is a plain id comparison."""

    lead = _lead()

    assert lead.is_owned_by(OWNER_ID)
    assert not lead.is_owned_by(UUID("00000000-0000-0000-0000-0000000000bb"))


def test_parse_status() -> None:
    """Verify status parsing accepts the closed set and names allowed values on error."""

    assert parse_status("not_connected") is LeadStatus.NOT_CONNECTED

    with pytest.raises(ValidationError) as excinfo:
        parse_status("closed")

    assert "new, connected, not_connected" in excinfo.value.message


def test_parse_response() -> None:
    """Verify empty responses mean none and unknown responses are rejected."""

    assert parse_response(None) is None
    assert parse_response("") is None
    assert parse_response("switched_off") is LeadResponse.SWITCHED_OFF

    with pytest.raises(ValidationError):
        parse_response("maybe")


def test_require_text_strips() -> None:
    """Verify accepted text is returned stripped and non-strings are rejected."""

    assert require_text("address", "  5 Park St  ") == "5 Park St"

    with pytest.raises(ValidationError):
        require_text("address", 42)
