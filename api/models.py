"""
API Request and Response Models.

Pydantic models for validating API requests and serializing responses.
Responses are serialized with camelCase aliases (callDate, createdAt, ...) to
keep the wire format the frontend already consumes.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr
from pydantic.alias_generators import to_camel

from domain.lead import Lead
from domain.principal import Principal
from services.lead_service import LeadWithOwner
from services.stats_service import LeadStats


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Auth Models
# ============================================================================

class RegisterRequest(BaseModel):
    """Local registration. Role defaults to telecaller."""
    name: str = ""
    email: EmailStr
    password: str = ""
    role: Optional[str] = None

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Asha Rao",
                "email": "asha@example.com",
                "password": "s3cret-pass",
                "role": "telecaller",
            }
        }
    )


class LoginRequest(BaseModel):
    """Empty fields are rejected by the service with a 400, not a 422."""
    email: str = ""
    password: str = ""


class UserSummary(ApiModel):
    id: str
    name: str
    email: str
    role: str

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserSummary":
        return cls(**principal.public_view())


class UserOut(ApiModel):
    """Principal as exposed over the API. The password hash never leaves the service."""
    id: str
    name: str
    email: str
    role: str
    oauth_provider: Optional[str] = None
    created_at: datetime

    @classmethod
    def from_principal(cls, principal: Principal) -> "UserOut":
        return cls(
            id=str(principal.id),
            name=principal.name,
            email=principal.email,
            role=principal.role.value,
            oauth_provider=principal.oauth_provider.value if principal.oauth_provider else None,
            created_at=principal.created_at,
        )


class AuthResponse(ApiModel):
    success: bool = True
    token: str
    user: UserSummary


class UserResponse(ApiModel):
    success: bool = True
    data: UserOut


class UserListResponse(ApiModel):
    success: bool = True
    count: int
    data: List[UserOut]


class SuccessResponse(ApiModel):
    success: bool = True
    data: dict[str, Any] = {}


# ============================================================================
# Lead Models
# ============================================================================

class LeadCreateRequest(BaseModel):
    """
    Contact fields for a new lead.

    Extra keys are accepted and passed through; the service ignores anything
    that is not a contact field.
    """
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={
            "example": {
                "name": "Ravi Kumar",
                "email": "ravi@example.com",
                "phone": "+91 98450 00000",
                "address": "12 MG Road, Bengaluru",
            }
        },
    )


class LeadAddressRequest(BaseModel):
    """Only `address` is applied; other keys are accepted and ignored."""
    address: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class LeadStatusRequest(BaseModel):
    """Omitting `response` keeps the current one; null clears it."""
    status: Optional[str] = None
    response: Optional[str] = None

    model_config = ConfigDict(
        extra="allow",
        json_schema_extra={"example": {"status": "connected", "response": "interested"}},
    )


class TelecallerSummary(ApiModel):
    id: str
    name: str
    email: str


class LeadOut(ApiModel):
    id: str
    name: str
    email: str
    phone: str
    address: str
    status: str
    response: Optional[str] = None
    telecaller: str
    owner: Optional[TelecallerSummary] = None
    call_date: Optional[datetime] = None
    created_at: datetime

    @classmethod
    def from_lead(cls, lead: Lead, owner: Optional[Principal] = None) -> "LeadOut":
        return cls(
            id=str(lead.id),
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            address=lead.address,
            status=lead.status.value,
            response=lead.response.value if lead.response else None,
            telecaller=str(lead.telecaller),
            owner=(
                TelecallerSummary(id=str(owner.id), name=owner.name, email=owner.email)
                if owner
                else None
            ),
            call_date=lead.call_date,
            created_at=lead.created_at,
        )

    @classmethod
    def from_view(cls, view: LeadWithOwner) -> "LeadOut":
        return cls.from_lead(view.lead, view.owner)


class LeadDetailResponse(ApiModel):
    success: bool = True
    data: LeadOut


class LeadListResponse(ApiModel):
    success: bool = True
    count: int
    data: List[LeadOut]


class CallTrendOut(ApiModel):
    date: str
    count: int


class LeadStatsOut(ApiModel):
    total_telecallers: int
    total_calls: int
    total_customers: int
    recent_calls: List[LeadOut]
    call_trends: List[CallTrendOut]

    @classmethod
    def from_stats(cls, stats: LeadStats) -> "LeadStatsOut":
        return cls(
            total_telecallers=stats.total_telecallers,
            total_calls=stats.total_calls,
            total_customers=stats.total_customers,
            recent_calls=[LeadOut.from_view(view) for view in stats.recent_calls],
            call_trends=[CallTrendOut(date=p.date, count=p.count) for p in stats.call_trends],
        )


class LeadStatsResponse(ApiModel):
    success: bool = True
    data: LeadStatsOut


# ============================================================================
# Error Models
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    status_code: int

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": False,
                "error": "Invalid credentials",
                "status_code": 401,
            }
        }
    )
