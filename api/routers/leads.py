"""
Leads API Endpoints.

Role gates run as dependencies; the lead service then fetches the record and
checks ownership, so a non-owner gets 403 rather than 404 for an existing lead.
"""

from fastapi import APIRouter, Depends, status

from api.dependencies import get_current_principal, require_roles
from api.models import (
    LeadAddressRequest,
    LeadCreateRequest,
    LeadDetailResponse,
    LeadListResponse,
    LeadOut,
    LeadStatsOut,
    LeadStatsResponse,
    LeadStatusRequest,
    SuccessResponse,
)
from domain.principal import Principal, Role
from services import lead_service
from services.stats_service import get_lead_stats

router = APIRouter(prefix="/leads")

telecaller_only = require_roles(Role.TELECALLER)


@router.get(
    "",
    response_model=LeadListResponse,
    summary="List Leads",
    description="Telecallers receive their own leads; admins receive all leads with owner details.",
)
def get_leads(principal: Principal = Depends(get_current_principal)):
    leads = [LeadOut.from_view(view) for view in lead_service.list_leads(principal)]
    return LeadListResponse(count=len(leads), data=leads)


@router.get("/stats", response_model=LeadStatsResponse, summary="Call Statistics")
def get_stats(admin: Principal = Depends(require_roles(Role.ADMIN))):
    return LeadStatsResponse(data=LeadStatsOut.from_stats(get_lead_stats()))


@router.post(
    "",
    response_model=LeadDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create Lead",
)
def create_lead(request: LeadCreateRequest, principal: Principal = Depends(telecaller_only)):
    lead = lead_service.create_lead(principal, request.model_dump())
    return LeadDetailResponse(data=LeadOut.from_lead(lead))


@router.get("/{lead_id}", response_model=LeadDetailResponse, summary="Get Lead")
def get_lead(lead_id: str, principal: Principal = Depends(get_current_principal)):
    return LeadDetailResponse(data=LeadOut.from_view(lead_service.get_lead(principal, lead_id)))


@router.put(
    "/{lead_id}",
    response_model=LeadDetailResponse,
    summary="Update Lead Address",
    description="Only `address` is applied. Any other field in the body is ignored.",
)
def update_lead(
    lead_id: str,
    request: LeadAddressRequest,
    principal: Principal = Depends(telecaller_only),
):
    lead = lead_service.update_lead_address(principal, lead_id, request.model_dump())
    return LeadDetailResponse(data=LeadOut.from_lead(lead))


@router.put("/{lead_id}/status", response_model=LeadDetailResponse, summary="Update Lead Status")
def update_lead_status(
    lead_id: str,
    request: LeadStatusRequest,
    principal: Principal = Depends(telecaller_only),
):
    """
    Moving to `connected` stamps `callDate` with the current time; any other
    status leaves `callDate` as it was.
    """
    lead = lead_service.update_lead_status(
        principal, lead_id, request.model_dump(exclude_unset=True)
    )
    return LeadDetailResponse(data=LeadOut.from_lead(lead))


@router.delete("/{lead_id}", response_model=SuccessResponse, summary="Delete Lead")
def delete_lead(lead_id: str, principal: Principal = Depends(telecaller_only)):
    lead_service.delete_lead(principal, lead_id)
    return SuccessResponse()
