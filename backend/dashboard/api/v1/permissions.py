"""Capability query endpoints (caller's own identity only)."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from dashboard.schemas.permissions import CapabilityMatrixResponse, DecisionResponse, RoleFlags
from dashboard.security.auth import get_current_user, require_capability
from dashboard.security.resolver import Capability, capability_matrix, decide, parse_capability
from dashboard.security.roles import UserIdentity, company_ids_of


router = APIRouter(dependencies=[Depends(require_capability(Capability.VIEW_PROFILE))])


@router.get("/permissions", response_model=CapabilityMatrixResponse)
async def get_capability_matrix(
    company_id: Optional[str] = Query(None, max_length=64),
    user: UserIdentity = Depends(get_current_user),
) -> CapabilityMatrixResponse:
    """Full capability matrix for diagnostics and administrative tooling."""
    m = capability_matrix(user, company_id)
    return CapabilityMatrixResponse(
        user_id=user.id,
        email=user.email,
        global_role=m["global_role"],
        company_id=m["company_id"],
        company_role=m["company_role"],
        effective_company_role=m["effective_company_role"],
        company_ids=company_ids_of(user),
        roles=RoleFlags(**m["roles"]),
        capabilities=m["capabilities"],
    )


@router.get("/permissions/{capability}", response_model=DecisionResponse)
async def get_capability(
    capability: str,
    company_id: Optional[str] = Query(None, max_length=64),
    user: UserIdentity = Depends(get_current_user),
) -> DecisionResponse:
    if parse_capability(capability) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown capability.")
    d = decide(user, capability, company_id)
    return DecisionResponse(
        capability=d.capability,
        allowed=d.allowed,
        effective_role=d.effective_role,
        reason=d.reason,
    )
