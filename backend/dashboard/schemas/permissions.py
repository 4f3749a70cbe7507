"""Schemas for capability query endpoints."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class DecisionResponse(BaseModel):
    capability: str
    allowed: bool
    effective_role: str
    reason: str


class RoleFlags(BaseModel):
    is_super_admin: bool
    is_company_owner: bool
    is_company_admin: bool
    is_member: bool


class CapabilityMatrixResponse(BaseModel):
    """Diagnostic matrix for administrative tooling; not for UI control flow."""

    user_id: str
    email: str
    global_role: str
    company_id: Optional[str] = None
    company_role: Optional[str] = None
    effective_company_role: Optional[str] = None
    company_ids: list[str]
    roles: RoleFlags
    capabilities: dict[str, bool]
