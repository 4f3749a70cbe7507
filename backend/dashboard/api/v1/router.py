"""API v1 root router."""

from __future__ import annotations

from fastapi import APIRouter

from dashboard.api.v1.budgets import router as budgets_router
from dashboard.api.v1.permissions import router as permissions_router


router = APIRouter()
router.include_router(permissions_router, prefix="/me", tags=["permissions"])
router.include_router(budgets_router, tags=["budgets"])
