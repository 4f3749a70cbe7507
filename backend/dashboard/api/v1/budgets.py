"""Budget endpoints.

Reads answer 200 with an empty body when the caller may not see the
company's budgets. Mutations answer 403 on create and 404 on update/delete,
whether the budget is missing or merely not manageable by the caller. Request
bodies are validated only once the caller may write, so a denied caller gets
the same answer whatever it sends.
"""

from __future__ import annotations

from typing import Any, TypeVar

from fastapi import APIRouter, Body, Depends, HTTPException, Path, Response, status
from fastapi.exceptions import RequestValidationError
from pydantic import BaseModel, ValidationError

from budgeting.core.errors import MalformedBudget
from dashboard.api.deps import get_budget_store, get_expense_store
from dashboard.repositories.budget_repo import BudgetRepository
from dashboard.repositories.expense_repo import ExpenseRepository
from dashboard.schemas.budget import (
    BudgetCreate,
    BudgetProgressRead,
    BudgetRead,
    BudgetSummaryRead,
    BudgetUpdate,
)
from dashboard.security.auth import forbidden, get_current_user
from dashboard.security.roles import UserIdentity
from dashboard.services import budget_service


router = APIRouter()

_Body = TypeVar("_Body", bound=BaseModel)


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Budget not found.")


def _unprocessable(e: MalformedBudget) -> HTTPException:
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))


@router.get("/companies/{company_id}/budgets", response_model=list[BudgetRead])
async def list_budgets(
    company_id: str = Path(..., min_length=1, max_length=64),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
) -> list[BudgetRead]:
    return [BudgetRead.from_budget(b) for b in budget_service.list_budgets(user, company_id, budgets=budgets)]


@router.get("/companies/{company_id}/budgets/progress", response_model=list[BudgetProgressRead])
async def get_budget_progress(
    company_id: str = Path(..., min_length=1, max_length=64),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
    expenses: ExpenseRepository = Depends(get_expense_store),
) -> list[BudgetProgressRead]:
    progress = budget_service.budget_progress(user, company_id, budgets=budgets, expenses=expenses)
    return [BudgetProgressRead.from_progress(p) for p in progress]


@router.get("/companies/{company_id}/budgets/summary", response_model=BudgetSummaryRead)
async def get_budget_summary(
    company_id: str = Path(..., min_length=1, max_length=64),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
    expenses: ExpenseRepository = Depends(get_expense_store),
) -> BudgetSummaryRead:
    summary = budget_service.budget_summary(user, company_id, budgets=budgets, expenses=expenses)
    return BudgetSummaryRead.from_summary(summary)


def _parse(schema: type[_Body], body: Any) -> _Body:
    try:
        return schema.model_validate({} if body is None else body)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False)) from e


@router.post(
    "/companies/{company_id}/budgets",
    response_model=BudgetRead,
    status_code=status.HTTP_201_CREATED,
)
async def create_budget(
    company_id: str = Path(..., min_length=1, max_length=64),
    body: Any = Body(None),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
) -> BudgetRead:
    if not budget_service.may_manage(user, company_id):
        raise forbidden()
    data = _parse(BudgetCreate, body).model_dump()
    data["company_id"] = company_id
    try:
        created = budget_service.create_budget(user, data, budgets=budgets)
    except MalformedBudget as e:
        raise _unprocessable(e) from e
    if created is None:
        raise forbidden()
    return BudgetRead.from_budget(created)


@router.patch("/budgets/{budget_id}", response_model=BudgetRead)
async def update_budget(
    budget_id: str = Path(..., min_length=1, max_length=64),
    body: Any = Body(None),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
) -> BudgetRead:
    if budget_service.manageable_budget(user, budget_id, budgets) is None:
        raise _not_found()
    patch = _parse(BudgetUpdate, body).to_patch()
    try:
        updated = budget_service.update_budget(user, budget_id, patch, budgets=budgets)
    except MalformedBudget as e:
        raise _unprocessable(e) from e
    if updated is None:
        raise _not_found()
    return BudgetRead.from_budget(updated)


@router.delete("/budgets/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(
    budget_id: str = Path(..., min_length=1, max_length=64),
    user: UserIdentity = Depends(get_current_user),
    budgets: BudgetRepository = Depends(get_budget_store),
) -> Response:
    if not budget_service.delete_budget(user, budget_id, budgets=budgets):
        raise _not_found()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
