"""Budget operations gated by the authorization resolver.

Rules:
- The resolver is consulted before any store call; nothing bypasses it.
- Read denials return the same shape as "no data" (an empty list or an empty
  summary) so that denied callers learn nothing about the company.
- Mutations return None/False when denied or when the budget does not exist
  in a company the caller may manage; the two cases are indistinguishable.
- Results are recomputed on every call.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

from budgeting.core.entities import Budget, BudgetPatch, BudgetProgress, BudgetSummary
from budgeting.core.progress import compute_progress, summarize
from budgeting.core.validation import validate_new_budget
from dashboard.repositories.base import BudgetStore, ExpenseStore
from dashboard.security.resolver import (
    Capability,
    can_manage_budgets,
    can_view_budgets,
    decide,
    valid_company_id,
)


logger = logging.getLogger("expdash.budgets")


def _log(event: dict[str, Any]) -> None:
    logger.info(json.dumps(event, ensure_ascii=False, default=str))


def _log_denied(user: Any, capability: Capability, company_id: Any) -> None:
    d = decide(user, capability, company_id)
    _log(
        {
            "event": "authorization_denied",
            "user_id": getattr(user, "id", None),
            "capability": d.capability,
            "reason": d.reason,
        }
    )


def _may_view(user: Any, company_id: Any) -> bool:
    if not valid_company_id(company_id):
        return False
    if not can_view_budgets(user):
        _log_denied(user, Capability.VIEW_BUDGETS, company_id)
        return False
    return True


def may_manage(user: Any, company_id: Any) -> bool:
    # Mutations always name a company; the unscoped global form never applies here.
    if not valid_company_id(company_id):
        return False
    if not can_manage_budgets(user, company_id):
        _log_denied(user, Capability.MANAGE_BUDGETS, company_id)
        return False
    return True


def list_budgets(user: Any, company_id: Optional[str], *, budgets: BudgetStore) -> list[Budget]:
    if not _may_view(user, company_id):
        return []
    return list(budgets.list_budgets(company_id))


def budget_progress(
    user: Any,
    company_id: Optional[str],
    *,
    budgets: BudgetStore,
    expenses: ExpenseStore,
) -> list[BudgetProgress]:
    """Spend-vs-budget state of every budget in the company; [] when denied."""
    if not _may_view(user, company_id):
        return []
    company_budgets = list(budgets.list_budgets(company_id))
    if not company_budgets:
        return []
    company_expenses = [e for e in expenses.list_expenses(company_id) if e.company_id == company_id]
    return compute_progress(company_budgets, company_expenses)


def budget_summary(
    user: Any,
    company_id: Optional[str],
    *,
    budgets: BudgetStore,
    expenses: ExpenseStore,
) -> BudgetSummary:
    return summarize(budget_progress(user, company_id, budgets=budgets, expenses=expenses))


def create_budget(user: Any, data: Mapping[str, Any], *, budgets: BudgetStore) -> Optional[Budget]:
    """Validate then store a new budget. None when the caller may not manage the company.

    Raises MalformedBudget for invalid data from an authorized caller.
    """
    company_id = data.get("company_id")
    if not may_manage(user, company_id):
        return None
    created = budgets.create_budget(validate_new_budget(data))
    _log(
        {
            "event": "budget_created",
            "user_id": getattr(user, "id", None),
            "company_id": created.company_id,
            "budget_id": created.id,
        }
    )
    return created


def manageable_budget(user: Any, budget_id: str, budgets: BudgetStore) -> Optional[Budget]:
    current = budgets.get_budget(budget_id)
    if current is None:
        return None
    if not may_manage(user, current.company_id):
        return None
    return current


def update_budget(user: Any, budget_id: str, patch: BudgetPatch, *, budgets: BudgetStore) -> Optional[Budget]:
    if manageable_budget(user, budget_id, budgets) is None:
        return None
    updated = budgets.update_budget(budget_id, patch)
    _log(
        {
            "event": "budget_updated",
            "user_id": getattr(user, "id", None),
            "company_id": updated.company_id,
            "budget_id": updated.id,
            "fields": sorted(patch.changes()),
        }
    )
    return updated


def delete_budget(user: Any, budget_id: str, *, budgets: BudgetStore) -> bool:
    """Hard delete; there is no soft-delete."""
    current = manageable_budget(user, budget_id, budgets)
    if current is None:
        return False
    budgets.delete_budget(budget_id)
    _log(
        {
            "event": "budget_deleted",
            "user_id": getattr(user, "id", None),
            "company_id": current.company_id,
            "budget_id": budget_id,
        }
    )
    return True
