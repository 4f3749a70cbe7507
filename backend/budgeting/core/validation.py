"""Budget creation and patch validation (MalformedBudget)."""

from __future__ import annotations

import uuid
from typing import Any, Mapping, Optional

from budgeting.core.entities import (
    Budget,
    BudgetCategory,
    BudgetPatch,
    BudgetPeriod,
    to_date,
    to_decimal,
)
from budgeting.core.errors import MalformedBudget


def _category(raw: Any) -> BudgetCategory:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        raise MalformedBudget("Budget category is required.", field="category")
    try:
        return BudgetCategory(str(getattr(raw, "value", raw)).strip().lower())
    except ValueError as e:
        raise MalformedBudget(f"Unknown budget category {raw!r}.", field="category") from e


def _period(raw: Any) -> BudgetPeriod:
    try:
        return BudgetPeriod(str(getattr(raw, "value", raw)).strip().lower())
    except ValueError as e:
        raise MalformedBudget(f"Unknown budget period {raw!r}.", field="period") from e


def _amount(raw: Any):
    if raw is None:
        raise MalformedBudget("Budget amount is required.", field="amount")
    try:
        amount = to_decimal(raw)
    except ValueError as e:
        raise MalformedBudget("Budget amount must be a number.", field="amount") from e
    if not amount.is_finite() or amount <= 0:
        raise MalformedBudget("Budget amount must be greater than zero.", field="amount")
    return amount


def _date(raw: Any, field: str):
    try:
        return to_date(raw)
    except ValueError as e:
        raise MalformedBudget(f"Budget {field} must be an ISO date.", field=field) from e


def _window(start: Any, end: Any):
    start_d, end_d = _date(start, "start_date"), _date(end, "end_date")
    if start_d is not None and end_d is not None and end_d < start_d:
        raise MalformedBudget("Budget end date precedes its start date.", field="end_date")
    return start_d, end_d


def validate_new_budget(data: Mapping[str, Any], *, budget_id: Optional[str] = None) -> Budget:
    """Build a Budget from raw creation data or raise MalformedBudget."""
    company_id = data.get("company_id")
    if not isinstance(company_id, str) or not company_id.strip():
        raise MalformedBudget("Budget company is required.", field="company_id")

    start, end = _window(data.get("start_date"), data.get("end_date"))
    period = data.get("period")
    is_active = data.get("is_active")
    return Budget(
        id=budget_id or str(uuid.uuid4()),
        company_id=company_id,
        category=_category(data.get("category")),
        amount=_amount(data.get("amount")),
        period=_period(period) if period is not None else BudgetPeriod.MONTHLY,
        start_date=start,
        end_date=end,
        is_active=True if is_active is None else bool(is_active),
        name=data.get("name"),
        description=data.get("description"),
    )


def validate_patch(current: Budget, patch: BudgetPatch) -> Budget:
    """Apply a patch to an existing budget; the result must still be well-formed."""
    if patch.clear_window and (patch.start_date is not None or patch.end_date is not None):
        raise MalformedBudget("Cannot clear the date window and set a date at once.", field="clear_window")
    changes = patch.changes()
    if "category" in changes:
        changes["category"] = _category(changes["category"])
    if "period" in changes:
        changes["period"] = _period(changes["period"])
    if "amount" in changes:
        changes["amount"] = _amount(changes["amount"])

    start, end = _window(
        changes.get("start_date", current.start_date),
        changes.get("end_date", current.end_date),
    )
    changes["start_date"], changes["end_date"] = start, end

    fields = {k: getattr(current, k) for k in current.__dataclass_fields__}
    fields.update(changes)
    return Budget(**fields)
