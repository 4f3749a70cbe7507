from __future__ import annotations

"""Budget status aggregation.

Deterministic rules:
- An expense counts toward a budget when the categories match and, if the
  budget has both a start and an end date, the expense date lies within
  [start, end] inclusive. A budget missing either bound covers all time.
- status is a pure function of spending / amount with fixed thresholds.
- No caching: expenses can change between calls.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Iterable, Sequence

from budgeting.core.entities import (
    Budget,
    BudgetProgress,
    BudgetStatus,
    BudgetSummary,
    Expense,
)
from budgeting.core.errors import AggregationError


WARNING_THRESHOLD = Decimal("80")
EXCEEDED_THRESHOLD = Decimal("100")

_ZERO = Decimal("0")
_HUNDRED = Decimal("100")


def status_for(percentage_used: Decimal) -> BudgetStatus:
    if percentage_used >= EXCEEDED_THRESHOLD:
        return BudgetStatus.EXCEEDED
    if percentage_used >= WARNING_THRESHOLD:
        return BudgetStatus.WARNING
    return BudgetStatus.ON_TRACK


def index_by_category(expenses: Iterable[Expense]) -> dict[str, list[Expense]]:
    by_category: dict[str, list[Expense]] = defaultdict(list)
    for e in expenses:
        by_category[e.category].append(e)
    return by_category


def matching_expenses(budget: Budget, candidates: Iterable[Expense]) -> list[Expense]:
    """Expenses of the budget's category that fall inside its window."""
    category = budget.category.value
    selected = [e for e in candidates if e.category == category]
    if not budget.has_window:
        return selected
    return [e for e in selected if budget.start_date <= e.date <= budget.end_date]


def progress_for(budget: Budget, expenses: Iterable[Expense]) -> BudgetProgress:
    if budget.amount <= _ZERO:
        # Amounts are validated at creation; a non-positive one here is corrupt input.
        raise AggregationError(f"Budget {budget.id} has non-positive amount.")

    spending = sum((e.amount for e in matching_expenses(budget, expenses)), _ZERO)
    percentage = spending / budget.amount * _HUNDRED
    return BudgetProgress(
        budget=budget,
        current_spending=spending,
        percentage_used=percentage,
        remaining=budget.amount - spending,
        status=status_for(percentage),
    )


def compute_progress(budgets: Sequence[Budget], expenses: Iterable[Expense]) -> list[BudgetProgress]:
    """Progress for every budget, in budget order.

    Expenses are indexed by category once, so each budget only scans its own
    category.
    """
    by_category = index_by_category(expenses)
    return [progress_for(b, by_category.get(b.category.value, ())) for b in budgets]


def summarize(progress: Sequence[BudgetProgress]) -> BudgetSummary:
    counts = {s: 0 for s in BudgetStatus}
    total_budgeted = _ZERO
    total_spending = _ZERO
    active = 0
    for p in progress:
        counts[p.status] += 1
        total_budgeted += p.budget.amount
        total_spending += p.current_spending
        if p.budget.is_active:
            active += 1

    n = len(progress)
    return BudgetSummary(
        budget_count=n,
        active_count=active,
        total_budgeted=total_budgeted,
        average_budget=(total_budgeted / n) if n else _ZERO,
        total_spending=total_spending,
        on_track_count=counts[BudgetStatus.ON_TRACK],
        warning_count=counts[BudgetStatus.WARNING],
        exceeded_count=counts[BudgetStatus.EXCEEDED],
    )
