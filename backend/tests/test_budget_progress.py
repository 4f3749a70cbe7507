from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from budgeting.core.entities import Budget, BudgetStatus, Expense
from budgeting.core.errors import AggregationError
from budgeting.core.progress import compute_progress, status_for, summarize


def budget(amount="1000", category="rent", start=None, end=None, **kw) -> Budget:
    return Budget(
        id=kw.pop("id", "b1"),
        company_id="c1",
        category=category,
        amount=amount,
        start_date=start,
        end_date=end,
        **kw,
    )


def expense(amount, category="rent", on=date(2024, 5, 10), eid="e") -> Expense:
    return Expense(id=eid, company_id="c1", category=category, amount=amount, date=on)


def test_warning_at_eighty_percent():
    [p] = compute_progress([budget()], [expense("500"), expense("300")])
    assert p.current_spending == Decimal("800")
    assert p.percentage_used == 80
    assert p.remaining == Decimal("200")
    assert p.status == BudgetStatus.WARNING


def test_exceeded_with_negative_remaining():
    [p] = compute_progress([budget()], [expense("700"), expense("500")])
    assert p.current_spending == Decimal("1200")
    assert p.remaining == Decimal("-200")
    assert p.status == BudgetStatus.EXCEEDED


@pytest.mark.parametrize(
    "pct, expected",
    [
        ("0", BudgetStatus.ON_TRACK),
        ("79.999", BudgetStatus.ON_TRACK),
        ("80.0", BudgetStatus.WARNING),
        ("99.999", BudgetStatus.WARNING),
        ("100.0", BudgetStatus.EXCEEDED),
        ("250", BudgetStatus.EXCEEDED),
    ],
)
def test_status_thresholds(pct, expected):
    assert status_for(Decimal(pct)) == expected


def test_window_is_inclusive_on_both_ends():
    b = budget(start=date(2024, 1, 1), end=date(2024, 1, 31))
    expenses = [
        expense("100", on=date(2023, 12, 31)),
        expense("10", on=date(2024, 1, 1)),
        expense("20", on=date(2024, 1, 15)),
        expense("30", on=date(2024, 1, 31)),
        expense("100", on=date(2024, 2, 1)),
    ]
    [p] = compute_progress([b], expenses)
    assert p.current_spending == Decimal("60")


@pytest.mark.parametrize("start, end", [(date(2024, 1, 1), None), (None, date(2024, 1, 31)), (None, None)])
def test_missing_bound_counts_all_time(start, end):
    b = budget(start=start, end=end)
    expenses = [expense("100", on=date(2020, 1, 1)), expense("50", on=date(2030, 1, 1))]
    [p] = compute_progress([b], expenses)
    assert p.current_spending == Decimal("150")


def test_only_matching_category_counts():
    budgets = [budget(id="rent"), budget(id="water", category="water", amount="200")]
    expenses = [expense("400"), expense("50", category="water"), expense("999", category="catering")]
    rent, water = compute_progress(budgets, expenses)
    assert rent.current_spending == Decimal("400")
    assert rent.status == BudgetStatus.ON_TRACK
    assert water.current_spending == Decimal("50")
    assert water.percentage_used == 25


def test_budget_without_expenses_is_on_track():
    [p] = compute_progress([budget()], [])
    assert p.current_spending == 0
    assert p.percentage_used == 0
    assert p.remaining == Decimal("1000")
    assert p.status == BudgetStatus.ON_TRACK


def test_same_inputs_same_results():
    budgets = [budget()]
    expenses = [expense("850")]
    assert compute_progress(budgets, expenses) == compute_progress(budgets, expenses)


def test_status_never_falls_back_while_spending_grows():
    b = budget(amount="100")
    order = [BudgetStatus.ON_TRACK, BudgetStatus.WARNING, BudgetStatus.EXCEEDED]
    spent: list[Expense] = []
    last = 0
    for i, amt in enumerate(["30", "45", "5", "19.99", "0.01", "50"]):
        spent.append(expense(amt, eid=f"e{i}"))
        [p] = compute_progress([b], spent)
        rank = order.index(p.status)
        assert rank >= last
        last = rank
    assert last == 2


def test_float_amounts_are_exact():
    [p] = compute_progress([budget(amount=0.3)], [expense(0.1), expense(0.2)])
    assert p.percentage_used == 100
    assert p.status == BudgetStatus.EXCEEDED


def test_non_positive_amount_is_rejected_here_too():
    with pytest.raises(AggregationError):
        compute_progress([budget(amount="0")], [])


def test_summary_counts():
    budgets = [
        budget(id="a", amount="100"),
        budget(id="b", amount="100", category="water"),
        budget(id="c", amount="200", category="internet", is_active=False),
    ]
    expenses = [expense("120"), expense("85", category="water")]
    s = summarize(compute_progress(budgets, expenses))
    assert s.budget_count == 3
    assert s.active_count == 2
    assert s.total_budgeted == Decimal("400")
    assert s.average_budget == Decimal("400") / 3
    assert s.total_spending == Decimal("205")
    assert (s.on_track_count, s.warning_count, s.exceeded_count) == (1, 1, 1)


def test_summary_of_nothing():
    s = summarize([])
    assert s.budget_count == 0
    assert s.average_budget == 0
