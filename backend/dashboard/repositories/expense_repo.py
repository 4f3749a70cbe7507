"""Expense repository (read-only)."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import Select, select

from budgeting.core.entities import Expense
from dashboard.models.expense import ExpenseRecord
from dashboard.repositories.base import ReadOnlyRepository


class ExpenseRepository(ReadOnlyRepository[ExpenseRecord]):
    """Expense store backed by the shared database.

    Returns value objects, never ORM rows, so callers cannot mutate records.
    """

    def list_expenses(self, company_id: str) -> Sequence[Expense]:
        stmt: Select = (
            select(ExpenseRecord)
            .where(ExpenseRecord.company_id == company_id)
            .order_by(ExpenseRecord.date.asc(), ExpenseRecord.id.asc())
        )
        rows = self._execute(stmt).scalars().all()
        return [_to_expense(r) for r in rows]


def _to_expense(r: ExpenseRecord) -> Expense:
    return Expense(
        id=r.id,
        company_id=r.company_id,
        category=r.category,
        amount=r.amount,
        date=r.date,
    )
