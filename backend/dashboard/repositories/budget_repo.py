"""Budget repository.

The only writer of budget records. Authorization is the caller's job: the
budget service checks the resolver before any method here is reached.
"""

from __future__ import annotations

from typing import Optional, Sequence

from sqlalchemy import Select, select
from sqlalchemy.orm import Session

from budgeting.core.entities import Budget, BudgetPatch
from budgeting.core.validation import validate_patch
from dashboard.models.budget import BudgetRecord
from dashboard.repositories.base import BaseRepository


class BudgetNotFound(LookupError):
    pass


class BudgetRepository(BaseRepository[BudgetRecord]):
    def __init__(self, session: Session, *, autocommit: bool = True) -> None:
        super().__init__(session)
        self._autocommit = autocommit

    def _flush(self) -> None:
        if self._autocommit:
            self._session.commit()
        else:
            self._session.flush()

    def _get_record(self, budget_id: str) -> Optional[BudgetRecord]:
        if not budget_id:
            return None
        return self._session.get(BudgetRecord, budget_id)

    def list_budgets(self, company_id: str) -> Sequence[Budget]:
        stmt: Select = (
            select(BudgetRecord)
            .where(BudgetRecord.company_id == company_id)
            .order_by(BudgetRecord.created_at.asc(), BudgetRecord.id.asc())
        )
        return [_to_budget(r) for r in self._execute(stmt).scalars().all()]

    def get_budget(self, budget_id: str) -> Optional[Budget]:
        r = self._get_record(budget_id)
        return _to_budget(r) if r is not None else None

    def create_budget(self, budget: Budget) -> Budget:
        r = BudgetRecord(
            id=budget.id,
            company_id=budget.company_id,
            category=budget.category,
            amount=budget.amount,
            period=budget.period,
            start_date=budget.start_date,
            end_date=budget.end_date,
            is_active=budget.is_active,
            name=budget.name,
            description=budget.description,
        )
        self._session.add(r)
        self._flush()
        return _to_budget(r)

    def update_budget(self, budget_id: str, patch: BudgetPatch) -> Budget:
        r = self._get_record(budget_id)
        if r is None:
            raise BudgetNotFound(budget_id)
        updated = validate_patch(_to_budget(r), patch)
        for k in ("category", "amount", "period", "start_date", "end_date", "is_active", "name", "description"):
            setattr(r, k, getattr(updated, k))
        self._flush()
        return _to_budget(r)

    def delete_budget(self, budget_id: str) -> None:
        r = self._get_record(budget_id)
        if r is None:
            raise BudgetNotFound(budget_id)
        self._session.delete(r)
        self._flush()


def _to_budget(r: BudgetRecord) -> Budget:
    return Budget(
        id=r.id,
        company_id=r.company_id,
        category=r.category,
        amount=r.amount,
        period=r.period or "monthly",
        start_date=r.start_date,
        end_date=r.end_date,
        is_active=bool(r.is_active) if r.is_active is not None else True,
        name=r.name,
        description=r.description,
    )
