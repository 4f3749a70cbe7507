"""API dependencies: request-scoped stores."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.orm import Session

from dashboard.core.db import get_db_session
from dashboard.repositories.budget_repo import BudgetRepository
from dashboard.repositories.expense_repo import ExpenseRepository


def get_budget_store(db: Session = Depends(get_db_session)) -> BudgetRepository:
    return BudgetRepository(db)


def get_expense_store(db: Session = Depends(get_db_session)) -> ExpenseRepository:
    # Autoflush off so that reads can never push pending writes.
    db.autoflush = False
    return ExpenseRepository(db)
