"""ExpenseRecord model.

Expenses are owned by the expense service. This application reads them to
compute budget progress and never changes them: updates and deletes through
this ORM mapping are rejected.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, Index, Numeric, String, Text, event
from sqlalchemy.orm import Mapped, mapped_column

from dashboard.core.base import Base, CreatedAtMixin, StringPrimaryKeyMixin


class ExpenseReadOnlyError(RuntimeError):
    """Raised when an attempt is made to mutate or delete an expense from this service."""


class ExpenseRecord(StringPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "expenses"

    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    # Free text: expense categories are owned upstream and may exceed the budget vocabulary.
    category: Mapped[str] = mapped_column(String(64), nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    vendor: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)

    __table_args__ = (Index("ix_expenses_company_category_date", "company_id", "category", "date"),)


@event.listens_for(ExpenseRecord, "before_update", propagate=True)
def _expense_prevent_update(mapper, connection, target) -> None:
    raise ExpenseReadOnlyError("Expenses are read-only in the budgeting service.")


@event.listens_for(ExpenseRecord, "before_delete", propagate=True)
def _expense_prevent_delete(mapper, connection, target) -> None:
    raise ExpenseReadOnlyError("Expenses are read-only in the budgeting service.")
