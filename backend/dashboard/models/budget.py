"""BudgetRecord model.

A budget caps spending for one category of one company, optionally within a
date window. Records are created, patched and hard-deleted only through the
budget service after a successful authorization check.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Date, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, validates
from sqlalchemy.sql.sqltypes import Enum as SAEnum

from budgeting.core.entities import BudgetCategory, BudgetPeriod
from dashboard.core.base import Base, CreatedAtMixin, StringPrimaryKeyMixin, UpdatedAtMixin


def _enum_values(enum_cls) -> list[str]:
    return [m.value for m in enum_cls]


class BudgetRecord(StringPrimaryKeyMixin, CreatedAtMixin, UpdatedAtMixin, Base):
    __tablename__ = "budgets"

    company_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    category: Mapped[BudgetCategory] = mapped_column(
        SAEnum(BudgetCategory, name="budget_category", values_callable=_enum_values),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    period: Mapped[BudgetPeriod] = mapped_column(
        SAEnum(BudgetPeriod, name="budget_period", values_callable=_enum_values),
        nullable=False,
        default=BudgetPeriod.MONTHLY,
    )

    start_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    end_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    name: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_budgets_amount_positive"),
        CheckConstraint(
            "(start_date IS NULL) OR (end_date IS NULL) OR (end_date >= start_date)",
            name="ck_budgets_end_after_start",
        ),
        Index("ix_budgets_company_category", "company_id", "category"),
    )

    @validates("amount")
    def _validate_amount(self, key: str, value: Decimal) -> Decimal:
        if value is None or Decimal(value) <= 0:
            raise ValueError("amount must be > 0.")
        return value
