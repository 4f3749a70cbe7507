"""Schemas for budget endpoints."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from budgeting.core.entities import (
    Budget,
    BudgetCategory,
    BudgetPatch,
    BudgetPeriod,
    BudgetProgress,
    BudgetSummary,
)


BudgetStatusLiteral = Literal["on_track", "warning", "exceeded"]


class _DateWindow(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @model_validator(mode="after")
    def _end_after_start(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not precede start_date")
        return self


class BudgetCreate(_DateWindow):
    category: BudgetCategory
    amount: Decimal = Field(gt=0, max_digits=14, decimal_places=2)
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    is_active: bool = True
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None


class BudgetUpdate(_DateWindow):
    category: Optional[BudgetCategory] = None
    amount: Optional[Decimal] = Field(None, gt=0, max_digits=14, decimal_places=2)
    period: Optional[BudgetPeriod] = None
    is_active: Optional[bool] = None
    name: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = None
    clear_window: bool = False

    def to_patch(self) -> BudgetPatch:
        return BudgetPatch(**self.model_dump(exclude_none=True))


class BudgetRead(BaseModel):
    id: str
    company_id: str
    category: BudgetCategory
    amount: float
    period: BudgetPeriod
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool
    name: Optional[str] = None
    description: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_budget(cls, b: Budget) -> "BudgetRead":
        return cls(
            id=b.id,
            company_id=b.company_id,
            category=b.category,
            amount=float(b.amount),
            period=b.period,
            start_date=b.start_date,
            end_date=b.end_date,
            is_active=b.is_active,
            name=b.name,
            description=b.description,
        )


class BudgetProgressRead(BaseModel):
    """One budget with its spending state (derived, never stored)."""

    budget: BudgetRead
    current_spending: float
    percentage_used: float
    remaining: float
    status: BudgetStatusLiteral

    @classmethod
    def from_progress(cls, p: BudgetProgress) -> "BudgetProgressRead":
        return cls(
            budget=BudgetRead.from_budget(p.budget),
            current_spending=float(p.current_spending),
            percentage_used=float(p.percentage_used),
            remaining=float(p.remaining),
            status=p.status.value,
        )


class BudgetSummaryRead(BaseModel):
    budget_count: int
    active_count: int
    total_budgeted: float
    average_budget: float
    total_spending: float
    on_track_count: int
    warning_count: int
    exceeded_count: int

    @classmethod
    def from_summary(cls, s: BudgetSummary) -> "BudgetSummaryRead":
        return cls(
            budget_count=s.budget_count,
            active_count=s.active_count,
            total_budgeted=float(s.total_budgeted),
            average_budget=float(s.average_budget),
            total_spending=float(s.total_spending),
            on_track_count=s.on_track_count,
            warning_count=s.warning_count,
            exceeded_count=s.exceeded_count,
        )
