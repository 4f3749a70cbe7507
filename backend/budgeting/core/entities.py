"""Budget and expense value objects shared by the stores and the aggregator."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional


class BudgetCategory(str, Enum):
    ELECTRICITY = "electricity"
    WATER = "water"
    INTERNET = "internet"
    RENT = "rent"
    SUPPLIES = "supplies"
    SALARIES = "salaries"
    MARKETING = "marketing"
    TRANSPORTATION = "transportation"
    OTHER = "other"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


class BudgetStatus(str, Enum):
    ON_TRACK = "on_track"
    WARNING = "warning"
    EXCEEDED = "exceeded"


def to_decimal(value: Any) -> Decimal:
    """Exact decimal for money; floats go through str to avoid binary noise."""
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    try:
        return Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a decimal amount: {value!r}") from e


def to_date(value: Any) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return datetime.fromisoformat(str(value).replace("Z", "+00:00")).date()


@dataclass(frozen=True, slots=True)
class Budget:
    id: str
    company_id: str
    category: BudgetCategory
    amount: Decimal
    period: BudgetPeriod = BudgetPeriod.MONTHLY
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: bool = True
    name: Optional[str] = None
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "category", BudgetCategory(self.category))
        object.__setattr__(self, "period", BudgetPeriod(self.period))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "start_date", to_date(self.start_date))
        object.__setattr__(self, "end_date", to_date(self.end_date))

    @property
    def has_window(self) -> bool:
        """A budget without both bounds covers all time."""
        return self.start_date is not None and self.end_date is not None


@dataclass(frozen=True, slots=True)
class Expense:
    """Read-only input owned by the expense store."""

    id: str
    company_id: str
    category: str
    amount: Decimal
    date: date

    def __post_init__(self) -> None:
        category = self.category.value if isinstance(self.category, Enum) else str(self.category)
        object.__setattr__(self, "category", category)
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "date", to_date(self.date))


@dataclass(frozen=True, slots=True)
class BudgetPatch:
    """Partial update; None means "leave unchanged".

    `clear_window` drops both dates so the budget covers all time again; it
    cannot be combined with a new start or end date.
    """

    category: Optional[BudgetCategory] = None
    amount: Optional[Decimal] = None
    period: Optional[BudgetPeriod] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    is_active: Optional[bool] = None
    name: Optional[str] = None
    description: Optional[str] = None
    clear_window: bool = False

    def changes(self) -> dict[str, Any]:
        """Budget fields this patch sets."""
        changed = {
            k: getattr(self, k)
            for k in self.__dataclass_fields__
            if k != "clear_window" and getattr(self, k) is not None
        }
        if self.clear_window:
            changed["start_date"] = changed["end_date"] = None
        return changed


@dataclass(frozen=True, slots=True)
class BudgetProgress:
    """Derived spend-vs-budget snapshot; recomputed on every query, never stored."""

    budget: Budget
    current_spending: Decimal
    percentage_used: Decimal
    remaining: Decimal
    status: BudgetStatus


@dataclass(frozen=True, slots=True)
class BudgetSummary:
    budget_count: int
    active_count: int
    total_budgeted: Decimal
    average_budget: Decimal
    total_spending: Decimal
    on_track_count: int
    warning_count: int
    exceeded_count: int
