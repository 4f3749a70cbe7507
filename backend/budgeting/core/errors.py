from __future__ import annotations

"""Controlled errors for budget handling.

Governance intent:
- Invalid budgets are rejected before they reach the store or the aggregator.
- Authorization denials are not errors here; they are decided upstream.
"""


class BudgetingError(RuntimeError):
    """Base error for the budgeting core."""


class MalformedBudget(BudgetingError, ValueError):
    """Raised when a budget is missing required fields or has a non-positive amount."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        super().__init__(message)
        self.field = field


class AggregationError(BudgetingError):
    """Raised when budget progress cannot be computed from the given inputs."""
