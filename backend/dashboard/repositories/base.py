"""Store contracts and repository base.

- The budget and expense services are consumed only through the two
  protocols below; the SQLAlchemy repositories are one implementation.
- Read-only discipline for the expense store is enforced at the repository
  layer: SELECT statements only, and no pending session writes.
"""

from __future__ import annotations

from typing import Any, Generic, Optional, Protocol, Sequence, TypeVar

from sqlalchemy.engine import Result
from sqlalchemy.orm import Session
from sqlalchemy.sql import Executable
from sqlalchemy.sql.dml import Delete, Insert, Update
from sqlalchemy.sql.selectable import Select

from budgeting.core.entities import Budget, BudgetPatch, Expense


class RepositoryReadOnlyViolation(RuntimeError):
    """Raised when a read-only repository detects a write or mutation attempt."""


class BudgetStore(Protocol):
    def list_budgets(self, company_id: str) -> Sequence[Budget]: ...

    def get_budget(self, budget_id: str) -> Optional[Budget]: ...

    def create_budget(self, budget: Budget) -> Budget: ...

    def update_budget(self, budget_id: str, patch: BudgetPatch) -> Budget: ...

    def delete_budget(self, budget_id: str) -> None: ...


class ExpenseStore(Protocol):
    def list_expenses(self, company_id: str) -> Sequence[Expense]: ...


T = TypeVar("T")


class BaseRepository(Generic[T]):
    def __init__(self, session: Session) -> None:
        self._session = session

    def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        return self._session.execute(stmt, params or {})


class ReadOnlyRepository(BaseRepository[T]):
    """Repository that may only run SELECTs against a clean unit of work."""

    def _assert_clean_uow(self) -> None:
        s = self._session
        if s.new or s.dirty or s.deleted:
            raise RepositoryReadOnlyViolation(
                "Repository is read-only: session has pending changes "
                f"(new={len(s.new)}, dirty={len(s.dirty)}, deleted={len(s.deleted)})."
            )

    def _assert_select_only(self, stmt: Executable) -> None:
        if isinstance(stmt, (Insert, Update, Delete)):
            raise RepositoryReadOnlyViolation("Repository is read-only: DML is forbidden.")
        if not isinstance(stmt, Select):
            raise RepositoryReadOnlyViolation(
                f"Repository is read-only: only SELECT statements are allowed (got {type(stmt)!r})."
            )

    def _execute(self, stmt: Executable, *, params: Optional[dict[str, Any]] = None) -> Result[Any]:
        self._assert_select_only(stmt)
        self._assert_clean_uow()
        result = super()._execute(stmt, params=params)
        self._assert_clean_uow()
        return result
