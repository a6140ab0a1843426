"""
In-Memory Storage Implementation

Keeps expenses in a list. Used for local development
(STORAGE_BACKEND=memory) and throughout the test suite.
"""

from datetime import datetime, timezone, tzinfo
from typing import Callable, Optional

from telexpenses.models.audit import AuditEvent
from telexpenses.models.expense import Expense, ExpenseFilter, NewExpense
from telexpenses.services.storage.interface import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    StorageError,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryExpenseStorage(ExpenseStorageInterface):
    """
    List-backed expense store.

    Filters are evaluated in `tz`. Set `fail_with` to a message to make
    every call raise StorageError.
    """

    def __init__(
        self,
        clock: Callable[[], datetime] = _utcnow,
        tz: tzinfo = timezone.utc,
    ):
        self._clock = clock
        self._tz = tz
        self._expenses: list[Expense] = []
        self.fail_with: Optional[str] = None

    @property
    def expenses(self) -> list[Expense]:
        """All stored expenses in insertion order."""
        return list(self._expenses)

    def _check_failure(self) -> None:
        if self.fail_with is not None:
            raise StorageError(self.fail_with)

    async def add_expense(self, expense: NewExpense) -> Expense:
        self._check_failure()
        stored = Expense(
            id=len(self._expenses) + 1,
            created_at=self._clock(),
            **expense.model_dump(),
        )
        self._expenses.append(stored)
        return stored

    async def load(self, expense: Expense) -> None:
        """Insert a fully formed expense (fixtures with chosen timestamps)."""
        self._expenses.append(expense)

    async def get_expenses(self, expense_filter: ExpenseFilter) -> list[Expense]:
        self._check_failure()
        matching = [e for e in self._expenses if expense_filter.matches(e, self._tz)]
        return sorted(matching, key=lambda e: (e.created_at, e.id), reverse=True)


class InMemoryAuditStorage(AuditStorageInterface):
    """Collects audit events in a list."""

    def __init__(self):
        self.events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self.events.append(event)
        return True
