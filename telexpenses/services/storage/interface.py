"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap PostgreSQL for Google Sheets (or anything else)
2. Use in-memory storage for testing
3. Keep the conversation logic decoupled from storage implementation

The interface is intentionally small: expenses are appended and
filtered, never edited or deleted.
"""

from abc import ABC, abstractmethod

from telexpenses.models.audit import AuditEvent
from telexpenses.models.expense import Expense, ExpenseFilter, NewExpense


class ExpenseStorageInterface(ABC):
    """
    Abstract interface for expense storage operations.

    Any storage implementation (PostgreSQL, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def add_expense(self, expense: NewExpense) -> Expense:
        """
        Append a new expense.

        The store assigns the id and the creation timestamp.

        Returns:
            The stored expense

        Raises:
            StorageError: If the insert fails
        """
        pass

    @abstractmethod
    async def get_expenses(self, expense_filter: ExpenseFilter) -> list[Expense]:
        """
        List expenses matching every constraint in the filter.

        Constraint values must be passed to the backend as parameters,
        never spliced into query text.

        Returns:
            Matching expenses, newest first

        Raises:
            StorageError: If the lookup fails
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class MigrationError(StorageError):
    """A schema migration could not be applied."""
    pass
