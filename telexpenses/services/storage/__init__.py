"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
PostgreSQL is the primary backend; Google Sheets and an in-memory store
implement the same interface.
"""

from telexpenses.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    MigrationError,
    StorageError,
)
from telexpenses.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryExpenseStorage,
)
from telexpenses.services.storage.postgres import (
    PostgresClient,
    PostgresExpenseStorage,
)
from telexpenses.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "ExpenseStorageInterface",
    # Exceptions
    "ConnectionError",
    "MigrationError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryExpenseStorage",
    # PostgreSQL implementation
    "PostgresClient",
    "PostgresExpenseStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsClient",
    "GoogleSheetsExpenseStorage",
]
