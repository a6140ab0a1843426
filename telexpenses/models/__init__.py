"""
Data Models Package

This package contains all Pydantic models used in Telexpenses.
All data flowing through the system must conform to these schemas.
"""

from telexpenses.models.expense import (
    Expense,
    ExpenseFilter,
    FilterField,
    FilterPredicate,
    NewExpense,
    QueryResult,
)
from telexpenses.models.messages import IncomingMessage, Reply, normalize_command
from telexpenses.models.session import (
    AwaitingAmount,
    AwaitingCategory,
    AwaitingComment,
    AwaitingSpecificQuery,
    Session,
    SessionState,
)
from telexpenses.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Expense models
    "Expense",
    "ExpenseFilter",
    "FilterField",
    "FilterPredicate",
    "NewExpense",
    "QueryResult",
    # Messages
    "IncomingMessage",
    "Reply",
    "normalize_command",
    # Sessions
    "AwaitingAmount",
    "AwaitingCategory",
    "AwaitingComment",
    "AwaitingSpecificQuery",
    "Session",
    "SessionState",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
