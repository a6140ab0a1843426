"""
Audit Models for Telexpenses

Every significant step of a conversation is logged for audit purposes.
This provides:
1. Traceability of what each user recorded and asked
2. Debugging information when things go wrong
3. Ability to reconstruct a conversation from its correlation id

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Session lifecycle
    SESSION_STARTED = "session_started"
    SESSION_SUPERSEDED = "session_superseded"
    SESSION_CANCELLED = "session_cancelled"
    SESSION_COMPLETED = "session_completed"

    # Input handling
    INPUT_REJECTED = "input_rejected"
    CATEGORY_UNRESOLVED = "category_unresolved"
    IDENTITY_CONFLICT = "identity_conflict"
    UNKNOWN_COMMAND = "unknown_command"

    # Persistence
    EXPENSE_SAVED = "expense_saved"
    SAVE_FAILED = "save_failed"

    # Queries
    QUERY_EXECUTED = "query_executed"
    QUERY_FAILED = "query_failed"

    # System events
    REPLY_SEND_FAILED = "reply_send_failed"
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Who and where
    user_id: Optional[int] = None
    chat_id: Optional[int] = None

    # Correlation - the session this event belongs to, if any
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """Convert to a dictionary suitable for structured logging."""
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "chat_id": self.chat_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, user_id, chat_id,
         correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            str(self.user_id) if self.user_id is not None else "",
            str(self.chat_id) if self.chat_id is not None else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, ensure_ascii=False, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.session_started(user_id, chat_id, "record", session.session_id)
        await audit_logger.log(event)
    """

    @staticmethod
    def session_started(
        user_id: int,
        chat_id: int,
        flow: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_STARTED,
            user_id=user_id,
            chat_id=chat_id,
            correlation_id=correlation_id,
            description=f"Session started: {flow}",
            details={"flow": flow},
        )

    @staticmethod
    def session_superseded(
        user_id: int,
        previous_state: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_SUPERSEDED,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Open session discarded by a new command",
            details={"previous_state": previous_state},
        )

    @staticmethod
    def session_cancelled(
        user_id: int,
        chat_id: int,
        previous_state: Optional[str],
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_CANCELLED,
            user_id=user_id,
            chat_id=chat_id,
            correlation_id=correlation_id,
            description="User cancelled",
            details={"previous_state": previous_state},
        )

    @staticmethod
    def session_completed(
        user_id: int,
        final_state: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SESSION_COMPLETED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Session finished from {final_state}",
            details={"final_state": final_state},
        )

    @staticmethod
    def input_rejected(
        user_id: int,
        state: str,
        reason: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Input rejected in {state}",
            details={"state": state, "reason": reason},
        )

    @staticmethod
    def category_unresolved(
        user_id: int,
        text: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CATEGORY_UNRESOLVED,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Category text did not match the catalog",
            details={"text": text},
        )

    @staticmethod
    def identity_conflict(
        user_id: int,
        chat_id: int,
        owner_id: int,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.IDENTITY_CONFLICT,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            chat_id=chat_id,
            correlation_id=correlation_id,
            description="Message from a user who does not own the open session",
            details={"session_owner": owner_id},
        )

    @staticmethod
    def unknown_command(
        user_id: int,
        chat_id: int,
        command: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.UNKNOWN_COMMAND,
            user_id=user_id,
            chat_id=chat_id,
            description="Unknown command",
            details={"command": command},
        )

    @staticmethod
    def expense_saved(
        user_id: int,
        expense_id: int,
        category: str,
        amount: Decimal,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.EXPENSE_SAVED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Expense {expense_id} saved",
            details={
                "expense_id": expense_id,
                "category": category,
                "amount": str(amount),
            },
        )

    @staticmethod
    def save_failed(
        user_id: int,
        error_message: str,
        correlation_id: UUID,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SAVE_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Expense could not be saved",
            error_message=error_message,
        )

    @staticmethod
    def query_executed(
        user_id: int,
        query_id: UUID,
        query_description: str,
        result_count: int,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_EXECUTED,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Query executed: returned {result_count} expenses",
            details={
                "query_id": str(query_id),
                "query": query_description,
                "result_count": result_count,
            },
        )

    @staticmethod
    def query_failed(
        user_id: int,
        query_id: UUID,
        error_message: str,
        correlation_id: Optional[UUID],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.QUERY_FAILED,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Query failed",
            details={"query_id": str(query_id)},
            error_message=error_message,
        )

    @staticmethod
    def reply_send_failed(
        chat_id: int,
        error_message: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.REPLY_SEND_FAILED,
            severity=AuditSeverity.ERROR,
            chat_id=chat_id,
            description="Reply could not be delivered",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
