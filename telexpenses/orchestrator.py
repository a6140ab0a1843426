"""
Component Wiring for Telexpenses

Builds the storage backend, audit logger, state machine and dispatcher
from settings.

DESIGN DECISION: Startup failures (bad configuration, unreachable
database, failed migration) raise and stop the process. There is no
silent fallback to another backend.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

import structlog

from telexpenses.audit import AuditLogger
from telexpenses.config import get_settings
from telexpenses.conversation import (
    ConversationStateMachine,
    InMemorySessionRepository,
    UpdateDispatcher,
)
from telexpenses.services.storage import (
    AuditStorageInterface,
    ExpenseStorageInterface,
    GoogleSheetsAuditStorage,
    GoogleSheetsClient,
    GoogleSheetsExpenseStorage,
    InMemoryExpenseStorage,
    PostgresClient,
    PostgresExpenseStorage,
)

logger = structlog.get_logger(__name__)


@dataclass
class AppComponents:
    dispatcher: UpdateDispatcher
    storage: ExpenseStorageInterface
    audit_logger: AuditLogger
    postgres_client: Optional[PostgresClient] = None

    def close(self) -> None:
        if self.postgres_client is not None:
            self.postgres_client.close()


def create_storage(
    backend: str,
    timezone: str = "UTC",
) -> tuple[ExpenseStorageInterface, Optional[AuditStorageInterface], Optional[PostgresClient]]:
    """
    Create the configured backend.

    For Postgres this connects, checks the connection and applies
    pending migrations before returning. Date filters are evaluated
    in `timezone`.

    Returns:
        (expense_storage, audit_storage_or_None, postgres_client_or_None)
    """
    if backend == "postgres":
        client = PostgresClient(timezone=timezone)
        client.ping()
        client.apply_migrations()
        return PostgresExpenseStorage(client), None, client

    if backend == "google_sheets":
        sheets_client = GoogleSheetsClient()
        sheets_client.connect()
        return (
            GoogleSheetsExpenseStorage(sheets_client, tz=ZoneInfo(timezone)),
            GoogleSheetsAuditStorage(sheets_client),
            None,
        )

    if backend == "memory":
        logger.warning("using_memory_storage", detail="expenses are lost on restart")
        return InMemoryExpenseStorage(tz=ZoneInfo(timezone)), None, None

    raise ValueError(f"Unknown storage backend: {backend}")


def create_app_components(
    storage: Optional[ExpenseStorageInterface] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        storage: Use this store instead of the configured backend
                (tests, embedding).
        audit_storage: Where to persist audit events when `storage`
                is given.
    """
    app_settings = get_settings().app
    postgres_client = None

    if storage is None:
        storage, audit_storage, postgres_client = create_storage(
            app_settings.storage_backend, app_settings.timezone
        )

    audit_logger = AuditLogger(audit_storage)
    state_machine = ConversationStateMachine(
        storage=storage,
        audit_logger=audit_logger,
        currency_symbol=app_settings.currency_symbol,
    )

    tz = app_settings.tzinfo
    dispatcher = UpdateDispatcher(
        sessions=InMemorySessionRepository(),
        state_machine=state_machine,
        audit_logger=audit_logger,
        clock=lambda: datetime.now(tz),
    )

    return AppComponents(
        dispatcher=dispatcher,
        storage=storage,
        audit_logger=audit_logger,
        postgres_client=postgres_client,
    )
