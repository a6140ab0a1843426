"""Shared fixtures for the Telexpenses test suite."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from telexpenses.audit import AuditLogger
from telexpenses.conversation import (
    ConversationStateMachine,
    InMemorySessionRepository,
    UpdateDispatcher,
)
from telexpenses.models.expense import Expense
from telexpenses.services.storage import InMemoryAuditStorage, InMemoryExpenseStorage

USER_A = 1001
USER_B = 2002
CHAT = 555

FIXED_NOW = datetime(2021, 5, 14, 12, 30, tzinfo=timezone.utc)


def make_expense(
    expense_id: int,
    category: str,
    amount: str,
    created_at: datetime,
    user_id: int = USER_A,
    comment: str = "",
) -> Expense:
    return Expense(
        id=expense_id,
        user_id=user_id,
        category=category,
        amount=Decimal(amount),
        comment=comment,
        created_at=created_at,
    )


@pytest.fixture
def storage():
    return InMemoryExpenseStorage(clock=lambda: FIXED_NOW)


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
def state_machine(storage, audit_logger):
    return ConversationStateMachine(storage=storage, audit_logger=audit_logger)


@pytest.fixture
def sessions():
    return InMemorySessionRepository()


@pytest.fixture
def dispatcher(sessions, state_machine, audit_logger):
    return UpdateDispatcher(
        sessions=sessions,
        state_machine=state_machine,
        audit_logger=audit_logger,
        clock=lambda: FIXED_NOW,
    )
