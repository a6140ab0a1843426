"""
Conversation Session Models

A session is the in-progress, per-user state of a multi-step flow.

DESIGN DECISION: The session's step is a closed tagged union. Each
variant carries exactly the data collected so far, so a step can never
hold a field it has not yet asked for (e.g. an amount before the
category is known).
"""

from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


class SessionState(str, Enum):
    """Where a user is in a flow. Idle is the absence of a session."""
    AWAITING_CATEGORY = "awaiting_category"
    AWAITING_AMOUNT = "awaiting_amount"
    AWAITING_COMMENT = "awaiting_comment"
    AWAITING_SPECIFIC_QUERY = "awaiting_specific_query"


class AwaitingCategory(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal[SessionState.AWAITING_CATEGORY] = SessionState.AWAITING_CATEGORY


class AwaitingAmount(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal[SessionState.AWAITING_AMOUNT] = SessionState.AWAITING_AMOUNT
    category: str = Field(..., min_length=1)


class AwaitingComment(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal[SessionState.AWAITING_COMMENT] = SessionState.AWAITING_COMMENT
    category: str = Field(..., min_length=1)
    amount: Decimal = Field(..., ge=0)


class AwaitingSpecificQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    state: Literal[SessionState.AWAITING_SPECIFIC_QUERY] = SessionState.AWAITING_SPECIFIC_QUERY


SessionStep = Annotated[
    Union[AwaitingCategory, AwaitingAmount, AwaitingComment, AwaitingSpecificQuery],
    Field(discriminator="state"),
]


class Session(BaseModel):
    """
    One user's open conversation.

    At most one exists per user at any time; the session repository
    enforces that.
    """
    model_config = ConfigDict(frozen=True)

    session_id: UUID = Field(
        default_factory=uuid4,
        description="Correlates all audit events of this conversation"
    )
    user_id: int
    chat_id: int
    step: SessionStep
    started_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )

    @property
    def state(self) -> SessionState:
        return self.step.state

    def advance(self, step: SessionStep) -> "Session":
        """Return a copy of this session moved to `step`."""
        return self.model_copy(update={"step": step})

    @classmethod
    def start_recording(cls, user_id: int, chat_id: int) -> "Session":
        return cls(user_id=user_id, chat_id=chat_id, step=AwaitingCategory())

    @classmethod
    def start_specific_query(cls, user_id: int, chat_id: int) -> "Session":
        return cls(user_id=user_id, chat_id=chat_id, step=AwaitingSpecificQuery())
