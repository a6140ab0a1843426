"""Conversation package: sessions, state machine and dispatcher."""

from telexpenses.conversation.dispatcher import UpdateDispatcher
from telexpenses.conversation.sessions import InMemorySessionRepository, SessionRepository
from telexpenses.conversation.state_machine import ConversationStateMachine, StepOutcome

__all__ = [
    "ConversationStateMachine",
    "InMemorySessionRepository",
    "SessionRepository",
    "StepOutcome",
    "UpdateDispatcher",
]
