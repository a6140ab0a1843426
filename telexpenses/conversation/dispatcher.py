"""
Update Dispatcher

Routes each incoming message either to command handling or to the
sender's open session.

Commands:
    /new, /expense      start recording an expense (replaces any open session)
    /month_specific     start a year/month/category query (replaces any open session)
    /month              one-shot summary of the current month (no session)
    /cancel             discard the sender's session
    anything else       help text

DESIGN DECISION: Updates are processed one at a time. Even if the
transport delivers updates concurrently, dispatch() holds a lock for
the whole update, so transitions apply in arrival order and the
one-session-per-user rule cannot race.
"""

import asyncio
from datetime import datetime
from typing import Callable, Optional

import structlog

from telexpenses import texts
from telexpenses.audit import AuditLogger
from telexpenses.catalog import keyboard_rows
from telexpenses.conversation.sessions import SessionRepository
from telexpenses.conversation.state_machine import ConversationStateMachine
from telexpenses.models.audit import AuditEventBuilder
from telexpenses.models.expense import ExpenseFilter
from telexpenses.models.messages import IncomingMessage, Reply
from telexpenses.models.session import Session

logger = structlog.get_logger(__name__)

RECORD_COMMANDS = frozenset({"new", "expense"})
SUMMARY_COMMAND = "month"
SPECIFIC_QUERY_COMMAND = "month_specific"
CANCEL_COMMAND = "cancel"
# Answered with the help text without being logged as unknown
HELP_COMMANDS = frozenset({"start", "help"})


class UpdateDispatcher:
    """Entry point for every incoming message."""

    def __init__(
        self,
        sessions: SessionRepository,
        state_machine: ConversationStateMachine,
        audit_logger: Optional[AuditLogger] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._sessions = sessions
        self._state_machine = state_machine
        self._audit_logger = audit_logger or AuditLogger()
        self._clock = clock or datetime.now
        self._lock = asyncio.Lock()

    async def dispatch(self, message: IncomingMessage) -> list[Reply]:
        """Handle one message and return the replies to send."""
        async with self._lock:
            if message.is_command:
                return await self._handle_command(message)
            return await self._handle_text(message)

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    async def _handle_command(self, message: IncomingMessage) -> list[Reply]:
        command = message.command
        logger.debug("command_received", command=command, user_id=message.user_id)

        if command in RECORD_COMMANDS:
            await self._start_session(
                Session.start_recording(message.user_id, message.chat_id),
                flow="record",
            )
            return [Reply(chat_id=message.chat_id, text=texts.ASK_CATEGORY, keyboard=keyboard_rows())]

        if command == SPECIFIC_QUERY_COMMAND:
            await self._start_session(
                Session.start_specific_query(message.user_id, message.chat_id),
                flow="specific_query",
            )
            return [Reply(chat_id=message.chat_id, text=texts.ASK_SPECIFIC_QUERY, remove_keyboard=True)]

        if command == CANCEL_COMMAND:
            return await self._cancel(message)

        if command == SUMMARY_COMMAND:
            now = self._clock()
            return await self._state_machine.answer_query(
                user_id=message.user_id,
                chat_id=message.chat_id,
                expense_filter=ExpenseFilter(year=now.year, month=now.month),
            )

        if command not in HELP_COMMANDS:
            await self._audit_logger.log(AuditEventBuilder.unknown_command(
                user_id=message.user_id,
                chat_id=message.chat_id,
                command=command,
            ))
        return [Reply(chat_id=message.chat_id, text=texts.HELP, markdown=True)]

    async def _start_session(self, session: Session, flow: str) -> None:
        previous = self._sessions.put(session)
        if previous is not None:
            await self._audit_logger.log(AuditEventBuilder.session_superseded(
                user_id=previous.user_id,
                previous_state=previous.state.value,
                correlation_id=previous.session_id,
            ))
        await self._audit_logger.log(AuditEventBuilder.session_started(
            user_id=session.user_id,
            chat_id=session.chat_id,
            flow=flow,
            correlation_id=session.session_id,
        ))

    async def _cancel(self, message: IncomingMessage) -> list[Reply]:
        previous = self._sessions.remove(message.user_id)
        await self._audit_logger.log(AuditEventBuilder.session_cancelled(
            user_id=message.user_id,
            chat_id=message.chat_id,
            previous_state=previous.state.value if previous else None,
            correlation_id=previous.session_id if previous else None,
        ))
        return [Reply(chat_id=message.chat_id, text=texts.CANCELLED, remove_keyboard=True)]

    # -------------------------------------------------------------------------
    # Free text
    # -------------------------------------------------------------------------

    async def _handle_text(self, message: IncomingMessage) -> list[Reply]:
        session = self._sessions.get(message.user_id)

        if session is None:
            # Someone else is mid-conversation, in this chat or any other
            others = self._sessions.others(message.user_id)
            if others:
                owner = others[0]
                await self._audit_logger.log(AuditEventBuilder.identity_conflict(
                    user_id=message.user_id,
                    chat_id=message.chat_id,
                    owner_id=owner.user_id,
                    correlation_id=owner.session_id,
                ))
                return [Reply(chat_id=message.chat_id, text=texts.NOT_TALKING_TO_YOU)]

            logger.debug("text_without_session", user_id=message.user_id)
            return []

        outcome = await self._state_machine.advance(session, message)

        if outcome.finished:
            self._sessions.remove(session.user_id)
            await self._audit_logger.log(AuditEventBuilder.session_completed(
                user_id=session.user_id,
                final_state=session.state.value,
                correlation_id=session.session_id,
            ))
        else:
            self._sessions.put(outcome.session)

        return outcome.replies
