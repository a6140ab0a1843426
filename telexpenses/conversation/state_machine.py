"""
Conversation State Machine

Advances one user's session by one text message.

Recording flow:
    AwaitingCategory -> AwaitingAmount -> AwaitingComment -> (saved, session ends)

Query flow:
    AwaitingSpecificQuery -> (results shown, session ends)

Unparsable input re-asks and leaves the session where it was. A storage
failure ends the session; the user starts over with the command.
"""

from dataclasses import dataclass, field
from typing import Optional
from uuid import UUID

import structlog

from telexpenses import texts
from telexpenses.audit import AuditLogger
from telexpenses.catalog import keyboard_rows
from telexpenses.matching import CategoryMatcher
from telexpenses.models.audit import AuditEventBuilder
from telexpenses.models.expense import ExpenseFilter, NewExpense
from telexpenses.models.messages import IncomingMessage, Reply
from telexpenses.models.session import (
    AwaitingAmount,
    AwaitingComment,
    Session,
    SessionState,
)
from telexpenses.queries import ExpenseQueryExecutor, render_summary
from telexpenses.services.storage import ExpenseStorageInterface, StorageError
from telexpenses.validation import UserInputError, parse_amount, parse_period_query

logger = structlog.get_logger(__name__)


@dataclass
class StepOutcome:
    """What one message did: the replies, and the session afterwards (None = ended)."""
    replies: list[Reply] = field(default_factory=list)
    session: Optional[Session] = None

    @property
    def finished(self) -> bool:
        return self.session is None


class ConversationStateMachine:
    """
    Applies the transition for a session's current step.

    The machine never touches the session repository; it returns the
    next session (or None) and the dispatcher stores it.
    """

    def __init__(
        self,
        storage: ExpenseStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
        matcher: Optional[CategoryMatcher] = None,
        currency_symbol: str = "€",
    ):
        self._storage = storage
        self._executor = ExpenseQueryExecutor(storage)
        self._audit_logger = audit_logger or AuditLogger()
        self._matcher = matcher or CategoryMatcher()
        self._currency_symbol = currency_symbol

    async def advance(self, session: Session, message: IncomingMessage) -> StepOutcome:
        """Route to the handler for the session's state."""
        if session.state == SessionState.AWAITING_CATEGORY:
            return await self._on_category(session, message)
        elif session.state == SessionState.AWAITING_AMOUNT:
            return await self._on_amount(session, message)
        elif session.state == SessionState.AWAITING_COMMENT:
            return await self._on_comment(session, message)
        elif session.state == SessionState.AWAITING_SPECIFIC_QUERY:
            return await self._on_specific_query(session, message)
        raise ValueError(f"Unhandled session state: {session.state}")

    async def _on_category(self, session: Session, message: IncomingMessage) -> StepOutcome:
        # The keyboard offers the catalog, but typed text is kept verbatim
        category = message.text.strip()
        if not category:
            return StepOutcome(
                replies=[Reply(chat_id=message.chat_id, text=texts.ASK_CATEGORY, keyboard=keyboard_rows())],
                session=session,
            )

        return StepOutcome(
            replies=[Reply(chat_id=message.chat_id, text=texts.ASK_AMOUNT, remove_keyboard=True)],
            session=session.advance(AwaitingAmount(category=category)),
        )

    async def _on_amount(self, session: Session, message: IncomingMessage) -> StepOutcome:
        step = session.step
        try:
            amount = parse_amount(message.text)
        except UserInputError as e:
            await self._audit_logger.log(AuditEventBuilder.input_rejected(
                user_id=session.user_id,
                state=session.state.value,
                reason=str(e),
                correlation_id=session.session_id,
            ))
            return StepOutcome(
                replies=[Reply(chat_id=message.chat_id, text=e.reply)],
                session=session,
            )

        logger.debug("amount_parsed", user_id=session.user_id, amount=str(amount))
        return StepOutcome(
            replies=[Reply(chat_id=message.chat_id, text=texts.ASK_COMMENT)],
            session=session.advance(AwaitingComment(category=step.category, amount=amount)),
        )

    async def _on_comment(self, session: Session, message: IncomingMessage) -> StepOutcome:
        step = session.step
        expense = NewExpense(
            user_id=session.user_id,
            category=step.category,
            amount=step.amount,
            comment=message.text,
        )

        try:
            stored = await self._storage.add_expense(expense)
        except StorageError as e:
            logger.error("cannot_add_expense", error=str(e), user_id=session.user_id)
            await self._audit_logger.log(AuditEventBuilder.save_failed(
                user_id=session.user_id,
                error_message=str(e),
                correlation_id=session.session_id,
            ))
            return StepOutcome(replies=[Reply(chat_id=message.chat_id, text=texts.SAVE_FAILED)])

        await self._audit_logger.log(AuditEventBuilder.expense_saved(
            user_id=session.user_id,
            expense_id=stored.id,
            category=stored.category,
            amount=stored.amount,
            correlation_id=session.session_id,
        ))
        return StepOutcome(replies=[Reply(chat_id=message.chat_id, text=texts.EXPENSE_SAVED)])

    async def _on_specific_query(self, session: Session, message: IncomingMessage) -> StepOutcome:
        try:
            query = parse_period_query(message.text)
        except UserInputError as e:
            await self._audit_logger.log(AuditEventBuilder.input_rejected(
                user_id=session.user_id,
                state=session.state.value,
                reason=str(e),
                correlation_id=session.session_id,
            ))
            return StepOutcome(
                replies=[Reply(chat_id=message.chat_id, text=e.reply)],
                session=session,
            )

        replies = []
        category = None
        if query.category_text:
            category = self._matcher.resolve(query.category_text)
            if category is None:
                await self._audit_logger.log(AuditEventBuilder.category_unresolved(
                    user_id=session.user_id,
                    text=query.category_text,
                    correlation_id=session.session_id,
                ))
                replies.append(Reply(chat_id=message.chat_id, text=texts.CATEGORY_NOT_FOUND))

        expense_filter = ExpenseFilter(year=query.year, month=query.month, category=category)
        replies.extend(await self.answer_query(
            user_id=session.user_id,
            chat_id=message.chat_id,
            expense_filter=expense_filter,
            correlation_id=session.session_id,
        ))
        return StepOutcome(replies=replies)

    async def answer_query(
        self,
        user_id: int,
        chat_id: int,
        expense_filter: ExpenseFilter,
        correlation_id: Optional[UUID] = None,
    ) -> list[Reply]:
        """
        Run a filter and render the totals as a reply.

        Used by the specific-query step and by the one-shot summary
        command.
        """
        result = await self._executor.execute(expense_filter)

        if not result.success:
            await self._audit_logger.log(AuditEventBuilder.query_failed(
                user_id=user_id,
                query_id=result.query_id,
                error_message=result.error_message or "",
                correlation_id=correlation_id,
            ))
            return [Reply(chat_id=chat_id, text=texts.QUERY_FAILED)]

        await self._audit_logger.log(AuditEventBuilder.query_executed(
            user_id=user_id,
            query_id=result.query_id,
            query_description=result.query_description,
            result_count=result.record_count,
            correlation_id=correlation_id,
        ))
        return [Reply(chat_id=chat_id, text=render_summary(result, self._currency_symbol))]
