"""
Telegram Transport

Adapter between python-telegram-bot and the dispatcher: turns updates
into IncomingMessage and sends each Reply back through the Bot API.
"""

from typing import Optional, Union

import structlog
from telegram import BotCommand, ReplyKeyboardMarkup, ReplyKeyboardRemove, Update
from telegram.constants import ParseMode
from telegram.error import TelegramError
from telegram.ext import Application, ApplicationBuilder, ContextTypes, MessageHandler, filters

from telexpenses.audit import AuditLogger
from telexpenses.conversation import UpdateDispatcher
from telexpenses.models.audit import AuditEventBuilder
from telexpenses.models.messages import IncomingMessage, Reply

logger = structlog.get_logger(__name__)

BOT_COMMANDS = [
    BotCommand("new", "Καινούριο έξοδο"),
    BotCommand("month", "Έξοδα αυτού του μήνα"),
    BotCommand("month_specific", "Έξοδα βάσει χρόνου, μήνα και κατηγορίας"),
    BotCommand("cancel", "Ακύρωση"),
]


def to_incoming(update: Update) -> Optional[IncomingMessage]:
    """Convert an update; None for updates without a text message or sender."""
    message = update.message
    if message is None or message.text is None or message.from_user is None:
        return None
    return IncomingMessage.from_text(
        user_id=message.from_user.id,
        chat_id=message.chat_id,
        text=message.text,
    )


def reply_markup(reply: Reply) -> Optional[Union[ReplyKeyboardMarkup, ReplyKeyboardRemove]]:
    if reply.keyboard:
        return ReplyKeyboardMarkup(reply.keyboard, resize_keyboard=True, one_time_keyboard=True)
    if reply.remove_keyboard:
        return ReplyKeyboardRemove()
    return None


class TelegramTransport:
    """Feeds Telegram updates to the dispatcher and delivers its replies."""

    def __init__(
        self,
        dispatcher: UpdateDispatcher,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._dispatcher = dispatcher
        self._audit_logger = audit_logger or AuditLogger()

    async def handle_update(self, update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
        incoming = to_incoming(update)
        if incoming is None:
            return

        replies = await self._dispatcher.dispatch(incoming)
        for reply in replies:
            await self.send(context.bot, reply)

    async def send(self, bot, reply: Reply) -> bool:
        """Send one reply. Delivery failures are logged, not raised."""
        try:
            await bot.send_message(
                chat_id=reply.chat_id,
                text=reply.text,
                reply_markup=reply_markup(reply),
                parse_mode=ParseMode.MARKDOWN if reply.markdown else None,
            )
            return True
        except TelegramError as e:
            logger.error("cannot_send_message", chat_id=reply.chat_id, error=str(e))
            await self._audit_logger.log(AuditEventBuilder.reply_send_failed(
                chat_id=reply.chat_id,
                error_message=str(e),
            ))
            return False

    async def on_error(self, update: object, context: ContextTypes.DEFAULT_TYPE) -> None:
        """Log exceptions raised while handling an update; polling continues."""
        logger.error("unhandled_error", exc_info=context.error)
        await self._audit_logger.log(AuditEventBuilder.system_error(
            error_type=type(context.error).__name__,
            error_message=str(context.error),
        ))

    async def _post_init(self, application: Application) -> None:
        await application.bot.set_my_commands(BOT_COMMANDS)
        logger.info(
            "telegram_bot_authorized",
            account=application.bot.username,
        )

    def build_application(self, token: str) -> Application:
        """
        Build the python-telegram-bot application.

        Updates are handled one at a time, in arrival order.
        """
        application = (
            ApplicationBuilder()
            .token(token)
            .concurrent_updates(False)
            .post_init(self._post_init)
            .build()
        )
        application.add_handler(
            MessageHandler(filters.TEXT & filters.UpdateType.MESSAGE, self.handle_update)
        )
        application.add_error_handler(self.on_error)
        return application

    def run(self, token: str, poll_timeout: int = 60) -> None:
        """Long-poll until interrupted."""
        application = self.build_application(token)
        application.run_polling(
            timeout=poll_timeout,
            allowed_updates=[Update.MESSAGE],
        )
