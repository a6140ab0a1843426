"""Messaging transport package."""

from telexpenses.transport.telegram import TelegramTransport, reply_markup, to_incoming

__all__ = ["TelegramTransport", "reply_markup", "to_incoming"]
