"""
Telexpenses - Source Package

A Telegram bot for recording personal expenses and asking what was
spent, per month and per category.

DESIGN PRINCIPLES:
1. One open conversation per user, advanced one message at a time
2. Unclear input is re-asked, never guessed
3. Expenses are append-only
4. Storage layer is swappable
"""

__version__ = "1.0.0"
