"""
User Input Parsing

Turns the free text a user types at each step into typed values.

IMPORTANT: Parsing NEVER guesses. Anything that is not clearly a valid
value raises a UserInputError carrying the message to re-ask with; the
conversation stays on the same step.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Optional

from telexpenses import texts


class UserInputError(ValueError):
    """Input that cannot be used. `reply` is what to tell the user."""

    reply = texts.INVALID_INPUT

    def __init__(self, message: str, reply: Optional[str] = None):
        super().__init__(message)
        if reply is not None:
            self.reply = reply


class InvalidAmountError(UserInputError):
    reply = texts.INVALID_AMOUNT


class InvalidYearError(UserInputError):
    reply = texts.INVALID_YEAR


class InvalidMonthError(UserInputError):
    reply = texts.INVALID_MONTH


# Amounts are stored as NUMERIC(12, 2)
CENT = Decimal("0.01")
MAX_AMOUNT = Decimal("9999999999.99")


def parse_amount(text: str) -> Decimal:
    """
    Parse an amount such as "12,50" or "12.50".

    A comma is accepted as the decimal separator. The result must be a
    finite, non-negative number of at most MAX_AMOUNT with no more than
    two decimal places; it is returned with exactly two.
    """
    normalized = text.strip().replace(",", ".")
    try:
        amount = Decimal(normalized)
    except InvalidOperation:
        raise InvalidAmountError(f"Not a number: {text!r}")

    if not amount.is_finite():
        raise InvalidAmountError(f"Not a finite number: {text!r}")
    if amount < 0:
        raise InvalidAmountError(f"Negative amount: {text!r}")
    if amount > MAX_AMOUNT:
        raise InvalidAmountError(f"Amount too large: {text!r}")

    cents = amount.quantize(CENT)
    if cents != amount:
        raise InvalidAmountError(f"More than two decimal places: {text!r}")

    return cents


@dataclass(frozen=True)
class PeriodQuery:
    """The parsed '<year> [<month>] [<category>]' reply."""
    year: int
    month: Optional[int] = None
    category_text: Optional[str] = None


def _parse_int(token: str) -> int:
    # int() also accepts "+5" and "1_000"; only plain digits are allowed
    if not token.isdigit():
        raise ValueError(token)
    return int(token)


def parse_period_query(text: str) -> PeriodQuery:
    """
    Parse "<year> [<month>] [<category text>]".

    Tokens are whitespace separated; everything after the month is the
    category text, so multi-word categories survive.
    """
    parts = text.split(maxsplit=2)
    if not parts:
        raise InvalidYearError("Empty query")

    try:
        year = _parse_int(parts[0])
    except ValueError:
        raise InvalidYearError(f"Not a year: {parts[0]!r}")
    if not 1 <= year <= 9999:
        raise InvalidYearError(f"Year out of range: {year}")

    month = None
    if len(parts) > 1:
        try:
            month = _parse_int(parts[1])
        except ValueError:
            raise InvalidMonthError(f"Not a month: {parts[1]!r}")
        if not 1 <= month <= 12:
            raise InvalidMonthError(f"Month out of range: {month}")

    category_text = parts[2].strip() if len(parts) > 2 else None

    return PeriodQuery(year=year, month=month, category_text=category_text or None)
