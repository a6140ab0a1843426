"""User input validation package."""

from telexpenses.validation.parsers import (
    InvalidAmountError,
    InvalidMonthError,
    InvalidYearError,
    PeriodQuery,
    UserInputError,
    parse_amount,
    parse_period_query,
)

__all__ = [
    "InvalidAmountError",
    "InvalidMonthError",
    "InvalidYearError",
    "PeriodQuery",
    "UserInputError",
    "parse_amount",
    "parse_period_query",
]
