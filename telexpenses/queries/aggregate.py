"""Aggregation over expenses."""

from decimal import Decimal
from typing import Iterable

from telexpenses.models.expense import Expense


def sum_by_category(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """
    Total the amounts of each category present in `expenses`.

    Keys are exactly the categories that occur; there is no grand-total
    entry (see grand_total).
    """
    totals: dict[str, Decimal] = {}
    for expense in expenses:
        totals[expense.category] = totals.get(expense.category, Decimal("0")) + expense.amount
    return totals


def grand_total(expenses: Iterable[Expense]) -> Decimal:
    return sum((expense.amount for expense in expenses), Decimal("0"))
