"""
Query Execution Engine

DESIGN DECISION: Query execution is DETERMINISTIC.
A filter goes to the store, the matching expenses are totalled per
category, and the result is returned as data. Formatting it for the
user is a separate step (see render.py).

Storage failures are captured into a failed QueryResult rather than
raised, so callers handle "no data" and "lookup failed" the same way:
by inspecting the result.
"""

from typing import Optional

import structlog

from telexpenses.models.expense import ExpenseFilter, QueryResult
from telexpenses.queries.aggregate import grand_total, sum_by_category
from telexpenses.services.storage import ExpenseStorageInterface, StorageError

logger = structlog.get_logger(__name__)


class ExpenseQueryExecutor:
    """
    Executes expense filters against storage.

    GUARANTEES:
    - Only returns real data from storage
    - Clear "no data found" if nothing matches
    - Never raises for storage failures; the result says so
    """

    def __init__(self, storage: ExpenseStorageInterface):
        self._storage = storage

    async def execute(self, expense_filter: ExpenseFilter) -> QueryResult:
        """Run the filter and aggregate per category."""
        description = describe_filter(expense_filter)

        try:
            expenses = await self._storage.get_expenses(expense_filter)
        except StorageError as e:
            logger.error("cannot_get_expenses", error=str(e), query=description)
            return QueryResult(
                filter=expense_filter,
                success=False,
                error_message=str(e),
                query_description=description,
            )

        return QueryResult(
            filter=expense_filter,
            success=True,
            record_count=len(expenses),
            totals=sum_by_category(expenses),
            grand_total=grand_total(expenses),
            query_description=description,
        )


def describe_filter(expense_filter: ExpenseFilter) -> str:
    """
    Describe a filter for humans, e.g. "5/2021 · Ψιλικά".

    An unconstrained filter is described as "όλα" (everything).
    """
    parts = []

    period: Optional[str] = None
    if expense_filter.date is not None:
        period = expense_filter.date.strftime("%d/%m/%Y")
    elif expense_filter.year is not None and expense_filter.month is not None:
        period = f"{expense_filter.month}/{expense_filter.year}"
    elif expense_filter.year is not None:
        period = str(expense_filter.year)
    elif expense_filter.month is not None:
        period = f"μήνας {expense_filter.month}"
    if period:
        parts.append(period)

    if expense_filter.category is not None:
        parts.append(expense_filter.category)

    return " · ".join(parts) if parts else "όλα"
