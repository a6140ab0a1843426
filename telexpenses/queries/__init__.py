"""Query execution package."""

from telexpenses.queries.aggregate import grand_total, sum_by_category
from telexpenses.queries.executor import ExpenseQueryExecutor, describe_filter
from telexpenses.queries.render import format_amount, render_summary

__all__ = [
    "ExpenseQueryExecutor",
    "describe_filter",
    "format_amount",
    "grand_total",
    "render_summary",
    "sum_by_category",
]
