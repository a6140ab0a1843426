"""Formatting query results as chat text."""

from decimal import Decimal

from telexpenses import texts
from telexpenses.catalog import display_order_key
from telexpenses.models.expense import QueryResult


def format_amount(amount: Decimal, currency_symbol: str = "€") -> str:
    return f"{amount:.2f}{currency_symbol}"


def render_summary(result: QueryResult, currency_symbol: str = "€") -> str:
    """
    Render per-category totals followed by the grand total.

    Callers check `result.success` first; a successful result with no
    expenses renders as the "nothing found" text.
    """
    if not result.data_found:
        return texts.NOTHING_FOUND

    lines = [f"Έξοδα για {result.query_description}:"]
    for category in sorted(result.totals, key=display_order_key):
        lines.append(f"- {category}: {format_amount(result.totals[category], currency_symbol)}")
    lines.append(f"{texts.TOTAL_LABEL}: {format_amount(result.grand_total, currency_symbol)}")
    return "\n".join(lines)
