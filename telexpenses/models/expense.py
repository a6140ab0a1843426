"""
Expense Data Models

These models define the strict schemas for expenses and for the
filters used to look them up.

DESIGN DECISION: A filter is a small structured list of predicates,
built programmatically. Storage backends translate each predicate into
a parameterized constraint (or evaluate it in Python); user-supplied
text never becomes part of a query's shape.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional, Union
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# EXPENSES
# =============================================================================

class NewExpense(BaseModel):
    """
    An expense as recorded by the user, before the store assigns
    its identity and timestamp.
    """
    model_config = ConfigDict(frozen=True)

    user_id: int = Field(
        ...,
        description="Telegram identity of the user who recorded it"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Catalog category, or free text typed instead of a button"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        description="Amount spent"
    )
    comment: str = Field(
        default="",
        description="Free-text comment, may be empty"
    )


class Expense(NewExpense):
    """
    A stored expense.

    Immutable: expenses are only ever inserted, never edited or deleted.
    """
    id: int = Field(
        ...,
        description="Identity assigned by the store"
    )
    created_at: dt.datetime = Field(
        ...,
        description="Assigned by the store at insert time"
    )


# =============================================================================
# FILTERS
# =============================================================================

class FilterField(str, Enum):
    """The fields an expense can be filtered on."""
    YEAR = "year"
    MONTH = "month"
    CATEGORY = "category"
    DATE = "date"


class FilterPredicate(BaseModel):
    """A single equality constraint on one field of an expense."""
    model_config = ConfigDict(frozen=True)

    field: FilterField
    value: Union[int, str, dt.date]

    def matches(self, expense: Expense, tz: Optional[dt.tzinfo] = None) -> bool:
        """
        Evaluate the predicate in Python (for backends without a query engine).

        Year, month and date are read from `created_at` as seen in `tz`,
        so they agree with the calendar the filter was built in.
        """
        created = expense.created_at
        if tz is not None:
            created = created.astimezone(tz)
        if self.field == FilterField.YEAR:
            return created.year == self.value
        if self.field == FilterField.MONTH:
            return created.month == self.value
        if self.field == FilterField.CATEGORY:
            return expense.category == self.value
        if self.field == FilterField.DATE:
            return created.date() == self.value
        return False


class ExpenseFilter(BaseModel):
    """
    Constraints over stored expenses.

    Every field is optional; a missing field places no constraint.
    All present fields must hold (logical AND).
    """
    model_config = ConfigDict(frozen=True)

    year: Optional[int] = Field(default=None, ge=1, le=9999)
    month: Optional[int] = Field(default=None, ge=1, le=12)
    category: Optional[str] = Field(default=None, min_length=1)
    date: Optional[dt.date] = None

    def predicates(self) -> list[FilterPredicate]:
        """Return the constraints in a fixed order: year, month, category, date."""
        predicates = []
        if self.year is not None:
            predicates.append(FilterPredicate(field=FilterField.YEAR, value=self.year))
        if self.month is not None:
            predicates.append(FilterPredicate(field=FilterField.MONTH, value=self.month))
        if self.category is not None:
            predicates.append(FilterPredicate(field=FilterField.CATEGORY, value=self.category))
        if self.date is not None:
            predicates.append(FilterPredicate(field=FilterField.DATE, value=self.date))
        return predicates

    def matches(self, expense: Expense, tz: Optional[dt.tzinfo] = None) -> bool:
        return all(p.matches(expense, tz) for p in self.predicates())

    @property
    def is_unconstrained(self) -> bool:
        return not self.predicates()


# =============================================================================
# QUERY RESULTS
# =============================================================================

class QueryResult(BaseModel):
    """
    Result of running a filter against the store and aggregating it.

    `totals` holds one entry per category present in the matching
    expenses and never a grand-total entry; the grand total has its
    own field.
    """

    query_id: UUID = Field(default_factory=uuid4)
    filter: ExpenseFilter

    success: bool
    error_message: Optional[str] = None

    record_count: int = Field(default=0, ge=0)
    totals: dict[str, Decimal] = Field(default_factory=dict)
    grand_total: Decimal = Decimal("0")

    query_description: str = Field(
        default="",
        description="Human-readable description of the filter"
    )

    @property
    def data_found(self) -> bool:
        return self.success and self.record_count > 0
