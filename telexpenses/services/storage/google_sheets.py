"""
Google Sheets Storage Implementation

DESIGN DECISION: Google Sheets is offered as an alternative backend because:
1. Household members can view their spending directly in Sheets
2. No database setup required
3. Easy to export/migrate later

TRADEOFFS:
- Not suitable for high-volume data (we're fine for personal use)
- No transactions (we handle this with careful ordering)
- Limited query capabilities (filters are evaluated in Python)

The implementation follows the abstract interface, so the conversation
logic does not change when switching backends.
"""

from datetime import datetime, timezone, tzinfo
from decimal import Decimal
from typing import Optional

import gspread
from google.oauth2.service_account import Credentials
from tenacity import retry, stop_after_attempt, wait_exponential

from telexpenses.config import get_settings
from telexpenses.models.audit import AuditEvent
from telexpenses.models.expense import Expense, ExpenseFilter, NewExpense
from telexpenses.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    ExpenseStorageInterface,
    StorageError,
)


# Column mappings for Expenses sheet
EXPENSE_COLUMNS = [
    "id",
    "user_id",
    "category",
    "amount",
    "comment",
    "created_at",
]

# Column mappings for Audit sheet
AUDIT_COLUMNS = [
    "event_id",
    "timestamp",
    "event_type",
    "severity",
    "user_id",
    "chat_id",
    "correlation_id",
    "description",
    "details_json",
    "error_message",
]


class GoogleSheetsClient:
    """
    Low-level Google Sheets client wrapper.

    Handles authentication and provides retry logic for connecting.
    """

    def __init__(self):
        self._client: Optional[gspread.Client] = None
        self._spreadsheet: Optional[gspread.Spreadsheet] = None
        self._settings = get_settings().google_sheets

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    def connect(self) -> gspread.Client:
        """
        Establish connection to Google Sheets.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                scopes = [
                    "https://www.googleapis.com/auth/spreadsheets",
                    "https://www.googleapis.com/auth/drive",
                ]
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=scopes,
                )
                self._client = gspread.authorize(credentials)
            except FileNotFoundError:
                raise ConnectionError(
                    f"Google credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Google Sheets: {e}")

        return self._client

    def get_spreadsheet(self) -> gspread.Spreadsheet:
        """Get the configured spreadsheet."""
        if self._spreadsheet is None:
            client = self.connect()
            try:
                self._spreadsheet = client.open_by_key(
                    self._settings.spreadsheet_id
                )
            except gspread.SpreadsheetNotFound:
                raise ConnectionError(
                    f"Spreadsheet not found: {self._settings.spreadsheet_id}"
                )
        return self._spreadsheet

    def _get_or_create_sheet(
        self,
        title: str,
        columns: list[str],
        rows: int,
    ) -> gspread.Worksheet:
        spreadsheet = self.get_spreadsheet()
        try:
            sheet = spreadsheet.worksheet(title)
        except gspread.WorksheetNotFound:
            # Create the sheet with headers
            sheet = spreadsheet.add_worksheet(
                title=title,
                rows=rows,
                cols=len(columns),
            )
            sheet.append_row(columns)
        return sheet

    def get_expenses_sheet(self) -> gspread.Worksheet:
        """Get or create the Expenses worksheet."""
        return self._get_or_create_sheet(
            self._settings.expenses_sheet_name, EXPENSE_COLUMNS, rows=1000
        )

    def get_audit_sheet(self) -> gspread.Worksheet:
        """Get or create the Audit worksheet."""
        return self._get_or_create_sheet(
            self._settings.audit_sheet_name, AUDIT_COLUMNS, rows=5000
        )


def expense_to_row(expense: Expense) -> list:
    """Convert an Expense to a spreadsheet row."""
    return [
        str(expense.id),
        str(expense.user_id),
        expense.category,
        str(expense.amount),
        expense.comment,
        expense.created_at.isoformat(),
    ]


def row_to_expense(row: list) -> Expense:
    """Convert a spreadsheet row to an Expense."""
    # Handle missing trailing cells gracefully
    def safe_get(index: int, default: str = "") -> str:
        try:
            return row[index] if row[index] else default
        except IndexError:
            return default

    return Expense(
        id=int(safe_get(0)),
        user_id=int(safe_get(1)),
        category=safe_get(2),
        amount=Decimal(safe_get(3, "0")),
        comment=safe_get(4),
        created_at=datetime.fromisoformat(safe_get(5)),
    )


class GoogleSheetsExpenseStorage(ExpenseStorageInterface):
    """
    Google Sheets implementation of expense storage.

    Expenses are stored one per row. The id is the row's position
    among the data rows, so it grows with every append. Filters are
    evaluated in `tz`.
    """

    def __init__(
        self,
        client: Optional[GoogleSheetsClient] = None,
        tz: tzinfo = timezone.utc,
    ):
        self._client = client or GoogleSheetsClient()
        self._tz = tz

    async def add_expense(self, expense: NewExpense) -> Expense:
        """Append an expense row."""
        try:
            sheet = self._client.get_expenses_sheet()
            # First column holds ids; its length includes the header
            next_id = len(sheet.col_values(1))
            stored = Expense(
                id=next_id,
                created_at=datetime.now(timezone.utc),
                **expense.model_dump(),
            )
            sheet.append_row(expense_to_row(stored), value_input_option="RAW")
            return stored
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save expense: {e}")

    async def get_expenses(self, expense_filter: ExpenseFilter) -> list[Expense]:
        """List matching expenses, newest first."""
        try:
            sheet = self._client.get_expenses_sheet()
            # Get all data (excluding header)
            all_rows = sheet.get_all_values()[1:]
            expenses = [row_to_expense(row) for row in all_rows if row and row[0]]
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to list expenses: {e}")

        matching = [e for e in expenses if expense_filter.matches(e, self._tz)]
        return sorted(matching, key=lambda e: (e.created_at, e.id), reverse=True)


class GoogleSheetsAuditStorage(AuditStorageInterface):
    """Appends audit events to the AuditLog worksheet."""

    def __init__(self, client: Optional[GoogleSheetsClient] = None):
        self._client = client or GoogleSheetsClient()

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            sheet = self._client.get_audit_sheet()
            sheet.append_row(event.to_sheets_row(), value_input_option="RAW")
            return True
        except Exception as e:
            raise StorageError(f"Failed to append audit event: {e}")
