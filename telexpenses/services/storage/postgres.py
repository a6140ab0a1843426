"""
PostgreSQL Storage Implementation

The primary backend. Expenses live in a single `expense` table whose
schema is managed by the SQL files in MIGRATIONS_DIR.

Filters are translated predicate by predicate into fixed SQL fragments
with `%s` placeholders; the values travel separately as query
parameters, so category or comment text can never alter the query.
"""

from pathlib import Path
from typing import Callable, Optional

import psycopg2
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from telexpenses.config import get_settings
from telexpenses.models.expense import (
    Expense,
    ExpenseFilter,
    FilterField,
    NewExpense,
)
from telexpenses.services.storage.interface import (
    ConnectionError,
    ExpenseStorageInterface,
    MigrationError,
    StorageError,
)

logger = structlog.get_logger(__name__)


EXPENSE_COLUMNS = ["id", "user_id", "category", "amount", "comment", "created_at"]

INSERT_EXPENSE_SQL = """
    INSERT INTO expense (user_id, category, amount, comment)
    VALUES (%s, %s, %s, %s)
    RETURNING id, created_at
"""

SELECT_EXPENSES_SQL = """
    SELECT id, user_id, category, amount, comment, created_at
    FROM expense
    WHERE {conditions}
    ORDER BY created_at DESC, id DESC
"""

PREDICATE_SQL = {
    FilterField.YEAR: "EXTRACT(YEAR FROM created_at) = %s",
    FilterField.MONTH: "EXTRACT(MONTH FROM created_at) = %s",
    FilterField.CATEGORY: "category = %s",
    FilterField.DATE: "created_at::date = %s",
}

CREATE_MIGRATIONS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS schema_migrations (
        version TEXT PRIMARY KEY,
        applied_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
"""


def build_select(expense_filter: ExpenseFilter) -> tuple[str, list]:
    """
    Build the SELECT statement and its parameters for a filter.

    Returns:
        (sql, params) with one `%s` per parameter
    """
    conditions = ["TRUE"]
    params = []
    for predicate in expense_filter.predicates():
        conditions.append(PREDICATE_SQL[predicate.field])
        params.append(predicate.value)
    sql = SELECT_EXPENSES_SQL.format(conditions=" AND ".join(conditions))
    return sql, params


def _row_to_expense(row) -> Expense:
    return Expense(**dict(zip(EXPENSE_COLUMNS, row)))


class PostgresClient:
    """
    Owns the database connection.

    Connecting is retried with exponential backoff, since the database
    is often still starting when the bot container comes up. With a
    `timezone`, every new session is switched to it, so date and month
    predicates read `created_at` on that calendar.
    """

    def __init__(
        self,
        dsn: Optional[str] = None,
        connect_attempts: Optional[int] = None,
        connect: Callable = psycopg2.connect,
        timezone: Optional[str] = None,
    ):
        if dsn is None or connect_attempts is None:
            settings = get_settings().postgres
            dsn = dsn or settings.dsn
            connect_attempts = connect_attempts or settings.connect_attempts
        self._dsn = dsn
        self._connect_attempts = connect_attempts
        self._connect = connect
        self._timezone = timezone
        self._conn = None

    def connect(self):
        """Return an open connection, (re)connecting if needed."""
        if self._conn is not None and not self._conn.closed:
            return self._conn

        try:
            for attempt in Retrying(
                stop=stop_after_attempt(self._connect_attempts),
                wait=wait_exponential(multiplier=1, min=1, max=10),
                retry=retry_if_exception_type(psycopg2.OperationalError),
                reraise=True,
            ):
                with attempt:
                    self._conn = self._connect(self._dsn)
        except psycopg2.Error as e:
            raise ConnectionError(f"Failed to connect to PostgreSQL: {e}")

        if self._timezone:
            try:
                with self._conn:
                    with self._conn.cursor() as cursor:
                        cursor.execute("SET TIME ZONE %s", (self._timezone,))
            except psycopg2.Error as e:
                raise ConnectionError(f"Cannot set time zone {self._timezone}: {e}")

        logger.info("postgres_connected", timezone=self._timezone)
        return self._conn

    def ping(self) -> None:
        conn = self.connect()
        try:
            with conn.cursor() as cursor:
                cursor.execute("SELECT 1")
        except psycopg2.Error as e:
            raise ConnectionError(f"PostgreSQL ping failed: {e}")

    def close(self) -> None:
        if self._conn is not None and not self._conn.closed:
            self._conn.close()
        self._conn = None

    def apply_migrations(self, migrations_dir: Optional[str] = None) -> list[str]:
        """
        Apply every not-yet-applied `*.up.sql` file, in name order.

        Each file runs in its own transaction together with the
        bookkeeping row recording its version.

        Returns:
            The versions applied by this call
        """
        directory = Path(migrations_dir or get_settings().postgres.migrations_dir)
        if not directory.is_dir():
            raise MigrationError(f"Migrations directory not found: {directory}")

        conn = self.connect()
        applied_now = []
        try:
            with conn:
                with conn.cursor() as cursor:
                    cursor.execute(CREATE_MIGRATIONS_TABLE_SQL)
                    cursor.execute("SELECT version FROM schema_migrations")
                    already_applied = {row[0] for row in cursor.fetchall()}

            for path in sorted(directory.glob("*.up.sql")):
                version = path.name.split("_", 1)[0]
                if version in already_applied:
                    continue
                with conn:
                    with conn.cursor() as cursor:
                        cursor.execute(path.read_text(encoding="utf-8"))
                        cursor.execute(
                            "INSERT INTO schema_migrations (version) VALUES (%s)",
                            (version,),
                        )
                applied_now.append(version)
                logger.info("migration_applied", version=version, file=path.name)
        except psycopg2.Error as e:
            raise MigrationError(f"Cannot migrate up: {e}")

        if not applied_now:
            logger.info("migrations_up_to_date")
        return applied_now


class PostgresExpenseStorage(ExpenseStorageInterface):
    """PostgreSQL implementation of expense storage."""

    def __init__(self, client: Optional[PostgresClient] = None):
        self._client = client or PostgresClient()

    async def add_expense(self, expense: NewExpense) -> Expense:
        """Insert an expense; the database assigns id and created_at."""
        try:
            conn = self._client.connect()
            with conn:
                with conn.cursor() as cursor:
                    cursor.execute(
                        INSERT_EXPENSE_SQL,
                        (expense.user_id, expense.category, expense.amount, expense.comment),
                    )
                    expense_id, created_at = cursor.fetchone()
        except StorageError:
            raise
        except psycopg2.Error as e:
            raise StorageError(f"Error adding expense: {e}")

        return Expense(id=expense_id, created_at=created_at, **expense.model_dump())

    async def get_expenses(self, expense_filter: ExpenseFilter) -> list[Expense]:
        """List matching expenses, newest first."""
        sql, params = build_select(expense_filter)
        try:
            conn = self._client.connect()
            with conn:
                with conn.cursor() as cursor:
                    cursor.execute(sql, params)
                    rows = cursor.fetchall()
        except StorageError:
            raise
        except psycopg2.Error as e:
            raise StorageError(f"Error getting expenses: {e}")

        return [_row_to_expense(row) for row in rows]
