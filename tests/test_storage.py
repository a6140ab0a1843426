"""
Tests for storage backends

PostgreSQL and Google Sheets are exercised against mocked connections;
no network access is needed.
"""

import pytest
from datetime import date, datetime, timezone
from decimal import Decimal
from unittest.mock import MagicMock
from zoneinfo import ZoneInfo

import psycopg2

from telexpenses.models.expense import ExpenseFilter, NewExpense
from telexpenses.services.storage import (
    ConnectionError,
    GoogleSheetsExpenseStorage,
    InMemoryExpenseStorage,
    MigrationError,
    PostgresClient,
    PostgresExpenseStorage,
    StorageError,
)
from telexpenses.services.storage.google_sheets import expense_to_row, row_to_expense
from telexpenses.services.storage.postgres import INSERT_EXPENSE_SQL, build_select

from tests.conftest import FIXED_NOW, USER_A, USER_B, make_expense

MAY_3 = datetime(2021, 5, 3, 9, tzinfo=timezone.utc)
MAY_4 = datetime(2021, 5, 4, 9, tzinfo=timezone.utc)
JUNE_1 = datetime(2021, 6, 1, 9, tzinfo=timezone.utc)

ATHENS = ZoneInfo("Europe/Athens")
# 2021-06-01 01:00 in Athens
LATE_MAY_31_UTC = datetime(2021, 5, 31, 22, tzinfo=timezone.utc)


def fake_connection():
    """A psycopg2-like connection whose cursor is a MagicMock."""
    conn = MagicMock()
    conn.closed = 0
    cursor = conn.cursor.return_value.__enter__.return_value
    return conn, cursor


def postgres_storage(conn):
    client = PostgresClient(dsn="postgresql://test", connect_attempts=1, connect=lambda dsn: conn)
    return PostgresExpenseStorage(client), client


class TestInMemoryStorage:
    """Tests for the list-backed store."""

    @pytest.mark.asyncio
    async def test_add_assigns_id_and_timestamp(self, storage):
        stored = await storage.add_expense(
            NewExpense(user_id=USER_A, category="Φαγητό", amount=Decimal("7.20"), comment="lunch")
        )
        assert stored.id == 1
        assert stored.created_at == FIXED_NOW
        assert stored.comment == "lunch"
        assert storage.expenses == [stored]

    @pytest.mark.asyncio
    async def test_filter_and_newest_first(self, storage):
        await storage.load(make_expense(1, "Ψιλικά", "1", MAY_3))
        await storage.load(make_expense(2, "Ψιλικά", "2", MAY_4))
        await storage.load(make_expense(3, "Φαγητό", "3", MAY_4))
        await storage.load(make_expense(4, "Ψιλικά", "4", JUNE_1))

        found = await storage.get_expenses(ExpenseFilter(year=2021, month=5, category="Ψιλικά"))

        assert [e.id for e in found] == [2, 1]

    @pytest.mark.asyncio
    async def test_same_timestamp_ordered_by_id(self, storage):
        await storage.load(make_expense(1, "Ψιλικά", "1", MAY_3))
        await storage.load(make_expense(2, "Ψιλικά", "2", MAY_3))

        found = await storage.get_expenses(ExpenseFilter())

        assert [e.id for e in found] == [2, 1]

    @pytest.mark.asyncio
    async def test_queries_are_household_wide(self, storage):
        """Expenses of every user are returned; filters have no user constraint."""
        await storage.load(make_expense(1, "Ψιλικά", "1", MAY_3, user_id=USER_A))
        await storage.load(make_expense(2, "Ψιλικά", "2", MAY_3, user_id=USER_B))

        found = await storage.get_expenses(ExpenseFilter(year=2021))

        assert {e.user_id for e in found} == {USER_A, USER_B}

    @pytest.mark.asyncio
    async def test_fail_with(self, storage):
        storage.fail_with = "down"
        with pytest.raises(StorageError, match="down"):
            await storage.add_expense(NewExpense(user_id=USER_A, category="Άλλο", amount=Decimal("1")))
        assert storage.expenses == []

    @pytest.mark.asyncio
    async def test_month_read_in_configured_zone(self):
        store = InMemoryExpenseStorage(clock=lambda: FIXED_NOW, tz=ATHENS)
        await store.load(make_expense(1, "Ψιλικά", "1", LATE_MAY_31_UTC))
        await store.load(make_expense(2, "Ψιλικά", "2", MAY_4))

        june = await store.get_expenses(ExpenseFilter(year=2021, month=6))
        may = await store.get_expenses(ExpenseFilter(year=2021, month=5))
        first_of_june = await store.get_expenses(ExpenseFilter(date=date(2021, 6, 1)))

        assert [e.id for e in june] == [1]
        assert [e.id for e in may] == [2]
        assert [e.id for e in first_of_june] == [1]

    @pytest.mark.asyncio
    async def test_utc_by_default(self, storage):
        await storage.load(make_expense(1, "Ψιλικά", "1", LATE_MAY_31_UTC))

        found = await storage.get_expenses(ExpenseFilter(year=2021, month=5))

        assert [e.id for e in found] == [1]


class TestBuildSelect:
    """Tests for translating filters to SQL."""

    def test_unconstrained(self):
        sql, params = build_select(ExpenseFilter())
        assert "WHERE TRUE" in sql
        assert params == []

    def test_every_predicate_parameterized(self):
        sql, params = build_select(
            ExpenseFilter(year=2021, month=5, category="Ψιλικά", date=date(2021, 5, 3))
        )
        assert sql.count("%s") == 4
        assert params == [2021, 5, "Ψιλικά", date(2021, 5, 3)]
        assert "ORDER BY created_at DESC, id DESC" in sql

    def test_category_text_never_in_sql(self):
        """Hostile category text travels only as a parameter."""
        hostile = "x'; DROP TABLE expense; --"
        sql, params = build_select(ExpenseFilter(category=hostile))
        assert hostile not in sql
        assert "DROP" not in sql
        assert params == [hostile]


class TestPostgresStorage:
    """Tests for the PostgreSQL backend with a fake connection."""

    @pytest.mark.asyncio
    async def test_add_expense(self):
        conn, cursor = fake_connection()
        cursor.fetchone.return_value = (42, MAY_3)
        store, _ = postgres_storage(conn)

        stored = await store.add_expense(
            NewExpense(user_id=USER_A, category="Φαγητό", amount=Decimal("7.20"), comment="lunch")
        )

        cursor.execute.assert_called_once_with(
            INSERT_EXPENSE_SQL, (USER_A, "Φαγητό", Decimal("7.20"), "lunch")
        )
        assert stored.id == 42
        assert stored.created_at == MAY_3

    @pytest.mark.asyncio
    async def test_get_expenses(self):
        conn, cursor = fake_connection()
        cursor.fetchall.return_value = [
            (2, USER_A, "Ψιλικά", Decimal("2.00"), "", MAY_4),
            (1, USER_B, "Ψιλικά", Decimal("1.00"), "gum", MAY_3),
        ]
        store, _ = postgres_storage(conn)
        expense_filter = ExpenseFilter(year=2021, category="Ψιλικά")

        found = await store.get_expenses(expense_filter)

        sql, params = build_select(expense_filter)
        cursor.execute.assert_called_once_with(sql, params)
        assert [e.id for e in found] == [2, 1]
        assert found[1].comment == "gum"

    @pytest.mark.asyncio
    async def test_database_error_becomes_storage_error(self):
        conn, cursor = fake_connection()
        cursor.execute.side_effect = psycopg2.OperationalError("server closed the connection")
        store, _ = postgres_storage(conn)

        with pytest.raises(StorageError):
            await store.get_expenses(ExpenseFilter())

    @pytest.mark.asyncio
    async def test_connect_failure(self):
        def refuse(dsn):
            raise psycopg2.OperationalError("connection refused")

        client = PostgresClient(dsn="postgresql://test", connect_attempts=1, connect=refuse)
        store = PostgresExpenseStorage(client)

        with pytest.raises(ConnectionError):
            await store.add_expense(NewExpense(user_id=USER_A, category="Άλλο", amount=Decimal("1")))

    def test_connection_reused(self):
        conn, _ = fake_connection()
        calls = []

        def connect(dsn):
            calls.append(dsn)
            return conn

        client = PostgresClient(dsn="postgresql://test", connect_attempts=1, connect=connect)
        client.connect()
        client.connect()

        assert calls == ["postgresql://test"]

    def test_session_time_zone_set_on_connect(self):
        conn, cursor = fake_connection()
        client = PostgresClient(
            dsn="postgresql://test",
            connect_attempts=1,
            connect=lambda dsn: conn,
            timezone="Europe/Athens",
        )

        client.connect()

        cursor.execute.assert_called_once_with("SET TIME ZONE %s", ("Europe/Athens",))

    def test_bad_time_zone_is_connection_error(self):
        conn, cursor = fake_connection()
        cursor.execute.side_effect = psycopg2.DataError("invalid value for parameter \"TimeZone\"")
        client = PostgresClient(
            dsn="postgresql://test",
            connect_attempts=1,
            connect=lambda dsn: conn,
            timezone="Mars/Olympus_Mons",
        )

        with pytest.raises(ConnectionError):
            client.connect()


class TestMigrations:
    """Tests for applying SQL migrations."""

    def test_applies_pending_in_order(self, tmp_path):
        (tmp_path / "0002_add_index.up.sql").write_text("CREATE INDEX b;", encoding="utf-8")
        (tmp_path / "0001_create_expense.up.sql").write_text("CREATE TABLE a;", encoding="utf-8")
        (tmp_path / "0001_create_expense.down.sql").write_text("DROP TABLE a;", encoding="utf-8")
        conn, cursor = fake_connection()
        cursor.fetchall.return_value = []
        _, client = postgres_storage(conn)

        applied = client.apply_migrations(str(tmp_path))

        assert applied == ["0001", "0002"]
        executed = [c.args[0] for c in cursor.execute.call_args_list]
        assert executed.index("CREATE TABLE a;") < executed.index("CREATE INDEX b;")
        assert "DROP TABLE a;" not in executed

    def test_skips_already_applied(self, tmp_path):
        (tmp_path / "0001_create_expense.up.sql").write_text("CREATE TABLE a;", encoding="utf-8")
        conn, cursor = fake_connection()
        cursor.fetchall.return_value = [("0001",)]
        _, client = postgres_storage(conn)

        assert client.apply_migrations(str(tmp_path)) == []

    def test_missing_directory(self, tmp_path):
        conn, _ = fake_connection()
        _, client = postgres_storage(conn)

        with pytest.raises(MigrationError):
            client.apply_migrations(str(tmp_path / "nope"))

    def test_failed_migration(self, tmp_path):
        (tmp_path / "0001_broken.up.sql").write_text("CREATE TABLEE a;", encoding="utf-8")
        conn, cursor = fake_connection()
        cursor.fetchall.return_value = []

        def execute(sql, *args):
            if sql == "CREATE TABLEE a;":
                raise psycopg2.ProgrammingError("syntax error")

        cursor.execute.side_effect = execute
        _, client = postgres_storage(conn)

        with pytest.raises(MigrationError):
            client.apply_migrations(str(tmp_path))


class TestGoogleSheetsStorage:
    """Tests for the Google Sheets backend with a mocked client."""

    def test_row_conversion(self):
        expense = make_expense(3, "Καφέδες", "2.80", MAY_3, comment="freddo")
        row = expense_to_row(expense)
        assert row == ["3", str(USER_A), "Καφέδες", "2.80", "freddo", MAY_3.isoformat()]
        assert row_to_expense(row) == expense

    def test_row_with_missing_comment(self):
        row = ["3", str(USER_A), "Καφέδες", "2.80", "", MAY_3.isoformat()]
        assert row_to_expense(row).comment == ""

    @pytest.mark.asyncio
    async def test_add_expense_appends_row(self):
        client = MagicMock()
        sheet = client.get_expenses_sheet.return_value
        sheet.col_values.return_value = ["id", "1", "2"]
        store = GoogleSheetsExpenseStorage(client)

        stored = await store.add_expense(
            NewExpense(user_id=USER_A, category="Φαγητό", amount=Decimal("7.20"))
        )

        assert stored.id == 3
        sheet.append_row.assert_called_once_with(expense_to_row(stored), value_input_option="RAW")

    @pytest.mark.asyncio
    async def test_get_expenses_filters_in_python(self):
        client = MagicMock()
        sheet = client.get_expenses_sheet.return_value
        sheet.get_all_values.return_value = [
            ["id", "user_id", "category", "amount", "comment", "created_at"],
            expense_to_row(make_expense(1, "Ψιλικά", "1", MAY_3)),
            expense_to_row(make_expense(2, "Ψιλικά", "2", JUNE_1)),
            expense_to_row(make_expense(3, "Ψιλικά", "3", MAY_4)),
            [],
        ]
        store = GoogleSheetsExpenseStorage(client)

        found = await store.get_expenses(ExpenseFilter(year=2021, month=5))

        assert [e.id for e in found] == [3, 1]

    @pytest.mark.asyncio
    async def test_get_expenses_in_configured_zone(self):
        client = MagicMock()
        sheet = client.get_expenses_sheet.return_value
        sheet.get_all_values.return_value = [
            ["id", "user_id", "category", "amount", "comment", "created_at"],
            expense_to_row(make_expense(1, "Ψιλικά", "1", LATE_MAY_31_UTC)),
            expense_to_row(make_expense(2, "Ψιλικά", "2", MAY_4)),
        ]
        store = GoogleSheetsExpenseStorage(client, tz=ATHENS)

        found = await store.get_expenses(ExpenseFilter(year=2021, month=6))

        assert [e.id for e in found] == [1]

    @pytest.mark.asyncio
    async def test_api_error_becomes_storage_error(self):
        client = MagicMock()
        client.get_expenses_sheet.side_effect = RuntimeError("quota exceeded")
        store = GoogleSheetsExpenseStorage(client)

        with pytest.raises(StorageError, match="quota exceeded"):
            await store.get_expenses(ExpenseFilter())


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
