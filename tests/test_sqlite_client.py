"""
Tests for the SQLAlchemy client, run against a real SQLite file.

SQLite needs no server, so these tests exercise the shared client code
(statement execution, decoding, transactions, error translation) end to end.
"""

import asyncio

import pytest

from sqlpane.core.exceptions import DatabaseConnectionError, ExecutionError, TransactionError
from sqlpane.database import SqliteClient
from sqlpane.database.client import SqlAlchemyClient
from sqlpane.database.schema import TableSchema
from sqlpane.database.types import SqliteColumnType
from sqlpane.database.values import OrderedObject

SCHEMA = (
    "CREATE TABLE users ("
    "id INTEGER PRIMARY KEY, "
    "name TEXT NOT NULL, "
    "email VARCHAR(120), "
    "score REAL DEFAULT 0, "
    "avatar BLOB)"
)


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "shop.db")


async def seeded_client(path: str) -> SqliteClient:
    client = await SqliteClient.connect(path)
    await client.execute(SCHEMA)
    await client.execute("CREATE TABLE orders (id INTEGER PRIMARY KEY, user_id INTEGER, total NUMERIC)")
    await client.execute("INSERT INTO users (name, email, avatar) VALUES ('Alice', 'alice@example.com', X'00FF')")
    await client.execute("INSERT INTO users (name, email) VALUES ('Bob', NULL)")
    return client


async def count_users(client: SqliteClient) -> int:
    rows = await client.query("SELECT COUNT(*) AS n FROM users")
    return rows[0]["n"]


class TestConnect:
    """Connection setup and URL handling."""

    def test_url_forms(self):
        """Paths, sqlite:// URLs and :memory: all map to the aiosqlite driver."""
        assert SqliteClient.to_sqlalchemy_url("/tmp/a.db") == "sqlite+aiosqlite:////tmp/a.db"
        assert SqliteClient.to_sqlalchemy_url("sqlite:///a.db") == "sqlite+aiosqlite:///a.db"
        assert SqliteClient.to_sqlalchemy_url(":memory:") == "sqlite+aiosqlite://"

    def test_unopenable_path_raises_connection_error(self, tmp_path):
        """A file in a missing directory fails at the SELECT 1 check."""
        path = str(tmp_path / "missing" / "nested" / "x.db")
        with pytest.raises(DatabaseConnectionError):
            asyncio.run(SqliteClient.connect(path))

    def test_empty_path_raises_connection_error(self):
        """An empty URL is rejected before any engine is built."""
        with pytest.raises(DatabaseConnectionError):
            asyncio.run(SqliteClient.connect(""))


class TestQueries:
    """Statement execution and result decoding."""

    def test_query_keeps_column_order(self, db_path):
        """Keys follow the SELECT list, not alphabetical order."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.query("SELECT name, id FROM users ORDER BY id")
            finally:
                await client.close()

        rows = asyncio.run(scenario())
        assert rows == [
            OrderedObject([("name", "Alice"), ("id", 1)]),
            OrderedObject([("name", "Bob"), ("id", 2)]),
        ]

    def test_query_with_column_order_display_strings(self, db_path):
        """NULL cells display as NULL and blobs as base64."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.query_with_column_order(
                    "SELECT email, name, avatar FROM users ORDER BY id"
                )
            finally:
                await client.close()

        header, rows = asyncio.run(scenario())
        assert header == ["email", "name", "avatar"]
        assert rows == [
            ["alice@example.com", "Alice", "AP8="],
            ["NULL", "Bob", "NULL"],
        ]

    def test_header_returned_for_empty_result(self, db_path):
        """A SELECT matching no rows still reports its columns."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.query_with_column_order("SELECT id, name FROM users WHERE id < 0")
            finally:
                await client.close()

        header, rows = asyncio.run(scenario())
        assert header == ["id", "name"]
        assert rows == []

    def test_colon_and_percent_sent_verbatim(self, db_path):
        """':name' and '%' in literals are not treated as parameters."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                await client.execute("INSERT INTO users (name, email) VALUES (':name', '100% %s')")
                return await client.query("SELECT name, email FROM users WHERE id = 3")
            finally:
                await client.close()

        rows = asyncio.run(scenario())
        assert rows[0]["name"] == ":name"
        assert rows[0]["email"] == "100% %s"

    def test_bad_sql_raises_execution_error(self, db_path):
        """Syntax errors surface as ExecutionError carrying the driver message."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                await client.query("SELEC name FROM users")
            finally:
                await client.close()

        with pytest.raises(ExecutionError) as exc_info:
            asyncio.run(scenario())
        assert "syntax error" in str(exc_info.value)
        assert exc_info.value.sql == "SELEC name FROM users"


class TestCatalog:
    """Database, table and column listing."""

    def test_list_databases_is_main(self, db_path):
        """A SQLite file has exactly one database."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.list_databases()
            finally:
                await client.close()

        assert asyncio.run(scenario()) == ["main"]

    def test_list_tables_sorted(self, db_path):
        """Tables are listed by name."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.list_tables()
            finally:
                await client.close()

        assert asyncio.run(scenario()) == ["orders", "users"]

    def test_describe_table(self, db_path):
        """Columns come back in table order with type, nullability and default."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                return await client.describe_table("users")
            finally:
                await client.close()

        schema = asyncio.run(scenario())
        assert schema.table_name == "users"
        assert schema.get_column_names() == ["id", "name", "email", "score", "avatar"]
        by_name = {column.name: column for column in schema.columns}
        assert by_name["email"].data_type == "VARCHAR(120)"
        assert by_name["name"].is_nullable is False
        assert by_name["email"].is_nullable is True
        assert by_name["score"].default == "0"
        assert schema.indexes == []


class TestTransactions:
    """Explicit transactions on a dedicated connection."""

    def test_commit_persists_and_consumes_handle(self, db_path):
        """After commit the data is visible and the handle is unusable."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                tx = await client.begin_transaction()
                await tx.execute("INSERT INTO users (name) VALUES ('Carol')")
                await tx.commit()
                assert not tx.is_active
                with pytest.raises(TransactionError):
                    await tx.execute("INSERT INTO users (name) VALUES ('Dave')")
                with pytest.raises(TransactionError):
                    await tx.commit()
                return await count_users(client)
            finally:
                await client.close()

        assert asyncio.run(scenario()) == 3

    def test_rollback_discards_changes(self, db_path):
        """Rolled back inserts never reach the table."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                tx = await client.begin_transaction()
                await tx.execute("INSERT INTO users (name) VALUES ('Carol')")
                await tx.rollback()
                with pytest.raises(TransactionError):
                    await tx.rollback()
                return await count_users(client)
            finally:
                await client.close()

        assert asyncio.run(scenario()) == 2

    def test_context_exit_without_commit_rolls_back(self, db_path):
        """Leaving the async with block abandons the transaction."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                async with await client.begin_transaction() as tx:
                    await tx.execute("INSERT INTO users (name) VALUES ('Carol')")
                assert not tx.is_active
                return await count_users(client)
            finally:
                await client.close()

        assert asyncio.run(scenario()) == 2

    def test_close_rolls_back_open_transaction(self, db_path):
        """Closing the client abandons transactions left open."""
        async def scenario():
            client = await seeded_client(db_path)
            tx = await client.begin_transaction()
            await tx.execute("INSERT INTO users (name) VALUES ('Carol')")
            await client.close()
            assert not tx.is_active

            reopened = await SqliteClient.connect(db_path)
            try:
                return await count_users(reopened)
            finally:
                await reopened.close()

        assert asyncio.run(scenario()) == 2

    def test_failed_statement_raises_execution_error(self, db_path):
        """A bad statement inside a transaction is an ExecutionError carrying the SQL."""
        async def scenario():
            client = await seeded_client(db_path)
            try:
                async with await client.begin_transaction() as tx:
                    await tx.execute("INSERT INTO missing_table VALUES (1)")
            finally:
                await client.close()

        with pytest.raises(ExecutionError) as excinfo:
            asyncio.run(scenario())
        assert excinfo.value.sql == "INSERT INTO missing_table VALUES (1)"
        assert "missing_table" in excinfo.value.message


class TestBackendContract:
    """Every SQLAlchemy backend must say how it categorizes type codes."""

    def test_backend_without_column_type_is_abstract(self):
        """Forgetting column_type fails at construction, not on the first query."""
        class HalfBackend(SqlAlchemyClient):
            @classmethod
            def to_sqlalchemy_url(cls, url):
                return url

            async def list_databases(self):
                return []

            async def list_tables(self):
                return []

            async def describe_table(self, table_name):
                return TableSchema(table_name=table_name, columns=[])

        with pytest.raises(TypeError, match="column_type"):
            HalfBackend(engine=None)

    def test_sqlite_type_codes_are_unknown(self):
        """SQLite descriptions carry no type code."""
        client = SqliteClient(engine=None)
        assert client.column_type(None) is SqliteColumnType.UNKNOWN
