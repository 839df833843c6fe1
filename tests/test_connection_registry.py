"""
Tests for the single-slot connection registry.
"""

import asyncio

import pytest

from sqlpane.core.exceptions import DatabaseConnectionError, NoConnectionError
from sqlpane.database import ConnectionRegistry, SqliteClient


class TestEmptyRegistry:
    """Operations before any connect."""

    @pytest.mark.parametrize("operation", [
        lambda r: r.execute("DELETE FROM users"),
        lambda r: r.query("SELECT 1"),
        lambda r: r.query_with_column_order("SELECT 1"),
        lambda r: r.list_databases(),
        lambda r: r.list_tables(),
        lambda r: r.describe_table("users"),
        lambda r: r.begin_transaction(),
    ])
    def test_every_operation_requires_a_client(self, operation):
        """An empty slot raises NoConnectionError for every operation."""
        registry = ConnectionRegistry()
        with pytest.raises(NoConnectionError) as exc_info:
            asyncio.run(operation(registry))
        assert str(exc_info.value) == "No database connection available."

    def test_clear_on_empty_registry(self):
        """Clearing an empty registry is a no-op."""
        registry = ConnectionRegistry()
        asyncio.run(registry.clear())
        assert not registry.is_connected


class TestConnect:
    """Replacing and clearing the active client."""

    def test_connect_registers_client(self, fake_backend):
        """Operations are forwarded to the connected client."""
        registry = ConnectionRegistry(pool_size=3)

        async def scenario():
            await registry.connect(fake_backend, "postgres://u:p@localhost:5432/postgres")
            return await registry.list_tables()

        assert asyncio.run(scenario()) == ["users", "orders"]
        assert registry.is_connected
        assert fake_backend.connected_urls == ["postgres://u:p@localhost:5432/postgres"]

    def test_reconnect_closes_previous_client(self, fake_backend):
        """Only one client is ever live; the old one is closed first."""
        registry = ConnectionRegistry()

        async def scenario():
            await registry.connect(fake_backend, "postgres://u:p@h:5432/postgres")
            await registry.connect(fake_backend, "postgres://u:p@h:5432/shop")

        asyncio.run(scenario())
        assert fake_backend.closed == 1
        assert fake_backend.connected_urls[-1] == "postgres://u:p@h:5432/shop"

    def test_failed_connect_leaves_registry_empty(self, fake_backend):
        """The old client is gone even when the new connection fails."""
        registry = ConnectionRegistry()

        async def scenario():
            await registry.connect(fake_backend, "postgres://u:p@h:5432/postgres")
            fake_backend.fail_connect = "password authentication failed"
            with pytest.raises(DatabaseConnectionError):
                await registry.connect(fake_backend, "postgres://u:p@h:5432/shop")

        asyncio.run(scenario())
        assert not registry.is_connected
        assert fake_backend.closed == 1

    def test_clear_closes_client(self, fake_backend):
        """After clear() the registry is empty again."""
        registry = ConnectionRegistry()

        async def scenario():
            await registry.connect(fake_backend, "mysql://u:p@h:3306/mysql")
            await registry.clear()
            with pytest.raises(NoConnectionError):
                await registry.list_databases()

        asyncio.run(scenario())
        assert fake_backend.closed == 1

    def test_concurrent_operations_are_serialized(self, fake_backend):
        """Operations issued together still run one at a time."""
        fake_backend.list_delay = 0.01
        registry = ConnectionRegistry()

        async def scenario():
            await registry.connect(fake_backend, "postgres://u:p@h:5432/postgres")
            return await asyncio.gather(registry.list_tables(), registry.list_databases())

        tables, databases = asyncio.run(scenario())
        assert tables == ["users", "orders"]
        assert databases == ["postgres", "shop"]

    def test_with_sqlite_backend(self, tmp_path):
        """A real client works through the registry."""
        registry = ConnectionRegistry()

        async def scenario():
            await registry.connect(SqliteClient, str(tmp_path / "app.db"))
            await registry.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT)")
            await registry.execute("INSERT INTO notes (body) VALUES ('hi')")
            header, rows = await registry.query_with_column_order("SELECT body, id FROM notes")
            await registry.clear()
            return header, rows

        header, rows = asyncio.run(scenario())
        assert header == ["body", "id"]
        assert rows == [["hi", "1"]]
