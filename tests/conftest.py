"""Shared fixtures: settings, an in-memory DbClient and a recording clipboard."""

import asyncio
from typing import Dict, List, Optional, Tuple

import pytest

from sqlpane.core.config import Settings
from sqlpane.core.exceptions import DatabaseConnectionError, ExecutionError
from sqlpane.database.client import DbClient, Transaction
from sqlpane.database.schema import ColumnSchema, TableSchema
from sqlpane.database.values import OrderedObject
from sqlpane.ui.backends import MySqlDatabaseUI, PostgresDatabaseUI
from sqlpane.ui.handlers import KeyDispatcher, KeyPress, prepare_screen
from sqlpane.ui.state import DatabaseClientUI


def make_settings(**overrides) -> Settings:
    values = dict(
        app_name="sqlpane-test",
        log_level="OFF",
        log_file="sqlpane-test.log",
        refresh_timeout_seconds=0.5,
        max_result_rows=1000,
        pool_size=5,
        debug_buffer_size=100,
        default_username="",
        default_password="",
        default_hostname="",
        default_port="",
    )
    values.update(overrides)
    return Settings(**values)


class FakeDbClient(DbClient):
    """
    DbClient double driven by class attributes.

    The fake_backend fixture hands out a fresh subclass per test, so the
    class-level state never leaks between tests.
    """

    connected_urls: List[str] = []
    fail_connect: Optional[str] = None
    databases: List[str] = []
    tables: List[str] = []
    columns: Dict[str, List[str]] = {}
    results: Dict[str, Tuple[List[str], List[List[str]]]] = {}
    failing_sql: Dict[str, str] = {}
    list_delay: float = 0.0
    executed: List[str] = []
    describe_calls: List[str] = []
    closed: int = 0

    @classmethod
    async def connect(cls, url: str, pool_size: int = 5) -> "FakeDbClient":
        cls.connected_urls.append(url)
        if cls.fail_connect is not None:
            raise DatabaseConnectionError(cls.fail_connect)
        return cls()

    async def execute(self, sql: str) -> None:
        if sql in self.failing_sql:
            raise ExecutionError(self.failing_sql[sql], sql)
        type(self).executed.append(sql)

    async def query(self, sql: str) -> List[OrderedObject]:
        header, rows = await self.query_with_column_order(sql)
        return [OrderedObject(zip(header, row)) for row in rows]

    async def query_with_column_order(self, sql: str) -> Tuple[List[str], List[List[str]]]:
        if sql in self.failing_sql:
            raise ExecutionError(self.failing_sql[sql], sql)
        return self.results.get(sql, ([], []))

    async def list_databases(self) -> List[str]:
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        return list(self.databases)

    async def list_tables(self) -> List[str]:
        if self.list_delay:
            await asyncio.sleep(self.list_delay)
        return list(self.tables)

    async def describe_table(self, table_name: str) -> TableSchema:
        type(self).describe_calls.append(table_name)
        if table_name not in self.columns:
            raise ExecutionError(f'relation "{table_name}" does not exist')
        return TableSchema(
            table_name=table_name,
            columns=[ColumnSchema(name, "text", True) for name in self.columns[table_name]],
        )

    async def begin_transaction(self) -> Transaction:
        raise NotImplementedError

    async def close(self) -> None:
        type(self).closed += 1


class FakeClipboard:
    def __init__(self):
        self.copies: List[str] = []

    def copy(self, text: str) -> None:
        self.copies.append(text)


@pytest.fixture
def settings():
    """Settings with a short refresh timeout."""
    return make_settings()


@pytest.fixture
def fake_backend(monkeypatch):
    """A fresh FakeDbClient subclass wired into both UI adapters."""
    backend = type("FakeBackend", (FakeDbClient,), {
        "connected_urls": [],
        "fail_connect": None,
        "databases": ["postgres", "shop"],
        "tables": ["users", "orders"],
        "columns": {"users": ["id", "name"], "orders": ["id", "user_id", "total"]},
        "results": {},
        "failing_sql": {},
        "list_delay": 0.0,
        "executed": [],
        "describe_calls": [],
        "closed": 0,
    })
    monkeypatch.setattr(PostgresDatabaseUI, "client_class", backend)
    monkeypatch.setattr(MySqlDatabaseUI, "client_class", backend)
    return backend


@pytest.fixture
def session(settings):
    """A fresh session on the database type screen."""
    return DatabaseClientUI.create(settings)


@pytest.fixture
def clipboard():
    return FakeClipboard()


@pytest.fixture
def dispatcher(clipboard):
    return KeyDispatcher(clipboard)


def key(name: str) -> KeyPress:
    """KeyPress for a named key ('enter', 'f5') or a single character."""
    if len(name) == 1:
        return KeyPress(name, name)
    return KeyPress(name)


async def press(dispatcher: KeyDispatcher, session: DatabaseClientUI, *names: str) -> None:
    """Feed keys the way the app does: handle, then prepare the next screen."""
    for name in names:
        await dispatcher.dispatch(session, key(name))
        await prepare_screen(session)


async def type_text(dispatcher: KeyDispatcher, session: DatabaseClientUI, text: str) -> None:
    await press(dispatcher, session, *text)
