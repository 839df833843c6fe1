"""
Database client contract and its SQLAlchemy implementation.

This module provides:
- DbClient: the uniform async contract every backend implements
- Transaction: a handle bound to one pooled connection
- SqlAlchemyClient: the shared implementation over an AsyncEngine

Why a single SQLAlchemy base:
1. Pooling, connection checkout and error wrapping are identical per backend
2. Backends differ only in URL scheme, catalog queries and type decoding
3. Driver exceptions are translated into DbError subclasses in one place

Statements are sent to the driver verbatim (exec_driver_sql with
no_parameters), so ':' and '%' in user SQL are never treated as bind
parameter markers.
"""
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, List, Optional, Sequence, Set, Tuple

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection,
    AsyncEngine,
    AsyncTransaction,
    create_async_engine,
)

from sqlpane.core.exceptions import (
    DatabaseConnectionError,
    ExecutionError,
    TransactionError,
)
from sqlpane.core.logging_config import LoggerMixin, get_logger
from sqlpane.database.schema import TableSchema
from sqlpane.database.types import ColumnTypeBase, to_canonical
from sqlpane.database.values import CanonicalValue, OrderedObject, to_display_text

DEFAULT_POOL_SIZE = 5

_VERBATIM = {"no_parameters": True}

CellDecoder = Callable[[Any], CanonicalValue]


def driver_message(error: BaseException) -> str:
    """
    Message of the underlying driver exception.

    SQLAlchemy wraps driver errors as "(asyncpg.exceptions.X) message" plus
    a documentation link; the UI shows the driver's own text instead.
    """
    if isinstance(error, DBAPIError) and error.orig is not None:
        return str(error.orig) or type(error.orig).__name__
    return str(error) or type(error).__name__


class Transaction(ABC):
    """
    Handle for an explicit transaction.

    commit() and rollback() consume the handle: any later call raises
    TransactionError. Used as an async context manager, a transaction that
    is still open on exit is rolled back.

    Example:
        >>> async with await client.begin_transaction() as tx:
        ...     await tx.execute("UPDATE accounts SET balance = 0")
        ...     await tx.commit()
    """

    @abstractmethod
    async def execute(self, sql: str) -> None:
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...

    @abstractmethod
    async def rollback(self) -> None:
        ...

    @property
    @abstractmethod
    def is_active(self) -> bool:
        ...

    async def close(self) -> None:
        """Roll back if neither commit() nor rollback() was called."""
        if self.is_active:
            await self.rollback()

    async def __aenter__(self) -> "Transaction":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class DbClient(ABC):
    """
    Uniform async contract over one database backend.

    Every method raises a DbError subclass on failure; driver exceptions
    never escape.
    """

    @classmethod
    @abstractmethod
    async def connect(cls, url: str, pool_size: int = DEFAULT_POOL_SIZE) -> "DbClient":
        """Open a pool for url and verify it with SELECT 1."""

    @abstractmethod
    async def execute(self, sql: str) -> None:
        """Run a statement in its own committed transaction."""

    @abstractmethod
    async def query(self, sql: str) -> List[OrderedObject]:
        """One ordered object per row, keys in column order."""

    @abstractmethod
    async def query_with_column_order(self, sql: str) -> Tuple[List[str], List[List[str]]]:
        """Header and rows of display strings."""

    @abstractmethod
    async def list_databases(self) -> List[str]:
        ...

    @abstractmethod
    async def list_tables(self) -> List[str]:
        ...

    @abstractmethod
    async def describe_table(self, table_name: str) -> TableSchema:
        ...

    @abstractmethod
    async def begin_transaction(self) -> Transaction:
        ...

    @abstractmethod
    async def close(self) -> None:
        """Release every pooled connection."""


class SqlAlchemyTransaction(Transaction, LoggerMixin):
    """Transaction over a connection checked out of the client's pool."""

    def __init__(
        self,
        connection: AsyncConnection,
        transaction: AsyncTransaction,
        on_finish: Optional[Callable[["SqlAlchemyTransaction"], None]] = None,
    ):
        self._connection = connection
        self._transaction = transaction
        self._on_finish = on_finish
        self._finished = False

    @property
    def is_active(self) -> bool:
        return not self._finished

    def _ensure_open(self) -> None:
        if self._finished:
            raise TransactionError("Transaction already committed or rolled back")

    async def execute(self, sql: str) -> None:
        self._ensure_open()
        try:
            await self._connection.exec_driver_sql(sql, execution_options=_VERBATIM)
        except SQLAlchemyError as e:
            self.logger.error(f"Statement failed inside transaction: {driver_message(e)}")
            raise ExecutionError(driver_message(e), sql) from e
        except Exception as e:
            self.logger.error(f"Unexpected error inside transaction: {e}")
            raise ExecutionError(driver_message(e), sql) from e

    async def commit(self) -> None:
        await self._finish(self._transaction.commit, "commit")

    async def rollback(self) -> None:
        await self._finish(self._transaction.rollback, "rollback")

    async def _finish(self, action, label: str) -> None:
        self._ensure_open()
        self._finished = True
        try:
            await action()
            self.logger.debug(f"Transaction {label} completed")
        except Exception as e:
            self.logger.error(f"Transaction {label} failed: {driver_message(e)}")
            raise TransactionError(driver_message(e)) from e
        finally:
            await self._connection.close()
            if self._on_finish is not None:
                self._on_finish(self)


class SqlAlchemyClient(DbClient, LoggerMixin):
    """
    DbClient over a pooled SQLAlchemy AsyncEngine.

    Subclasses set backend_name and implement the URL rewrite, the
    catalog queries and the per-column decoders.
    """

    backend_name: ClassVar[str] = "database"

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self._open_transactions: Set[SqlAlchemyTransaction] = set()

    # ============== Connection ==============

    @classmethod
    @abstractmethod
    def to_sqlalchemy_url(cls, url: str) -> str:
        """Rewrite a user-facing URL to the async driver's URL."""

    @classmethod
    def engine_options(cls, url: str, pool_size: int) -> Dict[str, Any]:
        return {"pool_size": pool_size, "max_overflow": 0, "pool_pre_ping": True}

    @classmethod
    async def connect(cls, url: str, pool_size: int = DEFAULT_POOL_SIZE) -> "SqlAlchemyClient":
        """
        Create a client and verify the connection.

        Args:
            url: Connection string (postgres://..., mysql://..., file path)
            pool_size: Number of pooled connections

        Returns:
            Connected client

        Raises:
            DatabaseConnectionError: With the driver's message on any failure
        """
        try:
            sa_url = cls.to_sqlalchemy_url(url)
            engine = create_async_engine(sa_url, **cls.engine_options(sa_url, pool_size))
        except (SQLAlchemyError, ValueError) as e:
            get_logger(cls.__name__).warning(f"Invalid {cls.backend_name} URL: {e}")
            raise DatabaseConnectionError(driver_message(e)) from e

        try:
            async with engine.connect() as conn:
                await conn.exec_driver_sql("SELECT 1", execution_options=_VERBATIM)
        except SQLAlchemyError as e:
            await engine.dispose()
            get_logger(cls.__name__).warning(f"{cls.backend_name} connection failed: {driver_message(e)}")
            raise DatabaseConnectionError(driver_message(e)) from e
        except Exception as e:
            # Socket and DNS errors can surface before SQLAlchemy wraps them
            await engine.dispose()
            get_logger(cls.__name__).error(f"Unexpected error connecting to {cls.backend_name}: {e}")
            raise DatabaseConnectionError(driver_message(e)) from e

        get_logger(cls.__name__).info(f"Connected to {cls.backend_name} (pool_size={pool_size})")
        return cls(engine)

    async def close(self) -> None:
        for transaction in list(self._open_transactions):
            self.logger.warning("Rolling back a transaction left open at close")
            try:
                await transaction.rollback()
            except TransactionError as e:
                self.logger.error(f"Rollback at close failed: {e}")
        await self.engine.dispose()
        self.logger.info(f"Closed {self.backend_name} connection pool")

    # ============== Execution ==============

    async def _run(self, sql: str) -> Tuple[List[str], Optional[Sequence], List[Sequence]]:
        """
        Run one statement in its own transaction.

        Returns:
            (column names, cursor description or None, raw rows)
        """
        start_time = time.perf_counter()
        try:
            async with self.engine.begin() as conn:
                result = await conn.exec_driver_sql(sql, execution_options=_VERBATIM)
                if not result.returns_rows:
                    keys, description, rows = [], None, []
                else:
                    keys = list(result.keys())
                    cursor = getattr(result, "cursor", None)
                    description = getattr(cursor, "description", None)
                    rows = result.fetchall()
        except SQLAlchemyError as e:
            self.logger.error(f"Statement failed: {driver_message(e)}")
            raise ExecutionError(driver_message(e), sql) from e
        except Exception as e:
            # A lost server surfaces as a bare OSError when the pool reconnects
            self.logger.error(f"Unexpected error running statement: {e}")
            raise ExecutionError(driver_message(e), sql) from e

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        self.logger.debug(f"Statement completed: {len(rows)} rows in {elapsed_ms:.2f}ms")
        return keys, description, rows

    def column_decoders(self, description: Optional[Sequence], width: int) -> List[CellDecoder]:
        """
        One decoder per result column.

        The default resolves each column's type code once via column_type().
        """
        decoders = []
        for index in range(width):
            type_code = description[index][1] if description and index < len(description) else None
            column_type = self.column_type(type_code)
            decoders.append(lambda raw, ct=column_type: to_canonical(ct, raw))
        return decoders

    @abstractmethod
    def column_type(self, type_code: Any) -> ColumnTypeBase:
        """Category for a cursor description type code."""

    def _decode_rows(
        self, keys: List[str], description: Optional[Sequence], rows: List[Sequence]
    ) -> List[List[CanonicalValue]]:
        decoders = self.column_decoders(description, len(keys))
        return [[decode(raw) for decode, raw in zip(decoders, row)] for row in rows]

    async def execute(self, sql: str) -> None:
        self.logger.info(f"Executing statement: {sql[:100]}")
        await self._run(sql)

    async def query(self, sql: str) -> List[OrderedObject]:
        self.logger.info(f"Executing query: {sql[:100]}")
        keys, description, rows = await self._run(sql)
        return [OrderedObject(zip(keys, values)) for values in self._decode_rows(keys, description, rows)]

    async def query_with_column_order(self, sql: str) -> Tuple[List[str], List[List[str]]]:
        self.logger.info(f"Executing query: {sql[:100]}")
        keys, description, rows = await self._run(sql)
        decoded = self._decode_rows(keys, description, rows)
        return keys, [[to_display_text(value) for value in values] for values in decoded]

    async def _first_column(self, sql: str) -> List[str]:
        _, _, rows = await self._run(sql)
        return [_as_text(row[0]) for row in rows]

    async def _records(self, sql: str) -> List[Dict[str, Any]]:
        keys, _, rows = await self._run(sql)
        return [dict(zip(keys, row)) for row in rows]

    # ============== Transactions ==============

    async def begin_transaction(self) -> Transaction:
        try:
            connection = await self.engine.connect()
        except SQLAlchemyError as e:
            raise TransactionError(driver_message(e)) from e
        except Exception as e:
            self.logger.error(f"Unexpected error starting transaction: {e}")
            raise TransactionError(driver_message(e)) from e
        try:
            transaction = await connection.begin()
        except Exception as e:
            await connection.close()
            raise TransactionError(driver_message(e)) from e

        handle = SqlAlchemyTransaction(connection, transaction, on_finish=self._open_transactions.discard)
        self._open_transactions.add(handle)
        self.logger.debug("Transaction started")
        return handle


def _as_text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return str(value)


def as_optional_text(value: Any) -> Optional[str]:
    """Catalog values (defaults, type names) may arrive as bytes on MySQL."""
    if value is None:
        return None
    return _as_text(value)
