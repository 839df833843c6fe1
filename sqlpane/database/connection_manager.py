"""
Connection Registry - the session's single active database client.

The registry holds at most one client. Every operation acquires an
asyncio.Lock for exactly that one operation, so a connect can never
interleave with a query on the client it replaces.

The registry is an ordinary object owned by the session state and passed
by reference; there is no module-level instance.
"""
import asyncio
from typing import List, Optional, Tuple, Type

from sqlpane.core.exceptions import NoConnectionError
from sqlpane.core.logging_config import LoggerMixin
from sqlpane.database.client import DEFAULT_POOL_SIZE, DbClient, Transaction
from sqlpane.database.schema import TableSchema
from sqlpane.database.values import OrderedObject


class ConnectionRegistry(LoggerMixin):
    """
    Single-slot holder for the active DbClient.

    Example:
        >>> registry = ConnectionRegistry()
        >>> await registry.connect(PostgresClient, "postgres://u:p@localhost:5432/postgres")
        >>> await registry.list_databases()
        ['postgres', 'shop']
    """

    def __init__(self, pool_size: int = DEFAULT_POOL_SIZE):
        self.pool_size = pool_size
        self._client: Optional[DbClient] = None
        self._lock = asyncio.Lock()
        self.logger.debug("ConnectionRegistry initialized")

    @property
    def is_connected(self) -> bool:
        return self._client is not None

    async def connect(self, backend: Type[DbClient], url: str) -> None:
        """
        Replace the current client with a new connection.

        The old client is cleared and disposed first, so on failure the
        registry is left empty.

        Args:
            backend: DbClient subclass to connect with
            url: Connection string for that backend

        Raises:
            DatabaseConnectionError: If the new connection cannot be opened
        """
        async with self._lock:
            await self._clear_locked()
            self._client = await backend.connect(url, pool_size=self.pool_size)
            self.logger.info(f"Registered {backend.__name__} client")

    async def clear(self) -> None:
        """Dispose the current client, if any."""
        async with self._lock:
            await self._clear_locked()

    async def _clear_locked(self) -> None:
        client, self._client = self._client, None
        if client is not None:
            await client.close()
            self.logger.info("Cleared active connection")

    def _require_client(self) -> DbClient:
        if self._client is None:
            raise NoConnectionError()
        return self._client

    async def execute(self, sql: str) -> None:
        async with self._lock:
            await self._require_client().execute(sql)

    async def query(self, sql: str) -> List[OrderedObject]:
        async with self._lock:
            return await self._require_client().query(sql)

    async def query_with_column_order(self, sql: str) -> Tuple[List[str], List[List[str]]]:
        async with self._lock:
            return await self._require_client().query_with_column_order(sql)

    async def list_databases(self) -> List[str]:
        async with self._lock:
            return await self._require_client().list_databases()

    async def list_tables(self) -> List[str]:
        async with self._lock:
            return await self._require_client().list_tables()

    async def describe_table(self, table_name: str) -> TableSchema:
        async with self._lock:
            return await self._require_client().describe_table(table_name)

    async def begin_transaction(self) -> Transaction:
        async with self._lock:
            return await self._require_client().begin_transaction()
