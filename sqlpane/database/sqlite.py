"""
SQLite backend (aiosqlite driver).

Available in the database layer; the interactive UI lists it but reports
it as not implemented yet.
"""
import os
from typing import Any, Dict, List, Optional, Sequence

from sqlpane.database.client import CellDecoder, SqlAlchemyClient, as_optional_text
from sqlpane.database.schema import ColumnSchema, TableSchema
from sqlpane.database.types import SqliteColumnType, to_canonical, sqlite_column_type_for_value

_DRIVER_PREFIX = "sqlite+aiosqlite://"


def _decode_by_storage_class(raw: Any):
    return to_canonical(sqlite_column_type_for_value(raw), raw)


class SqliteClient(SqlAlchemyClient):
    """
    Client for a SQLite database file.

    Example:
        >>> client = await SqliteClient.connect("/tmp/shop.db")
        >>> await client.list_databases()
        ['main']
    """

    backend_name = "SQLite"

    @classmethod
    def to_sqlalchemy_url(cls, url: str) -> str:
        """Accepts a filesystem path, ':memory:' or a sqlite:// URL."""
        if url.startswith(_DRIVER_PREFIX):
            return url
        if url.startswith("sqlite://"):
            return _DRIVER_PREFIX + url[len("sqlite://"):]
        if not url:
            raise ValueError("Empty SQLite path")
        if url == ":memory:":
            return _DRIVER_PREFIX
        return f"{_DRIVER_PREFIX}/{os.path.expanduser(url)}"

    @classmethod
    def engine_options(cls, url: str, pool_size: int) -> Dict[str, Any]:
        # In-memory databases use a single static connection
        if url.rstrip("/") == _DRIVER_PREFIX.rstrip("/") or ":memory:" in url:
            return {}
        return {"pool_size": pool_size, "max_overflow": 0}

    def column_type(self, type_code: Any) -> SqliteColumnType:
        # The description never carries a type code
        return SqliteColumnType.UNKNOWN

    def column_decoders(self, description: Optional[Sequence], width: int) -> List[CellDecoder]:
        # No type codes in the description: each value is typed by its storage class
        return [_decode_by_storage_class] * width

    async def list_databases(self) -> List[str]:
        return ["main"]

    async def list_tables(self) -> List[str]:
        return await self._first_column(
            "SELECT name FROM sqlite_master WHERE type = 'table' ORDER BY name"
        )

    async def describe_table(self, table_name: str) -> TableSchema:
        # table_name is interpolated as-is
        records = await self._records(f"PRAGMA table_info('{table_name}')")
        columns = [
            ColumnSchema(
                name=as_optional_text(record["name"]),
                data_type=as_optional_text(record["type"]) or "",
                is_nullable=not record["notnull"],
                default=as_optional_text(record["dflt_value"]),
            )
            for record in records
        ]
        self.logger.debug(f"Table '{table_name}': {len(columns)} columns")
        return TableSchema(table_name=table_name, columns=columns)
