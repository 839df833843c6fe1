"""
PostgreSQL backend (asyncpg driver).
"""
from typing import Any, List

from sqlpane.database.client import SqlAlchemyClient, as_optional_text
from sqlpane.database.schema import ColumnSchema, TableSchema
from sqlpane.database.types import PostgresColumnType, postgres_column_type


class PostgresClient(SqlAlchemyClient):
    """
    Client for PostgreSQL servers.

    Example:
        >>> client = await PostgresClient.connect("postgres://u:p@localhost:5432/shop")
        >>> await client.list_tables()
        ['orders', 'users']
    """

    backend_name = "PostgreSQL"

    @classmethod
    def to_sqlalchemy_url(cls, url: str) -> str:
        for scheme in ("postgres://", "postgresql://"):
            if url.startswith(scheme):
                return "postgresql+asyncpg://" + url[len(scheme):]
        if url.startswith("postgresql+asyncpg://"):
            return url
        raise ValueError(f"Not a PostgreSQL URL: {url.split('://')[0]}://...")

    def column_type(self, type_code: Any) -> PostgresColumnType:
        return postgres_column_type(type_code)

    async def list_databases(self) -> List[str]:
        return await self._first_column(
            "SELECT datname FROM pg_database WHERE datistemplate = false ORDER BY datname"
        )

    async def list_tables(self) -> List[str]:
        return await self._first_column(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = 'public' ORDER BY table_name"
        )

    async def describe_table(self, table_name: str) -> TableSchema:
        # table_name is interpolated as-is
        records = await self._records(
            "SELECT column_name, data_type, is_nullable, column_default "
            "FROM information_schema.columns "
            f"WHERE table_name = '{table_name}' ORDER BY ordinal_position"
        )
        columns = [
            ColumnSchema(
                name=as_optional_text(record["column_name"]),
                data_type=as_optional_text(record["data_type"]),
                is_nullable=as_optional_text(record["is_nullable"]) == "YES",
                default=as_optional_text(record["column_default"]),
            )
            for record in records
        ]
        self.logger.debug(f"Table '{table_name}': {len(columns)} columns")
        return TableSchema(table_name=table_name, columns=columns)
