"""
MySQL backend (aiomysql driver, PyMySQL protocol).
"""
from typing import Any, List

from sqlpane.database.client import SqlAlchemyClient, as_optional_text
from sqlpane.database.schema import ColumnSchema, TableSchema
from sqlpane.database.types import MySqlColumnType, mysql_column_type


class MySqlClient(SqlAlchemyClient):
    """Client for MySQL and MariaDB servers."""

    backend_name = "MySQL"

    @classmethod
    def to_sqlalchemy_url(cls, url: str) -> str:
        if url.startswith("mysql://"):
            return "mysql+aiomysql://" + url[len("mysql://"):]
        if url.startswith("mysql+aiomysql://"):
            return url
        raise ValueError(f"Not a MySQL URL: {url.split('://')[0]}://...")

    def column_type(self, type_code: Any) -> MySqlColumnType:
        return mysql_column_type(type_code)

    async def list_databases(self) -> List[str]:
        return await self._first_column("SHOW DATABASES")

    async def list_tables(self) -> List[str]:
        return await self._first_column("SHOW TABLES")

    async def describe_table(self, table_name: str) -> TableSchema:
        # table_name is interpolated as-is
        records = await self._records(f"DESCRIBE {table_name}")
        columns = [
            ColumnSchema(
                name=as_optional_text(record["Field"]),
                data_type=as_optional_text(record["Type"]),
                is_nullable=as_optional_text(record["Null"]) == "YES",
                default=as_optional_text(record["Default"]),
            )
            for record in records
        ]
        self.logger.debug(f"Table '{table_name}': {len(columns)} columns")
        return TableSchema(table_name=table_name, columns=columns)
