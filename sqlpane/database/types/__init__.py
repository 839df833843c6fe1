"""
Native type categories per backend and their canonical-value decoders.
"""
from sqlpane.database.types.base import ColumnTypeBase, to_canonical
from sqlpane.database.types.mysql import MySqlColumnType, mysql_column_type
from sqlpane.database.types.postgres import PostgresColumnType, postgres_column_type
from sqlpane.database.types.sqlite import SqliteColumnType, sqlite_column_type_for_value

__all__ = [
    "ColumnTypeBase",
    "to_canonical",
    "MySqlColumnType",
    "mysql_column_type",
    "PostgresColumnType",
    "postgres_column_type",
    "SqliteColumnType",
    "sqlite_column_type_for_value",
]
