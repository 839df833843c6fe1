"""
Database module - uniform access to PostgreSQL, MySQL and SQLite.

This module handles:
- The DbClient contract and its three backends
- Native-type-to-canonical-value coercion
- Schema description
- The session's single-slot connection registry
- Statement classification
"""
from typing import Dict, Type

from sqlpane.database.client import DEFAULT_POOL_SIZE, DbClient, Transaction
from sqlpane.database.connection_manager import ConnectionRegistry
from sqlpane.database.mysql import MySqlClient
from sqlpane.database.postgres import PostgresClient
from sqlpane.database.schema import ColumnSchema, TableSchema
from sqlpane.database.sqlite import SqliteClient
from sqlpane.database.validator import is_blank, is_select
from sqlpane.database.values import CanonicalValue, OrderedObject, to_display_text

# The closed set of supported backends
BACKENDS: Dict[str, Type[DbClient]] = {
    "postgres": PostgresClient,
    "mysql": MySqlClient,
    "sqlite": SqliteClient,
}

__all__ = [
    "BACKENDS",
    "DEFAULT_POOL_SIZE",
    "DbClient",
    "Transaction",
    "ConnectionRegistry",
    "PostgresClient",
    "MySqlClient",
    "SqliteClient",
    "ColumnSchema",
    "TableSchema",
    "is_blank",
    "is_select",
    "CanonicalValue",
    "OrderedObject",
    "to_display_text",
]
