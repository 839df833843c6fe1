"""
SQLite type categories.

SQLite is dynamically typed: the cursor description carries no type code,
and a column may hold values of different storage classes. Result cells are
therefore categorized by their own value (sqlite_column_type_for_value),
while declared column types (PRAGMA table_info) follow SQLite's affinity
rules in from_type_name.
"""
from typing import Any, Dict

from sqlpane.database.types.base import (
    ColumnTypeBase,
    Decoder,
    decode_best_effort_text,
    decode_binary,
    decode_float,
    decode_text,
    integer_decoder,
    normalize_type_name,
)


class SqliteColumnType(ColumnTypeBase):
    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"
    BLOB = "BLOB"
    NUMERIC = "NUMERIC"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_type_name(cls, type_name: str) -> "SqliteColumnType":
        """
        Determine the affinity of a declared column type.

        Rules are applied in order: INT -> INTEGER; CHAR, CLOB or TEXT ->
        TEXT; BLOB or no type -> BLOB; REAL, FLOA or DOUB -> REAL;
        anything else -> NUMERIC.
        """
        name = normalize_type_name(type_name)
        if "INT" in name:
            return cls.INTEGER
        if any(word in name for word in ("CHAR", "CLOB", "TEXT")):
            return cls.TEXT
        if "BLOB" in name or not name:
            return cls.BLOB
        if any(word in name for word in ("REAL", "FLOA", "DOUB")):
            return cls.REAL
        return cls.NUMERIC

    @classmethod
    def _type_names(cls) -> Dict[str, "SqliteColumnType"]:
        return {member.value: member for member in cls}

    @classmethod
    def _decoders(cls) -> Dict["SqliteColumnType", Decoder]:
        return _DECODERS


def decode_numeric(raw: Any) -> Any:
    # NUMERIC affinity stores integers, reals or text, whichever fits
    if isinstance(raw, int) and not isinstance(raw, bool):
        return _DECODERS[SqliteColumnType.INTEGER](raw)
    if isinstance(raw, float):
        return decode_float(raw)
    return decode_best_effort_text(raw)


_DECODERS = {
    SqliteColumnType.INTEGER: integer_decoder(64),
    SqliteColumnType.REAL: decode_float,
    SqliteColumnType.TEXT: decode_text,
    SqliteColumnType.BLOB: decode_binary,
    SqliteColumnType.NUMERIC: decode_numeric,
    SqliteColumnType.UNKNOWN: decode_best_effort_text,
}


def sqlite_column_type_for_value(raw: Any) -> SqliteColumnType:
    """Storage class of a single value."""
    if isinstance(raw, bool) or isinstance(raw, int):
        return SqliteColumnType.INTEGER
    if isinstance(raw, float):
        return SqliteColumnType.REAL
    if isinstance(raw, str):
        return SqliteColumnType.TEXT
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return SqliteColumnType.BLOB
    return SqliteColumnType.UNKNOWN
