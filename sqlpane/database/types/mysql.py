"""
MySQL type categories.

aiomysql reports a column's type as a protocol field type code (see
pymysql.constants.FIELD_TYPE). The wire protocol does not tell TEXT from
BLOB columns apart: both arrive with a BLOB code, so the blob decoders
return str values unchanged and base64-encode bytes.

Integer categories accept both the signed and the unsigned range of their
width, since the field type code does not carry the UNSIGNED flag.
"""
from typing import Any, Dict

from pymysql.constants import FIELD_TYPE

from sqlpane.core.exceptions import DecodeError
from sqlpane.database.types.base import (
    ColumnTypeBase,
    Decoder,
    decode_best_effort_text,
    decode_binary,
    decode_bool,
    decode_decimal_text,
    decode_float,
    decode_json,
    decode_temporal,
    decode_text,
    integer_decoder,
    normalize_type_name,
)


_MODIFIERS = {"UNSIGNED", "SIGNED", "ZEROFILL"}


class MySqlColumnType(ColumnTypeBase):
    TINYINT = "TINYINT"
    SMALLINT = "SMALLINT"
    MEDIUMINT = "MEDIUMINT"
    INT = "INT"
    BIGINT = "BIGINT"
    DECIMAL = "DECIMAL"
    FLOAT = "FLOAT"
    DOUBLE = "DOUBLE"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    TINYTEXT = "TINYTEXT"
    TEXT = "TEXT"
    MEDIUMTEXT = "MEDIUMTEXT"
    LONGTEXT = "LONGTEXT"
    DATE = "DATE"
    TIME = "TIME"
    YEAR = "YEAR"
    DATETIME = "DATETIME"
    TIMESTAMP = "TIMESTAMP"
    BINARY = "BINARY"
    VARBINARY = "VARBINARY"
    TINYBLOB = "TINYBLOB"
    BLOB = "BLOB"
    MEDIUMBLOB = "MEDIUMBLOB"
    LONGBLOB = "LONGBLOB"
    BIT = "BIT"
    JSON = "JSON"
    BOOLEAN = "BOOLEAN"
    ENUM = "ENUM"
    SET = "SET"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_type_name(cls, type_name: str) -> "MySqlColumnType":
        """Also accepts column definitions such as 'int(10) unsigned'."""
        words = [w for w in normalize_type_name(type_name).split() if w not in _MODIFIERS]
        return cls._lookup(" ".join(words))

    @classmethod
    def _type_names(cls) -> Dict[str, "MySqlColumnType"]:
        return _TYPE_NAMES

    @classmethod
    def _decoders(cls) -> Dict["MySqlColumnType", Decoder]:
        return _DECODERS


_TYPE_NAMES = {member.value: member for member in MySqlColumnType}
_TYPE_NAMES.update({
    "INTEGER": MySqlColumnType.INT,
    "BOOL": MySqlColumnType.BOOLEAN,
    "DEC": MySqlColumnType.DECIMAL,
    "NUMERIC": MySqlColumnType.DECIMAL,
    "REAL": MySqlColumnType.DOUBLE,
    "DOUBLE PRECISION": MySqlColumnType.DOUBLE,
})
del _TYPE_NAMES["UNKNOWN"]


def decode_blob_or_text(raw: Any) -> str:
    """TEXT columns share the BLOB field codes; str values are text already."""
    if isinstance(raw, str):
        return raw
    return decode_binary(raw)


def decode_bit(raw: Any) -> int:
    """BIT(n) arrives as big-endian bytes."""
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, (bytes, bytearray)):
        return int.from_bytes(bytes(raw), "big")
    raise DecodeError(f"unsupported BIT value {type(raw).__name__}")


def decode_year(raw: Any) -> int:
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw
    if isinstance(raw, (str, bytes)):
        try:
            return int(raw)
        except ValueError:
            raise DecodeError(f"{raw!r} is not a year") from None
    raise DecodeError(f"unsupported YEAR value {type(raw).__name__}")


def decode_boolean(raw: Any) -> bool:
    # BOOLEAN is TINYINT(1) and can hold any tinyint value
    if isinstance(raw, int) and not isinstance(raw, bool):
        return raw != 0
    return decode_bool(raw)


_DECODERS = {
    MySqlColumnType.TINYINT: integer_decoder(8, allow_unsigned=True),
    MySqlColumnType.SMALLINT: integer_decoder(16, allow_unsigned=True),
    MySqlColumnType.MEDIUMINT: integer_decoder(24, allow_unsigned=True),
    MySqlColumnType.INT: integer_decoder(32, allow_unsigned=True),
    MySqlColumnType.BIGINT: integer_decoder(64, allow_unsigned=True),
    MySqlColumnType.DECIMAL: decode_decimal_text,
    MySqlColumnType.FLOAT: decode_float,
    MySqlColumnType.DOUBLE: decode_float,
    # BINARY/VARBINARY share the CHAR/VARCHAR field codes
    MySqlColumnType.CHAR: decode_blob_or_text,
    MySqlColumnType.VARCHAR: decode_blob_or_text,
    MySqlColumnType.TINYTEXT: decode_text,
    MySqlColumnType.TEXT: decode_text,
    MySqlColumnType.MEDIUMTEXT: decode_text,
    MySqlColumnType.LONGTEXT: decode_text,
    MySqlColumnType.ENUM: decode_text,
    MySqlColumnType.SET: decode_text,
    MySqlColumnType.DATE: decode_temporal,
    MySqlColumnType.TIME: decode_temporal,
    MySqlColumnType.DATETIME: decode_temporal,
    MySqlColumnType.TIMESTAMP: decode_temporal,
    MySqlColumnType.YEAR: decode_year,
    MySqlColumnType.BINARY: decode_binary,
    MySqlColumnType.VARBINARY: decode_binary,
    MySqlColumnType.TINYBLOB: decode_blob_or_text,
    MySqlColumnType.BLOB: decode_blob_or_text,
    MySqlColumnType.MEDIUMBLOB: decode_blob_or_text,
    MySqlColumnType.LONGBLOB: decode_blob_or_text,
    MySqlColumnType.BIT: decode_bit,
    MySqlColumnType.JSON: decode_json,
    MySqlColumnType.BOOLEAN: decode_boolean,
    MySqlColumnType.UNKNOWN: decode_best_effort_text,
}


TYPE_NAMES_BY_FIELD_TYPE = {
    FIELD_TYPE.TINY: "TINYINT",
    FIELD_TYPE.SHORT: "SMALLINT",
    FIELD_TYPE.INT24: "MEDIUMINT",
    FIELD_TYPE.LONG: "INT",
    FIELD_TYPE.LONGLONG: "BIGINT",
    FIELD_TYPE.DECIMAL: "DECIMAL",
    FIELD_TYPE.NEWDECIMAL: "DECIMAL",
    FIELD_TYPE.FLOAT: "FLOAT",
    FIELD_TYPE.DOUBLE: "DOUBLE",
    FIELD_TYPE.STRING: "CHAR",
    FIELD_TYPE.VAR_STRING: "VARCHAR",
    FIELD_TYPE.VARCHAR: "VARCHAR",
    FIELD_TYPE.TINY_BLOB: "TINYBLOB",
    FIELD_TYPE.BLOB: "BLOB",
    FIELD_TYPE.MEDIUM_BLOB: "MEDIUMBLOB",
    FIELD_TYPE.LONG_BLOB: "LONGBLOB",
    FIELD_TYPE.DATE: "DATE",
    FIELD_TYPE.NEWDATE: "DATE",
    FIELD_TYPE.TIME: "TIME",
    FIELD_TYPE.YEAR: "YEAR",
    FIELD_TYPE.DATETIME: "DATETIME",
    FIELD_TYPE.TIMESTAMP: "TIMESTAMP",
    FIELD_TYPE.JSON: "JSON",
    FIELD_TYPE.ENUM: "ENUM",
    FIELD_TYPE.SET: "SET",
    FIELD_TYPE.BIT: "BIT",
}


def mysql_type_name(type_code: Any) -> str:
    if isinstance(type_code, int):
        return TYPE_NAMES_BY_FIELD_TYPE.get(type_code, "UNKNOWN")
    if isinstance(type_code, str):
        return type_code
    return "UNKNOWN"


def mysql_column_type(type_code: Any) -> MySqlColumnType:
    return MySqlColumnType.from_type_name(mysql_type_name(type_code))
