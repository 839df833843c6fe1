"""
PostgreSQL type categories.

asyncpg reports a column's type in the cursor description as the type OID;
postgres_type_name() turns that into the catalog name (int4, timestamptz...)
before it is matched against the category table.
"""
from typing import Any, Dict

from sqlpane.database.types.base import (
    ColumnTypeBase,
    Decoder,
    decode_array,
    decode_best_effort_text,
    decode_binary,
    decode_bool,
    decode_decimal_text,
    decode_float,
    decode_interval,
    decode_json,
    decode_temporal,
    decode_text,
    decode_uuid,
    integer_decoder,
)


class PostgresColumnType(ColumnTypeBase):
    SMALLINT = "SMALLINT"
    INTEGER = "INTEGER"
    BIGINT = "BIGINT"
    DECIMAL = "DECIMAL"
    REAL = "REAL"
    DOUBLE_PRECISION = "DOUBLE PRECISION"
    SERIAL = "SERIAL"
    BIGSERIAL = "BIGSERIAL"
    CHAR = "CHAR"
    VARCHAR = "VARCHAR"
    TEXT = "TEXT"
    BYTEA = "BYTEA"
    DATE = "DATE"
    TIME = "TIME"
    TIMESTAMP = "TIMESTAMP"
    TIMESTAMPTZ = "TIMESTAMPTZ"
    INTERVAL = "INTERVAL"
    BOOLEAN = "BOOLEAN"
    UUID = "UUID"
    JSON = "JSON"
    JSONB = "JSONB"
    ARRAY = "ARRAY"
    INET = "INET"
    CIDR = "CIDR"
    MACADDR = "MACADDR"
    POINT = "POINT"
    LINE = "LINE"
    CIRCLE = "CIRCLE"
    BOX = "BOX"
    MONEY = "MONEY"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _lookup(cls, name: str) -> "PostgresColumnType":
        # _int4 is the catalog name of int4[]
        if name.startswith("_") or name.endswith("[]"):
            return cls.ARRAY
        return _TYPE_NAMES.get(name, cls.UNKNOWN)

    @classmethod
    def _type_names(cls) -> Dict[str, "PostgresColumnType"]:
        return _TYPE_NAMES

    @classmethod
    def _decoders(cls) -> Dict["PostgresColumnType", Decoder]:
        return _DECODERS


_TYPE_NAMES = {
    "SMALLINT": PostgresColumnType.SMALLINT,
    "INT2": PostgresColumnType.SMALLINT,
    "INTEGER": PostgresColumnType.INTEGER,
    "INT": PostgresColumnType.INTEGER,
    "INT4": PostgresColumnType.INTEGER,
    "BIGINT": PostgresColumnType.BIGINT,
    "INT8": PostgresColumnType.BIGINT,
    "OID": PostgresColumnType.BIGINT,
    "DECIMAL": PostgresColumnType.DECIMAL,
    "NUMERIC": PostgresColumnType.DECIMAL,
    "REAL": PostgresColumnType.REAL,
    "FLOAT4": PostgresColumnType.REAL,
    "DOUBLE PRECISION": PostgresColumnType.DOUBLE_PRECISION,
    "FLOAT8": PostgresColumnType.DOUBLE_PRECISION,
    "SERIAL": PostgresColumnType.SERIAL,
    "SERIAL4": PostgresColumnType.SERIAL,
    "BIGSERIAL": PostgresColumnType.BIGSERIAL,
    "SERIAL8": PostgresColumnType.BIGSERIAL,
    "CHAR": PostgresColumnType.CHAR,
    "CHARACTER": PostgresColumnType.CHAR,
    "BPCHAR": PostgresColumnType.CHAR,
    "VARCHAR": PostgresColumnType.VARCHAR,
    "CHARACTER VARYING": PostgresColumnType.VARCHAR,
    "TEXT": PostgresColumnType.TEXT,
    "NAME": PostgresColumnType.TEXT,
    "BYTEA": PostgresColumnType.BYTEA,
    "DATE": PostgresColumnType.DATE,
    "TIME": PostgresColumnType.TIME,
    "TIME WITHOUT TIME ZONE": PostgresColumnType.TIME,
    "TIMETZ": PostgresColumnType.TIME,
    "TIME WITH TIME ZONE": PostgresColumnType.TIME,
    "TIMESTAMP": PostgresColumnType.TIMESTAMP,
    "TIMESTAMP WITHOUT TIME ZONE": PostgresColumnType.TIMESTAMP,
    "TIMESTAMPTZ": PostgresColumnType.TIMESTAMPTZ,
    "TIMESTAMP WITH TIME ZONE": PostgresColumnType.TIMESTAMPTZ,
    "INTERVAL": PostgresColumnType.INTERVAL,
    "BOOLEAN": PostgresColumnType.BOOLEAN,
    "BOOL": PostgresColumnType.BOOLEAN,
    "UUID": PostgresColumnType.UUID,
    "JSON": PostgresColumnType.JSON,
    "JSONB": PostgresColumnType.JSONB,
    "ARRAY": PostgresColumnType.ARRAY,
    "INET": PostgresColumnType.INET,
    "CIDR": PostgresColumnType.CIDR,
    "MACADDR": PostgresColumnType.MACADDR,
    "MACADDR8": PostgresColumnType.MACADDR,
    "POINT": PostgresColumnType.POINT,
    "LINE": PostgresColumnType.LINE,
    "CIRCLE": PostgresColumnType.CIRCLE,
    "BOX": PostgresColumnType.BOX,
    "MONEY": PostgresColumnType.MONEY,
}

_DECODERS = {
    PostgresColumnType.SMALLINT: integer_decoder(16),
    PostgresColumnType.INTEGER: integer_decoder(32),
    PostgresColumnType.SERIAL: integer_decoder(32),
    PostgresColumnType.BIGINT: integer_decoder(64),
    PostgresColumnType.BIGSERIAL: integer_decoder(64),
    PostgresColumnType.DECIMAL: decode_decimal_text,
    PostgresColumnType.REAL: decode_float,
    PostgresColumnType.DOUBLE_PRECISION: decode_float,
    PostgresColumnType.CHAR: decode_text,
    PostgresColumnType.VARCHAR: decode_text,
    PostgresColumnType.TEXT: decode_text,
    PostgresColumnType.BYTEA: decode_binary,
    PostgresColumnType.DATE: decode_temporal,
    PostgresColumnType.TIME: decode_temporal,
    PostgresColumnType.TIMESTAMP: decode_temporal,
    PostgresColumnType.TIMESTAMPTZ: decode_temporal,
    PostgresColumnType.INTERVAL: decode_interval,
    PostgresColumnType.BOOLEAN: decode_bool,
    PostgresColumnType.UUID: decode_uuid,
    PostgresColumnType.JSON: decode_json,
    PostgresColumnType.JSONB: decode_json,
    PostgresColumnType.ARRAY: decode_array,
    PostgresColumnType.UNKNOWN: decode_best_effort_text,
}


# pg_type OIDs of the builtin types; arrays map to the pseudo-name ARRAY
TYPE_NAMES_BY_OID = {
    16: "BOOL",
    17: "BYTEA",
    19: "NAME",
    20: "INT8",
    21: "INT2",
    23: "INT4",
    25: "TEXT",
    26: "OID",
    114: "JSON",
    600: "POINT",
    603: "BOX",
    628: "LINE",
    650: "CIDR",
    700: "FLOAT4",
    701: "FLOAT8",
    718: "CIRCLE",
    774: "MACADDR8",
    790: "MONEY",
    829: "MACADDR",
    869: "INET",
    1042: "BPCHAR",
    1043: "VARCHAR",
    1082: "DATE",
    1083: "TIME",
    1114: "TIMESTAMP",
    1184: "TIMESTAMPTZ",
    1186: "INTERVAL",
    1266: "TIMETZ",
    1700: "NUMERIC",
    2950: "UUID",
    3802: "JSONB",
    # array types
    199: "ARRAY",
    1000: "ARRAY",
    1005: "ARRAY",
    1007: "ARRAY",
    1009: "ARRAY",
    1015: "ARRAY",
    1016: "ARRAY",
    1021: "ARRAY",
    1022: "ARRAY",
    1115: "ARRAY",
    1182: "ARRAY",
    1185: "ARRAY",
    1231: "ARRAY",
    2951: "ARRAY",
    3807: "ARRAY",
}


def postgres_type_name(type_code: Any) -> str:
    """
    Resolve the type_code of a cursor description entry to a type name.

    Args:
        type_code: An OID, an asyncpg Type record (has .name) or a name

    Returns:
        Type name, "UNKNOWN" when the code is not recognized
    """
    if isinstance(type_code, int):
        return TYPE_NAMES_BY_OID.get(type_code, "UNKNOWN")
    if isinstance(type_code, str):
        return type_code
    name = getattr(type_code, "name", None)
    if isinstance(name, str):
        return name
    oid = getattr(type_code, "oid", None)
    if isinstance(oid, int):
        return TYPE_NAMES_BY_OID.get(oid, "UNKNOWN")
    return "UNKNOWN"


def postgres_column_type(type_code: Any) -> PostgresColumnType:
    return PostgresColumnType.from_type_name(postgres_type_name(type_code))
