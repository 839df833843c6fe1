"""
Shared decoders for native-type-to-canonical-value coercion.

Every decoder takes the Python value produced by the driver and returns a
canonical value, or raises DecodeError when the value does not fit the
category. Backends combine these into their own ColumnType enumerations,
since native type vocabularies differ (INT2/INT4/INT8 vs TINYINT/MEDIUMINT).

to_canonical() is the only entry point the clients use; it never raises.
"""
import base64
import datetime
import math
import re
import uuid
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict

from sqlpane.core.exceptions import DecodeError
from sqlpane.core.logging_config import get_logger
from sqlpane.database.values import (
    CanonicalValue,
    OrderedObject,
    from_json_structure,
    parse_json_text,
)

logger = get_logger(__name__)

Decoder = Callable[[Any], CanonicalValue]

_PARENTHESIZED = re.compile(r"\(.*?\)")


def normalize_type_name(type_name: str) -> str:
    """Uppercase, drop length/precision arguments and collapse whitespace."""
    name = _PARENTHESIZED.sub("", type_name or "").upper()
    return " ".join(name.split())


class ColumnTypeBase(Enum):
    """
    Base for the per-backend closed enumerations of native type categories.

    Subclasses provide _type_names() (normalized native name -> member) and
    _decoders() (member -> Decoder). Both tables live at module level next
    to the subclass, since any class attribute of an Enum becomes a member.
    """

    @classmethod
    def from_type_name(cls, type_name: str) -> "ColumnTypeBase":
        """Map a native type name onto a category; unmatched names are UNKNOWN."""
        return cls._lookup(normalize_type_name(type_name))

    @classmethod
    def _lookup(cls, name: str) -> "ColumnTypeBase":
        return cls._type_names().get(name, cls["UNKNOWN"])

    @classmethod
    def _type_names(cls) -> Dict[str, "ColumnTypeBase"]:
        raise NotImplementedError

    @classmethod
    def _decoders(cls) -> Dict["ColumnTypeBase", Decoder]:
        raise NotImplementedError

    def decode(self, raw: Any) -> CanonicalValue:
        """Decode a non-NULL driver value. Raises DecodeError on mismatch."""
        decoder = type(self)._decoders().get(self, decode_best_effort_text)
        return decoder(raw)


def to_canonical(column_type: ColumnTypeBase, raw: Any) -> CanonicalValue:
    """
    Decode a driver value into its canonical form. Never raises.

    Args:
        column_type: Category the column's native type maps to
        raw: Value as produced by the driver

    Returns:
        Canonical value, or None when the value is NULL or cannot be decoded
    """
    if raw is None:
        return None
    try:
        return column_type.decode(raw)
    except (DecodeError, TypeError, ValueError, ArithmeticError) as e:
        logger.debug(f"Could not decode {type(raw).__name__} as {column_type.name}: {e}")
        return None


# ============== Decoders ==============

def integer_decoder(bits: int, allow_unsigned: bool = False) -> Decoder:
    """
    Build a decoder for an integer category of the given width.

    allow_unsigned widens the upper bound to the unsigned range of the same
    width (MySQL's INT UNSIGNED and friends).
    """
    lower = -(1 << (bits - 1))
    upper = (1 << bits) - 1 if allow_unsigned else (1 << (bits - 1)) - 1

    def decode(raw: Any) -> int:
        if isinstance(raw, bool):
            value = int(raw)
        elif isinstance(raw, int):
            value = raw
        elif isinstance(raw, Decimal):
            if raw != raw.to_integral_value():
                raise DecodeError(f"{raw} is not an integer")
            value = int(raw)
        elif isinstance(raw, (str, bytes)):
            try:
                value = int(raw)
            except ValueError:
                raise DecodeError(f"{raw!r} is not an integer") from None
        else:
            raise DecodeError(f"unsupported integer value {type(raw).__name__}")
        if not lower <= value <= upper:
            raise DecodeError(f"{value} overflows a {bits}-bit integer")
        return value

    return decode


def decode_float(raw: Any) -> float:
    if isinstance(raw, bool):
        raise DecodeError("boolean is not a float")
    try:
        value = float(raw)
    except (TypeError, ValueError, OverflowError):
        raise DecodeError(f"{raw!r} is not a float") from None
    if not math.isfinite(value):
        raise DecodeError(f"{value} is not representable")
    return value


def decode_decimal_text(raw: Any) -> str:
    """Arbitrary-precision numbers travel as text to avoid float rounding."""
    if isinstance(raw, (Decimal, int)) and not isinstance(raw, bool):
        return str(raw)
    if isinstance(raw, float):
        if not math.isfinite(raw):
            raise DecodeError(f"{raw} is not representable")
        return repr(raw)
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bytes):
        return decode_text(raw)
    raise DecodeError(f"unsupported decimal value {type(raw).__name__}")


_TRUE_WORDS = {"t", "true", "y", "yes", "on", "1"}
_FALSE_WORDS = {"f", "false", "n", "no", "off", "0"}


def decode_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str):
        word = raw.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    raise DecodeError(f"{raw!r} is not a boolean")


def decode_binary(raw: Any) -> str:
    """Binary payloads are shown base64-encoded."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(raw)).decode("ascii")
    if isinstance(raw, str):
        return raw
    raise DecodeError(f"unsupported binary value {type(raw).__name__}")


def format_timedelta(value: datetime.timedelta) -> str:
    """[-]HH:MM:SS[.ffffff], hours may exceed 24 (MySQL TIME range)."""
    total_us = (value.days * 86400 + value.seconds) * 1_000_000 + value.microseconds
    sign = "-" if total_us < 0 else ""
    total_us = abs(total_us)
    seconds, micros = divmod(total_us, 1_000_000)
    minutes, seconds = divmod(seconds, 60)
    hours, minutes = divmod(minutes, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if micros:
        text += f".{micros:06d}"
    return text


def decode_temporal(raw: Any) -> str:
    """Dates and times use their natural text form (2024-01-31 08:00:00)."""
    if isinstance(raw, (datetime.datetime, datetime.date, datetime.time)):
        return str(raw)
    if isinstance(raw, datetime.timedelta):
        return format_timedelta(raw)
    if isinstance(raw, str):
        return raw
    if isinstance(raw, bytes):
        return decode_text(raw)
    raise DecodeError(f"unsupported temporal value {type(raw).__name__}")


def decode_interval(raw: Any) -> str:
    if isinstance(raw, datetime.timedelta):
        return str(raw)
    return decode_best_effort_text(raw)


def decode_json(raw: Any) -> CanonicalValue:
    """JSON documents are passed through structurally."""
    if isinstance(raw, (bytes, bytearray)):
        raw = decode_text(bytes(raw))
    if isinstance(raw, str):
        try:
            return parse_json_text(raw)
        except ValueError:
            raise DecodeError("malformed JSON document") from None
    if isinstance(raw, (dict, list, OrderedObject)):
        return from_json_structure(raw)
    if raw is None or isinstance(raw, (bool, int, float)):
        return from_json_structure(raw)
    raise DecodeError(f"unsupported JSON value {type(raw).__name__}")


def decode_uuid(raw: Any) -> str:
    if isinstance(raw, uuid.UUID):
        return str(raw)
    if isinstance(raw, str):
        try:
            return str(uuid.UUID(raw))
        except ValueError:
            raise DecodeError(f"{raw!r} is not a UUID") from None
    if isinstance(raw, bytes) and len(raw) == 16:
        return str(uuid.UUID(bytes=raw))
    raise DecodeError(f"unsupported UUID value {type(raw).__name__}")


def decode_text(raw: Any) -> str:
    if isinstance(raw, str):
        return raw
    if isinstance(raw, (bytes, bytearray, memoryview)):
        try:
            return bytes(raw).decode("utf-8")
        except UnicodeDecodeError:
            raise DecodeError("bytes are not valid UTF-8") from None
    raise DecodeError(f"{type(raw).__name__} is not text")


def decode_best_effort_text(raw: Any) -> str:
    """Fallback for UNKNOWN and exotic categories: any printable form."""
    if isinstance(raw, (bytes, bytearray, memoryview)):
        return decode_text(raw)
    return str(raw)


def decode_array(raw: Any) -> CanonicalValue:
    """Arrays keep their structure; elements without a JSON form become text."""
    if isinstance(raw, (list, tuple)):
        return [_array_element(item) for item in raw]
    return decode_best_effort_text(raw)


def _array_element(item: Any) -> CanonicalValue:
    if isinstance(item, (list, tuple)):
        return [_array_element(inner) for inner in item]
    if item is None or isinstance(item, (bool, int, str)):
        return item
    if isinstance(item, float):
        return item if math.isfinite(item) else None
    return decode_best_effort_text(item)
