"""
Canonical values - the backend-agnostic representation of a database cell.

A canonical value is one of:
- None (NULL)
- bool
- int / float (Number)
- str (Text)
- OrderedObject (a row, or a decoded JSON object)
- list (a decoded JSON array, passed through structurally)

Column order matters everywhere in this client, so rows and JSON objects are
kept as explicit sequences of (key, value) pairs instead of dicts.
"""
import json
import math
from typing import Any, Iterable, Iterator, List, Tuple, Union


CanonicalValue = Union[None, bool, int, float, str, "OrderedObject", list]

NULL_TEXT = "NULL"


class OrderedObject:
    """
    Immutable ordered association list with unique keys.

    Building from pairs with a repeated key keeps the first position and the
    last value (the way `SELECT a.id, b.id` collapses into one "id" column).

    Example:
        >>> row = OrderedObject([("name", "Alice"), ("email", "a@x.io")])
        >>> row.keys()
        ['name', 'email']
        >>> row["email"]
        'a@x.io'
    """

    __slots__ = ("_keys", "_values")

    def __init__(self, pairs: Iterable[Tuple[str, CanonicalValue]] = ()):
        keys: List[str] = []
        values: List[CanonicalValue] = []
        positions = {}
        for key, value in pairs:
            if key in positions:
                values[positions[key]] = value
                continue
            positions[key] = len(keys)
            keys.append(key)
            values.append(value)
        self._keys = tuple(keys)
        self._values = tuple(values)

    def keys(self) -> List[str]:
        return list(self._keys)

    def values(self) -> List[CanonicalValue]:
        return list(self._values)

    def items(self) -> List[Tuple[str, CanonicalValue]]:
        return list(zip(self._keys, self._values))

    def get(self, key: str, default: Any = None) -> Any:
        try:
            return self._values[self._keys.index(key)]
        except ValueError:
            return default

    def __getitem__(self, key: str) -> CanonicalValue:
        try:
            return self._values[self._keys.index(key)]
        except ValueError:
            raise KeyError(key) from None

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __iter__(self) -> Iterator[Tuple[str, CanonicalValue]]:
        return iter(zip(self._keys, self._values))

    def __len__(self) -> int:
        return len(self._keys)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedObject):
            return NotImplemented
        return self._keys == other._keys and self._values == other._values

    def __hash__(self) -> int:
        return hash((self._keys, tuple(repr(v) for v in self._values)))

    def __repr__(self) -> str:
        inner = ", ".join(f"{k!r}: {v!r}" for k, v in self)
        return f"OrderedObject({{{inner}}})"

    def to_json_compatible(self) -> dict:
        """Plain dict for json.dumps (insertion order matches column order)."""
        return {key: _json_compatible(value) for key, value in self}


def _json_compatible(value: CanonicalValue) -> Any:
    if isinstance(value, OrderedObject):
        return value.to_json_compatible()
    if isinstance(value, list):
        return [_json_compatible(item) for item in value]
    return value


def from_json_structure(value: Any) -> CanonicalValue:
    """
    Convert a parsed JSON document into canonical form.

    Objects become OrderedObject (key order kept), arrays stay lists,
    scalars pass through. Non-finite floats become None.
    """
    if isinstance(value, OrderedObject):
        return value
    if isinstance(value, dict):
        return OrderedObject((str(k), from_json_structure(v)) for k, v in value.items())
    if isinstance(value, list):
        return [from_json_structure(item) for item in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    return str(value)


def parse_json_text(text: str) -> CanonicalValue:
    """Parse JSON text keeping object key order. Raises ValueError on bad input."""
    return from_json_structure(json.loads(text, object_pairs_hook=_pairs_to_object))


def _pairs_to_object(pairs: List[Tuple[str, Any]]) -> OrderedObject:
    return OrderedObject((key, from_json_structure(value)) for key, value in pairs)


def to_display_text(value: CanonicalValue) -> str:
    """
    Stringify a canonical value for tabular display.

    NULL -> "NULL", text as-is, booleans as true/false, numbers in their
    shortest form, structured values as compact JSON.
    """
    if value is None:
        return NULL_TEXT
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, (OrderedObject, list)):
        return json.dumps(_json_compatible(value), separators=(",", ":"), ensure_ascii=False)
    return str(value)


def row_to_display(row: OrderedObject) -> List[str]:
    """Display strings for every cell of a decoded row, in column order."""
    return [to_display_text(value) for value in row.values()]
