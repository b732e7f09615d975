from __future__ import annotations

import datetime as _dt
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any, NewType

"""Field descriptor model: one record field bound to a header name.

The semantic type of a field is resolved once from its annotation into the
closed ``FieldType`` enum; coercion dispatches on that tag only.

Python has a single ``int`` and ``float``, so the narrower widths are spelled
with the NewType markers below::

    @dataclass
    class Item:
        qty: Short = header("Qty", default=0)
"""

__all__ = [
    "Short",
    "Long",
    "Byte",
    "Float32",
    "FieldType",
    "FieldDescriptor",
    "field_type_for",
]

Short = NewType("Short", int)
Long = NewType("Long", int)
Byte = NewType("Byte", int)
Float32 = NewType("Float32", float)


class FieldType(Enum):
    """Semantic type of a destination field."""
    BOOLEAN = "boolean"
    SHORT = "short"
    INT = "int"
    LONG = "long"
    BYTE = "byte"
    FLOAT = "float"
    DOUBLE = "double"
    STRING = "string"
    DATETIME = "datetime"
    DATE = "date"
    DECIMAL = "decimal"
    ANY = "any"

    @property
    def is_integer(self) -> bool:
        return self in _INTEGER_TYPES

    @property
    def accepts_text(self) -> bool:
        return self in (FieldType.STRING, FieldType.ANY)


_INTEGER_TYPES = frozenset({FieldType.SHORT, FieldType.INT, FieldType.LONG, FieldType.BYTE})

# NewType markers are checked before their base types (bool before int too)
_TYPE_TABLE: tuple[tuple[Any, FieldType], ...] = (
    (Short, FieldType.SHORT),
    (Long, FieldType.LONG),
    (Byte, FieldType.BYTE),
    (Float32, FieldType.FLOAT),
    (bool, FieldType.BOOLEAN),
    (int, FieldType.INT),
    (float, FieldType.DOUBLE),
    (str, FieldType.STRING),
    (_dt.datetime, FieldType.DATETIME),
    (_dt.date, FieldType.DATE),
    (Decimal, FieldType.DECIMAL),
)


def field_type_for(hint: Any) -> FieldType:
    """Map a resolved type hint to its FieldType (``Optional[X]`` -> X)."""
    args = getattr(hint, "__args__", None)
    if args and type(None) in args:
        remaining = [a for a in args if a is not type(None)]
        if len(remaining) == 1:
            hint = remaining[0]
    for candidate, field_type in _TYPE_TABLE:
        if hint is candidate:
            return field_type
    return FieldType.ANY


@dataclass(frozen=True)
class FieldDescriptor:
    """Immutable metadata for one header-bound record field."""
    name: str
    header: str
    field_type: FieldType

    def assign(self, record: object, value: Any) -> None:
        setattr(record, self.name, value)
