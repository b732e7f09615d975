from __future__ import annotations

import math
from datetime import datetime
from decimal import Decimal
from typing import Any

import numpy as np

from ..config.loader import DEFAULT_DATE_FORMAT
from ..errors import CoercionError
from ..excel.cell import Cell, CellKind
from ..models.field_descriptor import FieldDescriptor, FieldType

"""Cell value coercion.

Converts one ``Cell`` into the semantic type of its destination field.
Dispatch is on the cell kind first, then (for numbers) on ``FieldType``.

Numeric narrowing follows C-style casts: truncate toward zero, saturate to
the 32-bit range (NaN -> 0), then wrap to 16/8 bits for SHORT/BYTE.
"""

__all__ = [
    "coerce_cell",
    "render_number",
    "zero_value",
]

_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1
_INT64_MIN, _INT64_MAX = -(2**63), 2**63 - 1

_ZERO_VALUES: dict[FieldType, Any] = {
    FieldType.BOOLEAN: False,
    FieldType.SHORT: 0,
    FieldType.INT: 0,
    FieldType.LONG: 0,
    FieldType.BYTE: 0,
    FieldType.FLOAT: 0.0,
    FieldType.DOUBLE: 0.0,
    FieldType.STRING: "",
}


def zero_value(field_type: FieldType) -> Any:
    """Zero value assigned to blank cells under blank_policy="default"."""
    return _ZERO_VALUES.get(field_type)


def _saturate(value: float, low: int, high: int) -> int:
    if math.isnan(value):
        return 0
    if value >= high:
        return high
    if value <= low:
        return low
    return int(value)


def _narrow(value: int, dtype: type[np.integer]) -> int:
    # value is already inside int32; astype wraps to the smaller width
    return int(np.array(value, dtype=np.int32).astype(dtype))


def _to_float32(value: float) -> float:
    with np.errstate(over="ignore"):
        return float(np.float32(value))


def render_number(value: int | float) -> str:
    """Text form of a numeric cell without exponent notation.

    Integral values drop the fractional part ("42", "12300000000");
    other values use the shortest repr, re-rendered as fixed point when
    repr would use an exponent ("1.5e-07" -> "0.00000015").
    """
    if isinstance(value, int):
        return str(value)
    if math.isnan(value) or math.isinf(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _mismatch(cell: Cell, descriptor: FieldDescriptor) -> CoercionError:
    return CoercionError(
        f"cannot assign {cell.kind.value} cell (column {cell.column}) "
        f"to {descriptor.field_type.value} field '{descriptor.name}'",
        column=cell.column,
        field=descriptor.name,
    )


def _coerce_date(cell: Cell, descriptor: FieldDescriptor, date_format: str) -> Any:
    value: datetime = cell.value
    field_type = descriptor.field_type
    if field_type is FieldType.DATETIME:
        return value
    if field_type is FieldType.DATE:
        return value.date()
    if field_type.accepts_text:
        return value.strftime(date_format)
    raise _mismatch(cell, descriptor)


def _coerce_number(cell: Cell, descriptor: FieldDescriptor) -> Any:
    value = cell.value
    field_type = descriptor.field_type
    if field_type is FieldType.INT:
        return _saturate(value, _INT32_MIN, _INT32_MAX)
    if field_type is FieldType.SHORT:
        return _narrow(_saturate(value, _INT32_MIN, _INT32_MAX), np.int16)
    if field_type is FieldType.BYTE:
        return _narrow(_saturate(value, _INT32_MIN, _INT32_MAX), np.int8)
    if field_type is FieldType.LONG:
        return _saturate(value, _INT64_MIN, _INT64_MAX)
    if field_type is FieldType.FLOAT:
        return _to_float32(value)
    if field_type is FieldType.STRING:
        return render_number(value)
    if field_type is FieldType.DECIMAL:
        return Decimal(value) if isinstance(value, int) else Decimal(repr(float(value)))
    if field_type in (FieldType.DOUBLE, FieldType.ANY):
        return float(value)
    raise _mismatch(cell, descriptor)


def coerce_cell(
    cell: Cell,
    descriptor: FieldDescriptor,
    *,
    date_format: str = DEFAULT_DATE_FORMAT,
    blank_policy: str = "empty_string",
) -> Any:
    """Convert ``cell`` to the value assigned to ``descriptor``'s field.

    Args:
        cell: populated cell from the sheet
        descriptor: destination field
        date_format: strftime pattern used when a date cell lands in a text field
        blank_policy: "empty_string" (blank -> "" for every field type) or
            "default" (blank -> zero value of the field type)

    Raises:
        CoercionError: the cell kind cannot be stored in the field type
    """
    kind = cell.kind
    field_type = descriptor.field_type

    if kind is CellKind.BLANK:
        if blank_policy == "default":
            return zero_value(field_type)
        return ""
    if kind is CellKind.BOOLEAN:
        if field_type in (FieldType.BOOLEAN, FieldType.ANY):
            return bool(cell.value)
        raise _mismatch(cell, descriptor)
    if kind is CellKind.ERROR:
        code = _narrow(int(cell.error_code or 0), np.int8)
        if field_type.is_integer or field_type is FieldType.ANY:
            return code
        if field_type in (FieldType.FLOAT, FieldType.DOUBLE):
            return float(code)
        raise _mismatch(cell, descriptor)
    if kind is CellKind.FORMULA:
        if field_type.accepts_text:
            return cell.formula or ""
        raise _mismatch(cell, descriptor)
    if kind is CellKind.STRING:
        if field_type.accepts_text:
            return str(cell.value)
        raise _mismatch(cell, descriptor)
    if kind is CellKind.NUMERIC:
        if cell.is_date:
            return _coerce_date(cell, descriptor, date_format)
        return _coerce_number(cell, descriptor)
    raise _mismatch(cell, descriptor)  # pragma: no cover
