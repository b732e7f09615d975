from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

"""Decoder-neutral cell model.

Both workbook adapters (openpyxl for .xlsx, xlrd for .xls) translate their
native cells into ``Cell`` so the coercion layer never sees library types.
"""

__all__ = [
    "CellKind",
    "Cell",
    "ERROR_CODES",
    "ERROR_TEXTS",
]


class CellKind(Enum):
    """Value-kind discriminant of a populated cell."""
    BLANK = "blank"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    FORMULA = "formula"
    STRING = "string"
    ERROR = "error"


# Excel error codes (BIFF values, same table xlrd ships in biffh)
ERROR_CODES: dict[str, int] = {
    "#NULL!": 0x00,
    "#DIV/0!": 0x07,
    "#VALUE!": 0x0F,
    "#REF!": 0x17,
    "#NAME?": 0x1D,
    "#NUM!": 0x24,
    "#N/A": 0x2A,
}
ERROR_TEXTS: dict[int, str] = {code: text for text, code in ERROR_CODES.items()}


@dataclass(frozen=True)
class Cell:
    """One populated cell of a sheet row.

    Attributes:
        column: zero-based column position
        kind: value-kind discriminant
        value: native value (str / bool / int / float / datetime / None)
        is_date: numeric cell whose number format marks it as a date/time;
            ``value`` then already holds the decoded ``datetime``
        formula: formula text without leading '=' (FORMULA cells only)
        error_code: BIFF error code (ERROR cells only)
    """
    column: int
    kind: CellKind
    value: Any = None
    is_date: bool = False
    formula: str | None = None
    error_code: int | None = None

    @property
    def text(self) -> str:
        """Human readable rendering used for header cells and inspection."""
        if self.kind is CellKind.FORMULA:
            return self.formula or ""
        if self.kind is CellKind.ERROR:
            return ERROR_TEXTS.get(self.error_code or 0, "#ERR")
        if self.value is None:
            return ""
        if isinstance(self.value, float) and self.value.is_integer():
            return str(int(self.value))
        return str(self.value)
