from __future__ import annotations

from typing import IO, Any

import xlrd
from xlrd.xldate import xldate_as_datetime

from ..errors import WorkbookError
from .cell import Cell, CellKind

"""xlrd adapter for the legacy binary container (.xls and anything not .xlsx).

xlrd does not expose formula text; formula cells arrive as their cached
result and are classified by that result's type.
"""

__all__ = [
    "XlsSheet",
    "XlsWorkbook",
    "convert_cell",
]


def convert_cell(raw: Any, column: int, datemode: int) -> Cell | None:
    """Translate an xlrd cell into a ``Cell``; None for XL_CELL_EMPTY."""
    ctype = raw.ctype
    if ctype == xlrd.XL_CELL_EMPTY:
        return None
    if ctype == xlrd.XL_CELL_BLANK:
        return Cell(column=column, kind=CellKind.BLANK)
    if ctype == xlrd.XL_CELL_TEXT:
        return Cell(column=column, kind=CellKind.STRING, value=raw.value)
    if ctype == xlrd.XL_CELL_NUMBER:
        return Cell(column=column, kind=CellKind.NUMERIC, value=raw.value)
    if ctype == xlrd.XL_CELL_DATE:
        return Cell(
            column=column,
            kind=CellKind.NUMERIC,
            value=xldate_as_datetime(raw.value, datemode),
            is_date=True,
        )
    if ctype == xlrd.XL_CELL_BOOLEAN:
        return Cell(column=column, kind=CellKind.BOOLEAN, value=bool(raw.value))
    if ctype == xlrd.XL_CELL_ERROR:
        return Cell(column=column, kind=CellKind.ERROR, value=raw.value, error_code=int(raw.value))
    raise ValueError(f"unknown xlrd cell type: {ctype}")


class XlsSheet:
    def __init__(self, sheet: Any, datemode: int) -> None:
        self._sheet = sheet
        self._datemode = datemode

    @property
    def name(self) -> str:
        return self._sheet.name

    @property
    def last_row_index(self) -> int:
        return self._sheet.nrows - 1

    def row(self, index: int) -> list[Cell]:
        if index < 0 or index >= self._sheet.nrows:
            return []
        cells: list[Cell] = []
        for column, raw in enumerate(self._sheet.row(index)):
            try:
                converted = convert_cell(raw, column, self._datemode)
            except ValueError as e:  # XLDateError is a ValueError
                raise WorkbookError(f"cannot decode cell row={index + 1} column={column}: {e}") from e
            if converted is not None:
                cells.append(converted)
        return cells


class XlsWorkbook:
    def __init__(self, book: Any) -> None:
        self._book = book

    @classmethod
    def load(cls, handle: IO[bytes]) -> XlsWorkbook:
        # formatting_info keeps formatted-but-empty cells as XL_CELL_BLANK
        return cls(xlrd.open_workbook(file_contents=handle.read(), formatting_info=True))

    @property
    def sheet_names(self) -> list[str]:
        return list(self._book.sheet_names())

    def get_sheet(self, name: str) -> XlsSheet | None:
        if name not in self._book.sheet_names():
            return None
        return XlsSheet(self._book.sheet_by_name(name), self._book.datemode)

    def close(self) -> None:
        self._book.release_resources()
