from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import IO, Any

from openpyxl import load_workbook
from openpyxl.cell.cell import MergedCell
from openpyxl.workbook.workbook import Workbook as OpenpyxlWorkbook
from openpyxl.worksheet.worksheet import Worksheet

from ..errors import WorkbookError
from .cell import ERROR_CODES, Cell, CellKind

"""openpyxl adapter for the modern zipped-XML container (.xlsx).

The workbook is loaded with ``data_only=False`` so formula cells keep their
formula text instead of the cached result.
"""

__all__ = [
    "XlsxSheet",
    "XlsxWorkbook",
    "convert_cell",
]

# Excel's 1900 date system epoch as used for time-only / duration values
_EXCEL_EPOCH = datetime(1899, 12, 30)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if isinstance(value, time):
        return datetime.combine(_EXCEL_EPOCH.date(), value)
    if isinstance(value, timedelta):
        return _EXCEL_EPOCH + value
    raise TypeError(f"not a date/time value: {value!r}")


def convert_cell(cell: Any) -> Cell | None:
    """Translate an openpyxl cell into a ``Cell``; None when not populated.

    A cell without value counts as populated (BLANK) only when it carries
    formatting, mirroring how physically stored blank cells behave.
    """
    if isinstance(cell, MergedCell):
        return None
    column = cell.column - 1
    value = cell.value
    if value is None:
        return Cell(column=column, kind=CellKind.BLANK) if cell.has_style else None

    data_type = cell.data_type
    if data_type == "f":
        text = getattr(value, "text", value)  # ArrayFormula keeps its text separately
        text = str(text or "")
        return Cell(column=column, kind=CellKind.FORMULA, value=text, formula=text.removeprefix("="))
    if data_type == "b" or isinstance(value, bool):
        return Cell(column=column, kind=CellKind.BOOLEAN, value=bool(value))
    if data_type == "e":
        code = ERROR_CODES.get(str(value), ERROR_CODES["#VALUE!"])
        return Cell(column=column, kind=CellKind.ERROR, value=str(value), error_code=code)
    if cell.is_date:
        return Cell(column=column, kind=CellKind.NUMERIC, value=_as_datetime(value), is_date=True)
    if isinstance(value, (int, float)):
        return Cell(column=column, kind=CellKind.NUMERIC, value=value)
    return Cell(column=column, kind=CellKind.STRING, value=str(value))


class XlsxSheet:
    def __init__(self, worksheet: Worksheet) -> None:
        self._ws = worksheet

    @property
    def name(self) -> str:
        return self._ws.title

    @property
    def last_row_index(self) -> int:
        ws = self._ws
        if ws.max_row == 1 and all(v is None for v in next(ws.iter_rows(max_row=1, values_only=True), ())):
            return -1
        return ws.max_row - 1

    def row(self, index: int) -> list[Cell]:
        number = index + 1  # openpyxl rows are 1-based
        if index < 0 or number > self._ws.max_row:
            return []
        cells: list[Cell] = []
        for raw in next(self._ws.iter_rows(min_row=number, max_row=number), ()):
            try:
                converted = convert_cell(raw)
            except TypeError as e:
                raise WorkbookError(f"cannot decode cell {raw.coordinate}: {e}") from e
            if converted is not None:
                cells.append(converted)
        return cells


class XlsxWorkbook:
    def __init__(self, workbook: OpenpyxlWorkbook) -> None:
        self._wb = workbook

    @classmethod
    def load(cls, handle: IO[bytes]) -> XlsxWorkbook:
        return cls(load_workbook(handle, data_only=False))

    @property
    def sheet_names(self) -> list[str]:
        return list(self._wb.sheetnames)

    def get_sheet(self, name: str) -> XlsxSheet | None:
        if name not in self._wb.sheetnames:
            return None
        return XlsxSheet(self._wb[name])

    def close(self) -> None:
        self._wb.close()
