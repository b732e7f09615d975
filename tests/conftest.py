# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from datetime import date, datetime
from pathlib import Path
from typing import Any

import pytest
import xlwt
from openpyxl import Workbook
from openpyxl.styles import Font

from sheet_mapper.excel.cell import Cell
from sheet_mapper.logging.init import reset_logging

# marker value: write an empty but formatted (styled) cell
BLANK = object()


@pytest.fixture(autouse=True)
def _clean_logging():
    # package logger back to propagating so caplog sees engine records
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


def _write_rows(ws: Any, rows: list[list[Any]]) -> None:
    for r, row in enumerate(rows, start=1):
        for c, value in enumerate(row, start=1):
            if value is None:
                continue
            cell = ws.cell(row=r, column=c)
            if value is BLANK:
                cell.font = Font(bold=True)
            else:
                cell.value = value


@pytest.fixture()
def make_xlsx(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing an .xlsx file: make_xlsx("a.xlsx", {"Sheet1": [[...], ...]})."""

    def _make(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        wb = Workbook()
        wb.remove(wb.active)
        for sheet_name, rows in sheets.items():
            _write_rows(wb.create_sheet(sheet_name), rows)
        path = tmp_path / name
        wb.save(path)
        return path

    return _make


@pytest.fixture()
def make_xls(tmp_path: Path) -> Callable[..., Path]:
    """Legacy .xls counterpart of make_xlsx, written with xlwt."""
    date_style = xlwt.easyxf(num_format_str="YYYY-MM-DD HH:MM:SS")
    bold_style = xlwt.easyxf("font: bold on")

    def _make(name: str, sheets: dict[str, list[list[Any]]]) -> Path:
        wb = xlwt.Workbook()
        for sheet_name, rows in sheets.items():
            ws = wb.add_sheet(sheet_name)
            for r, row in enumerate(rows):
                for c, value in enumerate(row):
                    if value is None:
                        continue
                    if value is BLANK:
                        ws.write(r, c, "", bold_style)  # xlwt stores "" as a BLANK record
                    elif isinstance(value, (datetime, date)):
                        ws.write(r, c, value, date_style)
                    else:
                        ws.write(r, c, value)
        path = tmp_path / name
        wb.save(str(path))
        return path

    return _make


class FakeSheet:
    """In-memory Sheet: rows is a list of Cell lists (None = missing row)."""

    def __init__(self, name: str, rows: list[list[Cell] | None]) -> None:
        self.name = name
        self._rows = rows
        self.requested: list[int] = []

    @property
    def last_row_index(self) -> int:
        return len(self._rows) - 1

    def row(self, index: int) -> list[Cell]:
        self.requested.append(index)
        if index < 0 or index >= len(self._rows):
            return []
        return list(self._rows[index] or [])


class FakeWorkbook:
    def __init__(self, sheets: dict[str, FakeSheet]) -> None:
        self._sheets = sheets
        self.closed = False

    @property
    def sheet_names(self) -> list[str]:
        return list(self._sheets)

    def get_sheet(self, name: str) -> FakeSheet | None:
        return self._sheets.get(name)

    def close(self) -> None:
        self.closed = True


@pytest.fixture()
def fake_workbook(monkeypatch) -> Callable[..., FakeWorkbook]:
    """Patch the engine's open_workbook to serve in-memory sheets."""
    from contextlib import contextmanager

    def _install(sheets: dict[str, list[list[Cell] | None]]) -> FakeWorkbook:
        workbook = FakeWorkbook({name: FakeSheet(name, rows) for name, rows in sheets.items()})

        @contextmanager
        def _open(path):
            try:
                yield workbook
            finally:
                workbook.close()

        monkeypatch.setattr("sheet_mapper.services.engine.open_workbook", _open)
        return workbook

    return _install


@pytest.fixture()
def blank() -> object:
    """Marker for make_xlsx rows: formatted cell without a value."""
    return BLANK
