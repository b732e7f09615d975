from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from sheet_mapper.errors import WorkbookError
from sheet_mapper.excel.workbook import is_xlsx_path, open_workbook


@pytest.mark.parametrize(
    "name,expected",
    [("data.xlsx", True), ("DATA.XLSX", True), ("data.xls", False), ("data", False), ("data.xlsx.bak", False)],
)
def test_is_xlsx_path_by_extension_only(name, expected):
    assert is_xlsx_path(Path(name)) is expected


def test_missing_file_is_workbook_error(tmp_path: Path):
    with pytest.raises(WorkbookError, match="cannot open workbook"):
        with open_workbook(tmp_path / "nope.xlsx"):
            pass


@pytest.mark.parametrize("name", ["broken.xlsx", "broken.xls"])
def test_corrupt_container_is_workbook_error(tmp_path: Path, name: str):
    path = tmp_path / name
    path.write_bytes(b"definitely not a spreadsheet")
    with pytest.raises(WorkbookError, match="cannot decode workbook"):
        with open_workbook(path):
            pass


def test_decoder_selected_by_extension(tmp_path: Path):
    xlsx = tmp_path / "a.xlsx"
    xls = tmp_path / "a.xls"
    xlsx.write_bytes(b"")
    xls.write_bytes(b"")
    with patch("sheet_mapper.excel.workbook.XlsxWorkbook.load") as load_xlsx, \
         patch("sheet_mapper.excel.workbook.XlsWorkbook.load") as load_xls:
        with open_workbook(xlsx):
            pass
        with open_workbook(xls):
            pass
    assert load_xlsx.call_count == 1
    assert load_xls.call_count == 1


def test_handle_and_workbook_released_when_body_raises(tmp_path: Path):
    path = tmp_path / "a.xlsx"
    path.write_bytes(b"")
    handles = []
    fake_wb = MagicMock()

    def _load(handle):
        handles.append(handle)
        return fake_wb

    with patch("sheet_mapper.excel.workbook.XlsxWorkbook.load", side_effect=_load):
        with pytest.raises(RuntimeError):
            with open_workbook(path):
                raise RuntimeError("boom")

    assert handles[0].closed
    fake_wb.close.assert_called_once()


def test_handle_released_when_decoding_fails(tmp_path: Path):
    path = tmp_path / "a.xls"
    path.write_bytes(b"")
    handles = []

    def _load(handle):
        handles.append(handle)
        raise ValueError("bad container")

    with patch("sheet_mapper.excel.workbook.XlsWorkbook.load", side_effect=_load):
        with pytest.raises(WorkbookError):
            with open_workbook(path):
                pass

    assert handles[0].closed
