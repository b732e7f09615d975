from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from unittest.mock import MagicMock, call

import pytest

from sheet_mapper.config.loader import ParseOptions
from sheet_mapper.errors import ConfigurationError, WorkbookError
from sheet_mapper.excel.cell import Cell, CellKind
from sheet_mapper.mapping.correspondence import header
from sheet_mapper.models.parse_result import ParseStatus
from sheet_mapper.services.engine import parse, parse_report

"""Mapping engine tests against in-memory sheets (see fake_workbook fixture)."""


@dataclass
class Person:
    name: str = header("Name", default="")
    age: int = header("Age", default=0)
    active: bool = header("Active", default=False)


@dataclass
class NoBindings:
    name: str = ""
    age: int = 0


@dataclass
class NeedsArgs:
    name: str = header("Name")


@dataclass(frozen=True)
class Frozen:
    name: str = header("Name", default="")


def s(column: int, value: str) -> Cell:
    return Cell(column=column, kind=CellKind.STRING, value=value)


def n(column: int, value: float) -> Cell:
    return Cell(column=column, kind=CellKind.NUMERIC, value=value)


def b(column: int, value: bool) -> Cell:
    return Cell(column=column, kind=CellKind.BOOLEAN, value=value)


HEADER = [s(0, "Name"), s(1, "Age"), s(2, "Active")]


def test_one_record_per_data_row_in_order(fake_workbook):
    fake_workbook({"Sheet1": [HEADER, [s(0, "Alice"), n(1, 30)], [s(0, "Bob"), n(1, 25.9), b(2, True)]]})
    people = parse(Person, "people.xlsx")
    assert people == [Person("Alice", 30, False), Person("Bob", 25, True)]


def test_blank_and_missing_rows_still_produce_records(fake_workbook):
    fake_workbook({"Sheet1": [HEADER, [], None, [s(0, "Carol")], []]})
    people = parse(Person, "people.xlsx")
    assert len(people) == 4
    assert people[0] == Person()
    assert people[1] == Person()
    assert people[2].name == "Carol"


def test_sheet_with_header_only_returns_empty_list(fake_workbook):
    fake_workbook({"Sheet1": [HEADER]})
    report = parse_report(Person, "people.xlsx")
    assert report.status is ParseStatus.SUCCESS
    assert report.records == []


def test_missing_sheet_is_none_not_error(fake_workbook, caplog):
    fake_workbook({"Other": [HEADER]})
    with caplog.at_level(logging.WARNING, logger="sheet_mapper"):
        report = parse_report(Person, "people.xlsx")
    assert report.status is ParseStatus.SHEET_NOT_FOUND
    assert report.records is None
    assert report.errors == []
    assert parse(Person, "people.xlsx") is None
    assert "sheet not found" in caplog.text


def test_sheet_name_and_start_row(fake_workbook):
    wb = fake_workbook({"Data": [[s(0, "Title")], [], HEADER, [s(0, "Dan"), n(1, 41)]]})
    people = parse(Person, "people.xlsx", sheet_name="Data", start_row=3)
    assert people == [Person("Dan", 41, False)]
    # header row read at start_row - 1, data from start_row onward
    assert wb.get_sheet("Data").requested == [2, 3]


def test_options_object_and_explicit_arguments_override(fake_workbook):
    fake_workbook({"Data": [[s(0, "x")], HEADER, [s(0, "Eve")]]})
    opts = ParseOptions(sheet_name="Wrong", start_row=1)
    assert parse(Person, "p.xlsx", sheet_name="Data", start_row=2, options=opts) == [Person("Eve")]


def test_unmapped_and_headerless_columns_are_skipped(fake_workbook):
    fake_workbook({"Sheet1": [[s(0, "Name"), s(1, "Unknown")], [s(0, "Fay"), s(1, "zzz"), n(5, 99)]]})
    assert parse(Person, "p.xlsx") == [Person("Fay")]


def test_type_without_bindings_gives_default_records(fake_workbook):
    fake_workbook({"Sheet1": [HEADER, [s(0, "Gus"), n(1, 3)], [s(0, "Hal")]]})
    assert parse(NoBindings, "p.xlsx") == [NoBindings(), NoBindings()]


def test_missing_header_row_maps_nothing(fake_workbook):
    fake_workbook({"Sheet1": [[s(0, "Ivy")]]})
    # header row 5 does not exist; no data rows after it either
    assert parse(Person, "p.xlsx", start_row=5) == []


@pytest.mark.parametrize("start_row", [0, -1])
def test_start_row_below_one_raises_before_io(fake_workbook, start_row):
    wb = fake_workbook({"Sheet1": [HEADER]})
    with pytest.raises(ConfigurationError):
        parse(Person, "p.xlsx", start_row=start_row)
    assert wb.closed is False  # never opened


def test_non_dataclass_target_raises_configuration_error(fake_workbook):
    fake_workbook({"Sheet1": [HEADER]})
    with pytest.raises(ConfigurationError):
        parse(dict, "p.xlsx")


def test_coercion_failure_aborts_whole_parse(fake_workbook, caplog):
    wb = fake_workbook({"Sheet1": [HEADER, [s(0, "Ok")], [b(1, True)], [s(0, "Never")]]})
    with caplog.at_level(logging.ERROR, logger="sheet_mapper"):
        report = parse_report(Person, "p.xlsx")
    assert report.status is ParseStatus.FAILED
    assert report.records is None
    assert len(report.errors) == 1
    error = report.errors[0]
    assert (error.row, error.error_type, error.sheet, error.file) == (3, "COERCION_ERROR", "Sheet1", "p.xlsx")
    assert "parse failed" in caplog.text
    assert wb.closed


def test_skip_row_policy_drops_bad_rows(fake_workbook):
    fake_workbook({"Sheet1": [HEADER, [s(0, "A")], [s(0, "B"), b(1, True)], [s(0, "C")]]})
    report = parse_report(Person, "p.xlsx", options=ParseOptions(on_row_error="skip_row"))
    assert report.status is ParseStatus.SUCCESS
    assert [p.name for p in report.records] == ["A", "C"]
    assert report.skipped_rows == 1
    assert [e.row for e in report.errors] == [3]


def test_skip_cell_policy_keeps_row_with_default(fake_workbook):
    fake_workbook({"Sheet1": [HEADER, [s(0, "B"), b(1, True), b(2, True)]]})
    report = parse_report(Person, "p.xlsx", options=ParseOptions(on_row_error="skip_cell"))
    assert report.records == [Person("B", 0, True)]
    assert report.skipped_cells == 1
    assert report.errors[0].error_type == "COERCION_ERROR"


def test_progress_postfix_reports_error_count(fake_workbook, monkeypatch):
    tracker = MagicMock()
    tracker_cls = MagicMock()
    tracker_cls.return_value.__enter__.return_value = tracker
    monkeypatch.setattr("sheet_mapper.services.engine.RowProgressTracker", tracker_cls)
    fake_workbook({"Sheet1": [HEADER, [s(0, "A"), b(1, True)], [s(0, "B")], [s(0, "C"), b(1, False)]]})

    parse_report(Person, "p.xlsx", options=ParseOptions(on_row_error="skip_row"))

    assert tracker.set_postfix.call_args_list == [call(errors=1), call(errors=2)]
    assert tracker.advance.call_count == 3


def test_uninstantiable_record_type_fails_even_with_skip_policy(fake_workbook):
    fake_workbook({"Sheet1": [[s(0, "Name")], [s(0, "x")]]})
    report = parse_report(NeedsArgs, "p.xlsx", options=ParseOptions(on_row_error="skip_row"))
    assert report.status is ParseStatus.FAILED
    assert report.errors[0].error_type == "INITIALIZATION_ERROR"


def test_frozen_record_is_access_error(fake_workbook):
    fake_workbook({"Sheet1": [[s(0, "Name")], [s(0, "x")]]})
    report = parse_report(Frozen, "p.xlsx")
    assert report.status is ParseStatus.FAILED
    assert report.errors[0].error_type == "ACCESS_ERROR"


def test_blank_policy_default(fake_workbook):
    blank = Cell(column=1, kind=CellKind.BLANK)
    fake_workbook({"Sheet1": [HEADER, [s(0, "Kim"), blank]]})
    assert parse(Person, "p.xlsx")[0].age == ""  # original behaviour kept by default
    opts = ParseOptions(blank_policy="default")
    assert parse(Person, "p.xlsx", options=opts)[0].age == 0


def test_date_format_is_per_call(fake_workbook):
    @dataclass
    class Event:
        when: str = header("When", default="")

    stamp = Cell(column=0, kind=CellKind.NUMERIC, value=datetime(2021, 6, 1, 18, 30, 0), is_date=True)
    fake_workbook({"Sheet1": [[s(0, "When")], [stamp]]})
    assert parse(Event, "e.xlsx")[0].when == "2021-06-01 18:30:00"
    custom = ParseOptions(date_format="%d/%m/%Y")
    assert parse(Event, "e.xlsx", options=custom)[0].when == "01/06/2021"
    assert parse(Event, "e.xlsx")[0].when == "2021-06-01 18:30:00"


def test_workbook_error_is_logged_and_swallowed(tmp_path: Path, caplog):
    with caplog.at_level(logging.ERROR, logger="sheet_mapper"):
        report = parse_report(Person, tmp_path / "missing.xlsx")
    assert report.status is ParseStatus.FAILED
    assert report.records is None
    assert report.errors[0].row == -1
    assert report.errors[0].error_type == "WORKBOOK_ERROR"
    assert "cannot open workbook" in caplog.text


def test_workbook_error_raised_mid_sheet(fake_workbook, monkeypatch):
    wb = fake_workbook({"Sheet1": [HEADER, [s(0, "A")]]})
    sheet = wb.get_sheet("Sheet1")

    def _broken(index):
        raise WorkbookError("cannot decode cell")

    monkeypatch.setattr(sheet, "row", _broken)
    assert parse(Person, "p.xlsx") is None
    assert wb.closed


def test_report_timing_and_success_log(fake_workbook, caplog):
    fake_workbook({"Sheet1": [HEADER, [s(0, "A")]]})
    with caplog.at_level(logging.INFO, logger="sheet_mapper"):
        report = parse_report(Person, "p.xlsx")
    assert report.ok
    assert report.row_count == 1
    assert report.elapsed_seconds >= 0
    assert "records=1" in caplog.text
