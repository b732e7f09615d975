from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, TypeVar

from ..config.loader import ParseOptions
from ..errors import (
    AccessError,
    CoercionError,
    InitializationError,
    SheetMapperError,
    WorkbookError,
)
from ..excel.workbook import Sheet, open_workbook
from ..mapping.correspondence import build_header_map
from ..models.error_record import ErrorRecord
from ..models.field_descriptor import FieldDescriptor
from ..models.parse_result import ParseReport, ParseStatus
from .coercion import coerce_cell
from .progress import RowProgressTracker

"""Mapping engine: sheet rows -> records.

Flow of one parse:
1. Validate options and build the header correspondence (errors propagate)
2. Open the workbook (decoder chosen by extension) and locate the sheet
3. Read the header row into a column -> header correspondence
4. For every row after the header build one record and assign mapped cells
5. Release the workbook; log and swallow data-path errors into FAILED
"""

__all__ = [
    "build_column_map",
    "parse",
    "parse_report",
]

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Data-path errors; these never reach the caller of parse / parse_report
_DATA_PATH_ERRORS = (WorkbookError, InitializationError, AccessError, CoercionError)

_ERROR_TYPES: dict[type[SheetMapperError], str] = {
    WorkbookError: "WORKBOOK_ERROR",
    InitializationError: "INITIALIZATION_ERROR",
    AccessError: "ACCESS_ERROR",
    CoercionError: "COERCION_ERROR",
}


def build_column_map(sheet: Sheet, header_index: int) -> dict[int, str]:
    """Column position -> header text for every non-empty header cell."""
    columns: dict[int, str] = {}
    for cell in sheet.row(header_index):
        text = cell.text
        if text:
            columns[cell.column] = text
    return columns


def _new_record(record_type: type[T]) -> T:
    try:
        return record_type()
    except Exception as e:
        raise InitializationError(f"cannot instantiate {record_type.__name__}: {e}") from e


def _assign(descriptor: FieldDescriptor, record: Any, value: Any) -> None:
    try:
        descriptor.assign(record, value)
    except (AttributeError, TypeError) as e:  # FrozenInstanceError is an AttributeError
        raise AccessError(f"cannot write field '{descriptor.name}': {e}") from e


class _RowMapper:
    """Per-call mapping state (records, collected errors, current row)."""

    def __init__(
        self,
        record_type: type,
        header_map: dict[str, FieldDescriptor],
        options: ParseOptions,
        file_name: str,
        *,
        progress: bool = False,
    ) -> None:
        self.record_type = record_type
        self.header_map = header_map
        self.options = options
        self.file_name = file_name
        self.progress = progress
        self.records: list[Any] = []
        self.errors: list[ErrorRecord] = []
        self.skipped_rows = 0
        self.skipped_cells = 0
        self.current_row = -1  # 1-based row being mapped, -1 before the first row

    def record_error(self, error: SheetMapperError) -> None:
        self.errors.append(
            ErrorRecord.create(
                file=self.file_name,
                sheet=self.options.sheet_name,
                row=self.current_row,
                error_type=_ERROR_TYPES.get(type(error), "PARSE_ERROR"),
                message=str(error),
            )
        )

    def run(self, sheet: Sheet) -> list[Any]:
        header_index = self.options.start_row - 1
        columns = build_column_map(sheet, header_index)
        logger.debug(f"columns={columns} mapped_headers={sorted(self.header_map)}")

        first, last = header_index + 1, sheet.last_row_index
        total = max(last - first + 1, 0)
        with RowProgressTracker(total, description=sheet.name, requested=self.progress) as tracker:
            for index in range(first, last + 1):
                self.current_row = index + 1
                seen_errors = len(self.errors)
                record = self._map_row(sheet, index, columns)
                if record is not None:
                    self.records.append(record)
                if len(self.errors) != seen_errors:
                    tracker.set_postfix(errors=len(self.errors))
                tracker.advance()
        return self.records

    def _map_row(self, sheet: Sheet, index: int, columns: dict[int, str]) -> Any | None:
        """Build the record for row ``index``; None when the row is skipped."""
        record = _new_record(self.record_type)
        policy = self.options.on_row_error
        for cell in sheet.row(index):
            descriptor = self.header_map.get(columns.get(cell.column, ""))
            if descriptor is None:
                continue
            try:
                value = coerce_cell(
                    cell,
                    descriptor,
                    date_format=self.options.date_format,
                    blank_policy=self.options.blank_policy,
                )
                _assign(descriptor, record, value)
            except (CoercionError, AccessError) as e:
                if policy == "abort":
                    raise
                self.record_error(e)
                logger.warning(f"row {self.current_row}: {e}")
                if policy == "skip_row":
                    self.skipped_rows += 1
                    return None
                self.skipped_cells += 1
        return record


def parse_report(
    record_type: type[T],
    source_path: Path | str,
    sheet_name: str | None = None,
    start_row: int | None = None,
    *,
    options: ParseOptions | None = None,
    progress: bool = False,
) -> ParseReport:
    """Map the rows of one sheet onto ``record_type`` instances.

    ``sheet_name`` / ``start_row`` override the corresponding ``options``
    fields (defaults "Sheet1" and 1).

    Returns:
        ParseReport; ``records`` is None unless the status is SUCCESS

    Raises:
        ConfigurationError: invalid options or record type, raised before
            the file is opened
    """
    opts = (options or ParseOptions()).merged(sheet_name=sheet_name, start_row=start_row)
    header_map = build_header_map(record_type)
    path = Path(source_path)
    start_time = datetime.now(UTC)

    mapper = _RowMapper(record_type, header_map, opts, path.name, progress=progress)
    records: list[Any] | None = None
    try:
        with open_workbook(path) as workbook:
            sheet = workbook.get_sheet(opts.sheet_name)
            if sheet is None:
                logger.warning(
                    f"sheet not found: file={path.name} sheet={opts.sheet_name} "
                    f"available={workbook.sheet_names}"
                )
                status = ParseStatus.SHEET_NOT_FOUND
            else:
                records = mapper.run(sheet)
                status = ParseStatus.SUCCESS
    except _DATA_PATH_ERRORS as e:
        logger.error(
            f"parse failed: file={path.name} sheet={opts.sheet_name} row={mapper.current_row}: {e}",
            exc_info=True,
        )
        mapper.record_error(e)
        records = None
        status = ParseStatus.FAILED

    end_time = datetime.now(UTC)
    if status is ParseStatus.SUCCESS:
        logger.info(f"parsed file={path.name} sheet={opts.sheet_name} records={len(records or [])}")
    return ParseReport(
        file=path.name,
        sheet=opts.sheet_name,
        status=status,
        records=records,
        start_time=start_time,
        end_time=end_time,
        errors=mapper.errors,
        skipped_rows=mapper.skipped_rows,
        skipped_cells=mapper.skipped_cells,
    )


def parse(
    record_type: type[T],
    source_path: Path | str,
    sheet_name: str | None = None,
    start_row: int | None = None,
    *,
    options: ParseOptions | None = None,
) -> list[T] | None:
    """Records of the sheet in row order, or None.

    None means either the sheet does not exist or the parse failed (the
    reason is logged); use ``parse_report`` to tell the two apart.
    """
    return parse_report(record_type, source_path, sheet_name, start_row, options=options).records
