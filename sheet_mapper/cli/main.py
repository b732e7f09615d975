from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

from ..config.loader import BLANK_POLICIES, ROW_ERROR_POLICIES, ParseOptions, load_options
from ..errors import ConfigurationError, WorkbookError
from ..excel.workbook import open_workbook
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import log_summary, set_debug, setup_logging
from ..mapping.correspondence import build_header_map
from ..models.parse_result import ParseStatus
from ..services.engine import build_column_map, parse_report
from ..services.export import OUTPUT_FORMATS, render_records
from ..services.summary import render_summary_line

"""CLI entrypoint.

    python -m sheet_mapper.cli data.xlsx --record myapp.models:Contact --sheet Contacts

Flow:
- resolve the record type and build ParseOptions (options file + flags)
- parse the sheet, write records as JSON/CSV (stdout or --out)
- optionally flush per-row errors to a JSON Lines error log
- print the SUMMARY line; exit code reflects the parse status

Logs and SUMMARY go to stderr when the records are printed to stdout.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_SHEET_NOT_FOUND = 2

_EXIT_CODES = {
    ParseStatus.SUCCESS: EXIT_SUCCESS,
    ParseStatus.FAILED: EXIT_FATAL,
    ParseStatus.SHEET_NOT_FOUND: EXIT_SHEET_NOT_FOUND,
}

INSPECT_SAMPLE_ROWS = 3


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Map spreadsheet rows onto dataclass records")
    p.add_argument("file", help="Workbook path (.xlsx, anything else is read as legacy .xls)")
    p.add_argument("--record", required=True, help="Record dataclass as 'package.module:ClassName'")
    p.add_argument("--config", help="YAML options file")
    p.add_argument("--sheet", help="Sheet name (default: Sheet1)")
    p.add_argument("--start-row", type=int, help="1-based header row number (default: 1)")
    p.add_argument("--date-format", help="strftime pattern for dates bound to text fields")
    p.add_argument("--blank-policy", choices=BLANK_POLICIES)
    p.add_argument("--on-row-error", choices=ROW_ERROR_POLICIES)
    p.add_argument("--output", choices=OUTPUT_FORMATS, default="json", help="Record output format")
    p.add_argument("--out", help="Write records to this file instead of stdout")
    p.add_argument("--error-log", action="store_true", help="Write row errors to logs/errors-*.log")
    p.add_argument("--inspect", action="store_true", help="Print header mapping & first rows then exit")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    return p.parse_args(argv)


def _resolve_record_type(target: str) -> type:
    module_name, sep, class_name = target.partition(":")
    if not sep or not module_name or not class_name:
        raise ConfigurationError(f"record must look like 'module:ClassName', got {target!r}")
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(f"cannot import module {module_name!r}: {e}") from e
    try:
        return getattr(module, class_name)
    except AttributeError as e:
        raise ConfigurationError(f"{module_name!r} has no attribute {class_name!r}") from e


def _build_options(args: argparse.Namespace) -> ParseOptions:
    base = load_options(Path(args.config)) if args.config else ParseOptions()
    return base.merged(
        sheet_name=args.sheet,
        start_row=args.start_row,
        date_format=args.date_format,
        blank_policy=args.blank_policy,
        on_row_error=args.on_row_error,
    )


def _inspect(record_type: type, path: Path, options: ParseOptions) -> int:
    header_map = build_header_map(record_type)
    print(f"FILE: {path.name}")
    print(f"  headers: {{{', '.join(f'{h!r}: {d.name}' for h, d in header_map.items())}}}")
    try:
        with open_workbook(path) as workbook:
            sheet = workbook.get_sheet(options.sheet_name)
            if sheet is None:
                print(f"  sheet not found: {options.sheet_name} (available: {workbook.sheet_names})")
                return EXIT_SHEET_NOT_FOUND
            header_index = options.start_row - 1
            columns = build_column_map(sheet, header_index)
            print(f"  SHEET: {sheet.name} last_row={sheet.last_row_index + 1} columns={columns}")
            unmapped = sorted(set(columns.values()) - set(header_map))
            print(f"    unmapped_columns={unmapped}")
            stop = min(header_index + INSPECT_SAMPLE_ROWS, sheet.last_row_index)
            for index in range(header_index + 1, stop + 1):
                sample = {columns.get(c.column, f"#{c.column}"): c.text for c in sheet.row(index)}
                print(f"    row {index + 1}: {sample}")
    except WorkbookError as e:
        print(f"  read_error: {e}")
        return EXIT_FATAL
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    # None only: an explicit [] must not fall back to sys.argv (pytest args)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)

    # stdout carries the records unless they go to --out (or --inspect runs)
    records_on_stdout = not (args.out or args.inspect)
    logger = setup_logging(stream=sys.stderr if records_on_stdout else sys.stdout)

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        record_type = _resolve_record_type(args.record)
        options = _build_options(args)
        path = Path(args.file)
        if args.inspect:
            return _inspect(record_type, path, options)
        report = parse_report(record_type, path, options=options, progress=True)
    except ConfigurationError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    if args.error_log and report.errors:
        buffer = ErrorLogBuffer()
        buffer.extend(report.errors)
        log_path = buffer.flush()
        logger.info(f"error log written: {log_path}")

    if report.records is not None:
        out = Path(args.out) if args.out else None
        text = render_records(report.records, args.output, record_type=record_type, out=out)
        if text is not None:
            print(text)
        else:
            logger.info(f"records written: {out}")

    # log_summary adds the "SUMMARY " label itself
    log_summary(render_summary_line(report).removeprefix("SUMMARY "))
    return _EXIT_CODES[report.status]
