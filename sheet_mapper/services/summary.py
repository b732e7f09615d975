from __future__ import annotations

from ..models.parse_result import ParseReport

"""SUMMARY line rendering for one parse.

Format:
SUMMARY file={file} sheet={sheet} status={status} rows={rows}
skipped_rows={n} skipped_cells={n} errors={n} elapsed_sec={elapsed}
"""


def _format_seconds(seconds: float) -> str:
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        # avoid scientific notation for very small values
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(report: ParseReport) -> str:
    """Render the SUMMARY line for ``report``.

    Examples:
        >>> from datetime import datetime, timezone
        >>> from sheet_mapper.models.parse_result import ParseStatus
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> report = ParseReport(
        ...     file="data.xlsx", sheet="Sheet1", status=ParseStatus.SUCCESS,
        ...     records=[object()] * 3, start_time=start, end_time=end,
        ... )
        >>> render_summary_line(report)
        'SUMMARY file=data.xlsx sheet=Sheet1 status=success rows=3 skipped_rows=0 skipped_cells=0 errors=0 elapsed_sec=2'
    """
    return (
        f"SUMMARY file={report.file} "
        f"sheet={report.sheet} "
        f"status={report.status.value} "
        f"rows={report.row_count} "
        f"skipped_rows={report.skipped_rows} "
        f"skipped_cells={report.skipped_cells} "
        f"errors={len(report.errors)} "
        f"elapsed_sec={_format_seconds(report.elapsed_seconds)}"
    )
