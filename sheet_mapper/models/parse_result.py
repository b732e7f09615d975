from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from .error_record import ErrorRecord

"""Parse outcome models.

``ParseReport`` carries everything one ``parse_report`` call observed;
``parse`` only hands back ``report.records``.
"""

__all__ = [
    "ParseStatus",
    "ParseReport",
]


class ParseStatus(Enum):
    """Outcome of a single parse.

    - SUCCESS: sheet found, records produced (possibly zero)
    - SHEET_NOT_FOUND: workbook opened but the named sheet is absent
    - FAILED: a data-path error aborted the parse
    """
    SUCCESS = "success"
    SHEET_NOT_FOUND = "sheet_not_found"
    FAILED = "failed"


@dataclass
class ParseReport:
    """Result and diagnostics of one parse invocation."""
    file: str
    sheet: str
    status: ParseStatus
    records: list[Any] | None
    start_time: datetime
    end_time: datetime
    errors: list[ErrorRecord] = field(default_factory=list)
    skipped_rows: int = 0  # rows dropped under on_row_error=skip_row
    skipped_cells: int = 0  # cells left at default under on_row_error=skip_cell

    @property
    def elapsed_seconds(self) -> float:
        return (self.end_time - self.start_time).total_seconds()

    @property
    def row_count(self) -> int:
        return len(self.records) if self.records is not None else 0

    @property
    def ok(self) -> bool:
        return self.status is ParseStatus.SUCCESS
