from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Protocol

from ..errors import WorkbookError
from .cell import Cell
from .xls import XlsWorkbook
from .xlsx import XlsxWorkbook

"""Abstract workbook capability and decoder selection.

The engine only talks to ``Workbook`` / ``Sheet``; ``open_workbook`` picks the
concrete adapter by file extension (".xlsx" -> openpyxl, anything else ->
xlrd) and guarantees the file handle is released on every exit path.
"""

__all__ = [
    "Sheet",
    "Workbook",
    "is_xlsx_path",
    "open_workbook",
]

XLSX_SUFFIX = ".xlsx"


class Sheet(Protocol):
    @property
    def name(self) -> str: ...

    @property
    def last_row_index(self) -> int:
        """Zero-based index of the last row, -1 for an empty sheet."""
        ...

    def row(self, index: int) -> list[Cell]:
        """Populated cells of the zero-based row ``index`` in column order.

        Rows that do not exist return an empty list.
        """
        ...


class Workbook(Protocol):
    @property
    def sheet_names(self) -> list[str]: ...

    def get_sheet(self, name: str) -> Sheet | None: ...

    def close(self) -> None: ...


def is_xlsx_path(path: Path) -> bool:
    """Extension sniffing only; the file content is never inspected."""
    return path.suffix.lower() == XLSX_SUFFIX


@contextmanager
def open_workbook(path: Path | str) -> Iterator[Workbook]:
    """Open ``path`` with the decoder matching its extension.

    Raises:
        WorkbookError: file cannot be opened or is not a valid container
    """
    path = Path(path)
    try:
        handle = path.open("rb")
    except OSError as e:
        raise WorkbookError(f"cannot open workbook {path}: {e}") from e

    try:
        try:
            if is_xlsx_path(path):
                workbook: Workbook = XlsxWorkbook.load(handle)
            else:
                workbook = XlsWorkbook.load(handle)
        except WorkbookError:
            raise
        except Exception as e:
            raise WorkbookError(f"cannot decode workbook {path}: {e}") from e

        try:
            yield workbook
        finally:
            workbook.close()
    finally:
        handle.close()
