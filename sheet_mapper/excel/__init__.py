"""Workbook access layer (openpyxl / xlrd adapters behind one interface)."""

from .cell import Cell, CellKind
from .workbook import Sheet, Workbook, open_workbook

__all__ = [
    "Cell",
    "CellKind",
    "Sheet",
    "Workbook",
    "open_workbook",
]
