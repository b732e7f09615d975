from __future__ import annotations

"""Exception hierarchy for sheet_mapper.

ConfigurationError is the only one raised to callers of ``parse``; the
data-path errors (workbook, initialization, access, coercion) are caught by
the engine, logged and turned into a "no result" outcome.
"""

__all__ = [
    "SheetMapperError",
    "ConfigurationError",
    "WorkbookError",
    "InitializationError",
    "AccessError",
    "CoercionError",
]


class SheetMapperError(Exception):
    """Base exception for all sheet_mapper errors."""


class ConfigurationError(SheetMapperError):
    """Invalid parse options, options file or record type."""


class WorkbookError(SheetMapperError):
    """File missing, unreadable or not a valid workbook container."""


class InitializationError(SheetMapperError):
    """Record type cannot be constructed without arguments."""


class AccessError(SheetMapperError):
    """Field on a record cannot be written."""


class CoercionError(SheetMapperError):
    """Cell value cannot be converted to the destination field type."""

    def __init__(self, message: str, *, column: int | None = None, field: str | None = None) -> None:
        super().__init__(message)
        self.column = column
        self.field = field
