"""sheet_mapper: map spreadsheet rows onto dataclass records by header name.

    from dataclasses import dataclass
    from sheet_mapper import header, parse

    @dataclass
    class Contact:
        name: str = header("Name", default="")
        phone: str = header("Phone", default="")
        category: int = header("Category ID", default=0)

    contacts = parse(Contact, "contacts.xlsx", sheet_name="Contacts")
"""

from .config.loader import DEFAULT_DATE_FORMAT, LEGACY_DATE_FORMAT, ParseOptions, load_options
from .errors import (
    AccessError,
    CoercionError,
    ConfigurationError,
    InitializationError,
    SheetMapperError,
    WorkbookError,
)
from .mapping.correspondence import build_header_map, header
from .models import (
    Byte,
    ErrorRecord,
    FieldDescriptor,
    FieldType,
    Float32,
    Long,
    ParseReport,
    ParseStatus,
    Short,
)
from .services.engine import parse, parse_report
from .services.export import records_to_frame

__version__ = "0.1.0"

__all__ = [
    # Core API
    "parse",
    "parse_report",
    "header",
    "build_header_map",
    "records_to_frame",
    # Options
    "DEFAULT_DATE_FORMAT",
    "LEGACY_DATE_FORMAT",
    "ParseOptions",
    "load_options",
    # Field types
    "Byte",
    "FieldDescriptor",
    "FieldType",
    "Float32",
    "Long",
    "Short",
    # Outcome
    "ErrorRecord",
    "ParseReport",
    "ParseStatus",
    # Errors
    "AccessError",
    "CoercionError",
    "ConfigurationError",
    "InitializationError",
    "SheetMapperError",
    "WorkbookError",
]
