from __future__ import annotations

import json
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..errors import ConfigurationError

"""Parse options and their YAML loader.

Responsibilities:
- ParseOptions: per-call configuration (no process-wide mutable state)
- Load an options YAML file and validate it against options_schema.json
- Reject header row numbers below 1 before any file is touched
"""

__all__ = [
    "BLANK_POLICIES",
    "DEFAULT_DATE_FORMAT",
    "DEFAULT_SHEET_NAME",
    "LEGACY_DATE_FORMAT",
    "ROW_ERROR_POLICIES",
    "ConfigurationError",
    "ParseOptions",
    "load_options",
]

SCHEMA_PATH = Path(__file__).parent / "options_schema.json"

DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# 12-hour clock without AM/PM marker; kept for output compatibility with
# existing consumers of the "yyyy-MM-dd hh:mm:ss" rendering
LEGACY_DATE_FORMAT = "%Y-%m-%d %I:%M:%S"

BLANK_POLICIES = ("empty_string", "default")
ROW_ERROR_POLICIES = ("abort", "skip_row", "skip_cell")


@dataclass(frozen=True)
class ParseOptions:
    """Configuration of a single parse invocation.

    Attributes:
        sheet_name: sheet to read
        start_row: 1-based header row number; data starts on the next row
        date_format: strftime pattern for date cells bound to text fields
        blank_policy: "empty_string" assigns "" for blank cells whatever the
            field type; "default" assigns the field type's zero value
        on_row_error: "abort" fails the whole parse on the first bad cell,
            "skip_row" drops the row, "skip_cell" leaves the field at default
    """
    sheet_name: str = DEFAULT_SHEET_NAME
    start_row: int = 1
    date_format: str = DEFAULT_DATE_FORMAT
    blank_policy: str = "empty_string"
    on_row_error: str = "abort"

    def __post_init__(self) -> None:
        self.validate()

    def validate(self) -> None:
        if isinstance(self.start_row, bool) or not isinstance(self.start_row, int):
            raise ConfigurationError(f"start_row must be an integer, got {self.start_row!r}")
        if self.start_row < 1:
            raise ConfigurationError(f"start_row must be >= 1, got {self.start_row}")
        if not self.sheet_name:
            raise ConfigurationError("sheet_name must not be empty")
        if self.blank_policy not in BLANK_POLICIES:
            raise ConfigurationError(
                f"blank_policy must be one of {BLANK_POLICIES}, got {self.blank_policy!r}"
            )
        if self.on_row_error not in ROW_ERROR_POLICIES:
            raise ConfigurationError(
                f"on_row_error must be one of {ROW_ERROR_POLICIES}, got {self.on_row_error!r}"
            )

    def merged(self, **overrides: Any) -> ParseOptions:
        """Copy with the non-None overrides applied."""
        changes = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **changes) if changes else self


def _validate_options_schema(data: dict[str, Any]) -> None:
    """Validate options data against the packaged JSON schema.

    Raises:
        ConfigurationError: schema file missing/invalid or data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigurationError(f"options schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigurationError(f"options validation failed: {e.message}") from e


def load_options(path: Path) -> ParseOptions:
    """Load ParseOptions from a YAML file; absent keys keep their defaults."""
    if not path.exists():
        raise ConfigurationError(f"options file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"options file must contain a mapping, got {type(data).__name__}")

    _validate_options_schema(data)
    return ParseOptions(**data)
