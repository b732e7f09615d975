from .loader import (
    DEFAULT_DATE_FORMAT,
    LEGACY_DATE_FORMAT,
    ParseOptions,
    load_options,
)

__all__ = [
    "DEFAULT_DATE_FORMAT",
    "LEGACY_DATE_FORMAT",
    "ParseOptions",
    "load_options",
]
