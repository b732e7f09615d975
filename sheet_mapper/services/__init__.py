from .engine import build_column_map, parse, parse_report
from .export import records_to_frame, render_records

__all__ = [
    "build_column_map",
    "parse",
    "parse_report",
    "records_to_frame",
    "render_records",
]
