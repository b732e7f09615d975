from .correspondence import build_header_map, header

__all__ = [
    "build_header_map",
    "header",
]
