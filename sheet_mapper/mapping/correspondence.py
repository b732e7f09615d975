from __future__ import annotations

import dataclasses
import logging
import typing
from typing import Any

from ..errors import ConfigurationError
from ..models.field_descriptor import FieldDescriptor, field_type_for

"""Header correspondence builder.

Record types are plain dataclasses whose fields are bound to column headers
with ``header()``::

    @dataclass
    class Contact:
        name: str = header("Name", default="")
        phone: str = header("Phone", default="")
        note: str = ""  # not bound, never populated from the sheet

``build_header_map`` turns such a type into ``{header text: FieldDescriptor}``.
"""

__all__ = [
    "HEADER_KEY",
    "header",
    "build_header_map",
]

HEADER_KEY = "sheet_mapper.header"

logger = logging.getLogger(__name__)


def header(name: str, **kwargs: Any) -> Any:
    """``dataclasses.field`` bound to the column titled ``name``.

    All keyword arguments (``default``, ``default_factory``, ``repr`` ...) are
    passed through to ``dataclasses.field``.
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[HEADER_KEY] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def build_header_map(record_type: type) -> dict[str, FieldDescriptor]:
    """Build the header -> field descriptor mapping for ``record_type``.

    Fields without a header name (or with an empty one) are left out. When two
    fields share a header the later-declared field wins.

    Raises:
        ConfigurationError: not a dataclass type, or annotations unresolvable
    """
    if not (isinstance(record_type, type) and dataclasses.is_dataclass(record_type)):
        raise ConfigurationError(f"record type must be a dataclass, got {record_type!r}")
    try:
        hints = typing.get_type_hints(record_type)
    except Exception as e:
        raise ConfigurationError(f"cannot resolve annotations of {record_type.__name__}: {e}") from e

    mapping: dict[str, FieldDescriptor] = {}
    for f in dataclasses.fields(record_type):
        name = f.metadata.get(HEADER_KEY)
        if not name:
            continue
        if name in mapping:
            logger.debug(
                f"header '{name}' rebound from field '{mapping[name].name}' to '{f.name}'"
            )
        mapping[name] = FieldDescriptor(
            name=f.name,
            header=name,
            field_type=field_type_for(hints.get(f.name, Any)),
        )
    return mapping
