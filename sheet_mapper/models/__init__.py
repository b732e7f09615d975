"""Domain models for sheet_mapper.

Field descriptors produced by the correspondence builder, and the report /
error records produced by the mapping engine.
"""

from .error_record import ErrorRecord
from .field_descriptor import Byte, FieldDescriptor, FieldType, Float32, Long, Short
from .parse_result import ParseReport, ParseStatus

__all__ = [
    # Field binding
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
]
