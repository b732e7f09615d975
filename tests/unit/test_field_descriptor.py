from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

import pytest

from sheet_mapper.models.field_descriptor import Byte, FieldType, Float32, Long, Short, field_type_for


@pytest.mark.parametrize(
    "hint,expected",
    [
        (bool, FieldType.BOOLEAN),
        (int, FieldType.INT),
        (Short, FieldType.SHORT),
        (Long, FieldType.LONG),
        (Byte, FieldType.BYTE),
        (Float32, FieldType.FLOAT),
        (float, FieldType.DOUBLE),
        (str, FieldType.STRING),
        (datetime, FieldType.DATETIME),
        (date, FieldType.DATE),
        (Decimal, FieldType.DECIMAL),
        (Any, FieldType.ANY),
        (object, FieldType.ANY),
        (list, FieldType.ANY),
    ],
)
def test_field_type_for(hint, expected):
    assert field_type_for(hint) is expected


def test_optional_unwraps_to_inner_type():
    assert field_type_for(Optional[int]) is FieldType.INT
    assert field_type_for(int | None) is FieldType.INT
    assert field_type_for(Optional[Short]) is FieldType.SHORT


def test_multi_type_union_is_any():
    assert field_type_for(Union[int, str]) is FieldType.ANY
    assert field_type_for(Union[int, str, None]) is FieldType.ANY


def test_field_type_flags():
    assert FieldType.BYTE.is_integer
    assert not FieldType.DOUBLE.is_integer
    assert FieldType.ANY.accepts_text
    assert FieldType.STRING.accepts_text
    assert not FieldType.DATETIME.accepts_text
