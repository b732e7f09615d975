from __future__ import annotations

import dataclasses
from pathlib import Path
from typing import Any

import pandas as pd

"""Record export through pandas (JSON / CSV)."""

__all__ = [
    "OUTPUT_FORMATS",
    "records_to_frame",
    "render_records",
]

OUTPUT_FORMATS = ("json", "csv")


def records_to_frame(records: list[Any], record_type: type | None = None) -> pd.DataFrame:
    """One row per record, one column per dataclass field (declaration order).

    ``record_type`` supplies the columns when ``records`` is empty.
    """
    if record_type is None and records:
        record_type = type(records[0])
    columns = [f.name for f in dataclasses.fields(record_type)] if record_type is not None else []
    rows = [dataclasses.asdict(r) for r in records]
    return pd.DataFrame(rows, columns=columns)


def render_records(records: list[Any], fmt: str, *, record_type: type | None = None, out: Path | None = None) -> str | None:
    """Serialise records as JSON (records orient) or CSV.

    Writes to ``out`` when given and returns None, else returns the text.
    """
    if fmt not in OUTPUT_FORMATS:
        raise ValueError(f"unsupported output format: {fmt}")
    df = records_to_frame(records, record_type)
    if fmt == "json":
        text = df.to_json(orient="records", date_format="iso", force_ascii=False)
    else:
        text = df.to_csv(index=False)
    if out is None:
        return text
    out.write_text(text, encoding="utf-8")
    return None
