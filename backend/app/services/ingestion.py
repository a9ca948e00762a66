"""Spreadsheet ingestion.

Turns the raw bytes of an uploaded xlsx / xls / csv file into a ParsedTable:
the header row plus one record per data row, keyed by header name.

Only the first sheet of a workbook is read. Empty cells are left out of the
record (no null-padding), so a short row produces a record with fewer keys
than there are headers. Fully blank rows are skipped.

This module never touches persistent storage. The upload route saves the
bytes and builds the FileRecord from the returned table.
"""
import csv
import datetime as dt
import io
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("xlsx", "xls", "csv")

_MIME_FORMATS = {
    "text/csv": "csv",
    "application/csv": "csv",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "xlsx",
    "application/vnd.ms-excel": "xls",
}

_EXCEL_ENGINES = {"xlsx": "openpyxl", "xls": "xlrd"}


class ParseError(Exception):
    """Raised when the input cannot be read as a tabular file."""


@dataclass
class ParsedTable:
    headers: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    @property
    def row_count(self) -> int:
        return len(self.rows)

    @property
    def column_count(self) -> int:
        return len(self.headers)

    def to_dict(self) -> dict:
        return {"headers": list(self.headers), "rows": list(self.rows)}


def resolve_format(filename: Optional[str], content_type: Optional[str] = None) -> Optional[str]:
    """Pick the tabular format from the file extension, falling back to the MIME type."""
    if filename:
        ext = Path(filename).suffix.lower().lstrip(".")
        if ext:
            return ext
    if content_type:
        return _MIME_FORMATS.get(content_type.split(";")[0].strip().lower())
    return None


def parse_table(file_bytes: bytes, file_format: Optional[str]) -> ParsedTable:
    """Parse an uploaded spreadsheet into headers and row records.

    Args:
        file_bytes: Raw contents of the upload.
        file_format: "xlsx", "xls" or "csv" (a leading dot is tolerated).

    Raises:
        ParseError: empty input, unsupported format, or unreadable content.
    """
    fmt = (file_format or "").lower().lstrip(".")
    if fmt not in SUPPORTED_FORMATS:
        raise ParseError(f"Unsupported file format: {file_format or 'unknown'}")
    if not file_bytes:
        raise ParseError("File is empty")

    try:
        df = _read_frame(file_bytes, fmt)
    except Exception as e:
        logger.warning("Failed to parse %s file (%d bytes): %s", fmt, len(file_bytes), e)
        raise ParseError(f"Failed to parse {fmt} file") from e

    headers = [str(c) for c in df.columns]
    rows: list[dict[str, Any]] = []
    for values in df.itertuples(index=False, name=None):
        record = {}
        for header, raw in zip(headers, values):
            value = _to_scalar(raw)
            if value is not None:
                record[header] = value
        if record:
            rows.append(record)

    if not rows:
        headers = []
    return ParsedTable(headers=headers, rows=rows)


def _read_frame(file_bytes: bytes, fmt: str) -> pd.DataFrame:
    if fmt == "csv":
        df = _read_csv(file_bytes.decode("utf-8-sig"))
    else:
        df = pd.read_excel(io.BytesIO(file_bytes), sheet_name=0, engine=_EXCEL_ENGINES[fmt])

    # Formatted-but-empty trailing columns come back as "Unnamed: N"
    empty_unnamed = [
        c for c in df.columns
        if str(c).startswith("Unnamed:") and df[c].isna().all()
    ]
    if empty_unnamed:
        df = df.drop(columns=empty_unnamed)
    return df


def _read_csv(text: str) -> pd.DataFrame:
    """Read a CSV whose data rows may be longer or shorter than the header.

    pandas alone either shifts every row onto an implicit index (all rows
    longer) or fails outright (some rows longer). The header is split off
    first and the data is read against positional names wide enough for the
    longest row, so cells always stay in their own column. Cells past the
    last header have no name and are dropped.
    """
    lines = list(csv.reader(io.StringIO(text)))
    header_index = next((i for i, line in enumerate(lines) if line), None)
    if header_index is None:
        raise ValueError("No columns to parse from file")

    headers = _column_names(lines[header_index])
    data_lines = [line for line in lines[header_index + 1:] if line]
    if not data_lines:
        return pd.DataFrame(columns=headers)

    width = max(len(headers), *(len(line) for line in data_lines))
    df = pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        skiprows=header_index + 1,
        # Only truly empty cells count as missing; "NA", "null" etc. stay text.
        keep_default_na=False,
        na_values=[""],
    )
    df = df.iloc[:, :len(headers)]
    df.columns = headers
    return df


def _column_names(cells: list[str]) -> list[str]:
    # Same naming pandas uses: blank -> "Unnamed: N", repeats -> "name.1"
    names: list[str] = []
    seen: dict[str, int] = {}
    for position, cell in enumerate(cells):
        name = cell if cell.strip() else f"Unnamed: {position}"
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        names.append(name)
    return names


def _to_scalar(value: Any) -> Any:
    """Convert a pandas cell to a JSON-safe scalar. None means the cell is empty."""
    if value is None or value is pd.NA or value is pd.NaT:
        return None
    if isinstance(value, (bool, np.bool_)):
        return bool(value)
    if isinstance(value, (int, np.integer)):
        return int(value)
    if isinstance(value, (float, np.floating)):
        number = float(value)
        if math.isnan(number):
            return None
        if math.isinf(number):
            return str(number)
        return int(number) if number.is_integer() else number
    if isinstance(value, (pd.Timestamp, dt.datetime, dt.date, dt.time)):
        return value.isoformat()
    if isinstance(value, str):
        return value if value != "" else None
    return str(value)
