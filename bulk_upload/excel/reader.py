from __future__ import annotations

import io
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

import pandas as pd

from ..models.row_data import RowRecord, cell_text

"""Spreadsheet decoder for uploaded workbooks.

Both .xlsx (openpyxl) and legacy .xls (xlrd) workbooks are accepted.
The first worksheet is read; its first row is the header and data starts on
spreadsheet row 2. Cells are read verbatim (dtype=object, pandas' default NA
strings disabled) so that values like "NA" survive as text.

Fully blank rows are skipped, but the reported row numbers of later rows are
not shifted: they always match what the user sees in their spreadsheet app.
"""

__all__ = [
    "DecodeError",
    "EmptyBatchError",
    "DecodedSheet",
    "decode_spreadsheet",
    "HEADER_ROW",
    "OLE2_MAGIC",
    "excel_engine",
]

HEADER_ROW = 1  # Spreadsheet row holding column names

# Legacy .xls (BIFF) workbooks are OLE2 compound documents
OLE2_MAGIC = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"


class DecodeError(Exception):
    """Raised when the upload cannot be parsed as a spreadsheet."""


class EmptyBatchError(DecodeError):
    """Raised when the spreadsheet parses but holds no data rows."""


@dataclass
class DecodedSheet:
    sheet_name: str
    columns: list[str]
    row_count: int
    rows: Iterator[RowRecord]  # One-shot; consumed by the row loop


def excel_engine(buffer: bytes) -> str | None:
    """xlrd for legacy .xls, otherwise let pandas pick (openpyxl for .xlsx)."""
    return "xlrd" if buffer.startswith(OLE2_MAGIC) else None


def _read_first_sheet(buffer: bytes) -> tuple[str, pd.DataFrame]:
    if not buffer:
        raise DecodeError("Excel file is empty or invalid")
    try:
        xls = pd.ExcelFile(io.BytesIO(buffer), engine=excel_engine(buffer))
        if not xls.sheet_names:
            raise DecodeError("Excel file contains no worksheets")
        name = str(xls.sheet_names[0])
        # ヘッダなしで生読み (先頭行をヘッダとして後で適用)
        df = xls.parse(xls.sheet_names[0], header=None, dtype=object, keep_default_na=False)
    except DecodeError:
        raise
    except Exception as e:
        raise DecodeError(f"Error reading Excel file: {e}") from e
    return name, df


def _row_is_blank(values: list[Any]) -> bool:
    return all(cell_text(v) is None for v in values)


def decode_spreadsheet(buffer: bytes) -> DecodedSheet:
    """Decode an uploaded workbook into a header + a one-shot row iterator.

    Raises
    ------
    DecodeError: the buffer is not a readable spreadsheet
    EmptyBatchError: the first sheet has no header or no data rows
    """
    sheet_name, df = _read_first_sheet(buffer)
    if df.shape[0] == 0:
        raise EmptyBatchError("Excel file is empty or invalid")

    # Header cells -> (position, name); blank header cells are not columns
    header: list[tuple[int, str]] = []
    for pos, raw in enumerate(df.iloc[0].tolist()):
        name = cell_text(raw)
        if name is not None:
            header.append((pos, name))
    if not header:
        raise EmptyBatchError("Excel file has no header row")

    data_indexes = [
        idx for idx in range(1, df.shape[0]) if not _row_is_blank(df.iloc[idx].tolist())
    ]
    if not data_indexes:
        raise EmptyBatchError("Excel file is empty or invalid")

    def _rows() -> Iterator[RowRecord]:
        for idx in data_indexes:
            raw = df.iloc[idx].tolist()
            values = {name: raw[pos] for pos, name in header}
            yield RowRecord(row_number=idx + HEADER_ROW, values=values)

    return DecodedSheet(
        sheet_name=sheet_name,
        columns=[name for _, name in header],
        row_count=len(data_indexes),
        rows=_rows(),
    )
