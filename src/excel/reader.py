from __future__ import annotations

import csv
import datetime as dt
import io
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from src.models.cell import CellValue, SheetRange

"""Spreadsheet decoder: first sheet -> grid of typed cells.

xlsx / xls are read with pandas (openpyxl / xlrd engines), csv with
pandas.read_csv (UTF-8, falling back to cp1252; ragged rows padded to the
widest row). Every cell is converted to a CellValue:

- NaN / None            -> absent
- text                  -> formatted = text
- bool                  -> formatted = TRUE / FALSE
- datetime.time         -> formatted = HH:MM
- date-only timestamp   -> formatted = DD-Mon (05-Jan)
- other timestamps      -> formatted = DD-Mon HH:MM
- numbers               -> raw only (time serials are resolved by the normalizer)

The range is the bounding box of non-empty cells; row/column numbers stay
absolute (0-based) so placeholder header names match the sheet's columns.
"""

__all__ = [
    "DecodeError",
    "SheetGrid",
    "EXCEL_SUFFIXES",
    "CSV_SUFFIXES",
    "read_first_sheet",
    "to_cell_value",
]

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


class DecodeError(Exception):
    """Raised when the file cannot be decoded into a sheet with a range."""


@dataclass(frozen=True)
class SheetGrid:
    """Decoded first sheet. Implements the Grid protocol."""
    sheet_name: str
    range: SheetRange
    cells: dict[tuple[int, int], CellValue]

    def cell(self, row: int, col: int) -> CellValue | None:
        return self.cells.get((row, col))


def _na_options(keep_na_strings: Iterable[str] | None) -> dict[str, Any]:
    # pandas._libs.parsers.STR_NA_VALUES には既定のNA文字列集合が格納されている
    import pandas._libs.parsers as parsers

    if not keep_na_strings:
        return {"keep_default_na": True, "na_values": None}
    custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
    return {"keep_default_na": False, "na_values": list(custom_na)}


def _plain_number(value: Any) -> int | float:
    if isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def to_cell_value(value: Any) -> CellValue | None:
    """Convert one decoded pandas object into a CellValue (None = absent)."""
    if value is None:
        return None
    if not isinstance(value, str) and pd.isna(value):
        return None
    if isinstance(value, str):
        return CellValue(formatted=value, raw=value)
    if isinstance(value, (bool, np.bool_)):
        text = "TRUE" if value else "FALSE"
        return CellValue(formatted=text, raw=text)
    if isinstance(value, dt.time):
        return CellValue(formatted=value.strftime("%H:%M"), raw=value.strftime("%H:%M"))
    if isinstance(value, (pd.Timestamp, dt.datetime)):
        if (value.hour, value.minute, value.second) == (0, 0, 0):
            text = value.strftime("%d-%b")
        else:
            text = value.strftime("%d-%b %H:%M")
        return CellValue(formatted=text, raw=text)
    if isinstance(value, dt.date):
        text = value.strftime("%d-%b")
        return CellValue(formatted=text, raw=text)
    if isinstance(value, (int, float, np.integer, np.floating)):
        return CellValue(raw=_plain_number(value))
    # Anything else (timedelta etc.) is shown as text
    return CellValue(formatted=str(value), raw=str(value))


def _decode_csv_bytes(data: bytes) -> str:
    """UTF-8 (BOM tolerated) first, then Windows-1252 as Excel exports it."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("cp1252", errors="replace")


def _read_csv_frame(path: Path, na: dict[str, Any]) -> pd.DataFrame:
    text = _decode_csv_bytes(path.read_bytes())
    # rows may be ragged; size the frame by the widest one
    width = max((len(row) for row in csv.reader(io.StringIO(text))), default=0)
    if width == 0:
        raise DecodeError("sheet has no data range")
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=str,
        skip_blank_lines=False,
        **na,
    )


def _load_frame(path: Path, suffix: str, keep_na_strings: Iterable[str] | None) -> tuple[str, pd.DataFrame]:
    na = _na_options(keep_na_strings)
    if suffix in CSV_SUFFIXES:
        return path.stem, _read_csv_frame(path, na)
    if suffix in EXCEL_SUFFIXES:
        xls = pd.ExcelFile(path)
        if not xls.sheet_names:
            raise DecodeError("workbook has no sheets")
        name = xls.sheet_names[0]
        # ヘッダなしで生読み (ヘッダ行はノーマライザ側で決定)
        df = xls.parse(name, header=None, dtype=object, **na)
        return str(name), df
    raise DecodeError(f"unsupported file type: {suffix or '(none)'}")


def _bounding_range(df: pd.DataFrame) -> SheetRange:
    mask = df.notna().to_numpy()
    rows = np.flatnonzero(mask.any(axis=1))
    cols = np.flatnonzero(mask.any(axis=0))
    if rows.size == 0 or cols.size == 0:
        raise DecodeError("sheet has no data range")
    return SheetRange(
        start_row=int(rows[0]),
        start_col=int(cols[0]),
        end_row=int(rows[-1]),
        end_col=int(cols[-1]),
    )


def read_first_sheet(
    path: Path,
    keep_na_strings: Iterable[str] | None = None,
    file_type: str | None = None,
) -> SheetGrid:
    """Decode the first sheet of ``path`` into a SheetGrid.

    Parameters
    ----------
    path: spreadsheet path (xlsx / xls / csv)
    keep_na_strings: strings excluded from pandas' default NaN conversion (例: ['NA'])
    file_type: suffix override (e.g. '.csv') when the path has no meaningful suffix

    Raises
    ------
    DecodeError: unreadable / corrupt file, unsupported type, empty sheet
    """
    suffix = (file_type or path.suffix).lower()
    try:
        sheet_name, df = _load_frame(path, suffix, keep_na_strings)
    except DecodeError:
        raise
    except Exception as e:  # pandas / engine errors vary by format
        raise DecodeError(f"{type(e).__name__}: {e}") from e

    sheet_range = _bounding_range(df)
    cells: dict[tuple[int, int], CellValue] = {}
    values = df.to_numpy(dtype=object)
    for r in range(sheet_range.start_row, sheet_range.end_row + 1):
        for c in sheet_range.columns:
            cell = to_cell_value(values[r, c])
            if cell is not None:
                cells[(r, c)] = cell
    return SheetGrid(sheet_name=sheet_name, range=sheet_range, cells=cells)
