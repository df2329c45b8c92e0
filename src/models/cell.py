from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol

"""Cell / grid models shared by the reader and the normalizer.

The reader produces a grid of CellValue objects addressed by absolute
(row, column) positions. The normalizer only ever looks cells up through the
Grid protocol so it can be exercised without any file I/O.
"""

__all__ = [
    "CellValue",
    "SheetRange",
    "Grid",
]


@dataclass(frozen=True)
class CellValue:
    """Decoded content of one spreadsheet cell.

    Attributes:
        formatted: Display string provided by the decoder (text, dates, booleans)
        raw: Underlying value (number or text). Numbers come without ``formatted``.
    """
    formatted: str | None = None
    raw: Any = None


@dataclass(frozen=True)
class SheetRange:
    """Inclusive cell range. Row ``start_row`` is the header row."""
    start_row: int
    start_col: int
    end_row: int
    end_col: int

    @property
    def columns(self) -> range:
        return range(self.start_col, self.end_col + 1)

    @property
    def data_rows(self) -> range:
        return range(self.start_row + 1, self.end_row + 1)


class Grid(Protocol):
    """Cell lookup capability handed to the normalizer."""

    @property
    def range(self) -> SheetRange: ...

    def cell(self, row: int, col: int) -> CellValue | None: ...
