from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from .row_record import RowRecord

"""UploadResult model: outcome of processing one uploaded spreadsheet."""

__all__ = [
    "UploadResult",
]


def _iso_z(ts: datetime) -> str:
    return ts.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class UploadResult:
    file_name: str
    sheet_name: str
    headers: list[str]
    rows: list[RowRecord]
    skipped_rows: int  # rows rejected by the admission predicate (log only)
    start_time: datetime  # UTC
    end_time: datetime  # UTC
    elapsed_seconds: float

    @property
    def total_rows(self) -> int:
        return len(self.rows)

    def to_response(self) -> dict[str, Any]:
        """Render the HTTP 200 body.

        ``totalRows`` counts admitted rows only; rejected rows are not reported.
        """
        return {
            "success": True,
            "data": [r.to_dict() for r in self.rows],
            "totalRows": self.total_rows,
            "fileName": self.file_name,
            "uploadDate": _iso_z(self.end_time),
        }
