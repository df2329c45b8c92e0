from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

"""Row record models produced by the normalization pipeline.

A row's column set is only known after the header row is read, so a record is
a mapping from canonical field name to one of two field variants:

- TextField: free text columns (serial number, job details, comments)
- StatusField: every other column, carrying a status bundle

``RowRecord.to_dict`` renders the flat JSON shape consumed by the table view.
"""

__all__ = [
    "StatusKind",
    "StatusInfo",
    "TextField",
    "StatusField",
    "RowRecord",
    "NormalizedSheet",
]


class StatusKind(Enum):
    """Rendering category of a status cell."""
    DEFAULT = "default"
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    PROCESSING = "processing"
    PURPLE = "purple"
    INFO = "info"


@dataclass(frozen=True)
class StatusInfo:
    status: str
    color: str
    kind: StatusKind


@dataclass(frozen=True)
class TextField:
    raw_value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"rawValue": self.raw_value}


@dataclass(frozen=True)
class StatusField:
    raw_value: Any
    status: str
    status_color: str
    status_kind: StatusKind

    @classmethod
    def from_info(cls, raw_value: Any, info: StatusInfo) -> StatusField:
        return cls(
            raw_value=raw_value,
            status=info.status,
            status_color=info.color,
            status_kind=info.kind,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rawValue": self.raw_value,
            "status": self.status,
            "statusColor": self.status_color,
            "statusKind": self.status_kind.value,
        }


@dataclass(frozen=True)
class RowRecord:
    """One admitted data row.

    Attributes:
        fields: Canonical field name -> TextField | StatusField (sheet column order)
        id: ``row-<serial number>``; unique per upload batch only
        row_index: Numeric serial number used for ordering
        import_timestamp: ISO8601 UTC timestamp with 'Z' suffix
    """
    fields: dict[str, TextField | StatusField]
    id: str
    row_index: int | float
    import_timestamp: str

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {name: f.to_dict() for name, f in self.fields.items()}
        # metadata keys win over a column that happens to share the name
        data["id"] = self.id
        data["rowIndex"] = self.row_index
        data["importTimestamp"] = self.import_timestamp
        return data


@dataclass(frozen=True)
class NormalizedSheet:
    headers: list[str]
    rows: list[RowRecord] = field(default_factory=list)
    skipped_rows: int = 0  # rows dropped by the admission predicate
