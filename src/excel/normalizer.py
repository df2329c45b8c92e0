from __future__ import annotations

import math
import re
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

from src.logging.init import get_logger
from src.models.cell import CellValue, Grid
from src.models.row_record import (
    NormalizedSheet,
    RowRecord,
    StatusField,
    StatusInfo,
    StatusKind,
    TextField,
)

"""Spreadsheet normalization pipeline.

header extraction -> row extraction -> field classification -> status tagging
-> admission -> ordering.

All functions are pure apart from the import timestamp and DEBUG logging.
``normalize_grid`` is total: malformed cell content never raises, rows that
fail the admission predicate are simply left out.
"""

__all__ = [
    "SERIAL_NUMBER",
    "JOB_DETAILS",
    "COMMENTS",
    "TEXT_FIELDS",
    "excel_time_to_text",
    "format_cell",
    "extract_headers",
    "canonical_field_name",
    "classify_status",
    "build_row",
    "parse_serial_number",
    "is_admissible",
    "finalize_row",
    "normalize_grid",
]

SERIAL_NUMBER = "SerialNumber"
JOB_DETAILS = "JobDetails"
COMMENTS = "Comments"
TEXT_FIELDS = frozenset({SERIAL_NUMBER, JOB_DETAILS, COMMENTS})

GREY = "#d9d9d9"
GREEN = "#00B050"
RED = "#FF0000"
ORANGE = "#FFC000"
BLUE = "#0070C0"
PURPLE = "#7030A0"

SUCCESS_WORDS = frozenset({"ACTIVE", "PASS", "ENABLED", "UNSUSPENDED"})
ERROR_WORDS = frozenset({"OFF", "FAILED", "INACTIVE", "SUSPENDED"})

TIME_PATTERN = re.compile(r"^\d{1,2}:\d{2}$", re.ASCII)
DAY_MONTH_PATTERN = re.compile(r"^\d{1,2}-[A-Za-z]{3}$", re.ASCII)
PLACEHOLDER_PATTERN = re.compile(r"^Column\d+$")

MINUTES_PER_DAY = 24 * 60

logger = get_logger("normalizer")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _js_round(value: float) -> int:
    # half-up (Math.round), not banker's rounding
    return math.floor(value + 0.5)


def excel_time_to_text(serial: float) -> str:
    """Excel fraction-of-day time serial -> 'HH:MM'.

    >>> excel_time_to_text(0.5)
    '12:00'
    >>> excel_time_to_text(0.0)
    '00:00'
    """
    total_minutes = _js_round(serial * MINUTES_PER_DAY)
    hours = (total_minutes // 60) % 24
    minutes = total_minutes % 60
    return f"{hours:02d}:{minutes:02d}"


def format_cell(cell: CellValue | None) -> Any:
    """Resolve a cell's display value (the cell formatting rule)."""
    if cell is None:
        return ""
    if cell.formatted:
        return cell.formatted
    raw = cell.raw
    if raw is None:
        return ""
    if _is_number(raw) and 0 <= raw < 1:
        return excel_time_to_text(raw)
    return raw


def extract_headers(grid: Grid) -> list[str]:
    """Header labels for every column in range; empty cells get 'Column{N}'."""
    rng = grid.range
    headers: list[str] = []
    for col in rng.columns:
        label = _to_text(format_cell(grid.cell(rng.start_row, col)))
        headers.append(label if label else f"Column{col + 1}")
    return headers


def _is_placeholder(header: str) -> bool:
    return not header or PLACEHOLDER_PATTERN.match(header) is not None


def canonical_field_name(label: str) -> str:
    """Map a header label to its canonical field name (first match wins)."""
    lower = label.lower()
    if "s.no" in lower or "s no" in lower or lower == "s.no":
        return SERIAL_NUMBER
    if "job" in lower and "detail" in lower:
        return JOB_DETAILS
    if "comment" in lower:
        return COMMENTS
    return label


# --- status classification -------------------------------------------------

StatusRule = Callable[[str], "StatusInfo | None"]


def _keyword_rule(words: frozenset[str], color: str, kind: StatusKind) -> StatusRule:
    def rule(s: str) -> StatusInfo | None:
        return StatusInfo(s, color, kind) if s in words else None
    return rule


def _time_rule(s: str) -> StatusInfo | None:
    if not TIME_PATTERN.match(s):
        return None
    if s == "00:00":
        return StatusInfo(s, GREY, StatusKind.DEFAULT)
    return StatusInfo(s, BLUE, StatusKind.PROCESSING)


def _day_month_rule(s: str) -> StatusInfo | None:
    return StatusInfo(s, PURPLE, StatusKind.PURPLE) if DAY_MONTH_PATTERN.match(s) else None


def _na_rule(s: str) -> StatusInfo | None:
    return StatusInfo("NA", GREY, StatusKind.DEFAULT) if s == "NA" else None


# Keyword checks precede pattern checks. Order is part of the contract.
STATUS_RULES: tuple[StatusRule, ...] = (
    _keyword_rule(SUCCESS_WORDS, GREEN, StatusKind.SUCCESS),
    _keyword_rule(ERROR_WORDS, RED, StatusKind.ERROR),
    _keyword_rule(frozenset({"PENDING"}), ORANGE, StatusKind.WARNING),
    _time_rule,
    _day_month_rule,
    _na_rule,
)


def classify_status(value: Any) -> StatusInfo:
    """Derive the status bundle for a resolved cell value."""
    if value is None or value == "":
        return StatusInfo("NA", GREY, StatusKind.DEFAULT)
    s = _to_text(value).upper().strip()
    for rule in STATUS_RULES:
        info = rule(s)
        if info is not None:
            return info
    return StatusInfo(s, BLUE, StatusKind.INFO)


# --- rows ------------------------------------------------------------------

def build_row(grid: Grid, row: int, headers: list[str]) -> dict[str, TextField | StatusField]:
    """Build the candidate field mapping for one data row."""
    rng = grid.range
    fields: dict[str, TextField | StatusField] = {}
    for offset, col in enumerate(rng.columns):
        header = headers[offset]
        if _is_placeholder(header):
            continue
        value = format_cell(grid.cell(row, col))
        name = canonical_field_name(header)
        raw_value = value if value is not None else ""
        if name in TEXT_FIELDS:
            fields[name] = TextField(raw_value)
        else:
            fields[name] = StatusField.from_info(raw_value, classify_status(value))
    return fields


def parse_serial_number(value: Any) -> int | float | None:
    """Numeric serial number or None when the value is empty / non-numeric.

    Only decimal notation is accepted ("0x1A" is not a serial).
    """
    if _is_number(value):
        number = value
    elif isinstance(value, str) and value.strip() and "_" not in value:
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def is_admissible(fields: dict[str, TextField | StatusField]) -> bool:
    """Admission predicate: numeric serial number and non-blank job details."""
    serial = fields.get(SERIAL_NUMBER)
    job = fields.get(JOB_DETAILS)
    if serial is None or job is None:
        return False
    if serial.raw_value in ("", None) or parse_serial_number(serial.raw_value) is None:
        return False
    return _to_text(job.raw_value).strip() != ""


def finalize_row(fields: dict[str, TextField | StatusField], timestamp: str) -> RowRecord:
    serial = fields[SERIAL_NUMBER].raw_value
    return RowRecord(
        fields=fields,
        id=f"row-{_to_text(serial).strip()}",
        row_index=parse_serial_number(serial),
        import_timestamp=timestamp,
    )


def normalize_grid(grid: Grid, now: datetime | None = None) -> NormalizedSheet:
    """Run the whole pipeline over a decoded sheet."""
    timestamp = (now or datetime.now(UTC)).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    headers = extract_headers(grid)
    logger.debug(f"headers found: {headers}")

    rows: list[RowRecord] = []
    skipped = 0
    for row in grid.range.data_rows:
        fields = build_row(grid, row, headers)
        if not is_admissible(fields):
            skipped += 1
            serial = fields.get(SERIAL_NUMBER)
            job = fields.get(JOB_DETAILS)
            logger.debug(
                f"skipped row {row + 1}: serial={serial.raw_value if serial else None!r} "
                f"job={job.raw_value if job else None!r}"
            )
            continue
        rows.append(finalize_row(fields, timestamp))

    # sorted() is stable; ties keep sheet order
    rows = sorted(rows, key=lambda r: r.row_index)
    return NormalizedSheet(headers=headers, rows=rows, skipped_rows=skipped)
