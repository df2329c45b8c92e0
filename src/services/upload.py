from __future__ import annotations

import time
from datetime import UTC, datetime
from pathlib import Path

from ..excel.normalizer import normalize_grid
from ..excel.reader import CSV_SUFFIXES, EXCEL_SUFFIXES, DecodeError, read_first_sheet
from ..logging.init import get_logger, log_summary
from ..models.config_models import CSV_MIME, XLS_MIME, XLSX_MIME, ReaderConfig, UploadConfig
from ..models.upload_result import UploadResult
from .summary import render_summary_line

"""Upload processing service.

validate_upload() enforces the acceptance rules (InputRejected -> HTTP 400).
process_upload() runs decode -> normalize for a saved file and returns an
UploadResult (ProcessingError -> HTTP 500). Temp file lifecycle belongs to
the caller.
"""

__all__ = [
    "InputRejected",
    "ProcessingError",
    "MIME_SUFFIXES",
    "validate_upload",
    "suffix_for",
    "process_upload",
]

logger = get_logger("upload")

MIME_SUFFIXES = {
    XLSX_MIME: ".xlsx",
    XLS_MIME: ".xls",
    CSV_MIME: ".csv",
}


class InputRejected(Exception):
    """Missing file, disallowed MIME type or oversize upload."""


class ProcessingError(Exception):
    """Whole-file failure while decoding / normalizing an upload."""


def validate_upload(
    file_name: str | None,
    mime_type: str | None,
    size: int | None,
    config: UploadConfig,
) -> None:
    if not file_name:
        raise InputRejected("No file uploaded")
    if mime_type not in config.allowed_mime_types:
        raise InputRejected("Invalid file type. Only Excel and CSV files are allowed.")
    if size is not None and size > config.max_upload_bytes:
        limit_mb = config.max_upload_bytes / (1024 * 1024)
        raise InputRejected(f"File too large. Maximum size is {limit_mb:g}MB.")


def suffix_for(file_name: str, mime_type: str | None) -> str:
    """Decoder suffix: the file's own suffix when recognised, else one derived from the MIME type."""
    suffix = Path(file_name).suffix.lower()
    if suffix in EXCEL_SUFFIXES or suffix in CSV_SUFFIXES:
        return suffix
    return MIME_SUFFIXES.get(mime_type or "", suffix)


def process_upload(
    path: Path,
    file_name: str,
    reader_config: ReaderConfig | None = None,
    file_type: str | None = None,
) -> UploadResult:
    """Decode the first sheet of ``path`` and normalize it.

    Raises:
        ProcessingError: the file could not be decoded
    """
    reader_config = reader_config or ReaderConfig()
    start = datetime.now(UTC)
    t0 = time.perf_counter()
    logger.info(f"processing upload: {file_name}")
    try:
        grid = read_first_sheet(path, keep_na_strings=reader_config.keep_na_strings, file_type=file_type)
    except DecodeError as e:
        raise ProcessingError(str(e)) from e

    logger.info(f"sheet={grid.sheet_name} range={grid.range}")
    sheet = normalize_grid(grid, now=start)
    elapsed = time.perf_counter() - t0
    result = UploadResult(
        file_name=file_name,
        sheet_name=grid.sheet_name,
        headers=sheet.headers,
        rows=sheet.rows,
        skipped_rows=sheet.skipped_rows,
        start_time=start,
        end_time=datetime.now(UTC),
        elapsed_seconds=elapsed,
    )
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    return result
