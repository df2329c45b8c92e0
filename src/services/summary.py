from __future__ import annotations

from ..models.upload_result import UploadResult

"""SUMMARY line rendering for processed uploads."""


def _format_seconds(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # Format very small numbers to avoid scientific notation
        return f"{value:.6f}".rstrip("0").rstrip(".")
    return f"{value:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: UploadResult) -> str:
    """Render a SUMMARY line for one upload.

    Format:
    SUMMARY file={name} sheet={sheet} rows={admitted} skipped_rows={rejected}
    columns={n} elapsed_sec={elapsed}

    Examples:
        >>> from datetime import datetime, timezone
        >>> ts = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = UploadResult("jobs.xlsx", "Sheet1", ["S.No"], [], 2, ts, ts, 0.0)
        >>> render_summary_line(r)
        'SUMMARY file=jobs.xlsx sheet=Sheet1 rows=0 skipped_rows=2 columns=1 elapsed_sec=0'
    """
    return (
        f"SUMMARY file={result.file_name} "
        f"sheet={result.sheet_name} "
        f"rows={result.total_rows} "
        f"skipped_rows={result.skipped_rows} "
        f"columns={len(result.headers)} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)}"
    )
