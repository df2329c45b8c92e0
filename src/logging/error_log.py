from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from src.models.error_record import ErrorRecord

"""Error log buffering for whole-file failures.

- JSON Lines 固定スキーマ (追加キー禁止)
- One file per process: ``<log_dir>/errors-YYYYMMDD-HHMMSS.log`` (UTC),
  created on first flush
- The web layer appends a record and flushes once per failed upload; the
  buffer is shared by request threads, so every access holds ``_lock``
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush writes JSON Lines."""

    def __init__(self, log_dir: Path | str = "logs") -> None:
        self._log_dir = Path(log_dir)
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._lock = threading.Lock()

    def _resolve_path(self) -> Path:
        if self._file_path is None:
            self._log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._log_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def file_path(self) -> Path:
        with self._lock:
            return self._resolve_path()

    def append(self, record: ErrorRecord) -> None:
        with self._lock:
            self._records.append(record)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        with self._lock:
            return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file. No file is created when empty."""
        with self._lock:
            if not self._records:
                return None
            fp = self._resolve_path()
            with fp.open("a", encoding="utf-8") as f:
                for r in self._records:
                    f.write(r.to_json_line() + "\n")
            self._records.clear()
            return fp
