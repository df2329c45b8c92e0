from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the Excel status board backend.

Populated by src/config/loader.py from config/app.yml (+ .env overrides).
Every field has a default so tests can build configs directly.
"""

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME = "application/vnd.ms-excel"
CSV_MIME = "text/csv"

DEFAULT_ALLOWED_MIME_TYPES = (XLSX_MIME, XLS_MIME, CSV_MIME)
DEFAULT_MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
DEFAULT_KEEP_NA_STRINGS = ("NA", "N/A", "n/a", "NULL", "null", "None")


@dataclass(frozen=True)
class ServerConfig:
    """HTTP listener settings. HOST / PORT environment variables take precedence."""
    host: str = "0.0.0.0"
    port: int = 5000
    cors_origin: str = "*"


@dataclass(frozen=True)
class UploadConfig:
    """Upload acceptance rules and temp file location."""
    upload_dir: str = "uploads"
    field_name: str = "excel"  # multipart form field
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    allowed_mime_types: tuple[str, ...] = DEFAULT_ALLOWED_MIME_TYPES


@dataclass(frozen=True)
class ReaderConfig:
    """Decoder options passed to src.excel.reader."""
    keep_na_strings: tuple[str, ...] = DEFAULT_KEEP_NA_STRINGS


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object."""
    server: ServerConfig = field(default_factory=ServerConfig)
    upload: UploadConfig = field(default_factory=UploadConfig)
    reader: ReaderConfig = field(default_factory=ReaderConfig)
    error_log_dir: str = "logs"
