"""Domain models for the Excel status board backend."""

from .cell import CellValue, Grid, SheetRange
from .config_models import AppConfig, ReaderConfig, ServerConfig, UploadConfig
from .error_record import ErrorRecord
from .row_record import NormalizedSheet, RowRecord, StatusField, StatusInfo, StatusKind, TextField
from .upload_result import UploadResult

__all__ = [
    # Grid models
    "CellValue",
    "Grid",
    "SheetRange",
    # Configuration models
    "AppConfig",
    "ReaderConfig",
    "ServerConfig",
    "UploadConfig",
    # Result models
    "ErrorRecord",
    "NormalizedSheet",
    "RowRecord",
    "StatusField",
    "StatusInfo",
    "StatusKind",
    "TextField",
    "UploadResult",
]
