# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest
from openpyxl import Workbook

from src.logging.init import reset_logging
from src.models.cell import CellValue, SheetRange


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """server:
  host: 127.0.0.1
  port: 5050
  cors_origin: "*"
upload:
  upload_dir: ./uploads
  field_name: excel
  max_upload_bytes: 1048576
reader:
  keep_na_strings: [NA]
error_log_dir: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "app.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def make_excel(path: Path, rows: list[list[object]], sheet: str = "Sheet1", extra_sheets: dict | None = None) -> Path:
    # openpyxl directly: time / date values land as real typed cells
    wb = Workbook()
    ws = wb.active
    ws.title = sheet
    for row in rows:
        ws.append(row)
    for name, extra in (extra_sheets or {}).items():
        other = wb.create_sheet(name)
        for row in extra:
            other.append(row)
    wb.save(path)
    return path


@pytest.fixture()
def jobs_rows() -> list[list[object]]:
    return [
        ["S.No", "Job Details", "Server A", "Backup", "Comments"],
        [2, "Rotate logs", "active", 0.5, "ok"],
        [1, "Fix pump", "FAILED", None, None],
        ["abc", "Bad serial", "PASS", 0.25, ""],
        [3, "   ", "PENDING", 0.0, "blank job"],
        [None, None, None, None, None],
    ]


@pytest.fixture()
def jobs_xlsx(temp_workdir: Path, jobs_rows) -> Path:
    return make_excel(temp_workdir / "data" / "jobs.xlsx", jobs_rows)


class DictGrid:
    """In-memory Grid for normalizer tests: rows of plain values, header at row 0."""

    def __init__(self, rows: list[list[object]], start_col: int = 0) -> None:
        self.cells: dict[tuple[int, int], CellValue] = {}
        width = max(len(r) for r in rows)
        for r, row in enumerate(rows):
            for c, value in enumerate(row):
                if value is None:
                    continue
                if isinstance(value, CellValue):
                    self.cells[(r, c + start_col)] = value
                elif isinstance(value, str):
                    self.cells[(r, c + start_col)] = CellValue(formatted=value, raw=value)
                else:
                    self.cells[(r, c + start_col)] = CellValue(raw=value)
        self.range = SheetRange(0, start_col, len(rows) - 1, start_col + width - 1)

    def cell(self, row: int, col: int) -> CellValue | None:
        return self.cells.get((row, col))


@pytest.fixture()
def grid_factory():
    return DictGrid


@pytest.fixture()
def excel_factory():
    return make_excel
