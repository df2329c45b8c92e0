from __future__ import annotations

import datetime as dt
from pathlib import Path

import numpy as np
import pytest

from src.excel.reader import DecodeError, read_first_sheet, to_cell_value
from src.models.cell import CellValue, SheetRange


def test_read_first_sheet_xlsx(temp_workdir: Path, excel_factory):
    path = excel_factory(
        temp_workdir / "jobs.xlsx",
        [
            ["S.No", "Job Details", "Status"],
            [1, "Fix pump", "ACTIVE"],
            [2, "Rotate logs", 0.5],
        ],
    )
    grid = read_first_sheet(path)
    assert grid.sheet_name == "Sheet1"
    assert grid.range == SheetRange(0, 0, 2, 2)
    assert grid.cell(0, 0) == CellValue(formatted="S.No", raw="S.No")
    assert grid.cell(1, 0) == CellValue(raw=1)
    assert grid.cell(2, 2) == CellValue(raw=0.5)
    assert grid.cell(5, 5) is None


def test_read_first_sheet_ignores_other_sheets(temp_workdir: Path, excel_factory):
    path = excel_factory(
        temp_workdir / "multi.xlsx",
        [["S.No"], [1]],
        sheet="First",
        extra_sheets={"Second": [["Other"], ["x"]]},
    )
    grid = read_first_sheet(path)
    assert grid.sheet_name == "First"
    assert grid.cell(0, 0).formatted == "S.No"


def test_read_first_sheet_trims_empty_border(temp_workdir: Path, excel_factory):
    path = excel_factory(
        temp_workdir / "offset.xlsx",
        [
            [None, None, None],
            [None, "S.No", "Job Details"],
            [None, 1, "Fix pump"],
        ],
    )
    grid = read_first_sheet(path)
    rng = grid.range
    assert grid.cell(rng.start_row, rng.start_col).formatted == "S.No"
    assert rng.end_col - rng.start_col == 1
    assert rng.end_row - rng.start_row == 1


def test_read_first_sheet_keeps_na_strings(temp_workdir: Path, excel_factory):
    path = excel_factory(temp_workdir / "na.xlsx", [["S.No", "Status"], [1, "NA"]])
    default = read_first_sheet(path)
    assert default.cell(1, 1) is None
    kept = read_first_sheet(path, keep_na_strings=["NA"])
    assert kept.cell(1, 1) == CellValue(formatted="NA", raw="NA")


def test_read_first_sheet_time_cells(temp_workdir: Path, excel_factory):
    path = excel_factory(temp_workdir / "time.xlsx", [["S.No", "Start"], [1, dt.time(9, 30)]])
    grid = read_first_sheet(path)
    assert grid.cell(1, 1).formatted == "09:30"


def test_read_first_sheet_csv(temp_workdir: Path):
    path = temp_workdir / "jobs.csv"
    path.write_text("S.No,Job Details,Status\n1,Fix pump,active\n2,,NA\n", encoding="utf-8")
    grid = read_first_sheet(path, keep_na_strings=["NA"])
    assert grid.range == SheetRange(0, 0, 2, 2)
    # csv cells are all text
    assert grid.cell(1, 0) == CellValue(formatted="1", raw="1")
    assert grid.cell(2, 1) is None
    assert grid.cell(2, 2).formatted == "NA"


def test_read_first_sheet_csv_ragged_rows(temp_workdir: Path):
    path = temp_workdir / "ragged.csv"
    path.write_text("S.No,Job Details,Status\n1,Fix pump,PASS,extra note\n2,Other,OFF\n", encoding="utf-8")
    grid = read_first_sheet(path)
    assert grid.range == SheetRange(0, 0, 2, 3)
    assert grid.cell(0, 3) is None
    assert grid.cell(1, 3).formatted == "extra note"
    assert grid.cell(2, 2).formatted == "OFF"


def test_read_first_sheet_csv_cp1252(temp_workdir: Path):
    path = temp_workdir / "export.csv"
    path.write_bytes("S.No,Job Details\n1,Café restock\n".encode("cp1252"))
    grid = read_first_sheet(path)
    assert grid.cell(1, 1).formatted == "Café restock"


def test_read_first_sheet_csv_utf8_bom(temp_workdir: Path):
    path = temp_workdir / "bom.csv"
    path.write_text("S.No,Job Details\n1,x\n", encoding="utf-8-sig")
    grid = read_first_sheet(path)
    assert grid.cell(0, 0).formatted == "S.No"


def test_read_first_sheet_file_type_override(temp_workdir: Path):
    path = temp_workdir / "upload-123"
    path.write_text("S.No,Job Details\n1,x\n", encoding="utf-8")
    grid = read_first_sheet(path, file_type=".csv")
    assert grid.cell(1, 1).formatted == "x"


def test_read_first_sheet_corrupt_file(temp_workdir: Path):
    path = temp_workdir / "broken.xlsx"
    path.write_bytes(b"this is not a zip archive")
    with pytest.raises(DecodeError):
        read_first_sheet(path)


def test_read_first_sheet_unsupported_suffix(temp_workdir: Path):
    path = temp_workdir / "notes.txt"
    path.write_text("hello", encoding="utf-8")
    with pytest.raises(DecodeError, match="unsupported file type"):
        read_first_sheet(path)


def test_read_first_sheet_empty_csv_has_no_range(temp_workdir: Path):
    path = temp_workdir / "empty.csv"
    path.write_text("\n\n", encoding="utf-8")
    with pytest.raises(DecodeError):
        read_first_sheet(path)


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, None),
        (float("nan"), None),
        ("text", CellValue(formatted="text", raw="text")),
        (True, CellValue(formatted="TRUE", raw="TRUE")),
        (np.int64(7), CellValue(raw=7)),
        (np.float64(2.0), CellValue(raw=2)),
        (0.25, CellValue(raw=0.25)),
        (dt.time(14, 5), CellValue(formatted="14:05", raw="14:05")),
        (dt.datetime(2024, 1, 5), CellValue(formatted="05-Jan", raw="05-Jan")),
        (dt.datetime(2024, 1, 5, 7, 45), CellValue(formatted="05-Jan 07:45", raw="05-Jan 07:45")),
        (dt.date(2024, 3, 9), CellValue(formatted="09-Mar", raw="09-Mar")),
    ],
)
def test_to_cell_value(value, expected):
    assert to_cell_value(value) == expected


def test_to_cell_value_returns_plain_python_numbers():
    cell = to_cell_value(np.int64(3))
    assert type(cell.raw) is int
