#!/usr/bin/env python3
"""Generate a sample job status workbook for manual testing of the upload API.

Layout matches what the normalizer expects:
- Row 1: header (S.No, Job Details, <server columns>, Comments)
- Row 2+: one job per row; server cells hold status words, times or dates

A few deliberately invalid rows (non-numeric serial, blank job) are mixed in
so the admission filter can be observed.
"""
from __future__ import annotations

import argparse
import datetime as dt
import sys
from pathlib import Path

import numpy as np
import pandas as pd

STATUS_WORDS = ["ACTIVE", "PASS", "ENABLED", "OFF", "FAILED", "SUSPENDED", "PENDING", "NA"]


def _status_cell(rng: np.random.Generator) -> object:
    pick = rng.integers(0, 10)
    if pick < 6:
        return STATUS_WORDS[rng.integers(0, len(STATUS_WORDS))]
    if pick < 8:
        # fraction-of-day time serial
        return round(float(rng.integers(0, 96)) / 96, 6)
    if pick < 9:
        return dt.datetime(2024, int(rng.integers(1, 13)), int(rng.integers(1, 28)))
    return None


def generate_board(rows: int, servers: int, seed: int = 42, invalid_every: int = 7) -> pd.DataFrame:
    """Build the sheet as a header-less DataFrame (row 0 = header)."""
    rng = np.random.default_rng(seed)
    header = ["S.No", "Job Details"] + [f"Server {i + 1}" for i in range(servers)] + ["Comments"]
    body: list[list[object]] = []
    for n in range(1, rows + 1):
        serial: object = n
        job: object = f"Job {n:04d}"
        if invalid_every and n % invalid_every == 0:
            serial, job = ("n/a", job) if n % 2 else (n, "  ")
        line = [serial, job] + [_status_cell(rng) for _ in range(servers)]
        line.append("check logs" if rng.random() < 0.2 else None)
        body.append(line)
    # shuffled so the API has to sort by serial number
    order = rng.permutation(len(body))
    return pd.DataFrame([header] + [body[i] for i in order])


def save_board(df: pd.DataFrame, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path) as writer:
        df.to_excel(writer, sheet_name="Status", header=False, index=False)
    return path


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate a sample status board workbook")
    p.add_argument("--rows", type=int, default=50)
    p.add_argument("--servers", type=int, default=5)
    p.add_argument("--seed", type=int, default=42)
    p.add_argument("--output", type=Path, default=Path("data/sample_board.xlsx"))
    args = p.parse_args(argv)

    if args.rows < 1 or args.servers < 1:
        print("rows and servers must be >= 1", file=sys.stderr)
        return 1
    out = save_board(generate_board(args.rows, args.servers, args.seed), args.output)
    print(f"wrote {out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
