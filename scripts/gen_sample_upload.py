#!/usr/bin/env python3
"""Sample upload generator for manual and performance testing.

Writes a student or college workbook in the upload format (header on row 1,
data from row 2) with a controllable share of deliberately broken rows:

- duplicates: rows reusing the email of an earlier row
- blanks: rows with one required cell left empty

Usage:
    python scripts/gen_sample_upload.py student out.xlsx --rows 500 --duplicates 0.05 --blanks 0.02
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

FIRST_NAMES = ["Asha", "Ravi", "Meera", "Arjun", "Neha", "Kiran", "Ishaan", "Pooja"]
LAST_NAMES = ["Patil", "Sharma", "Iyer", "Khan", "Das", "Joshi", "Nair", "Rao"]
CITIES = ["Pune", "Mumbai", "Nagpur", "Nashik"]


def _student_rows(rows: int, rng: np.random.Generator) -> list[dict[str, Any]]:
    out = []
    for i in range(rows):
        first = str(rng.choice(FIRST_NAMES))
        last = str(rng.choice(LAST_NAMES))
        out.append(
            {
                "firstName": first,
                "lastName": last,
                "email": f"{first}.{last}.{i}@example.edu".lower(),
                "rollNumber": f"ST{i + 1:05d}",
                "contactNumber": f"+91-98{int(rng.integers(10_000_000, 99_999_999))}",
                "gender": str(rng.choice(["Male", "Female", "Other"])),
                "year": 2024,
            }
        )
    return out


def _college_rows(rows: int, rng: np.random.Generator) -> list[dict[str, Any]]:
    return [
        {
            "name": f"College {i + 1}",
            "code": f"c{i + 1:04d}",  # lower-case on purpose; stored upper-case
            "email": f"admin{i + 1}@college.example.edu",
            "city": str(rng.choice(CITIES)),
            "country": "India",
        }
        for i in range(rows)
    ]


def generate(kind: str, rows: int, duplicates: float, blanks: float, seed: int = 42) -> pd.DataFrame:
    rng = np.random.default_rng(seed)
    data = _student_rows(rows, rng) if kind == "student" else _college_rows(rows, rng)
    required = "rollNumber" if kind == "student" else "code"

    for i in range(1, rows):
        roll = rng.random()
        if roll < duplicates:
            data[i]["email"] = data[int(rng.integers(0, i))]["email"]
        elif roll < duplicates + blanks:
            data[i][required] = None
    return pd.DataFrame(data)


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Generate a sample bulk upload workbook")
    p.add_argument("kind", choices=["student", "college"])
    p.add_argument("out", type=Path)
    p.add_argument("--rows", type=int, default=100)
    p.add_argument("--duplicates", type=float, default=0.05, help="share of duplicate rows")
    p.add_argument("--blanks", type=float, default=0.02, help="share of rows missing a required cell")
    p.add_argument("--seed", type=int, default=42)
    args = p.parse_args(argv)

    if args.rows <= 0:
        print("rows must be positive", file=sys.stderr)
        return 1

    df = generate(args.kind, args.rows, args.duplicates, args.blanks, args.seed)
    args.out.parent.mkdir(parents=True, exist_ok=True)
    sheet = "Students" if args.kind == "student" else "Colleges"
    with pd.ExcelWriter(args.out, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet, index=False)
    print(f"wrote {len(df)} rows to {args.out}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
