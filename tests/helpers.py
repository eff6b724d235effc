"""Workbook builders shared by the test suites."""
from __future__ import annotations

import io
from datetime import date

import pandas as pd

TODAY = date(2025, 6, 1)

STUDENT_HEADER = ["firstName", "lastName", "email", "rollNumber"]
COLLEGE_HEADER = ["name", "code", "email"]

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def make_workbook(rows: list[list[object]], sheet_name: str = "Sheet1") -> bytes:
    """Build an xlsx in memory; rows[0] is the header row."""
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return buf.getvalue()


def three_row_students() -> bytes:
    """Row 2 valid, row 3 missing email, row 4 reuses row 2's email."""
    return make_workbook(
        [
            STUDENT_HEADER,
            ["Asha", "Patil", "Asha.Patil@Example.edu", "ST001"],
            ["Ravi", "Sharma", None, "ST002"],
            ["Asha", "P", "asha.patil@example.edu", "ST003"],
        ]
    )


def valid_students(count: int = 2, start: int = 1) -> bytes:
    rows: list[list[object]] = [STUDENT_HEADER]
    for i in range(start, start + count):
        rows.append([f"First{i}", f"Last{i}", f"student{i}@example.edu", f"ST{i:03d}"])
    return make_workbook(rows)
