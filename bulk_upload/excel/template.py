from __future__ import annotations

import io
from typing import Any

import pandas as pd

from ..models.config_models import EntityKind

"""Download template generation.

The template workbook holds a data sheet with two example rows and an
"Instructions" sheet listing every column, whether it is required, and the
default applied when it is left empty.
"""

__all__ = [
    "INSTRUCTIONS_SHEET",
    "build_template",
]

INSTRUCTIONS_SHEET = "Instructions"

_EXAMPLE_ROWS: dict[EntityKind, list[dict[str, Any]]] = {
    EntityKind.STUDENT: [
        {
            "firstName": "John",
            "lastName": "Doe",
            "email": "john.doe@example.com",
            "rollNumber": "ST001",
            "contactNumber": "+91-9876543210",
            "dateOfBirth": "2000-01-15",
            "gender": "Male",
            "address": "123 Main Street, City",
            "year": 2024,
            "semester": 3,
            "batch": "2024",
            "password": "ST001@123",
        },
        {
            "firstName": "Jane",
            "lastName": "Smith",
            "email": "jane.smith@example.com",
            "rollNumber": "ST002",
            "contactNumber": "+91-9876543211",
            "dateOfBirth": "2000-03-22",
            "gender": "Female",
            "address": "456 Oak Avenue, City",
            "year": 2024,
            "semester": 3,
            "batch": "2024",
            "password": "",
        },
    ],
    EntityKind.COLLEGE: [
        {
            "name": "Engineering College",
            "code": "ENG01",
            "email": "admin@eng01.example.edu",
            "password": "ENG01@123",
            "institute": "",
            "contactNumber": "+91-9876500001",
            "line1": "1 College Road",
            "line2": "",
            "city": "Pune",
            "state": "Maharashtra",
            "country": "India",
            "pincode": "411001",
            "website": "https://eng01.example.edu",
            "type": "Engineering",
            "status": "Active",
        },
        {
            "name": "Arts College",
            "code": "ART01",
            "email": "admin@art01.example.edu",
            "password": "",
            "institute": "",
            "contactNumber": "",
            "line1": "",
            "line2": "",
            "city": "Mumbai",
            "state": "Maharashtra",
            "country": "India",
            "pincode": "",
            "website": "",
            "type": "",
            "status": "",
        },
    ],
}

_DEFAULTS: dict[EntityKind, dict[str, str]] = {
    EntityKind.STUDENT: {
        "password": "ROLLNUMBER@123 (e.g. ST002@123)",
        "year": "current year (enrollment year)",
        "batch": "current year",
        "gender": "empty; otherwise one of Male, Female, Other",
        "dateOfBirth": "empty; otherwise a date such as 2000-01-15",
        "semester": "accepted but not stored",
    },
    EntityKind.COLLEGE: {
        "password": "CODE@123 (e.g. ART01@123)",
        "institute": "your own institute when logged in as an institute",
        "type": "Other",
        "status": "Active",
        "code": "stored upper-case",
    },
}


def _instructions(kind: EntityKind) -> pd.DataFrame:
    contract = kind.contract
    defaults = _DEFAULTS[kind]
    rows = []
    for col in contract.all_columns:
        rows.append(
            {
                "column": col,
                "required": "yes" if col in contract.required_columns else "no",
                "default / notes": defaults.get(col, ""),
            }
        )
    rows.append(
        {
            "column": "",
            "required": "",
            "default / notes": (
                f"Rows whose email or {contract.external_column} already exist "
                "are reported as duplicates and skipped."
            ),
        }
    )
    return pd.DataFrame(rows, columns=["column", "required", "default / notes"])


def build_template(kind: EntityKind) -> bytes:
    """Build the xlsx template for the given entity kind."""
    contract = kind.contract
    data = pd.DataFrame(_EXAMPLE_ROWS[kind], columns=list(contract.all_columns))
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        data.to_excel(writer, sheet_name=contract.sheet_name, index=False)
        _instructions(kind).to_excel(writer, sheet_name=INSTRUCTIONS_SHEET, index=False)
    return buf.getvalue()
