from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

import pandas as pd

from .config_models import EntityKind

"""Row models for the bulk upload pipeline.

RowRecord is one decoded spreadsheet row (column name -> raw cell value).
StudentRow / CollegeRow are the validated, normalized variants; they can only
be built through their from_record() constructors, which raise
RowValidationError for rows the pipeline must report as errors.
"""

__all__ = [
    "RowRecord",
    "RowValidationError",
    "StudentRow",
    "CollegeRow",
    "ValidatedRow",
    "cell_text",
    "validate_row",
]

GENDERS = ("Male", "Female", "Other")
DEFAULT_COLLEGE_TYPE = "Other"
DEFAULT_STATUS = "Active"


class RowValidationError(Exception):
    """Raised when a row misses required fields or carries an invalid value."""


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    if value is pd.NaT:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def cell_text(value: Any) -> str | None:
    """Render a raw cell as trimmed text (None for empty cells).

    Integral floats lose their fraction so that a roll number typed as 1001
    and read back as 1001.0 stays "1001".
    """
    if _is_blank(value):
        return None
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _json_safe(value: Any) -> Any:
    if _is_blank(value):
        return None
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if hasattr(value, "item"):  # numpy scalars
        return value.item()
    return value


@dataclass(frozen=True)
class RowRecord:
    """One decoded spreadsheet row.

    row_number is the 1-based spreadsheet row (header row included), so the
    first data row is row 2.
    """
    row_number: int
    values: dict[str, Any]

    def text(self, column: str) -> str | None:
        return cell_text(self.values.get(column))

    def raw(self) -> dict[str, Any]:
        """JSON-serializable copy of the non-empty cells (for error payloads)."""
        return {k: _json_safe(v) for k, v in self.values.items() if not _is_blank(v)}

    def missing(self, columns: tuple[str, ...]) -> list[str]:
        return [c for c in columns if self.text(c) is None]


def _parse_date(value: Any, column: str) -> date | None:
    if _is_blank(value):
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return pd.to_datetime(str(value).strip()).date()
    except (ValueError, TypeError, OverflowError) as e:
        raise RowValidationError(f"Invalid {column}: {value}") from e


def _parse_int(text: str | None, column: str, default: int) -> int:
    if text is None:
        return default
    try:
        number = float(text)
    except ValueError as e:
        raise RowValidationError(f"Invalid {column}: {text}") from e
    if not number.is_integer():
        raise RowValidationError(f"Invalid {column}: {text} (expected a whole number)")
    return int(number)


def _require(record: RowRecord, kind: EntityKind) -> None:
    missing = record.missing(kind.contract.required_columns)
    if missing:
        raise RowValidationError(f"Missing required fields: {', '.join(missing)}")


@dataclass(frozen=True)
class StudentRow:
    first_name: str
    last_name: str
    email: str
    roll_number: str
    password: str | None
    contact_number: str
    date_of_birth: date | None
    gender: str
    address: str
    enrollment_year: int
    batch: str

    kind = EntityKind.STUDENT

    @property
    def external_id(self) -> str:
        return self.roll_number

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

    @classmethod
    def from_record(cls, record: RowRecord, today: date | None = None) -> StudentRow:
        _require(record, EntityKind.STUDENT)
        this_year = (today or date.today()).year

        gender = record.text("gender") or ""
        if gender and gender not in GENDERS:
            raise RowValidationError(
                f"Invalid gender: {gender} (expected one of {', '.join(GENDERS)})"
            )

        return cls(
            first_name=record.text("firstName"),  # type: ignore[arg-type]
            last_name=record.text("lastName"),  # type: ignore[arg-type]
            email=record.text("email").lower(),  # type: ignore[union-attr]
            roll_number=record.text("rollNumber"),  # type: ignore[arg-type]
            password=record.text("password"),
            contact_number=record.text("contactNumber") or "",
            date_of_birth=_parse_date(record.values.get("dateOfBirth"), "dateOfBirth"),
            gender=gender,
            address=record.text("address") or "",
            enrollment_year=_parse_int(record.text("year"), "year", this_year),
            batch=record.text("batch") or str(this_year),
        )


@dataclass(frozen=True)
class CollegeRow:
    name: str
    code: str
    email: str
    password: str | None
    institute: str | None  # Raw reference from the row; resolved later
    contact_number: str
    line1: str
    line2: str
    city: str
    state: str
    country: str
    pincode: str
    website: str
    type: str
    status: str

    kind = EntityKind.COLLEGE

    @property
    def external_id(self) -> str:
        return self.code

    @property
    def display_name(self) -> str:
        return self.name

    @classmethod
    def from_record(cls, record: RowRecord, today: date | None = None) -> CollegeRow:
        _require(record, EntityKind.COLLEGE)
        return cls(
            name=record.text("name"),  # type: ignore[arg-type]
            code=record.text("code").upper(),  # type: ignore[union-attr]
            email=record.text("email").lower(),  # type: ignore[union-attr]
            password=record.text("password"),
            institute=record.text("institute"),
            contact_number=record.text("contactNumber") or "",
            line1=record.text("line1") or "",
            line2=record.text("line2") or "",
            city=record.text("city") or "",
            state=record.text("state") or "",
            country=record.text("country") or "",
            pincode=record.text("pincode") or "",
            website=record.text("website") or "",
            type=record.text("type") or DEFAULT_COLLEGE_TYPE,
            status=record.text("status") or DEFAULT_STATUS,
        )


ValidatedRow = StudentRow | CollegeRow

_CONSTRUCTORS = {
    EntityKind.STUDENT: StudentRow.from_record,
    EntityKind.COLLEGE: CollegeRow.from_record,
}


def validate_row(record: RowRecord, kind: EntityKind, today: date | None = None) -> ValidatedRow:
    """Presence check + normalization for one row of the given kind."""
    return _CONSTRUCTORS[kind](record, today)
