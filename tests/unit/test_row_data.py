from __future__ import annotations

import math
from datetime import date, datetime

import pytest

from bulk_upload.models.config_models import EntityKind
from bulk_upload.models.row_data import (
    CollegeRow,
    RowRecord,
    RowValidationError,
    StudentRow,
    cell_text,
    validate_row,
)
from tests.helpers import TODAY


def _student(**overrides):
    values = {
        "firstName": " Asha ",
        "lastName": "Patil",
        "email": "Asha.Patil@Example.EDU",
        "rollNumber": "ST001",
    }
    values.update(overrides)
    return RowRecord(row_number=2, values=values)


def test_cell_text_normalizes_values():
    assert cell_text("  x ") == "x"
    assert cell_text("") is None
    assert cell_text("   ") is None
    assert cell_text(None) is None
    assert cell_text(float("nan")) is None
    assert cell_text(1001.0) == "1001"
    assert cell_text(12.5) == "12.5"
    assert cell_text(7) == "7"
    assert cell_text(date(2000, 1, 15)) == "2000-01-15"


def test_student_row_is_normalized():
    row = StudentRow.from_record(_student(), today=TODAY)

    assert row.first_name == "Asha"
    assert row.email == "asha.patil@example.edu"
    assert row.roll_number == "ST001"
    assert row.external_id == "ST001"
    assert row.display_name == "Asha Patil"
    assert row.password is None
    assert row.enrollment_year == 2025
    assert row.batch == "2025"
    assert row.gender == ""
    assert row.date_of_birth is None


def test_student_optional_fields_are_parsed():
    record = _student(
        year=2023.0,
        batch="2023-A",
        gender="Female",
        dateOfBirth="2001-02-03",
        contactNumber="  +91-900 ",
        password="secret",
    )
    row = StudentRow.from_record(record, today=TODAY)

    assert row.enrollment_year == 2023
    assert row.batch == "2023-A"
    assert row.gender == "Female"
    assert row.date_of_birth == date(2001, 2, 3)
    assert row.contact_number == "+91-900"
    assert row.password == "secret"


def test_student_date_cells_accept_datetime():
    row = StudentRow.from_record(_student(dateOfBirth=datetime(1999, 12, 31, 0, 0)), today=TODAY)
    assert row.date_of_birth == date(1999, 12, 31)


def test_missing_required_fields_are_named():
    record = _student(email="  ", rollNumber=None)
    with pytest.raises(RowValidationError, match="Missing required fields: email, rollNumber"):
        StudentRow.from_record(record, today=TODAY)


def test_invalid_gender_is_rejected():
    with pytest.raises(RowValidationError, match="Invalid gender"):
        StudentRow.from_record(_student(gender="male"), today=TODAY)


def test_invalid_date_is_rejected():
    with pytest.raises(RowValidationError, match="Invalid dateOfBirth"):
        StudentRow.from_record(_student(dateOfBirth="not a date"), today=TODAY)


def test_invalid_year_is_rejected():
    with pytest.raises(RowValidationError, match="Invalid year"):
        StudentRow.from_record(_student(year="next year"), today=TODAY)


def test_fractional_year_is_rejected():
    with pytest.raises(RowValidationError, match="Invalid year: 2.5"):
        StudentRow.from_record(_student(year="2.5"), today=TODAY)
    with pytest.raises(RowValidationError, match="whole number"):
        StudentRow.from_record(_student(year=2024.5), today=TODAY)


def test_college_row_defaults_and_case():
    record = RowRecord(
        row_number=5,
        values={"name": "Engineering College", "code": "eng01", "email": "Admin@ENG.edu"},
    )
    row = CollegeRow.from_record(record)

    assert row.code == "ENG01"
    assert row.external_id == "ENG01"
    assert row.email == "admin@eng.edu"
    assert row.display_name == "Engineering College"
    assert row.type == "Other"
    assert row.status == "Active"
    assert row.institute is None


def test_validate_row_dispatches_on_kind():
    college = RowRecord(row_number=2, values={"name": "X", "code": "c1", "email": "x@y.z"})
    assert isinstance(validate_row(college, EntityKind.COLLEGE), CollegeRow)
    assert isinstance(validate_row(_student(), EntityKind.STUDENT, TODAY), StudentRow)


def test_raw_drops_blank_cells_and_is_json_safe():
    record = RowRecord(
        row_number=3,
        values={"firstName": "Ravi", "email": "", "year": 2024, "x": math.nan, "dob": date(2000, 1, 1)},
    )
    assert record.raw() == {"firstName": "Ravi", "year": 2024, "dob": "2000-01-01"}


def test_missing_lists_blank_columns():
    record = _student(lastName=" ")
    assert record.missing(("firstName", "lastName", "gender")) == ["lastName", "gender"]
