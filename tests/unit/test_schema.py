from __future__ import annotations

import pytest

from bulk_upload.excel.schema import SchemaError, validate_columns
from bulk_upload.models.config_models import EntityKind


def test_student_header_with_all_required_columns_passes():
    validate_columns(["firstName", "lastName", "email", "rollNumber", "gender"], EntityKind.STUDENT)


def test_missing_columns_are_listed_in_contract_order():
    with pytest.raises(SchemaError) as excinfo:
        validate_columns(["email", "firstName"], EntityKind.STUDENT)

    err = excinfo.value
    assert err.missing == ["lastName", "rollNumber"]
    assert err.required == ["firstName", "lastName", "email", "rollNumber"]
    assert str(err) == "Missing required columns: lastName, rollNumber"


def test_college_requires_name_code_email():
    with pytest.raises(SchemaError) as excinfo:
        validate_columns(["name", "city"], EntityKind.COLLEGE)
    assert excinfo.value.missing == ["code", "email"]
    assert excinfo.value.kind is EntityKind.COLLEGE


def test_column_names_are_case_sensitive():
    with pytest.raises(SchemaError):
        validate_columns(["FirstName", "lastName", "email", "rollNumber"], EntityKind.STUDENT)
