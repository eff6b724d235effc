from __future__ import annotations

from pathlib import Path

from bulk_upload.excel.reader import decode_spreadsheet
from bulk_upload.excel.schema import validate_columns
from bulk_upload.models.config_models import EntityKind
from scripts.gen_sample_upload import generate, main


def test_generate_is_deterministic_per_seed():
    a = generate("student", 20, duplicates=0.2, blanks=0.1, seed=7)
    b = generate("student", 20, duplicates=0.2, blanks=0.1, seed=7)
    assert a.equals(b)


def test_generate_injects_duplicates_and_blanks():
    df = generate("student", 200, duplicates=0.2, blanks=0.2, seed=1)

    assert len(df) == 200
    assert df["email"].duplicated().sum() > 0
    assert df["rollNumber"].isna().sum() > 0


def test_clean_college_sample():
    df = generate("college", 5, duplicates=0.0, blanks=0.0)
    assert df["email"].is_unique
    assert list(df["code"]) == ["c0001", "c0002", "c0003", "c0004", "c0005"]


def test_main_writes_uploadable_workbook(tmp_path: Path):
    out = tmp_path / "sample.xlsx"
    assert main(["student", str(out), "--rows", "10"]) == 0

    sheet = decode_spreadsheet(out.read_bytes())
    validate_columns(sheet.columns, EntityKind.STUDENT)
    assert sheet.row_count == 10


def test_main_rejects_non_positive_rows(tmp_path: Path):
    assert main(["college", str(tmp_path / "x.xlsx"), "--rows", "0"]) == 1
