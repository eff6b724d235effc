from __future__ import annotations

import re
import uuid
from pathlib import Path

from bulk_upload.cli import main as cli_main
from tests.helpers import three_row_students, valid_students

"""Contract: one SUMMARY line per completed batch on stdout.

    SUMMARY kind=<student|college> total=N successful=N errors=N duplicates=N elapsed_sec=S

successful + errors + duplicates always equals total.
"""

SUMMARY_PATTERN = re.compile(
    r"^SUMMARY\s+kind=(student|college)\s+total=([0-9]+)\s+successful=([0-9]+)\s+"
    r"errors=([0-9]+)\s+duplicates=([0-9]+)\s+elapsed_sec=([0-9]+\.?[0-9]*)$"
)


def _summary_lines(out: str) -> list[str]:
    return [line for line in out.splitlines() if line.startswith("SUMMARY")]


def test_summary_pattern_valid_format():
    for line in [
        "SUMMARY kind=student total=3 successful=1 errors=1 duplicates=1 elapsed_sec=0.84",
        "SUMMARY kind=college total=10 successful=10 errors=0 duplicates=0 elapsed_sec=2",
        "SUMMARY kind=student total=1 successful=0 errors=1 duplicates=0 elapsed_sec=0",
    ]:
        assert SUMMARY_PATTERN.match(line), line


def test_summary_pattern_rejects_invalid_lines():
    for line in [
        "SUMMARY kind=faculty total=1 successful=1 errors=0 duplicates=0 elapsed_sec=1",
        "SUMMARY kind=student total=1 successful=1 errors=0 elapsed_sec=1",
        "INFO kind=student total=1 successful=1 errors=0 duplicates=0 elapsed_sec=1",
    ]:
        assert not SUMMARY_PATTERN.match(line), line


def test_cli_emits_one_matching_summary(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "mixed.xlsx"
    f.write_bytes(three_row_students())

    code = cli_main(["upload", "student", str(f), "--actor-id", str(uuid.uuid4()), "--dry-run"])

    assert code == 2
    (line,) = _summary_lines(capsys.readouterr().out)
    m = SUMMARY_PATTERN.match(line)
    assert m
    total, ok, err, dup = (int(m.group(i)) for i in range(2, 6))
    assert (total, ok, err, dup) == (3, 1, 1, 1)
    assert ok + err + dup == total


def test_rejected_batch_emits_no_summary(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "bad.xlsx"
    f.write_bytes(b"garbage")

    assert cli_main(["upload", "student", str(f), "--actor-id", str(uuid.uuid4()), "--dry-run"]) == 1
    assert _summary_lines(capsys.readouterr().out) == []


def test_all_success_summary(temp_workdir: Path, capsys):
    f = temp_workdir / "data" / "ok.xlsx"
    f.write_bytes(valid_students(4))

    assert cli_main(["upload", "student", str(f), "--actor-id", str(uuid.uuid4()), "--dry-run"]) == 0
    (line,) = _summary_lines(capsys.readouterr().out)
    assert " total=4 successful=4 errors=0 duplicates=0 " in line
