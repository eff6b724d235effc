from __future__ import annotations

import threading
from datetime import UTC, datetime
from pathlib import Path

from ..models.batch_report import BatchReport
from ..models.error_record import BATCH_LEVEL_ROW, ErrorRecord

"""Upload audit log (JSON Lines).

- Fixed record schema (no extra keys), one object per line
- One `errors-YYYYMMDD-HHMMSS.log` (UTC) per process, created on first flush
- Records are buffered and written once per batch; concurrent batches
  append to the same file under a lock
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "records_for_report",
    "rejection_record",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"

_WRITE_LOCK = threading.Lock()
_PROCESS_FILES: dict[Path, Path] = {}  # resolved log dir -> this process's log file


class ErrorLogBuffer:
    """In-memory buffer for error records. flush() appends JSON Lines.

    One buffer per batch run; the file it writes to is shared by every
    buffer of this process that points at the same directory.
    """

    def __init__(self, log_dir: Path | str = "./logs") -> None:
        self.log_dir = Path(log_dir)
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._file_path = _process_file(self.log_dir)
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def extend(self, records: list[ErrorRecord]) -> None:
        self._records.extend(records)

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        if not self._records:
            return None
        fp = self.file_path
        lines = "".join(r.to_json_line() + "\n" for r in self._records)
        with _WRITE_LOCK, fp.open("a", encoding="utf-8") as f:
            f.write(lines)
        self._records.clear()
        return fp


def _process_file(log_dir: Path) -> Path:
    key = log_dir.resolve()
    with _WRITE_LOCK:
        log_dir.mkdir(parents=True, exist_ok=True)
        fp = _PROCESS_FILES.get(key)
        if fp is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            fp = _PROCESS_FILES[key] = key / f"errors-{stamp}.log"
        return fp


def records_for_report(file_name: str, report: BatchReport) -> list[ErrorRecord]:
    """Error and duplicate outcomes of a batch, in row order."""
    kind = report.kind.value
    records = [
        ErrorRecord.create(file_name, kind, e.row, "ROW_ERROR", e.message) for e in report.errors
    ]
    records.extend(
        ErrorRecord.create(file_name, kind, d.row, "DUPLICATE", f"duplicate of {d.existing}")
        for d in report.duplicates
    )
    records.sort(key=lambda r: r.row)
    return records


def rejection_record(file_name: str, kind: str, error_type: str, message: str) -> ErrorRecord:
    return ErrorRecord.create(file_name, kind, BATCH_LEVEL_ROW, error_type, message)
