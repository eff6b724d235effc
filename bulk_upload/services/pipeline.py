from __future__ import annotations

import dataclasses
import logging
from datetime import date

from ..db.gateway import PersistenceError, PersistenceGateway, is_valid_id
from ..excel.reader import DecodeError, EmptyBatchError, decode_spreadsheet
from ..excel.schema import SchemaError, validate_columns
from ..logging.error_log import ErrorLogBuffer, records_for_report, rejection_record
from ..logging.init import log_summary
from ..models.actor import Actor, Owner
from ..models.batch_report import BatchReport, BatchRun, BatchState
from ..models.config_models import FACULTY_TABLE, EntityKind, PipelineConfig
from .aggregator import OutcomeAggregator
from .credentials import CredentialHasher
from .progress import RowProgressTracker
from .roster import update_roster
from .row_processor import BatchContext, process_row
from .summary import render_summary_line

"""Batch orchestration for spreadsheet bulk uploads.

run_batch() drives one upload through
    decode → validate header → process rows → aggregate → roster update
Decode and header failures reject the whole batch (DecodeError, EmptyBatchError,
SchemaError propagate to the caller). Row failures never do: every decoded row
ends in the report as a success, an error or a duplicate.

Rows are processed strictly in order, each with its own lookup and insert, so
a row always sees the records inserted by the rows before it.
"""

__all__ = [
    "OwnerNotFoundError",
    "RosterUpdateError",
    "REJECTION_ERRORS",
    "resolve_owner",
    "run_batch",
]

logger = logging.getLogger(__name__)

# Setup failures that reject a batch before any row is processed
REJECTION_ERRORS = (DecodeError, SchemaError)


class OwnerNotFoundError(Exception):
    """Raised when the acting user has no faculty record to own a student batch."""


class RosterUpdateError(Exception):
    """Raised when the post-loop roster write fails.

    The rows themselves are already committed; the report is attached so the
    caller can still tell the user what was created.
    """

    def __init__(self, report: BatchReport, cause: Exception) -> None:
        self.report = report
        super().__init__(f"roster update failed: {cause}")


def resolve_owner(gateway: PersistenceGateway, actor: Actor) -> Owner:
    """Resolve the acting faculty as owner (department + coordinator) of new students."""
    faculty = gateway.find_by_id(FACULTY_TABLE, actor.id) if is_valid_id(actor.id) else None
    if faculty is None:
        raise OwnerNotFoundError("Faculty not found")
    department_id = faculty.get("department_id")
    if not department_id:
        raise OwnerNotFoundError("Faculty has no department")
    return Owner(
        coordinator_id=str(faculty.get("id", actor.id)),
        department_id=str(department_id),
        name=str(faculty.get("name") or ""),
    )


def _flush(error_log: ErrorLogBuffer | None) -> None:
    if error_log is None:
        return
    try:
        path = error_log.flush()
    except OSError as e:
        # Audit log failures never fail the batch
        logger.warning("error log flush failed: %s", e)
        return
    if path is not None:
        logger.info("error log written: %s", path)


def run_batch(
    buffer: bytes,
    kind: EntityKind,
    actor: Actor,
    gateway: PersistenceGateway,
    hasher: CredentialHasher,
    *,
    owner: Owner | None = None,
    config: PipelineConfig | None = None,
    file_name: str = "<upload>",
    today: date | None = None,
) -> BatchReport:
    """Run one bulk upload batch and return its report.

    Args:
        buffer: Raw uploaded workbook
        kind: Entity kind being imported
        actor: Authenticated user performing the upload
        gateway: Store used for duplicate lookup, inserts and the roster write
        hasher: Password hasher
        owner: Owning faculty (required for student batches, see resolve_owner)
        config: Pipeline settings (audit log location)
        file_name: Name of the uploaded file, for logs
        today: Date used for year defaults (tests pin it)

    Raises:
        DecodeError / EmptyBatchError: unreadable or empty workbook
        SchemaError: required columns missing from the header
        RosterUpdateError: rows were stored but the roster write failed
    """
    if kind is EntityKind.STUDENT and owner is None:
        raise ValueError("student batches need an owning faculty")

    config = config or PipelineConfig()
    error_log = ErrorLogBuffer(config.error_log_dir) if config.error_log_dir else None
    run = BatchRun(kind, file_name)
    logger.info("batch start kind=%s file=%s actor=%s", kind.value, file_name, actor.id)

    try:
        run.advance(BatchState.DECODING)
        sheet = decode_spreadsheet(buffer)
        run.advance(BatchState.VALIDATING)
        validate_columns(sheet.columns, kind)
    except REJECTION_ERRORS as e:
        run.reject(str(e))
        if isinstance(e, EmptyBatchError):
            error_type = "EMPTY_BATCH"
        elif isinstance(e, SchemaError):
            error_type = "SCHEMA_ERROR"
        else:
            error_type = "DECODE_ERROR"
        logger.error("batch rejected kind=%s file=%s: %s", kind.value, file_name, e)
        if error_log is not None:
            error_log.append(rejection_record(file_name, kind.value, error_type, str(e)))
        _flush(error_log)
        raise

    run.advance(BatchState.PROCESSING)
    ctx = BatchContext(
        kind=kind,
        actor=actor,
        gateway=gateway,
        hasher=hasher,
        owner=owner,
        today=today,
    )
    aggregator = OutcomeAggregator(kind)
    with RowProgressTracker(sheet.row_count, description=f"{kind.value} rows") as progress:
        for record in sheet.rows:
            aggregator.add(process_row(record, ctx))
            progress.advance(
                ok=len(aggregator.success),
                err=len(aggregator.errors),
                dup=len(aggregator.duplicates),
            )

    run.advance(BatchState.AGGREGATING)
    report = aggregator.report(sheet.row_count)

    if kind is EntityKind.STUDENT and owner is not None:
        try:
            update_roster(gateway, owner, ctx.new_ids)
        except PersistenceError as e:
            logger.error("roster update failed coordinator=%s: %s", owner.coordinator_id, e)
            if error_log is not None:
                error_log.extend(records_for_report(file_name, report))
                error_log.append(rejection_record(file_name, kind.value, "ROSTER_UPDATE_ERROR", str(e)))
            _flush(error_log)
            raise RosterUpdateError(report, e) from e

    run.advance(BatchState.COMPLETED)
    report = dataclasses.replace(report, elapsed_seconds=run.elapsed_seconds, state=run.state)

    if error_log is not None:
        error_log.extend(records_for_report(file_name, report))
    _flush(error_log)

    log_summary(render_summary_line(report)[len("SUMMARY "):])
    return report
