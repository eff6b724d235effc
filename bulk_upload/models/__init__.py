"""Domain models for the spreadsheet bulk upload pipeline.

This package contains the configuration, row, outcome and report models used
throughout the application.
"""

from .actor import Actor, Owner
from .batch_report import BatchReport, BatchRun, BatchState, BatchSummary
from .config_models import DatabaseConfig, EntityKind, PipelineConfig
from .outcome import Duplicate, Error, Outcome, Success
from .row_data import CollegeRow, RowRecord, RowValidationError, StudentRow

__all__ = [
    # Configuration models
    "DatabaseConfig",
    "EntityKind",
    "PipelineConfig",
    # Actors
    "Actor",
    "Owner",
    # Rows
    "RowRecord",
    "RowValidationError",
    "StudentRow",
    "CollegeRow",
    # Outcomes & reports
    "Success",
    "Duplicate",
    "Error",
    "Outcome",
    "BatchReport",
    "BatchRun",
    "BatchState",
    "BatchSummary",
]
