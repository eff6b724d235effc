from __future__ import annotations

from ..models.batch_report import BatchReport, BatchSummary
from ..models.config_models import EntityKind
from ..models.outcome import Duplicate, Error, Outcome, Success

"""Outcome aggregation.

Outcomes are collected in row order into the three result lists; the summary
counts are derived from them. report() refuses to build a BatchReport whose
lists do not partition the decoded rows exactly.
"""

__all__ = [
    "AggregationError",
    "OutcomeAggregator",
]


class AggregationError(Exception):
    """Raised when the outcomes do not partition the decoded rows."""


class OutcomeAggregator:
    def __init__(self, kind: EntityKind) -> None:
        self.kind = kind
        self.success: list[Success] = []
        self.errors: list[Error] = []
        self.duplicates: list[Duplicate] = []

    def add(self, outcome: Outcome) -> None:
        if isinstance(outcome, Success):
            self.success.append(outcome)
        elif isinstance(outcome, Duplicate):
            self.duplicates.append(outcome)
        elif isinstance(outcome, Error):
            self.errors.append(outcome)
        else:
            raise TypeError(f"not an outcome: {outcome!r}")

    def __len__(self) -> int:
        return len(self.success) + len(self.errors) + len(self.duplicates)

    def report(self, total: int, elapsed_seconds: float = 0.0) -> BatchReport:
        if len(self) != total:
            raise AggregationError(f"{len(self)} outcomes recorded for {total} decoded rows")
        summary = BatchSummary(
            total=total,
            successful=len(self.success),
            errors=len(self.errors),
            duplicates=len(self.duplicates),
        )
        return BatchReport(
            kind=self.kind,
            summary=summary,
            success=list(self.success),
            errors=list(self.errors),
            duplicates=list(self.duplicates),
            elapsed_seconds=elapsed_seconds,
        )
