from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from .config_models import EntityKind
from .outcome import Duplicate, Error, Success

"""Batch lifecycle and report models.

BatchState transitions:
    received → decoding → validating → processing → aggregating → completed
with a terminal `rejected` state reachable only from decoding or validating.
A batch whose rows all failed still completes; only setup failures reject it.
"""

__all__ = [
    "BatchState",
    "BatchStateError",
    "BatchRun",
    "BatchSummary",
    "BatchReport",
]


class BatchState(Enum):
    RECEIVED = "received"
    DECODING = "decoding"
    VALIDATING = "validating"
    PROCESSING = "processing"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    REJECTED = "rejected"


_TRANSITIONS: dict[BatchState, frozenset[BatchState]] = {
    BatchState.RECEIVED: frozenset({BatchState.DECODING}),
    BatchState.DECODING: frozenset({BatchState.VALIDATING, BatchState.REJECTED}),
    BatchState.VALIDATING: frozenset({BatchState.PROCESSING, BatchState.REJECTED}),
    BatchState.PROCESSING: frozenset({BatchState.AGGREGATING}),
    BatchState.AGGREGATING: frozenset({BatchState.COMPLETED}),
    BatchState.COMPLETED: frozenset(),
    BatchState.REJECTED: frozenset(),
}


class BatchStateError(Exception):
    """Raised on an illegal batch state transition."""


class BatchRun:
    """Mutable lifecycle tracker for one batch run."""

    def __init__(self, kind: EntityKind, file_name: str = "<upload>") -> None:
        self.kind = kind
        self.file_name = file_name
        self.state = BatchState.RECEIVED
        self.start_time = datetime.now(UTC)
        self.end_time: datetime | None = None
        self.error: str | None = None

    def advance(self, new_state: BatchState) -> None:
        if new_state not in _TRANSITIONS[self.state]:
            raise BatchStateError(
                f"illegal batch transition {self.state.value} -> {new_state.value}"
            )
        self.state = new_state
        if new_state in (BatchState.COMPLETED, BatchState.REJECTED):
            self.end_time = datetime.now(UTC)

    def reject(self, reason: str) -> None:
        self.advance(BatchState.REJECTED)
        self.error = reason

    @property
    def elapsed_seconds(self) -> float:
        end = self.end_time or datetime.now(UTC)
        return (end - self.start_time).total_seconds()


@dataclass(frozen=True)
class BatchSummary:
    total: int
    successful: int
    errors: int
    duplicates: int

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "successful": self.successful,
            "errors": self.errors,
            "duplicates": self.duplicates,
        }


@dataclass(frozen=True)
class BatchReport:
    """Aggregated result of one completed batch."""
    kind: EntityKind
    summary: BatchSummary
    success: list[Success] = field(default_factory=list)
    errors: list[Error] = field(default_factory=list)
    duplicates: list[Duplicate] = field(default_factory=list)
    elapsed_seconds: float = 0.0
    state: BatchState = BatchState.COMPLETED

    @property
    def new_ids(self) -> list[str]:
        return [s.entity_id for s in self.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "summary": self.summary.to_dict(),
            "results": {
                "success": [s.to_dict(self.kind) for s in self.success],
                "errors": [e.to_dict(self.kind) for e in self.errors],
                "duplicates": [d.to_dict(self.kind) for d in self.duplicates],
            },
        }
