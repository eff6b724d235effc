from __future__ import annotations

import uuid
from typing import Any

from ..models.config_models import EntityKind

"""Persistence gateway interface.

The pipeline needs four operations from the store:

- find_by_unique_keys: lookup by email OR external id (duplicate detection)
- insert_one: persist one entity document, returning its new id
- append_to_array: push ids onto an array column of one record (roster)
- find_by_id: fetch one record (acting faculty resolution)

Each call stands on its own; there is no transaction spanning rows, so every
insert is visible to the duplicate lookup of the next row.

Identifiers are UUID strings.
"""

__all__ = [
    "PersistenceError",
    "PersistenceGateway",
    "is_valid_id",
    "new_id",
]


class PersistenceError(Exception):
    """Raised when the store rejects or fails an operation."""


def new_id() -> str:
    return str(uuid.uuid4())


def is_valid_id(value: Any) -> bool:
    """True when value is a syntactically valid record identifier."""
    if not isinstance(value, str):
        return False
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


class PersistenceGateway:
    """Base class for stores used by the pipeline."""

    def find_by_unique_keys(
        self, kind: EntityKind, email: str, external_id: str
    ) -> dict[str, Any] | None:
        raise NotImplementedError

    def insert_one(self, kind: EntityKind, document: dict[str, Any]) -> str:
        raise NotImplementedError

    def append_to_array(self, table: str, record_id: str, field: str, values: list[str]) -> None:
        raise NotImplementedError

    def find_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        raise NotImplementedError

    def close(self) -> None:  # pragma: no cover (trivial)
        pass
