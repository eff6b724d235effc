from __future__ import annotations

from collections.abc import Iterable

from ..models.config_models import EntityKind

"""Header validation against the per-kind required-column contract."""

__all__ = [
    "SchemaError",
    "validate_columns",
]


class SchemaError(Exception):
    """Raised when the header lacks required columns."""

    def __init__(self, kind: EntityKind, missing: list[str]) -> None:
        self.kind = kind
        self.missing = missing
        self.required = list(kind.contract.required_columns)
        super().__init__(f"Missing required columns: {', '.join(missing)}")


def validate_columns(columns: Iterable[str], kind: EntityKind) -> None:
    present = set(columns)
    missing = [c for c in kind.contract.required_columns if c not in present]
    if missing:
        raise SchemaError(kind, missing)
