from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .config_models import EntityKind

"""Per-row outcome models.

Every decoded row produces exactly one Outcome: Success, Duplicate or Error.
The to_dict() methods render the payload shapes reported back to the upload
client.
"""

__all__ = [
    "Success",
    "Duplicate",
    "Error",
    "Outcome",
]


@dataclass(frozen=True)
class Success:
    row: int
    entity_id: str
    display_name: str
    email: str
    external_id: str

    def to_dict(self, kind: EntityKind) -> dict[str, Any]:
        contract = kind.contract
        return {
            "row": self.row,
            contract.id_key: self.entity_id,
            "name": self.display_name,
            "email": self.email,
            contract.external_column: self.external_id,
        }


@dataclass(frozen=True)
class Duplicate:
    row: int
    existing: str  # Email of the conflicting record
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, kind: EntityKind) -> dict[str, Any]:
        return {"row": self.row, "data": self.data, "existing": self.existing}


@dataclass(frozen=True)
class Error:
    row: int
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self, kind: EntityKind) -> dict[str, Any]:
        return {"row": self.row, "data": self.data, "error": self.message}


Outcome = Success | Duplicate | Error
