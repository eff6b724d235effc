from __future__ import annotations

import copy
from typing import Any

from ..models.config_models import ENTITY_CONTRACTS, FACULTY_TABLE, EntityKind
from .gateway import PersistenceError, PersistenceGateway, new_id

"""In-memory persistence gateway.

Backs the CLI --dry-run mode and the test suites. Unique keys (email and the
kind's external id) are enforced on insert the way the database's unique
constraints would be.
"""

__all__ = [
    "InMemoryGateway",
]


class InMemoryGateway(PersistenceGateway):
    def __init__(self) -> None:
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        # Call counters (used by tests to assert write amortization)
        self.insert_calls = 0
        self.append_calls = 0

    def _table(self, name: str) -> dict[str, dict[str, Any]]:
        return self.tables.setdefault(name, {})

    def add(self, table: str, document: dict[str, Any]) -> str:
        """Seed a record directly (fixtures / dry-run setup)."""
        doc = dict(document)
        doc.setdefault("id", new_id())
        self._table(table)[doc["id"]] = doc
        return doc["id"]

    def all(self, table: str) -> list[dict[str, Any]]:
        return [copy.deepcopy(d) for d in self._table(table).values()]

    def find_by_unique_keys(
        self, kind: EntityKind, email: str, external_id: str
    ) -> dict[str, Any] | None:
        contract = ENTITY_CONTRACTS[kind]
        for doc in self._table(contract.table).values():
            if doc.get("email") == email or doc.get(contract.external_field) == external_id:
                return copy.deepcopy(doc)
        return None

    def insert_one(self, kind: EntityKind, document: dict[str, Any]) -> str:
        contract = ENTITY_CONTRACTS[kind]
        table = self._table(contract.table)
        for key in ("email", contract.external_field):
            value = document.get(key)
            if any(d.get(key) == value for d in table.values()):
                raise PersistenceError(
                    f'duplicate key value violates unique constraint "{contract.table}_{key}_key"'
                )
        self.insert_calls += 1
        doc = dict(document)
        doc.setdefault("id", new_id())
        table[doc["id"]] = doc
        return doc["id"]

    def append_to_array(self, table: str, record_id: str, field: str, values: list[str]) -> None:
        self.append_calls += 1
        doc = self._table(table).get(record_id)
        if doc is None:
            raise PersistenceError(f"{table} record not found: {record_id}")
        doc.setdefault(field, [])
        doc[field] = list(doc[field]) + list(values)

    def find_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        doc = self._table(table).get(record_id)
        return copy.deepcopy(doc) if doc is not None else None

    def add_faculty(self, department_id: str, name: str = "", faculty_id: str | None = None) -> str:
        doc: dict[str, Any] = {"department_id": department_id, "name": name, "students": []}
        if faculty_id is not None:
            doc["id"] = faculty_id
        return self.add(FACULTY_TABLE, doc)
