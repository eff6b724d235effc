from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from ..db.gateway import PersistenceError, PersistenceGateway, is_valid_id
from ..models.actor import Actor, Owner
from ..models.config_models import EntityKind
from ..models.outcome import Duplicate, Error, Outcome, Success
from ..models.row_data import (
    CollegeRow,
    RowRecord,
    RowValidationError,
    StudentRow,
    ValidatedRow,
    validate_row,
)
from .credentials import CredentialHasher, default_password

"""Per-row processing.

Each row runs through:
    presence check → normalize → duplicate check → relation resolution
    → credential synthesis → persist
and ends as exactly one Outcome. No exception escapes process_row(); the batch
loop can never be terminated by a single bad row.
"""

__all__ = [
    "BatchContext",
    "DuplicateEntityError",
    "InvalidRelationError",
    "INSTITUTE_ROLE",
    "process_row",
]

logger = logging.getLogger(__name__)

INSTITUTE_ROLE = "institute"


class DuplicateEntityError(Exception):
    """Raised when a row's unique key collides with a persisted record."""

    def __init__(self, existing: str) -> None:
        self.existing = existing
        super().__init__(f"duplicate of existing record {existing}")


class InvalidRelationError(PersistenceError):
    """Raised when the owning record reference cannot be resolved."""


@dataclass
class BatchContext:
    """Everything a row needs besides its own cells.

    actor and owner are resolved once per batch by the caller; new_ids collects
    the ids of inserted students for the single roster write after the loop.
    """
    kind: EntityKind
    actor: Actor
    gateway: PersistenceGateway
    hasher: CredentialHasher
    owner: Owner | None = None
    today: date | None = None
    new_ids: list[str] = field(default_factory=list)


def _check_duplicate(row: ValidatedRow, ctx: BatchContext) -> None:
    existing = ctx.gateway.find_by_unique_keys(ctx.kind, row.email, row.external_id)
    if existing is not None:
        raise DuplicateEntityError(str(existing.get("email") or row.email))


def _resolve_institute(row: CollegeRow, actor: Actor) -> str:
    reference = row.institute
    if reference is None and actor.role == INSTITUTE_ROLE:
        reference = actor.id
    if reference is None or not is_valid_id(reference):
        raise InvalidRelationError("invalid institute reference")
    return reference


def _password_hash(row: ValidatedRow, ctx: BatchContext) -> str:
    plaintext = row.password if row.password else default_password(row.external_id)
    return ctx.hasher.hash(plaintext)


def _student_document(row: StudentRow, ctx: BatchContext) -> dict[str, Any]:
    if ctx.owner is None:
        raise InvalidRelationError("student batch has no owning faculty")
    return {
        "department_id": ctx.owner.department_id,
        "coordinator_id": ctx.owner.coordinator_id,
        "first_name": row.first_name,
        "last_name": row.last_name,
        "email": row.email,
        "password": _password_hash(row, ctx),
        "student_id": row.roll_number,
        "contact_number": row.contact_number,
        "dob": row.date_of_birth,
        "gender": row.gender or None,
        "address_line1": row.address,
        "enrollment_year": row.enrollment_year,
        "batch": row.batch,
        "status": "Active",
    }


def _college_document(row: CollegeRow, ctx: BatchContext) -> dict[str, Any]:
    institute_id = _resolve_institute(row, ctx.actor)
    return {
        "institute_id": institute_id,
        "name": row.name,
        "code": row.code,
        "email": row.email,
        "password": _password_hash(row, ctx),
        "contact_number": row.contact_number,
        "address_line1": row.line1,
        "address_line2": row.line2,
        "city": row.city,
        "state": row.state,
        "country": row.country,
        "pincode": row.pincode,
        "website": row.website,
        "type": row.type,
        "status": row.status,
    }


def process_row(record: RowRecord, ctx: BatchContext) -> Outcome:
    """Process one decoded row into its Outcome."""
    try:
        row = validate_row(record, ctx.kind, ctx.today)
        _check_duplicate(row, ctx)
        if isinstance(row, StudentRow):
            document = _student_document(row, ctx)
        else:
            document = _college_document(row, ctx)
        entity_id = ctx.gateway.insert_one(ctx.kind, document)
    except RowValidationError as e:
        logger.warning("row=%d validation failed: %s", record.row_number, e)
        return Error(row=record.row_number, message=str(e), data=record.raw())
    except DuplicateEntityError as e:
        logger.info("row=%d duplicate of %s", record.row_number, e.existing)
        return Duplicate(row=record.row_number, existing=e.existing, data=record.raw())
    except PersistenceError as e:
        logger.warning("row=%d not persisted: %s", record.row_number, e)
        return Error(row=record.row_number, message=str(e), data=record.raw())
    except Exception as e:
        logger.exception("row=%d unexpected failure", record.row_number)
        return Error(row=record.row_number, message=str(e) or type(e).__name__, data=record.raw())

    if ctx.kind is EntityKind.STUDENT:
        ctx.new_ids.append(entity_id)
    return Success(
        row=record.row_number,
        entity_id=entity_id,
        display_name=row.display_name,
        email=row.email,
        external_id=row.external_id,
    )
