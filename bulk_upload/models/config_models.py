from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

"""Config and entity-contract dataclasses for the bulk upload pipeline.

Two kinds of entities can be bulk uploaded: students (owned by the acting
faculty coordinator) and colleges (owned by an institute). Each kind carries a
fixed column contract; the tunable knobs (upload limit, hashing cost, audit log
location, database fallback) live in PipelineConfig and are loaded from YAML by
bulk_upload.config.loader.
"""

DEFAULT_MAX_UPLOAD_BYTES = 5 * 1024 * 1024
DEFAULT_BCRYPT_ROUNDS = 10


class EntityKind(Enum):
    """Entity kinds accepted by the bulk upload endpoints."""
    STUDENT = "student"
    COLLEGE = "college"

    @property
    def contract(self) -> EntityContract:
        return ENTITY_CONTRACTS[self]


@dataclass(frozen=True)
class EntityContract:
    """Column contract and naming for one entity kind.

    required_columns are checked against the header (SchemaError when absent)
    and against every row (row Error when empty). external_column is the
    spreadsheet column holding the kind's external identifier, which together
    with email forms the uniqueness key.
    """
    kind: EntityKind
    table: str  # Store collection / table name
    required_columns: tuple[str, ...]
    optional_columns: tuple[str, ...]
    external_column: str  # rollNumber / code
    external_field: str  # Persisted column of the external id
    id_key: str  # Key of the new id in success payloads
    sheet_name: str  # Data sheet name used by the download template
    template_filename: str
    route_prefix: str

    @property
    def all_columns(self) -> tuple[str, ...]:
        return self.required_columns + self.optional_columns


ENTITY_CONTRACTS: dict[EntityKind, EntityContract] = {
    EntityKind.STUDENT: EntityContract(
        kind=EntityKind.STUDENT,
        table="students",
        required_columns=("firstName", "lastName", "email", "rollNumber"),
        optional_columns=(
            "contactNumber",
            "dateOfBirth",
            "gender",
            "address",
            "year",
            "semester",
            "batch",
            "password",
        ),
        external_column="rollNumber",
        external_field="student_id",
        id_key="studentId",
        sheet_name="Students",
        template_filename="student_upload_template.xlsx",
        route_prefix="/api/bulk-students",
    ),
    EntityKind.COLLEGE: EntityContract(
        kind=EntityKind.COLLEGE,
        table="colleges",
        required_columns=("name", "code", "email"),
        optional_columns=(
            "password",
            "institute",
            "contactNumber",
            "line1",
            "line2",
            "city",
            "state",
            "country",
            "pincode",
            "website",
            "type",
            "status",
        ),
        external_column="code",
        external_field="code",
        id_key="collegeId",
        sheet_name="Colleges",
        template_filename="college_bulk_upload_template.xlsx",
        route_prefix="/api/bulk-colleges",
    ),
}

# Faculty records own the student roster
FACULTY_TABLE = "faculty"
ROSTER_FIELD = "students"


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection configuration.

    Used as fallback when environment variables are not set.
    Environment variables take precedence over these values.
    """
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str | None = None
    dsn: str | None = None


@dataclass(frozen=True)
class PipelineConfig:
    """Root configuration object for bulk upload runs."""
    max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES
    bcrypt_rounds: int = DEFAULT_BCRYPT_ROUNDS
    error_log_dir: str | None = None  # None disables the JSON Lines audit log
    database: DatabaseConfig = field(default_factory=DatabaseConfig)
