from __future__ import annotations

import logging
import os
import threading
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg2
import psycopg2.extras
from psycopg2 import sql
from psycopg2.pool import ThreadedConnectionPool

from ..models.config_models import ENTITY_CONTRACTS, DatabaseConfig, EntityKind
from .gateway import PersistenceError, PersistenceGateway, new_id

"""PostgreSQL persistence gateway (psycopg2).

Connections run in autocommit mode: every insert is its own transaction, so a
crash mid-batch leaves earlier rows committed and the duplicate lookup of row N
sees the insert of row N-1.

Expected tables (created outside this package):
    students(id uuid pk, email unique, student_id unique, ...)
    colleges(id uuid pk, email unique, code unique, institute_id uuid, ...)
    faculty(id uuid pk, department_id uuid, students uuid[])

Connection resolution order:
    1. DATABASE_URL / PGDSN environment variables (whole DSN)
    2. PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the `database` section of the YAML config
"""

__all__ = [
    "PostgresGateway",
    "resolve_dsn",
]

logger = logging.getLogger(__name__)

psycopg2.extras.register_uuid()


def _plain(row: Any) -> dict[str, Any] | None:
    # uuid.UUID -> str so records compare equal to ids handed out by insert_one
    if row is None:
        return None
    return {k: (str(v) if isinstance(v, uuid.UUID) else v) for k, v in row.items()}


def resolve_dsn(db_cfg: DatabaseConfig) -> str:
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


class PostgresGateway(PersistenceGateway):
    """Pooled gateway shared by all request threads.

    A bounded semaphore sized to the pool makes callers wait for a free
    connection instead of failing with "connection pool exhausted".
    """

    def __init__(self, dsn: str, *, min_connections: int = 1, max_connections: int = 5) -> None:
        try:
            self._pool = ThreadedConnectionPool(min_connections, max_connections, dsn)
        except psycopg2.Error as e:
            raise PersistenceError(f"database connection failed: {e}") from e
        self._slots = threading.BoundedSemaphore(max_connections)

    @classmethod
    def from_config(cls, db_cfg: DatabaseConfig) -> PostgresGateway:
        return cls(resolve_dsn(db_cfg))

    @contextmanager
    def _cursor(self) -> Iterator[Any]:
        with self._slots:
            try:
                conn = self._pool.getconn()
            except psycopg2.Error as e:
                raise PersistenceError(f"no database connection available: {e}") from e
            try:
                conn.autocommit = True
                with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                    yield cur
            except psycopg2.Error as e:
                raise PersistenceError(str(e).strip()) from e
            finally:
                self._pool.putconn(conn)

    def find_by_unique_keys(
        self, kind: EntityKind, email: str, external_id: str
    ) -> dict[str, Any] | None:
        contract = ENTITY_CONTRACTS[kind]
        query = sql.SQL("SELECT * FROM {table} WHERE email = %s OR {ext} = %s LIMIT 1").format(
            table=sql.Identifier(contract.table),
            ext=sql.Identifier(contract.external_field),
        )
        with self._cursor() as cur:
            cur.execute(query, (email, external_id))
            row = cur.fetchone()
        return _plain(row)

    def insert_one(self, kind: EntityKind, document: dict[str, Any]) -> str:
        contract = ENTITY_CONTRACTS[kind]
        doc = dict(document)
        doc.setdefault("id", new_id())
        columns = list(doc.keys())
        query = sql.SQL("INSERT INTO {table} ({cols}) VALUES ({vals}) RETURNING id").format(
            table=sql.Identifier(contract.table),
            cols=sql.SQL(",").join(sql.Identifier(c) for c in columns),
            vals=sql.SQL(",").join(sql.Placeholder() for _ in columns),
        )
        with self._cursor() as cur:
            cur.execute(query, [doc[c] for c in columns])
            returned = cur.fetchone()
        return str(returned["id"])

    def append_to_array(self, table: str, record_id: str, field: str, values: list[str]) -> None:
        query = sql.SQL(
            "UPDATE {table} SET {field} = array_cat(coalesce({field}, '{{}}'), %s::uuid[]) "
            "WHERE id = %s"
        ).format(table=sql.Identifier(table), field=sql.Identifier(field))
        with self._cursor() as cur:
            cur.execute(query, (list(values), record_id))
            if cur.rowcount == 0:
                raise PersistenceError(f"{table} record not found: {record_id}")

    def find_by_id(self, table: str, record_id: str) -> dict[str, Any] | None:
        query = sql.SQL("SELECT * FROM {table} WHERE id = %s").format(table=sql.Identifier(table))
        with self._cursor() as cur:
            cur.execute(query, (record_id,))
            row = cur.fetchone()
        return _plain(row)

    def close(self) -> None:
        logger.debug("closing connection pool")
        self._pool.closeall()
