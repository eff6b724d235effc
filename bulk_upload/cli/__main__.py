from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from bulk_upload.config.loader import DEFAULT_CONFIG_PATH, ConfigError, default_config, load_config
from bulk_upload.db.gateway import PersistenceError, PersistenceGateway
from bulk_upload.db.memory import InMemoryGateway
from bulk_upload.excel.template import build_template
from bulk_upload.logging.init import setup_logging
from bulk_upload.models.actor import Actor
from bulk_upload.models.config_models import EntityKind
from bulk_upload.services.credentials import CredentialHasher
from bulk_upload.services.pipeline import (
    REJECTION_ERRORS,
    OwnerNotFoundError,
    RosterUpdateError,
    resolve_owner,
    run_batch,
)

"""CLI entrypoint.

    python -m bulk_upload.cli upload student roster.xlsx --actor-id <uuid>
    python -m bulk_upload.cli upload college colleges.xlsx --actor-id <uuid> --actor-role institute
    python -m bulk_upload.cli template student student_upload_template.xlsx

Exit codes:
    0  every row was created
    2  batch completed with errors and/or duplicates
    1  fatal: bad config, rejected file, unknown owner, database unavailable
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True lets .env win over variables already in the environment, so
    the PostgreSQL connection settings in .env take priority.
    """
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    kinds = [k.value for k in EntityKind]
    p = argparse.ArgumentParser(prog="bulk_upload", description="Spreadsheet bulk upload")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    up = sub.add_parser("upload", help="Import one spreadsheet")
    up.add_argument("kind", choices=kinds)
    up.add_argument("file", type=Path)
    up.add_argument("--actor-id", required=True, help="Id of the uploading user")
    up.add_argument("--actor-role", default="faculty", help="Role of the uploading user")
    up.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH)
    up.add_argument("--dry-run", action="store_true", help="Use an in-memory store")
    up.add_argument("--report", type=Path, help="Write the JSON report to this path")

    tpl = sub.add_parser("template", help="Write the upload template")
    tpl.add_argument("kind", choices=kinds)
    tpl.add_argument("out", type=Path)
    return p.parse_args(argv)


def _dry_run_gateway(kind: EntityKind, actor: Actor) -> InMemoryGateway:
    gateway = InMemoryGateway()
    if kind is EntityKind.STUDENT:
        gateway.add_faculty(department_id=actor.id, name="dry-run", faculty_id=actor.id)
    return gateway


def _upload(args: argparse.Namespace, logger: logging.Logger) -> int:
    if args.config.exists():
        try:
            cfg = load_config(args.config)
        except ConfigError as e:
            logger.error(f"config: {e}")
            return EXIT_FATAL
    else:
        logger.info(f"config {args.config} not found, using defaults")
        cfg = default_config()

    if not args.file.exists():
        logger.error(f"file not found: {args.file}")
        return EXIT_FATAL

    kind = EntityKind(args.kind)
    actor = Actor(id=args.actor_id, role=args.actor_role.lower())

    gateway: PersistenceGateway
    if args.dry_run:
        gateway = _dry_run_gateway(kind, actor)
    else:
        from bulk_upload.db.postgres import PostgresGateway

        try:
            gateway = PostgresGateway.from_config(cfg.database)
        except PersistenceError as e:
            logger.error(f"database: {e}")
            return EXIT_FATAL

    try:
        owner = resolve_owner(gateway, actor) if kind is EntityKind.STUDENT else None
        report = run_batch(
            args.file.read_bytes(),
            kind,
            actor,
            gateway,
            CredentialHasher(cfg.bcrypt_rounds),
            owner=owner,
            config=cfg,
            file_name=args.file.name,
        )
    except OwnerNotFoundError as e:
        logger.error(f"owner: {e}")
        return EXIT_FATAL
    except REJECTION_ERRORS as e:
        logger.error(f"rejected: {e}")
        return EXIT_FATAL
    except RosterUpdateError as e:
        logger.error(str(e))
        return EXIT_FATAL
    finally:
        gateway.close()

    if args.report is not None:
        args.report.write_text(json.dumps(report.to_dict(), ensure_ascii=False, indent=2), encoding="utf-8")
        logger.info(f"report written: {args.report}")

    if report.summary.errors or report.summary.duplicates:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"), override=True)

    if args.debug:
        for h in logger.handlers:
            h.setLevel("DEBUG")
        logger.setLevel("DEBUG")
        logger.debug("debug mode enabled")

    if args.command == "template":
        kind = EntityKind(args.kind)
        args.out.write_bytes(build_template(kind))
        logger.info(f"template written: {args.out}")
        return EXIT_SUCCESS_ALL

    return _upload(args, logger)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
