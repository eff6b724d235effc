from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import APIRouter, Depends, FastAPI, File, Request, UploadFile
from fastapi.responses import JSONResponse, Response

from ..config.loader import DEFAULT_CONFIG_PATH, default_config, load_config
from ..db.gateway import PersistenceGateway
from ..excel.reader import DecodeError
from ..excel.schema import SchemaError
from ..excel.template import build_template
from ..logging.init import setup_logging
from ..models.actor import Actor
from ..models.config_models import EntityKind, PipelineConfig
from ..services.credentials import CredentialHasher
from ..services.pipeline import OwnerNotFoundError, RosterUpdateError, resolve_owner, run_batch

"""HTTP surface for the bulk upload pipeline (FastAPI).

Routes, per entity kind (prefix /api/bulk-students or /api/bulk-colleges):

    POST {prefix}/bulk-upload        multipart field `excelFile`
    GET  {prefix}/download-template  xlsx template with an Instructions sheet

Authentication happens upstream; the app asks its actor resolver for the
authenticated user and answers 401 when there is none. The default resolver
trusts the X-Actor-Id / X-Actor-Role headers set by the session proxy.

Routes are plain `def` so the synchronous batch runs in the worker threadpool.
"""

__all__ = [
    "AuthenticationError",
    "UploadRejectedError",
    "build_app",
    "create_app",
    "header_actor_resolver",
]

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ALLOWED_CONTENT_TYPES = frozenset({"application/vnd.ms-excel", XLSX_MIME})
ALLOWED_EXTENSIONS = (".xlsx", ".xls")

ActorResolver = Callable[[Request], Actor | None]


class AuthenticationError(Exception):
    """Raised when a request carries no authenticated actor."""


class UploadRejectedError(Exception):
    """Raised when the upload itself is unacceptable (missing, wrong type, too large)."""


def header_actor_resolver(request: Request) -> Actor | None:
    actor_id = request.headers.get("X-Actor-Id")
    if not actor_id:
        return None
    return Actor(id=actor_id.strip(), role=request.headers.get("X-Actor-Role", "").strip().lower())


def get_actor(request: Request) -> Actor:
    actor = request.app.state.actor_resolver(request)
    if actor is None:
        raise AuthenticationError("Authentication required")
    return actor


def _error(status_code: int, error: str, details: Any = None) -> JSONResponse:
    body: dict[str, Any] = {"error": error}
    if details is not None:
        body["details"] = details
    return JSONResponse(status_code=status_code, content=body)


def _read_upload(upload: UploadFile | None, limit: int) -> bytes:
    if upload is None:
        raise UploadRejectedError("No Excel file uploaded")
    name = (upload.filename or "").lower()
    if upload.content_type not in ALLOWED_CONTENT_TYPES and not name.endswith(ALLOWED_EXTENSIONS):
        raise UploadRejectedError("Only Excel files are allowed!")
    data = upload.file.read(limit + 1)
    if len(data) > limit:
        raise UploadRejectedError(f"File too large (limit {limit} bytes)")
    return data


def _build_router(kind: EntityKind) -> APIRouter:
    contract = kind.contract
    router = APIRouter(prefix=contract.route_prefix, tags=[f"bulk-{contract.table}"])

    @router.post("/bulk-upload")
    def bulk_upload(
        request: Request,
        excel_file: UploadFile | None = File(None, alias="excelFile"),
        actor: Actor = Depends(get_actor),
    ) -> Any:
        state = request.app.state
        try:
            buffer = _read_upload(excel_file, state.config.max_upload_bytes)
        except UploadRejectedError as e:
            return _error(400, str(e))

        try:
            owner = resolve_owner(state.gateway, actor) if kind is EntityKind.STUDENT else None
            report = run_batch(
                buffer,
                kind,
                actor,
                state.gateway,
                state.hasher,
                owner=owner,
                config=state.config,
                file_name=excel_file.filename or "<upload>",  # type: ignore[union-attr]
            )
        except OwnerNotFoundError as e:
            return _error(404, str(e))
        except SchemaError as e:
            return _error(
                400,
                str(e),
                {"missingColumns": e.missing, "requiredColumns": e.required},
            )
        except DecodeError as e:
            return _error(400, str(e))
        except RosterUpdateError as e:
            body = {"error": "Failed to update coordinator roster", "details": str(e)}
            body.update(e.report.to_dict())
            return JSONResponse(status_code=500, content=body)
        except Exception as e:
            logger.exception("bulk upload failed kind=%s", kind.value)
            return _error(500, "Server error during bulk upload", str(e))

        return {"message": "Bulk upload completed", **report.to_dict()}

    @router.get("/download-template")
    def download_template() -> Response:
        try:
            content = build_template(kind)
        except Exception:
            logger.exception("template generation failed kind=%s", kind.value)
            return _error(500, "Failed to generate template")
        return Response(
            content=content,
            media_type=XLSX_MIME,
            headers={"Content-Disposition": f"attachment; filename={contract.template_filename}"},
        )

    return router


def create_app(
    gateway: PersistenceGateway,
    config: PipelineConfig | None = None,
    *,
    hasher: CredentialHasher | None = None,
    actor_resolver: ActorResolver | None = None,
    lifespan: Any = None,
) -> FastAPI:
    config = config or default_config()
    app = FastAPI(title="Bulk upload", lifespan=lifespan)
    app.state.config = config
    app.state.gateway = gateway
    app.state.hasher = hasher or CredentialHasher(config.bcrypt_rounds)
    app.state.actor_resolver = actor_resolver or header_actor_resolver

    @app.exception_handler(AuthenticationError)
    async def _unauthenticated(request: Request, exc: AuthenticationError) -> JSONResponse:
        return _error(401, str(exc))

    for kind in EntityKind:
        app.include_router(_build_router(kind))
    return app


def build_app(actor_resolver: ActorResolver | None = None) -> FastAPI:
    """ASGI factory: `uvicorn bulk_upload.api.app:build_app --factory`.

    Reads the config named by BULK_UPLOAD_CONFIG (default
    config/bulk_upload.yml, optional) and connects to PostgreSQL.
    Without an actor_resolver the caller identity is read from the
    X-Actor-Id / X-Actor-Role headers, which only an authenticating proxy
    in front of the service may set; a warning is logged at startup.
    """
    from ..db.postgres import PostgresGateway

    setup_logging()
    path = Path(os.getenv("BULK_UPLOAD_CONFIG", str(DEFAULT_CONFIG_PATH)))
    config = load_config(path) if path.exists() else default_config()
    gateway = PostgresGateway.from_config(config.database)
    if actor_resolver is None:
        logger.warning(
            "no actor resolver configured: trusting X-Actor-Id / X-Actor-Role request headers; "
            "run behind a proxy that authenticates users and sets them"
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        gateway.close()

    return create_app(gateway, config, actor_resolver=actor_resolver, lifespan=lifespan)
