"""
CampusLog Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Middleware, exception handlers, routers and the service container are
       assembled in one place.
How:   create_app(settings=None, container=None) returns a configured app.
       The lifespan builds the ServiceContainer unless one was passed in,
       which is how the tests inject a SQL store and a temp blob store.
Who:   uvicorn (`uvicorn campuslog.main:app`) and the test-suite.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routers:                                           │
    │   /api/buslog  /api/generatorlog  /api/filelog      │
    │   /api/departments  /api/employees  /api/students   │
    │   /  /health  /files/{path}                         │
    │                                                     │
    │  Exception Handlers:                                │
    │   Validation→400 │ NotFound→404 │ Upload/Store→500  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → build container (validates config) → optional header
              bootstrap
    Shutdown: dispose the database engine, if any
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from campuslog import __version__
from campuslog.config import Settings, settings as default_settings
from campuslog.container import ServiceContainer, build_container
from campuslog.exceptions import (
    CampusLogError,
    NotFoundError,
    RemoteUnavailableError,
    SchemaMismatchError,
    UploadError,
    ValidationError,
)
from campuslog.middleware.logging import RequestLoggingMiddleware
from campuslog.middleware.request_id import RequestIDMiddleware, request_id_var
from campuslog.routes import (
    buslog,
    departments,
    employees,
    filelog,
    files,
    generatorlog,
    health,
    students,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once, at startup.

    Format: 2024-01-15T12:00:00 [INFO] campuslog.access: POST /api/... 201 ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party libraries that log every request at INFO/DEBUG
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("googleapiclient.discovery_cache").setLevel(logging.ERROR)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the service container on startup, release it on shutdown.

    A container already on app.state (passed to create_app) is used as is.
    Configuration errors are logged and re-raised: without spreadsheet ids
    no route can work, so the server should not start.
    """
    app_settings: Settings = app.state.settings
    setup_logging(app_settings.log_level)
    logger.info("=" * 60)
    logger.info("CampusLog Backend %s starting up...", __version__)

    # Why build here and not at import: tests create the app with their own
    # container, and importing main must not need Google credentials
    if app.state.container is None:
        try:
            app.state.container = await build_container(app_settings)
        except ValueError as e:
            logger.error("Configuration error: %s", e)
            logger.error("Fix the configuration and restart the server.")
            raise

    logger.info(
        "Server ready at http://%s:%d", app_settings.backend_host, app_settings.backend_port
    )
    logger.info("=" * 60)

    yield

    logger.info("CampusLog Backend shutting down...")
    await app.state.container.aclose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_response(
    status_code: int,
    error: str,
    msg: str,
    details: Optional[Any] = None,
) -> JSONResponse:
    """Every error body: {"msg", "error", "details"?, "request_id"}."""
    content = {"msg": msg, "error": error, "request_id": request_id_var.get("")}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes.

    Handler hierarchy:
        ValidationError          → 400 (client can fix the input)
        RequestValidationError   → 400 (body is not an object, bad multipart)
        NotFoundError            → 404
        UploadError              → 500
        RemoteUnavailableError   → 500 (generic message, context logged)
        SchemaMismatchError      → 500
        CampusLogError (base)    → 500
        HTTPException            → its own status (unknown route, bad method)
        Exception (fallback)     → 500, stack trace logged only
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Malformed request: %s", request_id_var.get(""), exc.errors())
        return error_response(
            400,
            "validation_error",
            "Invalid request body.",
            {"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return error_response(404, "not_found", exc.message, exc.context)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        rid = request_id_var.get("")
        logger.error("[%s] Upload error: %s | Context: %s", rid, exc.message, exc.context)
        orphan = exc.context.get("orphaned_blob_id")
        details = {"orphaned_blob_id": orphan} if orphan else None
        return error_response(500, "upload_error", exc.message, details)

    @app.exception_handler(RemoteUnavailableError)
    async def handle_remote_unavailable(request: Request, exc: RemoteUnavailableError):
        rid = request_id_var.get("")
        logger.error("[%s] Store unavailable: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, "store_unavailable", exc.message)

    @app.exception_handler(SchemaMismatchError)
    async def handle_schema_mismatch(request: Request, exc: SchemaMismatchError):
        rid = request_id_var.get("")
        logger.error("[%s] Schema mismatch: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, "schema_mismatch", exc.message, exc.context)

    @app.exception_handler(CampusLogError)
    async def handle_campuslog_error(request: Request, exc: CampusLogError):
        rid = request_id_var.get("")
        logger.error("[%s] Application error: %s | Context: %s", rid, exc.message, exc.context)
        return error_response(500, "server_error", exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, "http_error", str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), exc, exc_info=True)
        return error_response(500, "internal_server_error", "Server Error")


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    container: Optional[ServiceContainer] = None,
) -> FastAPI:
    """
    Assemble the FastAPI application.

    Args:
        settings:  Defaults to the environment-driven singleton
        container: Pre-built services (tests); built in the lifespan otherwise
    """
    app_settings = settings or default_settings

    app = FastAPI(
        title="CampusLog API",
        description=(
            "Bus trips, generator runs, paper-file movements and the campus "
            "directory, stored in Google Sheets with photos in Google Drive."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = app_settings
    app.state.container = container

    # ── Middleware (last added runs first) ────────────────────────────────
    # Why expose X-Request-ID: browsers hide non-safelisted response headers
    # from scripts, and the front-ends quote the id in error reports
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    # Why minimum_size=500: list responses compress well; below that the gzip
    # overhead outweighs the savings
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    # Why added last: it must run first, so the access log and every error
    # body already see the request id
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(buslog.router)
    app.include_router(generatorlog.router)
    app.include_router(filelog.router)
    app.include_router(departments.router)
    app.include_router(employees.router)
    app.include_router(students.router)
    app.include_router(files.router)

    return app


# uvicorn campuslog.main:app
app = create_app()
