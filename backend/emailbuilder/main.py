"""
Email Builder Backend — FastAPI Application Factory
====================================================

What:  Creates and configures the FastAPI application instance.
How:   Factory pattern: create_app() returns a configured FastAPI instance;
       the lifespan builds the store and upload client and publishes them
       on `app.state` for the dependencies in `emailbuilder.dependencies`.
Who:   uvicorn (`emailbuilder.main:app`), `python -m emailbuilder`, tests.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │  Middleware:  Request ID → Access Log → GZip → CORS →    │
    │               Unexpected Error                           │
    │                                                          │
    │  Routes:                                                 │
    │   /api/email-templates[/{id}]   /api/upload-image        │
    │   /health                                                │
    │                                                          │
    │  Exception Handlers:                                     │
    │   Validation→400 │ NotFound→404 │ Persistence/Upload→500 │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (logged, never fatal)
    3. Connect the template store (failure logged, process keeps serving)
    4. Build the Cloudinary upload client

    Shutdown:
    1. Dispose the store's connection pool
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from emailbuilder import __version__
from emailbuilder.config import Settings, settings as default_settings
from emailbuilder.database import TemplateStore
from emailbuilder.exceptions import (
    EmailBuilderError,
    NotFoundError,
    PersistenceError,
    StoreConnectionError,
    UploadError,
    ValidationError,
)
from emailbuilder.middleware.errors import GENERIC_ERROR, UnexpectedErrorMiddleware
from emailbuilder.middleware.logging import RequestLoggingMiddleware
from emailbuilder.middleware.request_id import REQUEST_ID_HEADER, RequestIDMiddleware, request_id_var
from emailbuilder.routes import health, templates, upload
from emailbuilder.services.cloudinary_service import CloudinaryUploader

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure logging for the whole process.

    Format: 2024-05-01T09:30:00 [INFO] emailbuilder.access: GET /api/... 200 3.1ms
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Third-party loggers that are chatty at INFO
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the long-lived handles, run the app, release the handles.

    A failed store connection or missing media credentials never stop the
    process: the error is logged and the affected requests fail with 500.
    """
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Email Builder backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))

    store = TemplateStore.from_settings(settings)
    try:
        await store.connect()
    except StoreConnectionError as e:
        logger.error("Template store connection error: %s | Context: %s", e.message, e.context)
        logger.error("Continuing without a working store; template requests will fail.")

    app.state.store = store
    app.state.media_uploader = CloudinaryUploader.from_settings(settings)

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Email Builder backend shutting down...")
    await store.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    # The catch-all handler runs outside the request ID middleware, where
    # the ContextVar has already been reset; request.state survives.
    return request_id_var.get("") or getattr(request.state, "request_id", "")


def _error_response(request: Request, status_code: int, message: str) -> JSONResponse:
    rid = _request_id(request)
    return JSONResponse(
        status_code=status_code,
        content={"error": message, "request_id": rid},
        headers={REQUEST_ID_HEADER: rid} if rid else None,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to status codes and `{"error": ...}` bodies.

    Handler hierarchy:
        RequestValidationError  → 400 "Invalid request body."
        ValidationError         → 400 (includes bad ids and unsupported formats)
        NotFoundError           → 404 "Template not found."
        PersistenceError        → 500 static per-operation message
        UploadError             → 500 "Failed to upload image."
        EmailBuilderError       → 500 generic
        HTTPException           → its own status, detail as the error text
        Exception               → 500 generic (raised outside UnexpectedErrorMiddleware)

    Internal details (driver errors, SDK messages) are logged, never returned.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning("[%s] Invalid request body: %s", _request_id(request), exc.errors())
        return _error_response(request, 400, "Invalid request body.")

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", _request_id(request), exc.message)
        return _error_response(request, 400, exc.message)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(request, 404, exc.message)

    @app.exception_handler(PersistenceError)
    async def handle_persistence_error(request: Request, exc: PersistenceError):
        logger.error("[%s] Persistence error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error_response(request, 500, exc.message)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        logger.error("[%s] Upload error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error_response(request, 500, exc.message)

    @app.exception_handler(EmailBuilderError)
    async def handle_app_error(request: Request, exc: EmailBuilderError):
        logger.error("[%s] Application error: %s | Context: %s", _request_id(request), exc.message, exc.context)
        return _error_response(request, 500, GENERIC_ERROR)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": str(exc.detail), "request_id": _request_id(request)},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=True,
        )
        return _error_response(request, 500, GENERIC_ERROR)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Overrides the environment-derived settings (tests).
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Email Builder API",
        description=(
            "Stores email templates (a title plus ordered section blocks) for the "
            "email-builder UI and uploads images to Cloudinary."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS → UnexpectedError → routes

    # Innermost, so unexpected 500s still get CORS headers on the way out
    app.add_middleware(UnexpectedErrorMiddleware)

    # Permissive by default; the frontend origin is always listed so that
    # credentialed requests from it get an explicit Allow-Origin.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(templates.router)
    app.include_router(upload.router)
    app.include_router(health.router)

    return app


# uvicorn entry point: `uvicorn emailbuilder.main:app`
app = create_app()
