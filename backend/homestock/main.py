"""
HomeStock Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes app configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   Called by uvicorn to start the server (uvicorn homestock.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌─────────────┐ ┌──────┐ ┌────────┐   │
    │  │ Req ID   │→│  Logging    │→│ GZip │→│  CORS  │   │
    │  └──────────┘ └─────────────┘ └──────┘ └────────┘   │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────────────┐ ┌───────┐ ┌─────────────┐ │
    │  │ /api/v1/stock[/{id}] │ │ GET / │ │ GET /health │ │
    │  └──────────────────────┘ └───────┘ └─────────────┘ │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ Validation→400 │ NotFound→404 │ Upload/DB→500 │  │
    │  └───────────────────────────────────────────────┘  │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Validate configuration (DATABASE_URL required)
    3. Connect to the database (SELECT 1) — failure aborts startup
    4. Build the ImageService from the Cloudinary credentials
    Any StartupError propagates out of the lifespan, so uvicorn exits with
    a non-zero status.

    Shutdown:
    1. Dispose database engine (close all connections)
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from homestock import __version__
from homestock.config import Settings, settings as default_settings
from homestock.database import Database
from homestock.exceptions import (
    DatabaseError,
    HomeStockError,
    NotFoundError,
    StartupError,
    UploadError,
    ValidationError,
)
from homestock.middleware.logging import RequestLoggingMiddleware
from homestock.middleware.request_id import RequestIDMiddleware, request_id_var
from homestock.routes import health, stock
from homestock.services.image_service import ImageService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during app startup (and by the CLI before uvicorn starts).
    """
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[
            logging.StreamHandler(sys.stdout),  # Docker captures stdout
        ],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("urllib3").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the process-wide collaborators and release them on shutdown.

    The Database and ImageService live on `app.state`; routes reach them
    through FastAPI dependencies.

    Raises:
        StartupError: DATABASE_URL missing or database unreachable.
    """
    settings: Settings = app.state.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("HomeStock Backend %s starting up...", __version__)

    try:
        settings.validate_required()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise StartupError(detail=str(e)) from e

    try:
        database = Database.from_settings(settings)
        await database.ping()
    except Exception as e:
        logger.error("Database connection error: %s", str(e))
        raise StartupError(
            detail=f"Could not connect to the database: {e}",
            context={"error_type": type(e).__name__},
        ) from e
    logger.info("Database connected successfully")

    if not settings.cloudinary_configured:
        logger.warning(
            "Cloudinary credentials are incomplete; image uploads will fail. "
            "Set CLOUDINARY_CLOUD_NAME, CLOUDINARY_API_KEY and CLOUDINARY_API_SECRET."
        )

    app.state.database = database
    app.state.image_service = ImageService.from_settings(settings)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.port)
    logger.info("=" * 60)

    yield  # Application runs here

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("HomeStock Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(status_code: int, exc: HomeStockError) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "message": exc.message,
            "error": exc.detail,
            "request_id": request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Register global exception handlers for consistent error responses.

    Handler hierarchy:
        ValidationError  → 400 Bad Request (500 with LENIENT_STATUS_CODES)
        NotFoundError    → 404 Not Found
        UploadError      → 500 Internal Server Error
        DatabaseError    → 500 Internal Server Error
        HomeStockError   → 500 Internal Server Error (catch-all for custom)
        Exception        → 500 Internal Server Error (unexpected errors)

    Context dicts and stack traces are logged server-side only.
    """
    validation_status = 500 if settings.lenient_status_codes else 400

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.detail)
        return _error_response(validation_status, exc)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, exc)

    @app.exception_handler(UploadError)
    async def handle_upload_error(request: Request, exc: UploadError):
        logger.error(
            "[%s] Upload error: %s | Context: %s", request_id_var.get(""), exc.detail, exc.context
        )
        return _error_response(500, exc)

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, exc)

    @app.exception_handler(HomeStockError)
    async def handle_app_error(request: Request, exc: HomeStockError):
        logger.error("[%s] %s: %s", request_id_var.get(""), exc.message, exc.detail)
        return _error_response(500, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Catch-all: generic 500, stack trace logged server-side only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "message": "An unexpected error occurred",
                "error": "Please try again or contact support.",
                "request_id": rid,
            },
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration to build the app with (defaults to the
                  environment-loaded settings). Stored on `app.state`.
    """
    settings = settings or default_settings

    app = FastAPI(
        title="HomeStock API",
        description=(
            "Household inventory tracking: create, list, fetch, update and delete "
            "stock items, with optional images stored on Cloudinary."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition: RequestID runs first
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, settings)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(stock.router)
    app.include_router(health.router)

    return app


# uvicorn expects `homestock.main:app` to be importable
app = create_app()
