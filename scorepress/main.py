"""
ScorePress Backend — FastAPI Application Factory
==================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       exception handling and lifecycle management in one place.
How:   Factory pattern: create_app() returns a configured FastAPI instance.
Who:   uvicorn (`uvicorn scorepress.main:app`) or the `scorepress` console script.

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                        FastAPI App                        │
    │                                                           │
    │  Middleware:  [Request ID] → [Access Log] → [CORS]        │
    │                                                           │
    │  Routes:                                                  │
    │   GET  /              GET  /health                        │
    │   POST /saveStudentDetails   POST /getStudentDetails      │
    │   POST /generatePDF          POST /combine-pdfs           │
    │                                                           │
    │  Exception Handlers (one JSON envelope everywhere):       │
    │   Validation→400 │ NotFound→404 │ Storage/Generation→500  │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  logging → config check → Mongo client + index → httpx client
    Shutdown: close httpx client → close Mongo client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator

import httpx
import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from scorepress import __version__
from scorepress.config import settings
from scorepress.database import (
    close_mongo_client,
    create_mongo_client,
    ensure_indexes,
    student_collection,
)
from scorepress.exceptions import (
    GenerationError,
    NotFoundError,
    ScorePressError,
    StorageError,
    UpstreamFetchError,
    ValidationError,
)
from scorepress.middleware.logging import RequestLoggingMiddleware
from scorepress.middleware.request_id import RequestIDMiddleware, request_id_var
from scorepress.routes import health, pdfs, students

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the entire application.

    Called once during startup, before anything else logs.
    Format: 2024-01-15T12:00:00 [INFO] scorepress.services.pdf_combiner: message
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # One line per upstream request / driver heartbeat otherwise
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("pymongo").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Own the two long-lived I/O handles: the Mongo client and the httpx client.

    Both are stored on `app.state` and reach handlers only through
    dependencies (`get_student_collection`, `get_http_client`).
    """
    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging()
    logger.info("=" * 60)
    logger.info("ScorePress Backend %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: PDF endpoints and /health work without a real store
        logger.warning("%s", str(e))

    mongo_client = create_mongo_client(settings)
    app.state.mongo_client = mongo_client
    app.state.student_collection = student_collection(mongo_client, settings)
    await ensure_indexes(app.state.student_collection)

    app.state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(settings.fetch_timeout_seconds),
        follow_redirects=True,
    )
    logger.info(
        "Upstream client ready (timeout=%.0fs, image concurrency=%d, catalog=%d entries)",
        settings.fetch_timeout_seconds,
        settings.image_fetch_concurrency,
        len(settings.pdf_catalog),
    )

    logger.info("Server ready at http://%s:%d", settings.host, settings.port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("ScorePress Backend shutting down...")
    await app.state.http_client.aclose()
    await close_mongo_client(app.state.mongo_client)
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: dict | None = None,
    request_id: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details or None,
            "request_id": request_id if request_id is not None else request_id_var.get(""),
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the shared error envelope.

    Handler table:
        ValidationError          → 400 validation_error
        RequestValidationError   → 400 validation_error (malformed body)
        NotFoundError            → 404 not_found
        UpstreamFetchError       → 502 upstream_error (only if one escapes a service)
        StorageError             → 500 storage_error
        GenerationError          → 500 generation_error
        ScorePressError (base)   → 500 server_error
        Exception (fallback)     → 500 internal_server_error

    Stack traces are logged, never returned.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Body is not the expected shape (e.g. destinations is a string)."""
        errors = [
            {
                "field": ".".join(str(part) for part in err.get("loc", ())[1:]) or "body",
                "message": err.get("msg", "invalid value"),
            }
            for err in exc.errors()
        ]
        logger.warning("[%s] Malformed request body: %s", request_id_var.get(""), errors)
        return _error_response(
            400,
            "validation_error",
            "Request body is malformed",
            {"errors": errors},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(UpstreamFetchError)
    async def handle_upstream_error(request: Request, exc: UpstreamFetchError):
        logger.error("[%s] Upstream fetch error: %s", request_id_var.get(""), exc.message)
        return _error_response(502, "upstream_error", exc.message)

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        logger.error(
            "[%s] Storage error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "storage_error", exc.message)

    @app.exception_handler(GenerationError)
    async def handle_generation_error(request: Request, exc: GenerationError):
        logger.error(
            "[%s] Generation error: %s | Context: %s",
            request_id_var.get(""),
            exc.message,
            exc.context,
        )
        return _error_response(500, "generation_error", exc.message)

    @app.exception_handler(ScorePressError)
    async def handle_app_error(request: Request, exc: ScorePressError):
        logger.error("[%s] Application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", exc.message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Runs in Starlette's ServerErrorMiddleware, outside RequestIDMiddleware,
        so the ContextVar value is not visible here; the id is read back
        from request.state, which lives in the shared request scope.
        """
        rid = getattr(request.state, "request_id", "")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        response = _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
            request_id=rid,
        )
        if rid:
            response.headers["X-Request-ID"] = rid
        return response


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Importing this module does not connect to anything; connections are
    opened by the lifespan handler when the server starts.
    """
    app = FastAPI(
        title="ScorePress API",
        description=(
            "Student score records, bucket-list photo booklets, "
            "and selective merging of a fixed PDF catalog."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added executes first: RequestID → Logging → CORS
    origins = settings.cors_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        # Browsers reject credentialed requests to a wildcard origin
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Content-Disposition"],
    )
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(health.router)
    app.include_router(students.router)
    app.include_router(pdfs.router)

    return app


# uvicorn expects `scorepress.main:app` to be importable
app = create_app()


def run() -> None:
    """Console entry point: serve on settings.host:settings.port."""
    uvicorn.run(
        "scorepress.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
