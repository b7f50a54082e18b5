"""
ChurchFinder Backend — FastAPI Application Factory
===================================================

What:  Builds the FastAPI application: settings, database, shared HTTP client,
       services, middleware, exception handlers and routes.
How:   `create_app()` takes an optional Settings object (and, for tests, an
       engine and an httpx client). Without Settings it calls load_settings(),
       which raises ConfigurationError when a Google credential is missing,
       so `uvicorn churchfinder.main:create_app --factory` fails at startup.

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │  Middleware:  Request ID → Logging → GZip → CORS    │
    │                                                     │
    │  Routes:                                            │
    │  ┌──────────────┐ ┌──────────────┐ ┌─────────────┐  │
    │  │ /api/churches│ │ /api/maps    │ │ /health     │  │
    │  └──────────────┘ └──────────────┘ └─────────────┘  │
    │                                                     │
    │  Exception Handlers:                                │
    │  Validation→400 │ NotFound→404 │ Conflict→409 │     │
    │  Upstream→passthrough │ everything else→500         │
    └─────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log the bound address
    Shutdown: dispose the engine, close the httpx client
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncEngine

from churchfinder import __version__
from churchfinder.config import Settings, load_settings
from churchfinder.database import build_engine, build_session_factory
from churchfinder.exceptions import (
    ChurchFinderError,
    ConfigurationError,
    DatabaseError,
    UpstreamError,
    ValidationError,
)
from churchfinder.middleware.logging import RequestLoggingMiddleware
from churchfinder.middleware.request_id import RequestIDMiddleware, request_id_var
from churchfinder.routes import churches, health, maps
from churchfinder.services.church_service import ChurchService
from churchfinder.services.maps_service import MapsService
from churchfinder.services.photo_search_service import PhotoSearchService
from churchfinder.services.review_service import ReviewService
from churchfinder.services.service_time_service import ServiceTimeService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] churchfinder.services.church_service: ...
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Per-query / per-connection chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    settings: Settings = app.state.settings
    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("ChurchFinder Backend %s starting up...", __version__)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("ChurchFinder Backend shutting down...")
    await app.state.http_client.aclose()
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "") or request_id_var.get("")


def error_body(message: str, code: str, request: Request) -> dict:
    return {"error": message, "code": code, "request_id": _request_id(request)}


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exceptions to status codes and the common error body.

    Handler hierarchy:
        ValidationError         → 400 ("Invalid <thing> data")
        RequestValidationError  → 400 ("Invalid request data")
        NotFoundError           → 404
        ConflictError           → 409
        UpstreamError           → upstream status (502 on transport failure)
        DatabaseError           → 500 (generic message)
        Exception (fallback)    → 500 (generic message, stack trace logged)

    Responses never contain stack traces, SQL, pydantic error lists or
    upstream bodies; those go to the server log.
    """

    @app.exception_handler(ChurchFinderError)
    async def handle_app_error(request: Request, exc: ChurchFinderError):
        rid = _request_id(request)
        if isinstance(exc, ValidationError):
            logger.warning("[%s] %s | Context: %s", rid, exc.message, exc.context)
        elif isinstance(exc, (UpstreamError, DatabaseError)):
            logger.error("[%s] %s | Context: %s", rid, exc.message, exc.context)
        else:
            logger.info("[%s] %s", rid, exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.code, request),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        logger.warning(
            "[%s] Request validation failed on %s: %s",
            _request_id(request),
            request.url.path,
            exc.errors(),
        )
        return JSONResponse(
            status_code=400,
            content=error_body("Invalid request data", ValidationError.code, request),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error(
            "[%s] Unexpected error: %s",
            _request_id(request),
            str(exc),
            exc_info=exc,
        )
        return JSONResponse(
            status_code=500,
            content=error_body(
                "An unexpected error occurred. Please try again later.",
                "internal_server_error",
                request,
            ),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(
    settings: Optional[Settings] = None,
    *,
    engine: Optional[AsyncEngine] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.
        engine: Pre-built async engine (tests pass an in-memory SQLite engine).
        http_client: Client for the Google APIs (tests pass a MockTransport).

    Raises:
        ConfigurationError: settings omitted and the environment lacks a
            required credential.
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="ChurchFinder API",
        description=(
            "Map-based church directory: find-or-create churches by place id, "
            "service times, reviews, and Google Maps / Custom Search proxies."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # ── Shared resources ──────────────────────────────────────────────────
    engine = engine or build_engine(settings)
    http_client = http_client or httpx.AsyncClient()

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.http_client = http_client

    church_service = ChurchService(find_or_create_attempts=settings.find_or_create_attempts)
    app.state.church_service = church_service
    app.state.service_time_service = ServiceTimeService(church_service)
    app.state.review_service = ReviewService(church_service)
    app.state.maps_service = MapsService(settings, http_client)
    app.state.photo_search_service = PhotoSearchService(settings, http_client)

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(churches.router)
    app.include_router(maps.router)
    app.include_router(health.router)

    return app


def run() -> None:
    """Console entry point: load settings, fail fast, serve with uvicorn."""
    import uvicorn

    try:
        settings = load_settings()
    except ConfigurationError as e:
        setup_logging()
        logger.error("%s", e.message)
        logger.error("Fix the configuration and restart the server.")
        raise SystemExit(1)

    uvicorn.run(create_app(settings), host=settings.backend_host, port=settings.backend_port)


if __name__ == "__main__":
    run()
