"""
Bookshelf Backend — FastAPI Application Factory
=================================================

What:  Creates and configures the FastAPI application instance.
Why:   Centralizes configuration, middleware registration, route mounting,
       and lifecycle management in one place.
How:   create_app(settings) builds the per-application collaborators
       (Database, TokenService, AuthService), stores them on app.state, and
       wires middleware, exception handlers, and routers.
Who:   uvicorn imports `bookshelf.main:app`; tests call create_app() directly
       with their own Settings.

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                      FastAPI App                         │
    │                                                          │
    │  Middleware Chain (outer → inner):                       │
    │  ┌────────┐ ┌─────────┐ ┌──────┐ ┌──────┐ ┌───────────┐  │
    │  │ Req ID │→│ Logging │→│ GZip │→│ CORS │→│ Auth Gate │  │
    │  └────────┘ └─────────┘ └──────┘ └──────┘ └───────────┘  │
    │                                                          │
    │  Routes:                                                 │
    │  ┌────────────┐ ┌──────────────┐ ┌─────────────┐         │
    │  │ /api/auth  │ │ /api/books   │ │ GET /health │         │
    │  └────────────┘ └──────────────┘ └─────────────┘         │
    │                                                          │
    │  Exception Handlers:                                     │
    │  Validation→400 │ Auth→400 │ Unauthorized→401 │          │
    │  NotFound→404 │ Database→500 │ anything else→500         │
    └──────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:
    1. Initialize logging
    2. Warn about development-only secrets
    3. Create missing tables
    4. Seed the admin account and sample catalog (if enabled)

    Shutdown:
    1. Dispose database engine (close all connections)
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

from bookshelf import __version__
from bookshelf.config import Settings, get_settings
from bookshelf.database import Database
from bookshelf.exceptions import (
    AuthError,
    BookshelfError,
    DatabaseError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from bookshelf.middleware.auth_gate import AuthGateMiddleware
from bookshelf.middleware.logging import RequestLoggingMiddleware
from bookshelf.middleware.request_id import RequestIDMiddleware, request_id_var
from bookshelf.routes import auth, books, health
from bookshelf.services.auth_service import AuthService
from bookshelf.services.seed_service import seed_initial_data
from bookshelf.services.token_service import TokenService

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(level: str) -> None:
    """
    Configure logging for the entire application.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s
    Called once during startup, before anything else logs.
    """
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    # Our access-log middleware replaces uvicorn's
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: logging, config warnings, schema, seed data.
    Shutdown: dispose the engine.
    """
    settings: Settings = app.state.settings
    database: Database = app.state.database

    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info("Bookshelf Backend %s starting up...", __version__)

    # Warn, don't exit: a dev box runs fine with the defaults
    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.warning("%s", str(e))

    await database.create_all()
    logger.info("Database schema ready")

    if settings.seed_data:
        await seed_initial_data(database.session_factory, settings)

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Bookshelf Backend shutting down...")
    await database.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and one error body format.

    Handler hierarchy:
        ValidationError     → 400 Bad Request (message + field details)
        RequestValidationError → 400 (malformed body or parameter)
        AuthError           → 400 Bad Request (message only)
        UnauthorizedError   → 401 Unauthorized
        NotFoundError       → 404 Not Found
        DatabaseError       → 500 (generic message; details logged)
        BookshelfError      → 500 (catch-all for custom)
        Exception           → 500 (unexpected errors)

    Security: handlers never put stack traces or SQL in the response.
    """

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        rid = request_id_var.get("")
        logger.warning("[%s] Validation error: %s", rid, exc.message)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": exc.message,
                "details": exc.context,
                "request_id": rid,
            },
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation_error(request: Request, exc: RequestValidationError):
        """Malformed bodies and parameters are client errors like any other: 400."""
        rid = request_id_var.get("")
        errors = [
            {"field": ".".join(str(part) for part in err.get("loc", ())), "message": err.get("msg", "")}
            for err in exc.errors()
        ]
        logger.warning("[%s] Request validation failed: %s", rid, errors)
        return JSONResponse(
            status_code=400,
            content={
                "error": "validation_error",
                "message": "Request is missing or has invalid fields",
                "details": {"errors": errors},
                "request_id": rid,
            },
        )

    @app.exception_handler(AuthError)
    async def handle_auth_error(request: Request, exc: AuthError):
        """Context stays server-side: it records which credential check failed."""
        rid = request_id_var.get("")
        logger.info("[%s] Auth rejected: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=400,
            content={
                "error": "auth_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=401,
            content={
                "error": "unauthorized",
                "message": exc.message,
                "request_id": rid,
            },
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        return JSONResponse(
            status_code=404,
            content={
                "error": "not_found",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        rid = request_id_var.get("")
        logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": "An internal error occurred. Please try again later.",
                "request_id": rid,
            },
        )

    @app.exception_handler(BookshelfError)
    async def handle_bookshelf_error(request: Request, exc: BookshelfError):
        rid = request_id_var.get("")
        logger.error("[%s] Unhandled application error: %s | Context: %s", rid, exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content={
                "error": "server_error",
                "message": exc.message,
                "request_id": rid,
            },
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """Stack trace goes to the log only."""
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_server_error",
                "message": "An unexpected error occurred. Please try again or contact support.",
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
        settings: Configuration to build the app with. Defaults to the
                  environment-derived `get_settings()`.

    The engine is created here (it connects lazily) rather than in the
    lifespan, so test clients that skip lifespan events still get one.
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Bookshelf API",
        description=(
            "Book catalog backend: browse, search, and filter books publicly; "
            "create, update, delete, and count views with a bearer token."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # ── Per-application collaborators ─────────────────────────────────────
    token_service = TokenService(
        secret=settings.jwt_secret,
        ttl_seconds=settings.jwt_ttl_seconds,
        algorithm=settings.jwt_algorithm,
    )
    app.state.settings = settings
    app.state.database = Database(settings)
    app.state.token_service = token_service
    app.state.auth_service = AuthService(token_service, bcrypt_rounds=settings.bcrypt_rounds)

    # ── Register Middleware ───────────────────────────────────────────────
    # Middleware executes in REVERSE order of addition (last added = outermost).
    # Adding Gate → CORS → GZip → Logging → RequestID gives the execution order
    # RequestID → Logging → GZip → CORS → Gate.
    app.add_middleware(AuthGateMiddleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID"],
    )

    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(auth.router)
    app.include_router(books.router)
    app.include_router(health.router)

    return app


# uvicorn expects `bookshelf.main:app` to be importable
app = create_app()
