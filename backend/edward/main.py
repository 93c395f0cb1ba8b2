"""
Edward Backend — FastAPI Application Factory
==============================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() wires middleware, exception handlers and routers;
       uvicorn serves the module-level `app` (uvicorn edward.main:app).

Application Architecture:
    ┌───────────────────────────────────────────────────────────┐
    │                       FastAPI App                         │
    │                                                           │
    │  Middleware Chain:                                        │
    │  ┌──────────────┐ ┌──────────┐ ┌──────────────────┐       │
    │  │  Rate Limit  │→│ Req ID   │→│  Access Logging  │       │
    │  └──────────────┘ └──────────┘ └──────────────────┘       │
    │                                                           │
    │  Routes:                                                  │
    │  /health  /api/user  /api/document(s)  /api/chapter(s)    │
    │  /api/topic(s)  /api/plan(s)  /api/section  /api/workshop(s)│
    │                                                           │
    │  Exception Handlers:                                      │
    │  Validation→400 │ Auth→401 │ Premium→403 │ NotFound→404   │
    │  RateLimit→429  │ Database/InvalidArguments→500           │
    └───────────────────────────────────────────────────────────┘

Lifecycle:
    Startup:  configure logging, log where the server listens
    Shutdown: dispose the database engine
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from edward import __version__
from edward.config import settings
from edward.database import dispose_engine
from edward.exceptions import (
    AuthenticationError,
    DatabaseError,
    EdwardError,
    InvalidArgumentsError,
    InvalidOrderError,
    NotFoundError,
    PremiumRequiredError,
    RateLimitExceededError,
    UnknownTopicError,
    ValidationError,
)
from edward.middleware.logging import RequestLoggingMiddleware
from edward.middleware.rate_limit import RateLimitMiddleware
from edward.middleware.request_id import RequestIDMiddleware, request_id_var
from edward.routes import chapters, documents, health, plans, topics, user, workshops

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure root logging once for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s: %(message)s, to stdout.
    """
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_logging()
    logger.info("=" * 60)
    logger.info("Edward Backend %s starting up...", __version__)
    logger.info("Identity header: %s", settings.identity_header)
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Edward Backend shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_response(
    status_code: int,
    error: str,
    message: str,
    details: Optional[dict] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": message,
            "details": details,
            "request_id": request_id_var.get(""),
        },
        headers=headers,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map the exception hierarchy onto HTTP responses.

    Handler hierarchy (most specific wins):
        InvalidOrderError       → 400 invalid_order
        UnknownTopicError       → 400 unknown_topic
        ValidationError         → 400 validation_error
        AuthenticationError     → 401 unauthenticated
        PremiumRequiredError    → 403 premium_required
        NotFoundError           → 404 not_found
        RateLimitExceededError  → 429 rate_limit_exceeded
        InvalidArgumentsError   → 500 server_error
        DatabaseError           → 500 server_error
        EdwardError (base)      → 500 server_error
        Exception (fallback)    → 500 internal_server_error

    500 responses never carry exception context; it is logged instead.
    """

    @app.exception_handler(InvalidOrderError)
    async def handle_invalid_order(request: Request, exc: InvalidOrderError):
        logger.warning("[%s] Rejected %s order: %s", request_id_var.get(""), exc.kind, exc.context)
        return _error_response(400, "invalid_order", exc.message)

    @app.exception_handler(UnknownTopicError)
    async def handle_unknown_topic(request: Request, exc: UnknownTopicError):
        logger.warning("[%s] Unknown topics: %s", request_id_var.get(""), exc.topic_ids)
        return _error_response(400, "unknown_topic", exc.message, {"topic_ids": exc.topic_ids})

    @app.exception_handler(ValidationError)
    async def handle_validation_error(request: Request, exc: ValidationError):
        logger.warning("[%s] Validation error: %s", request_id_var.get(""), exc.message)
        return _error_response(400, "validation_error", exc.message, exc.context)

    @app.exception_handler(AuthenticationError)
    async def handle_authentication_error(request: Request, exc: AuthenticationError):
        return _error_response(401, "unauthenticated", exc.message)

    @app.exception_handler(PremiumRequiredError)
    async def handle_premium_required(request: Request, exc: PremiumRequiredError):
        return _error_response(403, "premium_required", exc.message, exc.context)

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return _error_response(404, "not_found", exc.message)

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return _error_response(
            429,
            "rate_limit_exceeded",
            exc.message,
            exc.context,
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(InvalidArgumentsError)
    async def handle_invalid_arguments(request: Request, exc: InvalidArgumentsError):
        logger.error("[%s] %s | Context: %s", request_id_var.get(""), exc.message, exc.context)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error(
            "[%s] Database error: %s | Context: %s", request_id_var.get(""), exc.message, exc.context
        )
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(EdwardError)
    async def handle_edward_error(request: Request, exc: EdwardError):
        logger.error("[%s] Unhandled application error: %s", request_id_var.get(""), exc.message)
        return _error_response(500, "server_error", "An internal error occurred. Please try again later.")

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        logger.error("[%s] Unexpected error: %s", request_id_var.get(""), str(exc), exc_info=True)
        return _error_response(
            500,
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    app = FastAPI(
        title="Edward API",
        description=(
            "Server storage for the Edward writing app: documents, chapters, "
            "master topics, plans with sections, and workshops, each container "
            "kept in its user-defined order."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware runs in reverse order of addition: RateLimit → RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    # Chapter payloads carry full rich-text deltas
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(RateLimitMiddleware)

    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(user.router)
    app.include_router(documents.router)
    app.include_router(chapters.router)
    app.include_router(topics.router)
    app.include_router(plans.router)
    app.include_router(workshops.router)

    return app


app = create_app()
