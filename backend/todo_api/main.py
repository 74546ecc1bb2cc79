"""
Todo API - FastAPI Application Factory
======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app() registers middleware, exception handlers and routers;
       lifespan() handles startup validation and engine disposal.
Who:   Run by uvicorn (`uvicorn todo_api.main:app --port 4000`).

Application Architecture:
    ┌──────────────────────────────────────────────────────────┐
    │                       FastAPI App                        │
    │                                                          │
    │  Middleware:                                             │
    │    RequestID → RateLimit → Logging → GZip → CORS         │
    │                                                          │
    │  Routes:                                                 │
    │    POST /api/sync-user                                   │
    │    /api/lists[/{id}[/tasks]]    /api/tasks/{id}          │
    │    GET /health                                           │
    │                                                          │
    │  Exception Handlers:                                     │
    │    Unauthorized→401  Forbidden→403  NotFound→404         │
    │    RequestValidation→422  RateLimit→429                  │
    │    Database→500  Exception→500                           │
    └──────────────────────────────────────────────────────────┘
"""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Dict, List

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from todo_api import __version__
from todo_api.config import settings
from todo_api.database import dispose_engine
from todo_api.exceptions import (
    DatabaseError,
    ForbiddenError,
    NotFoundError,
    RateLimitExceededError,
    TodoAppError,
    UnauthorizedError,
)
from todo_api.middleware.logging import RequestLoggingMiddleware
from todo_api.middleware.rate_limit import RateLimitMiddleware
from todo_api.middleware.request_id import (
    RequestIDLogFilter,
    RequestIDMiddleware,
    request_id_var,
)
from todo_api.routes import health, lists, tasks, users

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging() -> None:
    """
    Configure logging for the whole process.

    Format: %(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s

    The request ID comes from RequestIDLogFilter, so lines logged outside a
    request show "-".
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDLogFilter())

    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s]: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:  configure logging, validate settings, log readiness.
    Shutdown: dispose the database engine (closes pooled connections).
    """
    setup_logging()
    logger.info("=" * 60)
    logger.info("Todo API %s starting up...", __version__)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        # Keep serving: /health still answers and every authenticated call
        # fails with 401 until the key is configured
        logger.error("Configuration error: %s", str(e))
        logger.error("Fix the configuration and restart the server.")

    logger.info("Database backend: %s", "sqlite" if settings.is_sqlite else "postgresql")
    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    logger.info("Todo API shutting down...")
    await dispose_engine()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _error_body(error: str, message: str, details: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "error": error,
        "message": message,
        "request_id": request_id_var.get(""),
    }
    if details:
        body["details"] = details
    return body


def _describe_validation_errors(exc: RequestValidationError) -> List[Dict[str, str]]:
    """Flatten pydantic errors to {field, message}; ctx may hold raw exceptions."""
    described = []
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        described.append({
            "field": ".".join(loc) or "body",
            "message": err.get("msg", "Invalid value"),
        })
    return described


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP status codes and the JSON error envelope.

    Handler hierarchy:
        UnauthorizedError       → 401 Unauthorized (+ WWW-Authenticate)
        ForbiddenError          → 403 Forbidden
        NotFoundError           → 404 Not Found
        RequestValidationError  → 422 Unprocessable Entity
        RateLimitExceededError  → 429 Too Many Requests
        DatabaseError           → 500 Internal Server Error
        TodoAppError (base)     → 500 Internal Server Error
        Exception (fallback)    → 500 Internal Server Error

    Responses never contain stack traces or SQL; those are logged only.
    """

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        """Malformed body, out-of-range field, or non-UUID path parameter."""
        details = _describe_validation_errors(exc)
        logger.info("Rejected request body for %s %s: %s", request.method, request.url.path, details)
        return JSONResponse(
            status_code=422,
            content=_error_body("validation_error", "Request validation failed", details),
        )

    @app.exception_handler(UnauthorizedError)
    async def handle_unauthorized(request: Request, exc: UnauthorizedError):
        logger.info("Unauthorized request to %s: %s", request.url.path, exc.message)
        return JSONResponse(
            status_code=401,
            content=_error_body("unauthorized", exc.message),
            headers={"WWW-Authenticate": "Bearer"},
        )

    @app.exception_handler(ForbiddenError)
    async def handle_forbidden(request: Request, exc: ForbiddenError):
        logger.warning(
            "Forbidden: subject %s on %s",
            getattr(request.state, "auth_subject", "unknown"),
            exc.context,
        )
        return JSONResponse(
            status_code=403,
            content=_error_body("forbidden", exc.message),
        )

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        return JSONResponse(
            status_code=404,
            content=_error_body("not_found", exc.message),
        )

    @app.exception_handler(RateLimitExceededError)
    async def handle_rate_limit(request: Request, exc: RateLimitExceededError):
        return JSONResponse(
            status_code=429,
            content=_error_body("rate_limit_exceeded", exc.message, exc.context),
            headers={"Retry-After": str(exc.retry_after)},
        )

    @app.exception_handler(DatabaseError)
    async def handle_database_error(request: Request, exc: DatabaseError):
        logger.error("Database error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body(
                "server_error", "An internal error occurred. Please try again later."
            ),
        )

    @app.exception_handler(TodoAppError)
    async def handle_app_error(request: Request, exc: TodoAppError):
        logger.error("Unhandled application error: %s | Context: %s", exc.message, exc.context)
        return JSONResponse(
            status_code=500,
            content=_error_body("server_error", exc.message),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        """
        Runs in Starlette's ServerErrorMiddleware, outside every user
        middleware: the request ID context var is already reset here, so
        the ID comes from request.state and the header is set by hand.
        """
        rid = getattr(request.state, "request_id", "")
        logger.error("Unexpected error [%s]: %s", rid, str(exc), exc_info=True)
        body = _error_body(
            "internal_server_error",
            "An unexpected error occurred. Please try again or contact support.",
        )
        body["request_id"] = rid
        return JSONResponse(
            status_code=500,
            content=body,
            headers={"X-Request-ID": rid} if rid else None,
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app() -> FastAPI:
    """Assemble middleware, exception handlers and routers into a FastAPI app."""
    app = FastAPI(
        title="Todo API",
        description=(
            "Multi-user to-do lists. Every call carries an identity provider "
            "session token; each user sees and changes only their own lists and tasks."
        ),
        version=__version__,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    # Middleware executes in reverse order of addition:
    # RequestID → RateLimit → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "Retry-After"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    app.include_router(users.router)
    app.include_router(lists.router)
    app.include_router(tasks.router)
    app.include_router(health.router)

    return app


app = create_app()
