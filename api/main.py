"""
api/main.py -- FastAPI application entry point for QuantumEdge.

Run with:      uvicorn asgi:app --reload
               python main.py --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware -- credentialed CORS for the allow-listed front-end origins
  2. log_requests   -- one access-log line per request

Lifespan builds every process-wide component from Settings -- the database
engine, both stores, the token signer and the session cookie policy -- and
disposes the engine on shutdown. Nothing reads configuration from module
globals at request time.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.jobs import router as jobs_router
from auth.store import UserStore
from auth.tokens import SessionCookie, TokenSigner
from core.config import get_settings
from core.database import create_db_engine, ping
from jobs.store import JobStore

VERSION = "1.0.0"

_settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=_settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("quantumedge.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Acquire process-wide resources at startup and release them at shutdown.

    A database that cannot be reached raises out of create_db_engine(), which
    aborts startup -- the server never accepts requests without storage.
    """
    settings = get_settings()
    logger.info("QuantumEdge API starting up (environment=%s)", settings.environment)

    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    app.state.user_store = UserStore(engine)
    app.state.job_store = JobStore(engine)
    logger.info("Database connected")

    app.state.token_signer = TokenSigner(settings.secret_key, expire_seconds=settings.token_expire_seconds)
    app.state.session_cookie = SessionCookie(
        production=settings.is_production,
        max_age=settings.token_expire_seconds,
    )
    app.state.verify_user_on_request = settings.verify_user_on_request
    logger.info(
        "Auth initialized (secure_cookies=%s, verify_user_on_request=%s)",
        settings.is_production,
        settings.verify_user_on_request,
    )

    yield

    engine.dispose()
    logger.info("QuantumEdge API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="QuantumEdge API",
    description="Job board backend: cookie-session authentication and job postings.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=_settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(jobs_router, prefix="/api", tags=["Jobs"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same {message, error} envelope so clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


def _error(status_code: int, message: str, code: str | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, error=code).model_dump(),
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies are input errors: 400, not FastAPI's default 422."""
    return _error(400, "Request validation failed.", "validation_error")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render HTTPException as the error envelope.

    Route handlers raise HTTPException with detail={"code", "message"}. Plain
    string details (e.g. Starlette's own 404/405) keep their text as message.
    """
    if isinstance(exc.detail, dict):
        return _error(exc.status_code, str(exc.detail.get("message", "")), exc.detail.get("code"))
    return _error(exc.status_code, str(exc.detail), f"http_{exc.status_code}")


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error(500, "Server error", "internal_error")


# ---------------------------------------------------------------------------
# Liveness endpoints
# ---------------------------------------------------------------------------


@app.get("/", response_class=PlainTextResponse, include_in_schema=False)
async def root() -> str:
    return "QuantumEdge API is running"


@app.get("/api/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and database reachability."""
    try:
        ping(request.app.state.engine)
        database = "ok"
    except Exception:
        logger.exception("Health check: database unreachable")
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
