"""
Middleware components for the Inkwell backend.

This module contains middleware for security headers, request logging and
CORS handling, plus the lifespan handler that prepares logging and the
database on startup and releases connections on shutdown.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from re import fullmatch
from time import perf_counter
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from inkwell.configs import settings
from inkwell.db import close_db, init_db
from inkwell.monitoring import bind_request_id, clear_context, configure_logging, get_logger
from inkwell.utils.helpers import get_summary, host

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
REQUEST_ID_PATTERN = r"[A-Za-z0-9-]{8,64}"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Manage application startup and shutdown events."""
    configure_logging()
    if settings.ENVIRONMENT == "development":
        install()

    # Startup
    logger.info("Starting %s...", app.title)
    try:
        await init_db()
        settings.UPLOADS_DIR.mkdir(parents=True, exist_ok=True)
        logger.info("Services initialized successfully")
        logger.info("  - Backend API: http://localhost:8000")
        logger.info("  - API Documentation: http://localhost:8000/docs")
        logger.info("  - Health Check: http://localhost:8000/health")
    except Exception:
        logger.exception("Failed to initialize services")
        raise

    yield

    # Shutdown
    logger.info("Shutting down %s...", app.title)
    try:
        await close_db()
        logger.info("Services cleaned up successfully")
    except Exception:
        logger.exception("Error during service cleanup")


def configure_cors(app: FastAPI) -> None:
    """Configure CORS middleware for the application."""
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # Add production origins if specified
    if frontend_url := settings.PRODUCTION_FRONTEND_URL:
        allowed_origins.append(frontend_url)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER)
    if incoming and fullmatch(REQUEST_ID_PATTERN, incoming):
        return incoming
    return uuid4().hex


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Bind a request ID and log request summary and timing."""

        clear_context()
        request_id = _request_id(request)
        bind_request_id(request_id)

        start_time = perf_counter()
        summary = get_summary(request)
        route_info = summary or f"{request.method} {request.url.path}"
        logger.info("Request: %s, from ip: %s", route_info, host(request))

        try:
            response = await call_next(request)
            duration = perf_counter() - start_time
            logger.info(
                "Response: %d for %s %s in %.3fs",
                response.status_code,
                request.method,
                request.url.path,
                duration,
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            clear_context()


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Add security headers to all responses."""

        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        return response
