# inkwell/main.py

"""Inkwell Backend - posts with likes and view counts over FastAPI."""

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from inkwell.configs import settings
from inkwell.db import ping_db
from inkwell.errors import (
    PostError,
    UploadError,
    post_exception_handler,
    upload_exception_handler,
    validation_exception_handler,
)
from inkwell.middleware import (
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from inkwell.monitoring import get_logger
from inkwell.routes import post_router
from inkwell.schemas import HealthCheckResponse
from inkwell.utils.helpers import today_str

logger = get_logger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Inkwell Backend API",
    version=settings.APP_VERSION,
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
# Trust X-Forwarded-* from the reverse proxy
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

routes = [post_router]

_ = [app.include_router(router) for router in routes]

errors = [
    (PostError, post_exception_handler),
    (UploadError, upload_exception_handler),
    (RequestValidationError, validation_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

# Uploaded thumbnails; the lifespan creates the directory
app.mount(
    "/uploads",
    StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
    name="uploads",
)


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_model=HealthCheckResponse,
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "version": "1.0.0",
                        "status": "ok",
                        "timestamp": "2025-01-01 00:00:00",
                        "database": "reachable",
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
async def health_check() -> HealthCheckResponse:
    """
    Health check endpoint.

    Returns
    -------
    HealthCheckResponse
        Service version, timestamp and database reachability. The status is
        "degraded" when the database does not answer.
    """
    try:
        reachable = await ping_db()
    except (SQLAlchemyError, OSError):
        logger.warning("Database health check failed", exc_info=True)
        reachable = False

    return HealthCheckResponse(
        version=app.version,
        status="ok" if reachable else "degraded",
        timestamp=today_str(),
        database="reachable" if reachable else "unreachable",
    )


@app.get(
    "/",
    tags=["🏠 Root"],
    summary="Root access",
    response_model=dict[str, str],
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"message": "Welcome to Inkwell Backend"},
                },
            },
        },
    },
    operation_id="root_access",
)
async def root() -> dict[str, str]:
    """
    Root endpoint.

    Returns
    -------
    dict[str, str]
        Welcome message payload.
    """
    return {"message": f"Welcome to {settings.APP_NAME}"}
