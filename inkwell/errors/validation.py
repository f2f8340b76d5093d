"""Request validation error handling for FastAPI."""

from typing import cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from inkwell.monitoring import get_logger
from inkwell.utils.helpers import host

logger = get_logger(__name__)


def format_validation_errors(errors: list[dict], skip_location: bool = True) -> list[dict]:
    """
    Flatten pydantic error dicts into `field`/`message`/`type` entries.

    Args:
        errors: Errors as returned by `ValidationError.errors()`.
        skip_location: Drop the leading location part ("body", "path", ...).

    Returns:
        list[dict]: JSON-serializable error entries.
    """
    formatted_errors = []
    for error in errors:
        loc = error.get("loc", [])
        if skip_location:
            loc = loc[1:] or loc
        formatted_error = {
            "field": ".".join(str(part) for part in loc),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        }
        # Non-serializable context values (like ValueError) become strings
        if "ctx" in error:
            formatted_error["context"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in error["ctx"].items()
            }
        formatted_errors.append(formatted_error)
    return formatted_errors


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle request validation errors with a 400 and a compact error list.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with formatted validation errors.
    """
    exec_error = cast(RequestValidationError, exc)
    formatted_errors = format_validation_errors(list(exec_error.errors()))

    logger.warning(
        f"Validation error for ip: {host(request)} at endpoint {request.url.path}: {formatted_errors}",
    )

    return ORJSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content={
            "detail": "Validation failed",
            "errors": formatted_errors,
        },
    )
