from collections.abc import MutableMapping
from datetime import UTC, datetime
from re import sub
from typing import Any

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from starlette.routing import BaseRoute, Match, Route

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def host(request: Request) -> str:
    """Return the host IP address."""
    return request.client.host if request.client else "unknown"


def today_str() -> str:
    """Return the current local time as a string."""
    return datetime.now(datetime.now().astimezone().tzinfo).strftime(DATE_FORMAT)


def utc_now() -> datetime:
    """Return the current timezone-aware UTC time."""
    return datetime.now(tz=UTC)


def format_datetime(value: datetime | None) -> str | None:
    """
    Format a database timestamp as an ISO 8601 UTC string.

    Naive values (SQLite drops tzinfo) are treated as UTC.

    Args:
        value: Timestamp read from the database

    Returns:
        str | None: ISO formatted timestamp, or None if value is None
    """
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat().replace("+00:00", "Z")


def secure_filename(filename: str | None, default: str = "upload") -> str:
    """
    Reduce an uploaded file name to a safe ASCII basename.

    Args:
        filename: Client supplied file name
        default: Fallback when nothing usable remains

    Returns:
        str: Sanitized file name
    """
    if not filename:
        return default
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    name = sub(r"[^A-Za-z0-9._-]", "_", name)
    name = sub(r"_+", "_", name).strip("._")
    return name or default


def get_summary(request: Request) -> str | None:
    """Extract route summary from request."""

    scope: MutableMapping[str, Any] = request.scope
    app: FastAPI = scope["app"]
    routes: list[BaseRoute] = app.routes

    summary = None
    for route in routes:
        is_api_route = type(route) is APIRoute
        is_route = type(route) is Route
        if is_api_route and route.matches(scope)[0] == Match.FULL:
            summary = route.summary
            break
        if is_route and route.matches(scope)[0] == Match.FULL:
            summary = route.name
            break

    return summary
