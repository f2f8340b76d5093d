"""Utility helper functions."""

from inkwell.utils.helpers import (
    format_datetime,
    get_summary,
    host,
    secure_filename,
    today_str,
    utc_now,
)

__all__ = [
    "format_datetime",
    "get_summary",
    "host",
    "secure_filename",
    "today_str",
    "utc_now",
]
