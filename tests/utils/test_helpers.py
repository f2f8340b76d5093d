"""Tests for inkwell/utils/helpers.py."""

from datetime import UTC, datetime, timedelta, timezone

import pytest

from inkwell.utils.helpers import format_datetime, secure_filename, utc_now


class TestFormatDatetime:
    """Tests for format_datetime."""

    def test_none(self) -> None:
        """None passes through."""
        assert format_datetime(None) is None

    def test_naive_treated_as_utc(self) -> None:
        """Naive values from SQLite are read as UTC."""
        assert format_datetime(datetime(2025, 1, 1, 8, 30)) == "2025-01-01T08:30:00Z"

    def test_offset_converted(self) -> None:
        """Aware values are converted to UTC."""
        value = datetime(2025, 1, 1, 10, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_datetime(value) == "2025-01-01T08:00:00Z"


def test_utc_now_is_aware() -> None:
    """utc_now carries the UTC zone."""
    assert utc_now().tzinfo is UTC


@pytest.mark.parametrize(
    ("filename", "expected"),
    [
        ("cover.png", "cover.png"),
        ("my cover.png", "my_cover.png"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\ada\\photo.jpg", "photo.jpg"),
        ("...", "upload"),
        (None, "upload"),
        ("", "upload"),
    ],
)
def test_secure_filename(filename: str | None, expected: str) -> None:
    """File names are reduced to a safe basename."""
    assert secure_filename(filename) == expected
