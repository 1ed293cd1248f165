"""Tests for timestamp helpers."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta, timezone

import pytest

from lofi_sync.utils.timeutils import ensure_utc, format_timestamp, parse_timestamp


def test_parse_z_suffix() -> None:
    assert parse_timestamp("2023-01-01T00:00:00.000Z") == datetime(2023, 1, 1, tzinfo=UTC)


def test_parse_offset_converted() -> None:
    parsed = parse_timestamp("2023-01-01T02:00:00+02:00")

    assert parsed == datetime(2023, 1, 1, tzinfo=UTC)
    assert parsed.tzinfo is UTC


def test_parse_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_timestamp("yesterday")


def test_ensure_utc_naive() -> None:
    assert ensure_utc(datetime(2023, 5, 1)).tzinfo is UTC


def test_format_millisecond_precision() -> None:
    value = datetime(2023, 1, 1, 12, 30, 5, 123456, tzinfo=timezone(timedelta(hours=1)))

    assert format_timestamp(value) == "2023-01-01T11:30:05.123Z"
