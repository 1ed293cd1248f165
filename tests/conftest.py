"""Pytest configuration and fixtures."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import pytest

from lofi_sync.utils.config import reset_config


@pytest.fixture
def card_payload() -> dict[str, Any]:
    """A valid card in wire format."""
    return {
        "id": "c1",
        "title": "Test",
        "status": "todo",
        "priority": "medium",
        "labels": ["bug"],
        "assignees": ["user1"],
        "position": 1,
        "createdAt": "2023-01-01T00:00:00.000Z",
        "updatedAt": "2023-01-01T00:00:00.000Z",
    }


@pytest.fixture(autouse=True)
def _fresh_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from LOFI_SYNC_* variables and the cached config."""
    for key in (
        "LOFI_SYNC_LOG_LEVEL",
        "LOFI_SYNC_FAIL_ON_CONFLICT",
        "LOFI_SYNC_CONFLICT_EXIT_CODE",
        "LOFI_SYNC_JSON_INDENT",
        "LOFI_SYNC_LOCAL_STORE",
        "LOFI_SYNC_REMOTE_STORE",
    ):
        monkeypatch.delenv(key, raising=False)
    reset_config()
    yield
    reset_config()
