"""Pytest configuration shared by the test suite.

Tests must never pick up a developer's real database: ``DATABASE_URL`` and the
import tuning variables are cleared for every test, and tests that need a
database bootstrap a file-backed SQLite DB under ``tmp_path``.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.storage import DEFAULT_TEST_CATEGORIES, InMemoryStorage


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("FINANCE_TRACKER_MAX_UPLOAD_BYTES", raising=False)
    monkeypatch.delenv("FINANCE_TRACKER_LOG_LEVEL", raising=False)


@pytest.fixture
def memory_storage() -> InMemoryStorage:
    return InMemoryStorage(DEFAULT_TEST_CATEGORIES)


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """A seeded, file-backed SQLite database."""

    return bootstrap_sqlite_db(tmp_path / "finance.db")
