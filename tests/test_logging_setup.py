from __future__ import annotations

import asyncio
import io
import logging
import re
from collections.abc import Iterator

import pytest

from finance_tracker.config import Settings
from finance_tracker.ingest.importer import import_csv
from finance_tracker.logging_setup import (
    PACKAGE_LOGGER,
    configure_logging,
    get_logger,
    import_logger,
    parse_level,
)
from finance_tracker.models import ColumnMapping
from tests.helpers.storage import InMemoryStorage


@pytest.fixture(autouse=True)
def _restore_package_logger() -> Iterator[None]:
    logger = logging.getLogger(PACKAGE_LOGGER)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.mark.parametrize(
    ("level", "expected"),
    [(None, logging.INFO), ("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("10", 10)],
)
def test_parse_level(level: str | None, expected: int) -> None:
    assert parse_level(level) == expected


def test_parse_level_rejects_unknown_names() -> None:
    with pytest.raises(ValueError):
        parse_level("chatty")


def test_reconfiguring_replaces_the_handler() -> None:
    first, second = io.StringIO(), io.StringIO()

    configure_logging("INFO", stream=first)
    logger = configure_logging("INFO", stream=second)
    get_logger("finance_tracker.tests").info("hello")

    assert first.getvalue() == ""
    assert "hello" in second.getvalue()
    assert len([h for h in logger.handlers if not isinstance(h, logging.NullHandler)]) == 1


def test_import_logger_tags_each_call_with_its_own_id() -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream, fmt="%(message)s")
    logger = get_logger("finance_tracker.tests")

    first, second = import_logger(logger), import_logger(logger)
    first.info("one")
    second.info("two")

    assert second.import_id == first.import_id + 1
    assert stream.getvalue().splitlines() == [
        f"[import {first.import_id}] one",
        f"[import {second.import_id}] two",
    ]


def test_import_lines_share_one_tag(memory_storage: InMemoryStorage) -> None:
    stream = io.StringIO()
    configure_logging("INFO", stream=stream, fmt="%(message)s")
    data = b"date,amount,category\n2024-01-15,-3.50,Coffee\n"
    mapping = ColumnMapping(amount_col="amount", date_col="date", category_col="category")

    asyncio.run(import_csv(data, mapping, memory_storage))

    lines = stream.getvalue().splitlines()
    tags = {re.match(r"\[import (\d+)\]", line).group(1) for line in lines}
    assert len(tags) == 1
    assert any("Importing 1 rows" in line for line in lines)
    assert any("Created category 'Coffee'" in line for line in lines)
    assert any("Import finished: 1 imported" in line for line in lines)


def test_settings_carry_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite:///unused.db")
    monkeypatch.setenv("FINANCE_TRACKER_LOG_LEVEL", " debug ")

    assert Settings.from_env().log_level == "debug"
