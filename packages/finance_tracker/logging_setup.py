"""Logging for the ``finance_tracker`` package.

Entrypoints (the CLI callback, the web app factory) call
:func:`configure_logging`; library modules only call :func:`get_logger` and
never add handlers. Every :func:`~finance_tracker.ingest.importer.import_csv`
call logs through :func:`import_logger`, which prefixes each message with a
process-unique ``[import N]`` tag so lines from overlapping imports can be
told apart.
"""

from __future__ import annotations

import itertools
import logging
import sys
from collections.abc import MutableMapping
from typing import IO, Any

PACKAGE_LOGGER = "finance_tracker"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_import_ids = itertools.count(1)


class _PackageHandler(logging.StreamHandler):
    """The handler installed by :func:`configure_logging`; replaced on reconfigure."""


def parse_level(level: int | str | None) -> int:
    """Accept ``None`` (INFO), an int, a numeric string or a level name."""

    if level is None:
        return logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelName(name)
    if not isinstance(resolved, int):
        raise ValueError(f"unknown log level {level!r}")
    return resolved


def configure_logging(
    level: int | str | None = None,
    *,
    stream: IO[str] = sys.stderr,
    fmt: str = DEFAULT_FORMAT,
) -> logging.Logger:
    """Send package log records to ``stream`` at ``level``.

    Calling it again swaps the previous handler for a new one instead of
    stacking handlers, so the CLI and an app factory can both call it.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if isinstance(h, (_PackageHandler, logging.NullHandler)):
            logger.removeHandler(h)

    handler = _PackageHandler(stream)
    handler.setFormatter(logging.Formatter(fmt))
    logger.addHandler(handler)
    logger.setLevel(parse_level(level))
    # Records stop here; the root logger never sees them twice.
    logger.propagate = False
    return logger


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


class ImportLog(logging.LoggerAdapter):
    """Logger adapter carrying the id of one import call."""

    @property
    def import_id(self) -> int:
        return self.extra["import_id"]

    def process(
        self, msg: Any, kwargs: MutableMapping[str, Any]
    ) -> tuple[Any, MutableMapping[str, Any]]:
        return f"[import {self.import_id}] {msg}", kwargs


def import_logger(logger: logging.Logger) -> ImportLog:
    """Wrap ``logger`` with a fresh import id."""

    return ImportLog(logger, {"import_id": next(_import_ids)})


__all__ = [
    "DEFAULT_FORMAT",
    "PACKAGE_LOGGER",
    "ImportLog",
    "configure_logging",
    "get_logger",
    "import_logger",
    "parse_level",
]
