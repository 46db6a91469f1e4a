"""Public API for importing bank CSV files from disk.

These are thin, file-path based wrappers around
:mod:`finance_tracker.ingest.importer` for callers outside a web request (the
CLI, scripts, tests). Each call creates its own engine and disposes it before
returning, so nothing is shared between calls.
"""

from __future__ import annotations

from os import PathLike
from pathlib import Path

from db.client import create_engine

from .ingest.importer import import_csv, preview_csv
from .models import ColumnMapping, CsvPreview, ImportResult
from .storage import SqlStorage


def preview_csv_file(csv_path: str | PathLike[str]) -> CsvPreview:
    """Tokenize ``csv_path`` and return its header, first rows and row count."""

    return preview_csv(Path(csv_path).read_bytes())


async def import_csv_file(
    csv_path: str | PathLike[str],
    mapping: ColumnMapping,
    *,
    database_url: str | None = None,
) -> ImportResult:
    """Import ``csv_path`` into the database at ``database_url``.

    ``database_url`` falls back to ``$DATABASE_URL``. The mapping is checked
    before the file is read or a connection is opened.
    """

    mapping.require_mandatory()
    data = Path(csv_path).read_bytes()
    engine = create_engine(database_url=database_url)
    try:
        return await import_csv(data, mapping, SqlStorage(engine))
    finally:
        await engine.dispose()


__all__ = ["import_csv_file", "preview_csv_file"]
