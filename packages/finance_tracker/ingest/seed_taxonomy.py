from __future__ import annotations

# Seeder for the default category taxonomy.
#
# Usage:
#   finance-tracker seed --database-url sqlite:///finance.db --create-schema
#
# This module:
#   1) Optionally creates missing tables from the ORM models.
#   2) Inserts each default category unless a category with the same name
#      already exists. Existing rows are never modified, so it is safe to
#      run repeatedly.
from db.client import create_engine, create_schema

from ..logging_setup import get_logger
from ..models import CategoryKind, CategoryRecord
from ..storage import SqlStorage, Storage

logger = get_logger("finance_tracker.ingest.seed_taxonomy")

DEFAULT_CATEGORIES: tuple[tuple[str, CategoryKind, str], ...] = (
    ("Salary", CategoryKind.INCOME, "#22c55e"),
    ("Freelance", CategoryKind.INCOME, "#10b981"),
    ("Investments", CategoryKind.INCOME, "#06b6d4"),
    ("Other Income", CategoryKind.INCOME, "#8b5cf6"),
    ("Housing", CategoryKind.EXPENSE, "#ef4444"),
    ("Food & Dining", CategoryKind.EXPENSE, "#f97316"),
    ("Transportation", CategoryKind.EXPENSE, "#eab308"),
    ("Utilities", CategoryKind.EXPENSE, "#64748b"),
    ("Entertainment", CategoryKind.EXPENSE, "#ec4899"),
    ("Healthcare", CategoryKind.EXPENSE, "#14b8a6"),
    ("Shopping", CategoryKind.EXPENSE, "#a855f7"),
    ("Education", CategoryKind.EXPENSE, "#3b82f6"),
    ("Other Expense", CategoryKind.EXPENSE, "#6b7280"),
)


async def seed_default_categories(storage: Storage) -> list[CategoryRecord]:
    """Ensure every default category exists; return the rows in seed order."""

    records: list[CategoryRecord] = []
    inserted_count = 0
    for name, kind, color in DEFAULT_CATEGORIES:
        record, inserted = await storage.create_category_if_absent(name, kind, color)
        records.append(record)
        inserted_count += inserted
    logger.info(
        "Seeded taxonomy: %d inserted, %d already present",
        inserted_count,
        len(records) - inserted_count,
    )
    return records


async def reseed_taxonomy(*, database_url: str | None, create_tables: bool = False) -> int:
    engine = create_engine(database_url=database_url)
    try:
        if create_tables:
            await create_schema(engine)
        rows = await seed_default_categories(SqlStorage(engine))
    finally:
        await engine.dispose()
    return len(rows)


__all__ = ["DEFAULT_CATEGORIES", "reseed_taxonomy", "seed_default_categories"]
