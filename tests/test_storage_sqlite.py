from __future__ import annotations

import asyncio
from datetime import date
from decimal import Decimal
from pathlib import Path

import pytest
from sqlalchemy import text

from finance_tracker.errors import StorageError
from finance_tracker.ingest.seed_taxonomy import DEFAULT_CATEGORIES, seed_default_categories
from finance_tracker.models import CategoryKind, NewTransaction
from tests.helpers.db import bootstrap_sqlite_db, fetch_categories, open_storage


def test_seed_is_idempotent(sqlite_url: str) -> None:
    async def _reseed() -> int:
        async with open_storage(sqlite_url) as storage:
            return len(await seed_default_categories(storage))

    assert asyncio.run(_reseed()) == len(DEFAULT_CATEGORIES)
    names = [c.name for c in fetch_categories(sqlite_url)]
    assert names == [name for name, _, _ in DEFAULT_CATEGORIES]


def test_find_category_by_name_is_case_insensitive(sqlite_url: str) -> None:
    async def _find():
        async with open_storage(sqlite_url) as storage:
            return await storage.find_category_by_name("food & DINING")

    found = asyncio.run(_find())
    assert found is not None
    assert found.name == "Food & Dining"
    assert found.kind is CategoryKind.EXPENSE


def test_create_category_if_absent_returns_existing_row(sqlite_url: str) -> None:
    async def _create_twice():
        async with open_storage(sqlite_url) as storage:
            first = await storage.create_category_if_absent(
                "Coffee", CategoryKind.EXPENSE, "#111111"
            )
            second = await storage.create_category_if_absent(
                "Coffee", CategoryKind.INCOME, "#222222"
            )
            return first, second

    (first, first_inserted), (second, second_inserted) = asyncio.run(_create_twice())

    assert (first_inserted, second_inserted) == (True, False)
    assert first == second
    assert first.color == "#111111"
    assert first.kind is CategoryKind.EXPENSE
    assert [c.name for c in fetch_categories(sqlite_url)].count("Coffee") == 1


def test_insert_and_find_transaction(sqlite_url: str) -> None:
    record = NewTransaction(
        amount=Decimal("4.86"), description="Bakery", date=date(2024, 1, 15), category_id=None
    )

    async def _roundtrip():
        async with open_storage(sqlite_url) as storage:
            inserted = await storage.insert_transaction(record)
            hit = await storage.find_transaction(date(2024, 1, 15), Decimal("4.86"), "Bakery")
            miss = await storage.find_transaction(date(2024, 1, 15), Decimal("4.86"), "bakery")
            return inserted, hit, miss

    inserted, hit, miss = asyncio.run(_roundtrip())

    assert hit is not None
    assert hit.id == inserted.id
    assert hit.amount == Decimal("4.86")
    assert miss is None


def test_missing_table_surfaces_as_storage_error(tmp_path: Path) -> None:
    url = bootstrap_sqlite_db(tmp_path / "broken.db", seed=False)

    async def _drop_and_query() -> None:
        async with open_storage(url) as storage:
            async with storage._sessions.begin() as session:
                await session.execute(text("DROP TABLE transactions"))
            await storage.find_transaction(date(2024, 1, 1), Decimal("1"), "x")

    with pytest.raises(StorageError) as excinfo:
        asyncio.run(_drop_and_query())
    assert "transactions" in str(excinfo.value)
