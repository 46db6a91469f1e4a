"""In-memory ``Storage`` double for import engine tests.

Mirrors the semantics of ``SqlStorage`` (case-insensitive category lookup,
idempotent get-or-create, exact-match duplicate lookup) and records every call
so tests can assert on how often the engine hits storage. Every method yields
to the event loop once, so imports gathered on one instance interleave.
Failures can be injected per operation.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from finance_tracker.errors import StorageError
from finance_tracker.models import (
    CategoryKind,
    CategoryRecord,
    NewTransaction,
    TransactionRecord,
)


class InMemoryStorage:
    def __init__(self, categories: Iterable[tuple[str, CategoryKind]] = ()) -> None:
        self.categories: list[CategoryRecord] = []
        self.transactions: list[TransactionRecord] = []
        self.calls: Counter[str] = Counter()
        self.fail_category_creation = False
        # Descriptions whose insert raises StorageError.
        self.fail_inserts_for: set[str] = set()
        # Names find_category_by_name misses, as if another writer created
        # them between the lookup and the insert.
        self.hidden_from_lookup: set[str] = set()
        for name, kind in categories:
            self._add_category(name, kind, "#6b7280")

    def _add_category(self, name: str, kind: CategoryKind, color: str) -> CategoryRecord:
        record = CategoryRecord(id=len(self.categories) + 1, name=name, kind=kind, color=color)
        self.categories.append(record)
        return record

    def category(self, name: str) -> CategoryRecord:
        return next(c for c in self.categories if c.name == name)

    async def list_categories(self) -> list[CategoryRecord]:
        self.calls["list_categories"] += 1
        await asyncio.sleep(0)
        return list(self.categories)

    async def find_category_by_name(self, name: str) -> CategoryRecord | None:
        self.calls["find_category_by_name"] += 1
        await asyncio.sleep(0)
        return next(
            (
                c
                for c in self.categories
                if c.name.lower() == name.lower() and c.name not in self.hidden_from_lookup
            ),
            None,
        )

    async def create_category_if_absent(
        self, name: str, kind: CategoryKind, color: str
    ) -> tuple[CategoryRecord, bool]:
        self.calls["create_category_if_absent"] += 1
        await asyncio.sleep(0)
        if self.fail_category_creation:
            raise StorageError("category insert rejected")
        existing = next((c for c in self.categories if c.name == name), None)
        if existing is not None:
            return existing, False
        return self._add_category(name, kind, color), True

    async def find_transaction(
        self, date: date, amount: Decimal, description: str
    ) -> TransactionRecord | None:
        self.calls["find_transaction"] += 1
        await asyncio.sleep(0)
        return next(
            (
                t
                for t in self.transactions
                if t.date == date and t.amount == amount and t.description == description
            ),
            None,
        )

    async def insert_transaction(self, record: NewTransaction) -> TransactionRecord:
        self.calls["insert_transaction"] += 1
        await asyncio.sleep(0)
        if record.description in self.fail_inserts_for:
            raise StorageError(f'value too long for column "description": {record.description}')
        stored = TransactionRecord(
            id=len(self.transactions) + 1,
            amount=record.amount,
            description=record.description,
            date=record.date,
            category_id=record.category_id,
        )
        self.transactions.append(stored)
        return stored


DEFAULT_TEST_CATEGORIES: tuple[tuple[str, CategoryKind], ...] = (
    ("Salary", CategoryKind.INCOME),
    ("Other Income", CategoryKind.INCOME),
    ("Food & Dining", CategoryKind.EXPENSE),
    ("Other Expense", CategoryKind.EXPENSE),
)
