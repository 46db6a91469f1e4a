"""Storage interface consumed by the import engine and its SQLAlchemy adapter.

The engine only ever talks to :class:`Storage`; :class:`SqlStorage` implements
it on an async SQLAlchemy engine owned by the caller. Each method runs in its
own short transaction, so an interrupted import keeps every row it already
persisted and nothing spans the whole file.

Failures inside :class:`SqlStorage` surface as
:class:`~finance_tracker.errors.StorageError` carrying the driver's message;
callers never see raw ``SQLAlchemyError`` instances.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Protocol

from db.client import session_factory
from db.models.finance import Category, Transaction
from sqlalchemy import func, insert, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from .errors import StorageError
from .models import CategoryKind, CategoryRecord, NewTransaction, TransactionRecord


class Storage(Protocol):
    async def list_categories(self) -> list[CategoryRecord]: ...

    async def find_category_by_name(self, name: str) -> CategoryRecord | None:
        """Case-insensitive lookup."""
        ...

    async def create_category_if_absent(
        self, name: str, kind: CategoryKind, color: str
    ) -> tuple[CategoryRecord, bool]:
        """Atomically insert ``name`` or return the row that already holds it.

        The flag is true only when this call inserted the row.
        """
        ...

    async def find_transaction(
        self, date: date, amount: Decimal, description: str
    ) -> TransactionRecord | None: ...

    async def insert_transaction(self, record: NewTransaction) -> TransactionRecord: ...


# ---------------------------------------------------------------------------
# SQLAlchemy implementation
# ---------------------------------------------------------------------------

_CONFLICT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _category_record(row: Category) -> CategoryRecord:
    return CategoryRecord(
        id=row.id, name=row.name, kind=CategoryKind(row.kind), color=row.color
    )


def _transaction_record(row: Transaction) -> TransactionRecord:
    return TransactionRecord(
        id=row.id,
        amount=row.amount,
        description=row.description,
        date=row.date,
        category_id=row.category_id,
    )


def _describe(exc: SQLAlchemyError) -> str:
    orig = getattr(exc, "orig", None)
    return str(orig) if orig is not None else str(exc)


class SqlStorage:
    """:class:`Storage` backed by an async SQLAlchemy engine.

    The engine is injected; this class never creates or disposes it.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._sessions = session_factory(engine)
        self._dialect = engine.dialect.name

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions.begin() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(_describe(exc)) from exc

    async def list_categories(self) -> list[CategoryRecord]:
        async with self._transaction() as session:
            rows = (await session.execute(select(Category).order_by(Category.id))).scalars()
            return [_category_record(r) for r in rows]

    async def find_category_by_name(self, name: str) -> CategoryRecord | None:
        async with self._transaction() as session:
            row = (
                await session.execute(
                    select(Category)
                    .where(func.lower(Category.name) == name.lower())
                    .order_by(Category.id)
                    .limit(1)
                )
            ).scalar_one_or_none()
            return _category_record(row) if row is not None else None

    async def create_category_if_absent(
        self, name: str, kind: CategoryKind, color: str
    ) -> tuple[CategoryRecord, bool]:
        values = {"name": name, "kind": str(kind), "color": color}
        conflict_insert = _CONFLICT_INSERTS.get(self._dialect)

        if conflict_insert is not None:
            async with self._transaction() as session:
                stmt = conflict_insert(Category).values(**values)
                result = await session.execute(
                    stmt.on_conflict_do_nothing(index_elements=[Category.name])
                )
                row = (
                    await session.execute(select(Category).where(Category.name == name))
                ).scalar_one()
                return _category_record(row), result.rowcount == 1

        # Dialects without ON CONFLICT: a duplicate name is idempotent.
        inserted = True
        try:
            async with self._sessions.begin() as session:
                await session.execute(insert(Category).values(**values))
        except IntegrityError:
            inserted = False
        except SQLAlchemyError as exc:
            raise StorageError(_describe(exc)) from exc
        async with self._transaction() as session:
            row = (
                await session.execute(select(Category).where(Category.name == name))
            ).scalar_one_or_none()
            if row is None:
                raise StorageError(f"category {name!r} was neither created nor found")
            return _category_record(row), inserted

    async def find_transaction(
        self, date: date, amount: Decimal, description: str
    ) -> TransactionRecord | None:
        async with self._transaction() as session:
            row = (
                await session.execute(
                    select(Transaction)
                    .where(
                        Transaction.date == date,
                        Transaction.amount == amount,
                        Transaction.description == description,
                    )
                    .order_by(Transaction.id)
                    .limit(1)
                )
            ).scalar_one_or_none()
            return _transaction_record(row) if row is not None else None

    async def insert_transaction(self, record: NewTransaction) -> TransactionRecord:
        async with self._transaction() as session:
            row = Transaction(
                amount=record.amount,
                description=record.description,
                date=record.date,
                category_id=record.category_id,
            )
            session.add(row)
            await session.flush()
            return _transaction_record(row)


__all__ = ["SqlStorage", "Storage"]
