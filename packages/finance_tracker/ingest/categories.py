"""Resolve free-text category labels from a CSV row to taxonomy entries.

A resolver is created per import call and owns a :class:`CategoryCache` seeded
from ``Storage.list_categories()``. Labels are matched case-insensitively; an
unknown label is materialized through the storage's atomic get-or-create and
remembered, so later rows with the same label neither re-query nor re-create
it. When a label is missing, invalid, or cannot be created, the row falls back
to ``"Other Income"``/``"Other Expense"`` by amount sign, and to no category at
all when those defaults are missing from the taxonomy.

Exports
-------
- ``CategoryResolver`` and ``CategoryResolution``
- ``CategoryCache``: the per-call name → category map
- ``normalize_name(...)`` and ``validate_name(...)``
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import Decimal

from ..errors import StorageError
from ..logging_setup import ImportLog, get_logger
from ..models import CategoryKind, CategoryRecord
from ..storage import Storage

logger = get_logger("finance_tracker.ingest.categories")

DEFAULT_INCOME_CATEGORY = "Other Income"
DEFAULT_EXPENSE_CATEGORY = "Other Expense"

# Colors handed to categories created at import time, cycled by the number of
# categories already known.
CATEGORY_PALETTE: tuple[str, ...] = (
    "#22c55e",
    "#10b981",
    "#06b6d4",
    "#8b5cf6",
    "#ef4444",
    "#f97316",
    "#eab308",
    "#64748b",
    "#ec4899",
    "#14b8a6",
    "#a855f7",
    "#3b82f6",
)

MAX_NAME_LENGTH = 100

# ---------------------------
# Name normalization/validation
# ---------------------------


def normalize_name(name: str) -> str:
    """Return a trimmed, single-spaced representation of ``name``.

    Does not change case; stored names keep the casing of their first use.
    """

    return " ".join(name.strip().split())


@dataclass(frozen=True, slots=True)
class NameValidation:
    ok: bool
    reason: str | None = None


def validate_name(name: str, *, max_len: int = MAX_NAME_LENGTH) -> NameValidation:
    n = normalize_name(name)
    if not n:
        return NameValidation(False, "Name cannot be empty")
    if len(n) > max_len:
        return NameValidation(False, f"Name must be at most {max_len} characters")
    return NameValidation(True, None)


# ---------------------------
# Cache and resolver
# ---------------------------


@dataclass(slots=True)
class CategoryCache:
    """Lower-cased name → category, local to one import call."""

    by_name: dict[str, CategoryRecord] = field(default_factory=dict)

    @classmethod
    def from_records(cls, records: Iterable[CategoryRecord]) -> CategoryCache:
        cache = cls()
        for record in records:
            # First row wins when names differ only by case.
            cache.by_name.setdefault(record.name.lower(), record)
        return cache

    def get(self, name: str) -> CategoryRecord | None:
        return self.by_name.get(name.lower())

    def remember(self, record: CategoryRecord) -> None:
        self.by_name.setdefault(record.name.lower(), record)

    def __len__(self) -> int:
        return len(self.by_name)


@dataclass(frozen=True, slots=True)
class CategoryResolution:
    category: CategoryRecord | None
    # Set only when this resolution materialized a new category.
    created: CategoryRecord | None = None

    @property
    def category_id(self) -> int | None:
        return self.category.id if self.category is not None else None


class CategoryResolver:
    def __init__(
        self,
        storage: Storage,
        cache: CategoryCache,
        *,
        palette: Sequence[str] = CATEGORY_PALETTE,
        log: logging.Logger | ImportLog = logger,
    ) -> None:
        if not palette:
            raise ValueError("palette must not be empty")
        self._storage = storage
        self._palette = tuple(palette)
        self._log = log
        self.cache = cache
        self.created: list[CategoryRecord] = []

    @classmethod
    async def load(cls, storage: Storage, **kwargs) -> CategoryResolver:
        """Build a resolver whose cache holds every category known right now."""

        return cls(storage, CategoryCache.from_records(await storage.list_categories()), **kwargs)

    def next_color(self) -> str:
        return self._palette[len(self.cache) % len(self._palette)]

    def default_for(self, amount: Decimal) -> CategoryRecord | None:
        name = (
            DEFAULT_INCOME_CATEGORY
            if CategoryKind.for_amount(amount) is CategoryKind.INCOME
            else DEFAULT_EXPENSE_CATEGORY
        )
        return self.cache.get(name)

    async def resolve(self, label: str | None, amount: Decimal) -> CategoryResolution:
        name = normalize_name(label or "")
        if not name:
            return CategoryResolution(self.default_for(amount))

        cached = self.cache.get(name)
        if cached is not None:
            return CategoryResolution(cached)

        validation = validate_name(name)
        if not validation.ok:
            self._log.warning("Skipping category %r: %s", name, validation.reason)
            return CategoryResolution(self.default_for(amount))

        try:
            existing = await self._storage.find_category_by_name(name)
            if existing is not None:
                self.cache.remember(existing)
                return CategoryResolution(existing)

            record, inserted = await self._storage.create_category_if_absent(
                name, CategoryKind.for_amount(amount), self.next_color()
            )
        except StorageError as exc:
            self._log.warning("Could not create category %r, using default: %s", name, exc)
            return CategoryResolution(self.default_for(amount))

        self.cache.remember(record)
        if not inserted:
            # Another import created it between the lookup and the insert.
            return CategoryResolution(record)
        self.created.append(record)
        self._log.info("Created category %r (%s, %s)", record.name, record.kind, record.color)
        return CategoryResolution(record, created=record)


__all__ = [
    "CATEGORY_PALETTE",
    "DEFAULT_EXPENSE_CATEGORY",
    "DEFAULT_INCOME_CATEGORY",
    "CategoryCache",
    "CategoryResolution",
    "CategoryResolver",
    "NameValidation",
    "normalize_name",
    "validate_name",
]
