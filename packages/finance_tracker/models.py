"""Data models for the CSV import engine.

Storage-facing records (:class:`CategoryRecord`, :class:`TransactionRecord`,
:class:`NewTransaction`) are plain frozen dataclasses decoupled from the ORM so
that the engine can run against any :class:`~finance_tracker.storage.Storage`
implementation. Import results are built from per-row outcomes, which makes
the "every row yields exactly one outcome" rule structural.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import StrEnum
from typing import TypeAlias

from .errors import MissingColumnMappingError


class CategoryKind(StrEnum):
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def for_amount(cls, amount: Decimal) -> CategoryKind:
        """Zero counts as income."""
        return cls.INCOME if amount >= 0 else cls.EXPENSE


@dataclass(frozen=True, slots=True)
class CategoryRecord:
    id: int
    name: str
    kind: CategoryKind
    color: str


@dataclass(frozen=True, slots=True)
class NewTransaction:
    """A transaction ready to insert. ``amount`` is a non-negative magnitude."""

    amount: Decimal
    description: str
    date: date
    category_id: int | None


@dataclass(frozen=True, slots=True)
class TransactionRecord:
    id: int
    amount: Decimal
    description: str
    date: date
    category_id: int | None


# ---------------------------------------------------------------------------
# Column mapping
# ---------------------------------------------------------------------------


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    return value if value.strip() else None


@dataclass(frozen=True, slots=True)
class ColumnMapping:
    """Which CSV header feeds which transaction field.

    ``amount_col`` and ``date_col`` are mandatory; blank strings are treated as
    absent, which is how an unselected dropdown arrives from a form.
    """

    amount_col: str | None
    date_col: str | None
    description_col: str | None = None
    category_col: str | None = None

    @classmethod
    def from_form(
        cls,
        *,
        amount_col: str | None,
        date_col: str | None,
        description_col: str | None = None,
        category_col: str | None = None,
    ) -> ColumnMapping:
        return cls(
            amount_col=_blank_to_none(amount_col),
            date_col=_blank_to_none(date_col),
            description_col=_blank_to_none(description_col),
            category_col=_blank_to_none(category_col),
        )

    def require_mandatory(self) -> None:
        missing = [
            name
            for name, value in (("amount", self.amount_col), ("date", self.date_col))
            if value is None or not value.strip()
        ]
        if missing:
            raise MissingColumnMappingError(missing)


# ---------------------------------------------------------------------------
# Row outcomes and import results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Imported:
    row: int
    record: TransactionRecord


@dataclass(frozen=True, slots=True)
class Skipped:
    row: int


@dataclass(frozen=True, slots=True)
class Failed:
    row: int
    reason: str


RowOutcome: TypeAlias = Imported | Skipped | Failed


@dataclass(frozen=True, slots=True)
class RowError:
    row: int
    error: str


@dataclass(frozen=True, slots=True)
class ImportResult:
    imported: int
    skipped: int
    errors: list[RowError] = field(default_factory=list)
    created_categories: list[str] = field(default_factory=list)

    @property
    def total_rows(self) -> int:
        return self.imported + self.skipped + len(self.errors)

    @classmethod
    def from_outcomes(
        cls, outcomes: Iterable[RowOutcome], *, created_categories: Iterable[str] = ()
    ) -> ImportResult:
        imported = 0
        skipped = 0
        errors: list[RowError] = []
        for outcome in outcomes:
            match outcome:
                case Imported():
                    imported += 1
                case Skipped():
                    skipped += 1
                case Failed(row=row, reason=reason):
                    errors.append(RowError(row=row, error=reason))
        return cls(
            imported=imported,
            skipped=skipped,
            errors=errors,
            created_categories=list(created_categories),
        )

    def to_dict(self) -> dict[str, object]:
        """JSON shape returned by the commit endpoint."""
        return {
            "imported": self.imported,
            "skipped": self.skipped,
            "errors": [{"row": e.row, "error": e.error} for e in self.errors],
        }


@dataclass(frozen=True, slots=True)
class CsvPreview:
    columns: list[str]
    preview: list[Mapping[str, str]]
    total_rows: int
    suggested_mapping: Mapping[str, str | None] = field(default_factory=dict)

    def to_dict(self) -> dict[str, object]:
        return {
            "columns": list(self.columns),
            "preview": [dict(r) for r in self.preview],
            "totalRows": self.total_rows,
            "suggestedMapping": dict(self.suggested_mapping),
        }


__all__ = [
    "CategoryKind",
    "CategoryRecord",
    "ColumnMapping",
    "CsvPreview",
    "Failed",
    "ImportResult",
    "Imported",
    "NewTransaction",
    "RowError",
    "RowOutcome",
    "Skipped",
    "TransactionRecord",
]
