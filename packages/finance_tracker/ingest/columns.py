"""Suggest which CSV columns feed which transaction fields.

Matching is a case-insensitive substring test against small alias lists that
cover English exports and the common German bank exports (Sparkasse, DKB,
ING). The first column, in header order, that matches any alias wins.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence

COLUMN_ALIASES: Mapping[str, tuple[str, ...]] = {
    "amount": ("amount", "betrag"),
    "description": (
        "desc",
        "memo",
        "note",
        "verwendungszweck",
        "buchungstext",
        "beguenstigter",
    ),
    "date": ("date", "buchungstag", "valutadatum"),
    "category": ("categ", "kategorie"),
}


def suggest_column_mapping(columns: Sequence[str]) -> dict[str, str | None]:
    lowered = [c.lower() for c in columns]
    suggestion: dict[str, str | None] = {}
    for field, aliases in COLUMN_ALIASES.items():
        suggestion[field] = next(
            (columns[i] for i, name in enumerate(lowered) if any(a in name for a in aliases)),
            None,
        )
    return suggestion


__all__ = ["COLUMN_ALIASES", "suggest_column_mapping"]
