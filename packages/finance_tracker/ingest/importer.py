"""Preview and commit a bank CSV export.

``preview_csv`` only tokenizes. ``import_csv`` drives every row, strictly in
file order, through amount → date → category → duplicate check → insert and
turns each row into exactly one outcome. Row problems are recorded and the
loop moves on; only file-level problems (missing mapping, untokenizable file)
raise, and they do so before storage is touched.

Rows are numbered from 1 in the order they appear after the header, skipping
blank lines.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from ..config import PREVIEW_ROW_LIMIT
from ..errors import StorageError
from ..logging_setup import ImportLog, get_logger, import_logger
from ..models import (
    ColumnMapping,
    CsvPreview,
    Failed,
    Imported,
    ImportResult,
    NewTransaction,
    RowOutcome,
    Skipped,
)
from ..storage import Storage
from .categories import CategoryResolver
from .columns import suggest_column_mapping
from .normalizers import parse_amount, parse_date
from .tokenizer import ParsedCsv, decode_upload, read_csv

logger = get_logger("finance_tracker.ingest.importer")

_CENTS = Decimal("0.01")


def _tokenize(data: bytes | str) -> ParsedCsv:
    text = decode_upload(data) if isinstance(data, bytes) else data
    return read_csv(text)


def preview_csv(data: bytes | str, *, limit: int = PREVIEW_ROW_LIMIT) -> CsvPreview:
    parsed = _tokenize(data)
    return CsvPreview(
        columns=parsed.columns,
        preview=parsed.rows[:limit],
        total_rows=len(parsed.rows),
        suggested_mapping=suggest_column_mapping(parsed.columns),
    )


def _magnitude(amount: Decimal) -> Decimal | None:
    """Return ``abs(amount)`` rounded to cents, or ``None`` when it has too many
    digits to round in the default decimal context."""

    try:
        return abs(amount).quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return None


def _cell(row: dict[str, str], column: str | None) -> str:
    if column is None:
        return ""
    return row.get(column) or ""


async def _import_row(
    index: int,
    row: dict[str, str],
    mapping: ColumnMapping,
    resolver: CategoryResolver,
    storage: Storage,
    log: ImportLog,
) -> RowOutcome:
    raw_amount = _cell(row, mapping.amount_col)
    amount = parse_amount(raw_amount)
    magnitude = _magnitude(amount) if amount is not None else None
    if amount is None or magnitude is None:
        return Failed(index, f'Invalid amount: "{raw_amount}"')

    raw_date = _cell(row, mapping.date_col)
    canonical = parse_date(raw_date)
    if canonical is None:
        return Failed(index, f'Invalid date: "{raw_date}"')

    description = _cell(row, mapping.description_col)
    resolution = await resolver.resolve(_cell(row, mapping.category_col), amount)

    # Only the magnitude is stored; the category kind carries the direction.
    record = NewTransaction(
        amount=magnitude,
        description=description,
        date=date.fromisoformat(canonical),
        category_id=resolution.category_id,
    )
    try:
        if await storage.find_transaction(record.date, record.amount, record.description):
            return Skipped(index)
        inserted = await storage.insert_transaction(record)
    except StorageError as exc:
        log.warning("Row %d: storage failure: %s", index, exc)
        return Failed(index, str(exc))
    return Imported(index, inserted)


async def import_csv(
    data: bytes | str,
    mapping: ColumnMapping,
    storage: Storage,
) -> ImportResult:
    """Import every row of ``data`` into ``storage`` using ``mapping``.

    Raises
    ------
    MissingColumnMappingError
        ``mapping`` lacks the amount or date column.
    CsvParseError
        The file cannot be decoded or tokenized.
    """

    mapping.require_mandatory()
    parsed = _tokenize(data)
    log = import_logger(logger)
    log.info(
        "Importing %d rows (delimiter %r, amount=%r, date=%r)",
        len(parsed.rows),
        parsed.delimiter,
        mapping.amount_col,
        mapping.date_col,
    )

    resolver = await CategoryResolver.load(storage, log=log)
    outcomes: list[RowOutcome] = []
    for index, row in enumerate(parsed.rows, start=1):
        outcome = await _import_row(index, row, mapping, resolver, storage, log)
        if isinstance(outcome, Failed):
            log.debug("Row %d failed: %s", outcome.row, outcome.reason)
        outcomes.append(outcome)

    result = ImportResult.from_outcomes(
        outcomes, created_categories=[c.name for c in resolver.created]
    )
    log.info(
        "Import finished: %d imported, %d skipped, %d errors, %d new categories",
        result.imported,
        result.skipped,
        len(result.errors),
        len(result.created_categories),
    )
    return result


__all__ = ["import_csv", "preview_csv"]
