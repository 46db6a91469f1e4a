"""Split an uploaded CSV into a header and rows of named raw values.

Parsing follows RFC 4180 rules via the stdlib :mod:`csv` module with the
delimiter chosen by :func:`~finance_tracker.ingest.normalizers.detect_delimiter`.
Blank lines are skipped, header names and cell values are trimmed, and a record
whose field count differs from the header's rejects the whole file.
"""

from __future__ import annotations

import csv
from dataclasses import dataclass
from io import StringIO

from ..errors import CsvParseError
from .normalizers import detect_delimiter


@dataclass(frozen=True, slots=True)
class ParsedCsv:
    delimiter: str
    columns: list[str]
    rows: list[dict[str, str]]


def decode_upload(data: bytes) -> str:
    """Decode uploaded bytes as UTF-8, tolerating a leading byte-order mark."""

    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise CsvParseError(
            f"file is not valid UTF-8 text ({exc.reason} at byte {exc.start})"
        ) from exc


def read_csv(text: str) -> ParsedCsv:
    delimiter = detect_delimiter(text)
    reader = csv.reader(StringIO(text, newline=""), delimiter=delimiter, strict=True)

    columns: list[str] | None = None
    rows: list[dict[str, str]] = []
    try:
        for record in reader:
            cells = [c.strip() for c in record]
            if not any(cells):
                continue
            if columns is None:
                columns = cells
                continue
            if len(cells) != len(columns):
                raise CsvParseError(
                    f"line {reader.line_num}: expected {len(columns)} fields, got {len(cells)}"
                )
            rows.append(dict(zip(columns, cells, strict=True)))
    except csv.Error as exc:
        raise CsvParseError(f"line {reader.line_num}: {exc}") from exc

    return ParsedCsv(delimiter=delimiter, columns=columns or [], rows=rows)


__all__ = ["ParsedCsv", "decode_upload", "read_csv"]
