"""Cell normalizers for bank CSV exports: delimiter, amount and date.

Every function here is pure and total: malformed input yields ``None`` (or, for
the delimiter, a default) instead of raising, so a single bad cell can only
ever fail its own row. Callers turn ``None`` into a row-level error message.

Out of scope: currency symbols and codes, thousands separators in the
``1,234.56`` style (the comma is read as a decimal point), month-first slash
dates.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

from dateutil import parser as date_parser

# ---------------------------------------------------------------------------
# Delimiter
# ---------------------------------------------------------------------------


def detect_delimiter(text: str) -> str:
    """Guess ``";"`` or ``","`` from the first line of ``text``.

    Semicolons win ties as long as there is at least one of them; a header
    with neither character (single-column file) defaults to a comma.
    """

    first_line = text.splitlines()[0] if text else ""
    semicolons = first_line.count(";")
    commas = first_line.count(",")
    if semicolons and semicolons >= commas:
        return ";"
    return ","


# ---------------------------------------------------------------------------
# Amount
# ---------------------------------------------------------------------------

# Some exports render the decimal separator as whitespace: "-4   86".
_SPACED_DECIMAL_RE = re.compile(r"^([+-]?\d+)\s+(\d{1,2})$")
# "1.234,56", "-12.345.678", "1.000,5"
_EURO_GROUPED_RE = re.compile(r"^[+-]?\d{1,3}(?:\.\d{3})+(?:,\d+)?$")
_WHITESPACE_RE = re.compile(r"\s+")


def parse_amount(raw: str | None) -> Decimal | None:
    """Return the signed amount in ``raw`` or ``None`` when it is not a number.

    >>> parse_amount("1.234,56")
    Decimal('1234.56')
    >>> parse_amount("-4   86")
    Decimal('-4.86')
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None

    m = _SPACED_DECIMAL_RE.match(s)
    if m:
        s = f"{m.group(1)}.{m.group(2).ljust(2, '0')}"
    else:
        s = _WHITESPACE_RE.sub("", s)
        if _EURO_GROUPED_RE.match(s):
            s = s.replace(".", "").replace(",", ".")
        else:
            s = s.replace(",", ".")

    try:
        value = Decimal(s)
    except InvalidOperation:
        return None
    # Decimal accepts "NaN" and "Infinity"; neither is an amount.
    if not value.is_finite():
        return None
    return value


# ---------------------------------------------------------------------------
# Date
# ---------------------------------------------------------------------------

# D.M.YY or D.M.YYYY
_DOTTED_RE = re.compile(r"^(\d{1,2})\.(\d{1,2})\.(\d{2}|\d{4})$")
# D/M/YYYY, day first
_SLASHED_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")

# Two defaults that differ in every field: a parse that only succeeds by
# borrowing a field from the default gives different results for each.
_PROBE_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _calendar_date(year: int, month: int, day: int) -> str | None:
    try:
        return date(year, month, day).isoformat()
    except ValueError:
        return None


def _fallback_date(s: str) -> str | None:
    try:
        return datetime.fromisoformat(s).date().isoformat()
    except ValueError:
        pass

    parsed: list[date] = []
    for default in _PROBE_DEFAULTS:
        try:
            parsed.append(date_parser.parse(s, default=default).date())
        except (ValueError, OverflowError):
            return None
    first, second = parsed
    if first != second:
        return None
    return first.isoformat()


def parse_date(raw: str | None) -> str | None:
    """Return ``raw`` as a canonical ``YYYY-MM-DD`` string or ``None``.

    Resolution order: ``D.M.YY``/``D.M.YYYY``, day-first ``D/M/YYYY``, then
    ISO-8601 and the general ``dateutil`` parser (RFC-2822, textual months).
    Time-of-day and zone information are dropped.
    """

    if raw is None:
        return None
    s = raw.strip()
    if not s:
        return None

    m = _DOTTED_RE.match(s)
    if m:
        day, month, year = m.groups()
        if len(year) == 2:
            year = "20" + year
        return _calendar_date(int(year), int(month), int(day))

    m = _SLASHED_RE.match(s)
    if m:
        day, month, year = m.groups()
        return _calendar_date(int(year), int(month), int(day))

    return _fallback_date(s)


__all__ = ["detect_delimiter", "parse_amount", "parse_date"]
