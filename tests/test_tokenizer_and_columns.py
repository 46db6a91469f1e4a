from __future__ import annotations

import pytest

from finance_tracker.errors import CsvParseError
from finance_tracker.ingest.columns import suggest_column_mapping
from finance_tracker.ingest.importer import preview_csv
from finance_tracker.ingest.tokenizer import decode_upload, read_csv


def test_read_csv_semicolon_with_quotes_and_blank_lines() -> None:
    text = (
        "Buchungstag;Betrag;Verwendungszweck\n"
        "\n"
        '01.02.2024;-4,86;"Bakery; Main St"\n'
        "  02.02.2024 ; 1.234,56 ;  Salary  \n"
        "\n"
    )

    parsed = read_csv(text)

    assert parsed.delimiter == ";"
    assert parsed.columns == ["Buchungstag", "Betrag", "Verwendungszweck"]
    assert parsed.rows == [
        {"Buchungstag": "01.02.2024", "Betrag": "-4,86", "Verwendungszweck": "Bakery; Main St"},
        {"Buchungstag": "02.02.2024", "Betrag": "1.234,56", "Verwendungszweck": "Salary"},
    ]


def test_read_csv_quoted_newline_stays_in_one_row() -> None:
    text = 'date,amount,description\n2024-01-15,1.00,"two\nlines"\n'

    parsed = read_csv(text)

    assert len(parsed.rows) == 1
    assert parsed.rows[0]["description"] == "two\nlines"


def test_read_csv_header_only() -> None:
    parsed = read_csv("date,amount\n")
    assert parsed.columns == ["date", "amount"]
    assert parsed.rows == []


def test_read_csv_empty_text() -> None:
    parsed = read_csv("")
    assert parsed.columns == []
    assert parsed.rows == []


def test_read_csv_rejects_ragged_rows() -> None:
    with pytest.raises(CsvParseError) as excinfo:
        read_csv("date,amount\n2024-01-15,1.00,extra\n")
    assert "expected 2 fields" in str(excinfo.value)
    assert str(excinfo.value).startswith("Failed to parse CSV:")


def test_read_csv_rejects_broken_quoting() -> None:
    with pytest.raises(CsvParseError):
        read_csv('date,amount\n2024-01-15,"1.00"x\n')


def test_decode_upload_strips_bom() -> None:
    assert decode_upload("\ufeffdate,amount\n".encode()) == "date,amount\n"


def test_decode_upload_rejects_non_utf8() -> None:
    with pytest.raises(CsvParseError):
        decode_upload("Betrag;Stra\xdfe\n".encode("latin-1"))


# ---------------------------------------------------------------------------
# Column suggestions
# ---------------------------------------------------------------------------


def test_suggest_column_mapping_english_export() -> None:
    columns = ["Date", "Description", "Amount", "Category"]
    assert suggest_column_mapping(columns) == {
        "amount": "Amount",
        "description": "Description",
        "date": "Date",
        "category": "Category",
    }


def test_suggest_column_mapping_german_export() -> None:
    columns = ["Buchungstag", "Valutadatum", "Buchungstext", "Verwendungszweck", "Betrag"]
    suggestion = suggest_column_mapping(columns)
    assert suggestion["date"] == "Buchungstag"
    assert suggestion["amount"] == "Betrag"
    assert suggestion["description"] == "Buchungstext"
    assert suggestion["category"] is None


def test_suggest_column_mapping_no_matches() -> None:
    assert suggest_column_mapping(["foo", "bar"]) == {
        "amount": None,
        "description": None,
        "date": None,
        "category": None,
    }


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------


def test_preview_limits_rows_and_counts_all() -> None:
    lines = ["date,amount,description"] + [f"2024-01-{d:02d},{d}.00,row {d}" for d in range(1, 9)]
    data = ("\n".join(lines) + "\n").encode()

    result = preview_csv(data)

    assert result.columns == ["date", "amount", "description"]
    assert result.total_rows == 8
    assert len(result.preview) == 5
    assert result.preview[0] == {"date": "2024-01-01", "amount": "1.00", "description": "row 1"}
    assert result.to_dict()["totalRows"] == 8
    assert result.to_dict()["suggestedMapping"]["amount"] == "amount"


def test_preview_header_only_file() -> None:
    result = preview_csv(b"date,amount\n")
    assert result.to_dict() == {
        "columns": ["date", "amount"],
        "preview": [],
        "totalRows": 0,
        "suggestedMapping": {
            "amount": "amount",
            "description": None,
            "date": "date",
            "category": None,
        },
    }
