"""Unit tests for CSV source reading."""

from __future__ import annotations

import pytest

from core.errors import SchemaError, SheetsIngestError
from ingest.csv_reader import read_csv_table
from tests.fixture_paths import csv_fixture


def test_read_csv_table_reads_headers_and_rows() -> None:
    """The first record is the header; the rest are rows."""
    table = read_csv_table(csv_fixture("sales_v1.csv"))

    assert table.headers == ("ID", "Name", "Amount")
    assert table.rows[2] == ("3", "Carol", "300") and not table.has_primary_key


def test_read_csv_table_trims_cells_and_skips_blank_lines() -> None:
    """Whitespace around cells and empty lines should be dropped."""
    table = read_csv_table(csv_fixture("padded_crlf.csv"))

    assert table.headers == ("ID", "Name", "Amount")
    assert table.rows == (("1", "Alice", "100"), ("2", "Bob", "200"))


def test_read_csv_table_keeps_quoted_delimiters() -> None:
    """Quoted commas and newlines belong to the cell."""
    table = read_csv_table(csv_fixture("quoted.csv"))

    assert table.rows == (("1", "Hello, world"), ("2", "Line one\nline two"))


def test_read_csv_table_resolves_primary_key() -> None:
    """Key tokens may be names or indices."""
    table = read_csv_table(csv_fixture("sales_v1.csv"), ["Name", "0"])

    assert table.primary_key == (1, 0)


def test_read_csv_table_rejects_ragged_rows_with_line_number() -> None:
    """Short rows should name the file line."""
    with pytest.raises(SchemaError, match="ragged.csv:3"):
        read_csv_table(csv_fixture("ragged.csv"))


def test_read_csv_table_rejects_empty_file() -> None:
    """A CSV without a header row cannot be snapshotted."""
    with pytest.raises(SheetsIngestError, match="header row is required"):
        read_csv_table(csv_fixture("empty.csv"))


def test_read_csv_table_rejects_missing_file(tmp_path) -> None:
    """Missing sources should raise an ingest error."""
    with pytest.raises(SheetsIngestError, match="does not exist"):
        read_csv_table(tmp_path / "missing.csv")


def test_read_csv_table_strips_utf8_bom(tmp_path) -> None:
    """Spreadsheet exports often start with a byte-order mark."""
    source_path = tmp_path / "bom.csv"
    source_path.write_bytes("\ufeffID,Name\n1,a\n".encode("utf-8"))

    table = read_csv_table(source_path)

    assert table.headers == ("ID", "Name")


def test_read_csv_table_rejects_non_utf8(tmp_path) -> None:
    """Undecodable bytes should ask for a UTF-8 export."""
    source_path = tmp_path / "latin.csv"
    source_path.write_bytes(b"ID,Name\n1,\xe9\xff\n")

    with pytest.raises(SheetsIngestError, match="UTF-8"):
        read_csv_table(source_path)
