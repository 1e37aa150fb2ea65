"""Unit tests for diff summary aggregation."""

from __future__ import annotations

import pytest

from core.diff_types import (
    CellChanged,
    ColumnAdded,
    ColumnRemoved,
    DiffSummary,
    RowAdded,
    RowRemoved,
    TableDiff,
    summarize_changes,
)
from core.errors import SheetsError


def test_summary_counts_each_change_kind() -> None:
    """Every record kind should land in its own counter."""
    diff = TableDiff(
        from_id="a",
        to_id="b",
        changes=(
            ColumnAdded(header="Region", index=3),
            ColumnRemoved(header="Notes", index=2),
            RowAdded(row_ref=("4",), index=2, row=("4", "Dave")),
            RowRemoved(row_ref=("2",), index=1, row=("2", "Bob")),
            CellChanged(row_ref=("1",), column="Name", old="Al", new="Alice"),
        ),
    )

    assert diff.summary == DiffSummary(
        rows_added=1,
        rows_removed=1,
        rows_modified=1,
        columns_added=1,
        columns_removed=1,
    )


def test_summary_counts_modified_row_once() -> None:
    """Several changed cells in one row count as one modified row."""
    changes = (
        CellChanged(row_ref=0, column="Name", old="a", new="b"),
        CellChanged(row_ref=0, column="Amount", old="1", new="2"),
        CellChanged(row_ref=3, column="Amount", old="1", new="2"),
    )

    assert summarize_changes(changes).rows_modified == 2


def test_empty_summary_is_empty() -> None:
    """A diff without changes should report an empty summary."""
    assert TableDiff(from_id="a", to_id="a", changes=()).summary.is_empty


def test_summary_rejects_unknown_records() -> None:
    """Unknown change records should not be silently ignored."""
    with pytest.raises(SheetsError, match="Unsupported change record"):
        summarize_changes(("not-a-change",))  # type: ignore[arg-type]
