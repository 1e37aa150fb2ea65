"""Unit tests for CLI diff rendering."""

from __future__ import annotations

import pytest

from cli.diff_render import format_row_ref, render_diff
from core.diff_types import CellChanged, ColumnAdded, RowRemoved, TableDiff
from core.errors import SheetsError


def _diff() -> TableDiff:
    return TableDiff(
        from_id="v1",
        to_id="v2",
        changes=(
            ColumnAdded(header="Region", index=3),
            RowRemoved(row_ref=("2",), index=1, row=("2", "Bob", "200")),
            CellChanged(row_ref=("1",), column="Amount", old="100", new="150"),
        ),
    )


def test_text_render_lists_changes() -> None:
    """Text output should hold the summary and one line per change."""
    output = render_diff(_diff(), "text")

    assert "Diff: v1 -> v2" in output
    assert "  + Column 3: 'Region'" in output
    assert "  - Row [2]: 2, Bob, 200" in output
    assert "  ~ Cell [1] Amount: '100' -> '150'" in output


def test_text_render_empty_diff() -> None:
    """Empty diffs should say so."""
    output = render_diff(TableDiff(from_id="v1", to_id="v1", changes=()), "text")

    assert output.endswith("No changes.")


def test_git_render_shows_cell_old_and_new() -> None:
    """Git-style output should pair removed and added cell values."""
    lines = render_diff(_diff(), "git").splitlines()

    assert lines[:3] == ["diff --git a/v1 b/v2", "--- a/v1", "+++ b/v2"]
    assert lines[-2:] == ["-[1],Amount: 100", "+[1],Amount: 150"]


def test_json_render_has_no_trailing_newline() -> None:
    """JSON output is printed as-is by the CLI."""
    assert render_diff(_diff(), "json").endswith("}")


def test_unknown_format_raises() -> None:
    """Unsupported formats should fail loudly."""
    with pytest.raises(SheetsError, match="Unsupported diff format"):
        render_diff(_diff(), "html")


def test_format_row_ref_positional() -> None:
    """Positional refs render with a hash sign."""
    assert format_row_ref(4) == "#4"
