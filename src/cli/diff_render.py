"""Human-readable diff rendering for the CLI."""

from __future__ import annotations

from core.constants import SUPPORTED_DIFF_FORMATS
from core.diff_types import (
    CellChanged,
    Change,
    ColumnAdded,
    ColumnRemoved,
    RowAdded,
    RowRef,
    RowRemoved,
    TableDiff,
)
from core.errors import SheetsError
from diff.diff_payload import render_diff_json


def render_diff(diff: TableDiff, output_format: str) -> str:
    """Render a diff in one of the supported output formats.

    Args:
        diff: Diff to render.
        output_format: ``text``, ``json``, or ``git``.

    Returns:
        Rendered diff without a trailing newline.

    Raises:
        SheetsError: If the format is not supported.
    """
    if output_format == "text":
        return render_text_diff(diff)
    if output_format == "json":
        return render_diff_json(diff).rstrip("\n")
    if output_format == "git":
        return render_git_diff(diff)
    raise SheetsError(
        f"Unsupported diff format '{output_format}'. "
        f"Use one of: {', '.join(SUPPORTED_DIFF_FORMATS)}."
    )


def render_text_diff(diff: TableDiff) -> str:
    """Render summary counts followed by one line per change."""
    summary = diff.summary
    lines = [
        f"Diff: {diff.from_id} -> {diff.to_id}",
        "",
        "Summary:",
        f"  Rows:    +{summary.rows_added} -{summary.rows_removed} ~{summary.rows_modified}",
        f"  Columns: +{summary.columns_added} -{summary.columns_removed}",
    ]
    if not diff.changes:
        lines.extend(["", "No changes."])
        return "\n".join(lines)
    lines.extend(["", "Changes:"])
    lines.extend(f"  {_describe_change(change)}" for change in diff.changes)
    return "\n".join(lines)


def render_git_diff(diff: TableDiff) -> str:
    """Render a unified-diff style view of the changes."""
    summary = diff.summary
    lines = [
        f"diff --git a/{diff.from_id} b/{diff.to_id}",
        f"--- a/{diff.from_id}",
        f"+++ b/{diff.to_id}",
        (
            f"@@ rows +{summary.rows_added} -{summary.rows_removed} ~{summary.rows_modified}"
            f" columns +{summary.columns_added} -{summary.columns_removed} @@"
        ),
    ]
    for change in diff.changes:
        lines.extend(_git_lines(change))
    return "\n".join(lines)


def format_row_ref(row_ref: RowRef) -> str:
    """Format a key tuple as ``[a, b]`` and a row position as ``#n``."""
    if isinstance(row_ref, tuple):
        return f"[{', '.join(row_ref)}]"
    return f"#{row_ref}"


def _describe_change(change: Change) -> str:
    if isinstance(change, ColumnAdded):
        return f"+ Column {change.index}: {change.header!r}"
    if isinstance(change, ColumnRemoved):
        return f"- Column {change.index}: {change.header!r}"
    if isinstance(change, RowAdded):
        return f"+ Row {format_row_ref(change.row_ref)}: {_join_cells(change.row)}"
    if isinstance(change, RowRemoved):
        return f"- Row {format_row_ref(change.row_ref)}: {_join_cells(change.row)}"
    if isinstance(change, CellChanged):
        return (
            f"~ Cell {format_row_ref(change.row_ref)} {change.column}: "
            f"{change.old!r} -> {change.new!r}"
        )
    raise SheetsError(f"Unsupported change record: {type(change).__name__}.")


def _git_lines(change: Change) -> list[str]:
    if isinstance(change, ColumnAdded):
        return [f"+column {change.index}: {change.header}"]
    if isinstance(change, ColumnRemoved):
        return [f"-column {change.index}: {change.header}"]
    if isinstance(change, RowAdded):
        return [f"+{format_row_ref(change.row_ref)}: {_join_cells(change.row)}"]
    if isinstance(change, RowRemoved):
        return [f"-{format_row_ref(change.row_ref)}: {_join_cells(change.row)}"]
    if isinstance(change, CellChanged):
        row_label = format_row_ref(change.row_ref)
        return [
            f"-{row_label},{change.column}: {change.old}",
            f"+{row_label},{change.column}: {change.new}",
        ]
    raise SheetsError(f"Unsupported change record: {type(change).__name__}.")


def _join_cells(row: tuple[str, ...]) -> str:
    return ", ".join(row)
