"""JSON artifact form of table diffs.

This is the canonical serialized diff; text and git-style renderers
derive from the same change records.
"""

from __future__ import annotations

import json

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


def diff_to_payload(diff: TableDiff) -> dict[str, object]:
    """Serialize a diff into a JSON-safe payload.

    Args:
        diff: Diff to serialize.

    Returns:
        Dictionary with ids, summary counts, and tagged changes.
    """
    summary = diff.summary
    return {
        "from_id": diff.from_id,
        "to_id": diff.to_id,
        "summary": {
            "rows_added": summary.rows_added,
            "rows_removed": summary.rows_removed,
            "rows_modified": summary.rows_modified,
            "columns_added": summary.columns_added,
            "columns_removed": summary.columns_removed,
        },
        "changes": [change_to_payload(change) for change in diff.changes],
    }


def change_to_payload(change: Change) -> dict[str, object]:
    """Serialize one change record with a ``type`` tag.

    Raises:
        SheetsError: If the change type is unknown.
    """
    if isinstance(change, ColumnAdded):
        return {"type": "column_added", "header": change.header, "index": change.index}
    if isinstance(change, ColumnRemoved):
        return {"type": "column_removed", "header": change.header, "index": change.index}
    if isinstance(change, RowAdded):
        return {
            "type": "row_added",
            "row": row_ref_to_payload(change.row_ref),
            "index": change.index,
            "data": list(change.row),
        }
    if isinstance(change, RowRemoved):
        return {
            "type": "row_removed",
            "row": row_ref_to_payload(change.row_ref),
            "index": change.index,
            "data": list(change.row),
        }
    if isinstance(change, CellChanged):
        return {
            "type": "cell_changed",
            "row": row_ref_to_payload(change.row_ref),
            "column": change.column,
            "old": change.old,
            "new": change.new,
        }
    raise SheetsError(f"Unsupported change record: {type(change).__name__}.")


def row_ref_to_payload(row_ref: RowRef) -> object:
    """Keyed refs become string lists, positional refs stay integers."""
    if isinstance(row_ref, int):
        return row_ref
    return list(row_ref)


def render_diff_json(diff: TableDiff) -> str:
    """Render the diff artifact text."""
    return json.dumps(diff_to_payload(diff), indent=2, ensure_ascii=False) + "\n"
