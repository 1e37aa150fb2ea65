"""Unit tests for diff JSON artifacts."""

from __future__ import annotations

import json

from core.diff_types import CellChanged, ColumnAdded, RowAdded, TableDiff
from diff.diff_payload import change_to_payload, render_diff_json


def test_keyed_row_refs_serialize_as_lists() -> None:
    """Key tuples should become JSON lists of strings."""
    payload = change_to_payload(CellChanged(row_ref=("EU", "2024"), column="Total", old="5", new="6"))

    assert payload == {
        "type": "cell_changed",
        "row": ["EU", "2024"],
        "column": "Total",
        "old": "5",
        "new": "6",
    }


def test_positional_row_refs_serialize_as_integers() -> None:
    """Positional refs should stay plain integers."""
    payload = change_to_payload(RowAdded(row_ref=3, index=3, row=("d",)))

    assert payload == {"type": "row_added", "row": 3, "index": 3, "data": ["d"]}


def test_render_diff_json_includes_summary() -> None:
    """The artifact should carry ids, counts, and ordered changes."""
    diff = TableDiff(
        from_id="v1",
        to_id="v2",
        changes=(
            ColumnAdded(header="Region", index=3),
            RowAdded(row_ref=("4",), index=2, row=("4", "Dave")),
        ),
    )

    payload = json.loads(render_diff_json(diff))

    assert payload["from_id"] == "v1" and payload["to_id"] == "v2"
    assert payload["summary"]["columns_added"] == 1 and payload["summary"]["rows_added"] == 1
    assert [change["type"] for change in payload["changes"]] == ["column_added", "row_added"]
