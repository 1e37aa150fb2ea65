"""Row, column, and cell level table diff.

Columns are aligned by label. Rows are matched by primary key when both
tables carry one and by position when neither does. Output order is
fixed: column additions, column removals, then row-level changes in
ascending row order with cell changes in column order.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

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
from core.errors import AmbiguousKeyError, PrimaryKeyMismatchError
from core.logging_config import get_logger
from core.table import RowKey, Table
from core.types import Snapshot

_LOGGER = get_logger(__name__)
_INTEGER_PATTERN = re.compile(r"-?[0-9]+")


@dataclass(frozen=True)
class SharedColumn:
    """Column present in both tables."""

    label: str
    from_index: int
    to_index: int


@dataclass(frozen=True)
class ColumnAlignment:
    """Column-level comparison of two tables."""

    added: tuple[ColumnAdded, ...]
    removed: tuple[ColumnRemoved, ...]
    shared: tuple[SharedColumn, ...]


def diff_snapshots(snapshot_from: Snapshot, snapshot_to: Snapshot) -> TableDiff:
    """Diff the tables of two snapshots.

    Args:
        snapshot_from: Older snapshot.
        snapshot_to: Newer snapshot.

    Returns:
        Ordered diff labelled with both snapshot ids.
    """
    return diff_tables(
        snapshot_from.table,
        snapshot_to.table,
        from_id=snapshot_from.snapshot_id,
        to_id=snapshot_to.snapshot_id,
    )


def diff_tables(
    table_from: Table,
    table_to: Table,
    from_id: str = "",
    to_id: str = "",
) -> TableDiff:
    """Compare two tables.

    Args:
        table_from: Older table.
        table_to: Newer table.
        from_id: Identity recorded for the older side.
        to_id: Identity recorded for the newer side.

    Returns:
        Ordered diff.

    Raises:
        PrimaryKeyMismatchError: If the tables use different key columns.
        AmbiguousKeyError: If a key tuple repeats within either table.
    """
    alignment = align_columns(table_from, table_to)
    changes: list[Change] = [*alignment.added, *alignment.removed]
    if table_from.has_primary_key or table_to.has_primary_key:
        changes.extend(_diff_keyed_rows(table_from, table_to, alignment.shared))
    else:
        changes.extend(_diff_positional_rows(table_from, table_to, alignment.shared))
    diff = TableDiff(from_id=from_id, to_id=to_id, changes=tuple(changes))
    summary = diff.summary
    _LOGGER.debug(
        "diff_computed",
        from_id=from_id,
        to_id=to_id,
        change_count=len(diff.changes),
        rows_added=summary.rows_added,
        rows_removed=summary.rows_removed,
        rows_modified=summary.rows_modified,
    )
    return diff


def align_columns(table_from: Table, table_to: Table) -> ColumnAlignment:
    """Split columns into added, removed, and shared by label.

    Args:
        table_from: Older table.
        table_to: Newer table.

    Returns:
        Column alignment; shared columns follow the newer table's order.
    """
    from_positions = {label: index for index, label in enumerate(table_from.column_labels)}
    to_positions = {label: index for index, label in enumerate(table_to.column_labels)}
    added = tuple(
        ColumnAdded(header=label, index=index)
        for index, label in enumerate(table_to.column_labels)
        if label not in from_positions
    )
    removed = tuple(
        ColumnRemoved(header=label, index=index)
        for index, label in enumerate(table_from.column_labels)
        if label not in to_positions
    )
    shared = tuple(
        SharedColumn(label=label, from_index=from_positions[label], to_index=index)
        for index, label in enumerate(table_to.column_labels)
        if label in from_positions
    )
    return ColumnAlignment(added=added, removed=removed, shared=shared)


def natural_key_order(key: RowKey) -> tuple[tuple[int, int, str], ...]:
    """Sort key for row keys: integer parts numerically, others as text.

    Integer components sort before non-integer components.
    """
    parts = []
    for value in key:
        if _INTEGER_PATTERN.fullmatch(value):
            parts.append((0, int(value), value))
        else:
            parts.append((1, 0, value))
    return tuple(parts)


def _diff_keyed_rows(
    table_from: Table,
    table_to: Table,
    shared: tuple[SharedColumn, ...],
) -> list[Change]:
    _check_key_configuration(table_from, table_to)
    from_rows = _unique_key_index(table_from, "from")
    to_rows = _unique_key_index(table_to, "to")
    changes: list[Change] = []
    for key in sorted(from_rows.keys() | to_rows.keys(), key=natural_key_order):
        if key not in from_rows:
            to_index = to_rows[key]
            changes.append(RowAdded(row_ref=key, index=to_index, row=table_to.rows[to_index]))
        elif key not in to_rows:
            from_index = from_rows[key]
            changes.append(
                RowRemoved(row_ref=key, index=from_index, row=table_from.rows[from_index])
            )
        else:
            changes.extend(
                _cell_changes(
                    key,
                    table_from.rows[from_rows[key]],
                    table_to.rows[to_rows[key]],
                    shared,
                )
            )
    return changes


def _diff_positional_rows(
    table_from: Table,
    table_to: Table,
    shared: tuple[SharedColumn, ...],
) -> list[Change]:
    changes: list[Change] = []
    for row_index in range(max(table_from.row_count, table_to.row_count)):
        if row_index >= table_from.row_count:
            changes.append(
                RowAdded(row_ref=row_index, index=row_index, row=table_to.rows[row_index])
            )
        elif row_index >= table_to.row_count:
            changes.append(
                RowRemoved(row_ref=row_index, index=row_index, row=table_from.rows[row_index])
            )
        else:
            changes.extend(
                _cell_changes(
                    row_index,
                    table_from.rows[row_index],
                    table_to.rows[row_index],
                    shared,
                )
            )
    return changes


def _cell_changes(
    row_ref: RowRef,
    from_row: tuple[str, ...],
    to_row: tuple[str, ...],
    shared: tuple[SharedColumn, ...],
) -> list[Change]:
    changes: list[Change] = []
    for column in shared:
        old_value = from_row[column.from_index]
        new_value = to_row[column.to_index]
        if old_value != new_value:
            changes.append(
                CellChanged(row_ref=row_ref, column=column.label, old=old_value, new=new_value)
            )
    return changes


def _check_key_configuration(table_from: Table, table_to: Table) -> None:
    """Require both tables to be keyed by the same columns.

    Raises:
        PrimaryKeyMismatchError: If key configurations differ.
    """
    if not table_from.has_primary_key or not table_to.has_primary_key:
        keyed_side = "from" if table_from.has_primary_key else "to"
        raise PrimaryKeyMismatchError(
            f"Only the '{keyed_side}' table has a primary key. "
            "Snapshot both tables with the same key, or with none for positional diffing."
        )
    if table_from.key_labels != table_to.key_labels:
        raise PrimaryKeyMismatchError(
            f"Primary keys differ: from={list(table_from.key_labels)} "
            f"to={list(table_to.key_labels)}. Diffing would match different rows."
        )


def _unique_key_index(table: Table, side: str) -> dict[RowKey, int]:
    """Return key -> row index, rejecting duplicate keys.

    Raises:
        AmbiguousKeyError: If any key tuple repeats.
    """
    duplicates = table.duplicate_keys()
    if duplicates:
        key, row_indices = duplicates[0]
        raise AmbiguousKeyError(key, side, row_indices)
    return {key: row_indices[0] for key, row_indices in table.key_index.items()}
