"""Typed models for table diffs.

Change records form a closed union. Every consumer handles all five
record types and rejects anything else.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from core.errors import SheetsError

RowRef = Union[tuple[str, ...], int]


@dataclass(frozen=True)
class ColumnAdded:
    """Column present only in the newer table."""

    header: str
    index: int


@dataclass(frozen=True)
class ColumnRemoved:
    """Column present only in the older table."""

    header: str
    index: int


@dataclass(frozen=True)
class RowAdded:
    """Row present only in the newer table.

    Attributes:
        row_ref: Key tuple in keyed mode, row position in positional mode.
        index: Position of the row in the newer table.
        row: Full row values.
    """

    row_ref: RowRef
    index: int
    row: tuple[str, ...]


@dataclass(frozen=True)
class RowRemoved:
    """Row present only in the older table."""

    row_ref: RowRef
    index: int
    row: tuple[str, ...]


@dataclass(frozen=True)
class CellChanged:
    """One differing cell in a row present in both tables."""

    row_ref: RowRef
    column: str
    old: str
    new: str


Change = Union[ColumnAdded, ColumnRemoved, RowAdded, RowRemoved, CellChanged]


@dataclass(frozen=True)
class DiffSummary:
    """Aggregate change counts."""

    rows_added: int = 0
    rows_removed: int = 0
    rows_modified: int = 0
    columns_added: int = 0
    columns_removed: int = 0

    @property
    def is_empty(self) -> bool:
        """Whether no change of any kind was counted."""
        return not any(
            (
                self.rows_added,
                self.rows_removed,
                self.rows_modified,
                self.columns_added,
                self.columns_removed,
            )
        )


@dataclass(frozen=True)
class TableDiff:
    """Ordered changes between two tables.

    Attributes:
        from_id: Identity of the older side.
        to_id: Identity of the newer side.
        changes: Column changes, then row and cell changes in row order.
    """

    from_id: str
    to_id: str
    changes: tuple[Change, ...]

    @property
    def summary(self) -> DiffSummary:
        """Counts derived from ``changes``."""
        return summarize_changes(self.changes)


def summarize_changes(changes: tuple[Change, ...]) -> DiffSummary:
    """Aggregate change records into summary counts.

    A row with several changed cells counts once as modified.

    Raises:
        SheetsError: If an unknown change record is present.
    """
    rows_added = rows_removed = columns_added = columns_removed = 0
    modified_rows: set[RowRef] = set()
    for change in changes:
        if isinstance(change, RowAdded):
            rows_added += 1
        elif isinstance(change, RowRemoved):
            rows_removed += 1
        elif isinstance(change, CellChanged):
            modified_rows.add(change.row_ref)
        elif isinstance(change, ColumnAdded):
            columns_added += 1
        elif isinstance(change, ColumnRemoved):
            columns_removed += 1
        else:
            raise SheetsError(f"Unsupported change record: {type(change).__name__}.")
    return DiffSummary(
        rows_added=rows_added,
        rows_removed=rows_removed,
        rows_modified=len(modified_rows),
        columns_added=columns_added,
        columns_removed=columns_removed,
    )
