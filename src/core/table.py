"""In-memory table model.

This module defines the immutable table shared by hashing, storage,
and diffing. Construction validates shape so every downstream
consumer can index rows and key columns without further checks.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from functools import cached_property
from typing import Iterable, Sequence

from core.errors import SchemaError

RowKey = tuple[str, ...]


@dataclass(frozen=True)
class Table:
    """Headers, rows, and an optional primary key.

    Attributes:
        headers: Ordered column names. Duplicates are allowed.
        rows: Ordered rows, each exactly ``len(headers)`` cells long.
        primary_key: Ordered distinct column indices forming the row key.
    """

    headers: tuple[str, ...]
    rows: tuple[tuple[str, ...], ...]
    primary_key: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", tuple(str(header) for header in self.headers))
        object.__setattr__(self, "rows", tuple(tuple(str(cell) for cell in row) for row in self.rows))
        object.__setattr__(self, "primary_key", tuple(self.primary_key))
        _validate_rows(self.headers, self.rows)
        _validate_primary_key(self.headers, self.primary_key)

    @property
    def row_count(self) -> int:
        """Number of data rows."""
        return len(self.rows)

    @property
    def column_count(self) -> int:
        """Number of columns."""
        return len(self.headers)

    @property
    def has_primary_key(self) -> bool:
        """Whether rows are matched by key instead of position."""
        return bool(self.primary_key)

    @cached_property
    def column_labels(self) -> tuple[str, ...]:
        """Unique per-column labels used by hashes and diffs."""
        return build_column_labels(self.headers)

    @property
    def key_labels(self) -> tuple[str, ...]:
        """Column labels of the primary-key columns, in key order."""
        return tuple(self.column_labels[index] for index in self.primary_key)

    def cell(self, row_index: int, column_index: int) -> str:
        """Return one cell value."""
        return self.rows[row_index][column_index]

    def column_values(self, column_index: int) -> tuple[str, ...]:
        """Return all values of one column in row order."""
        return tuple(row[column_index] for row in self.rows)

    def key_of(self, row_index: int) -> RowKey:
        """Return the primary-key tuple of one row."""
        row = self.rows[row_index]
        return tuple(row[index] for index in self.primary_key)

    @cached_property
    def key_index(self) -> dict[RowKey, tuple[int, ...]]:
        """Map each key tuple to the indices of the rows carrying it.

        Built on first access. Empty when no primary key is configured.
        """
        if not self.primary_key:
            return {}
        grouped: dict[RowKey, list[int]] = {}
        for row_index in range(len(self.rows)):
            grouped.setdefault(self.key_of(row_index), []).append(row_index)
        return {key: tuple(indices) for key, indices in grouped.items()}

    def duplicate_keys(self) -> list[tuple[RowKey, tuple[int, ...]]]:
        """Return key tuples shared by more than one row."""
        return [(key, indices) for key, indices in self.key_index.items() if len(indices) > 1]

    def with_primary_key(self, primary_key: Sequence[int]) -> "Table":
        """Return a copy of this table keyed by other columns."""
        return replace(self, primary_key=tuple(primary_key))


def build_table(
    headers: Iterable[str],
    rows: Iterable[Iterable[str]],
    primary_key: Iterable[int] = (),
) -> Table:
    """Build a validated table from plain iterables.

    Raises:
        SchemaError: If a row length or key index is invalid.
    """
    return Table(
        headers=tuple(headers),
        rows=tuple(tuple(row) for row in rows),
        primary_key=tuple(primary_key),
    )


def build_column_labels(headers: Sequence[str]) -> tuple[str, ...]:
    """Derive unique column labels from possibly duplicated headers.

    The first occurrence keeps the header text; later occurrences become
    ``"<header>[n]"`` with ``n`` counting from 2.

    Args:
        headers: Ordered header names.

    Returns:
        One unique label per column.
    """
    labels: list[str] = []
    taken: set[str] = set(headers)
    seen_counts: dict[str, int] = {}
    for header in headers:
        occurrence = seen_counts.get(header, 0) + 1
        seen_counts[header] = occurrence
        if occurrence == 1:
            labels.append(header)
            continue
        label = f"{header}[{occurrence}]"
        while label in taken:
            occurrence += 1
            label = f"{header}[{occurrence}]"
        taken.add(label)
        labels.append(label)
    return tuple(labels)


def split_key_spec(raw_spec: str) -> tuple[str, ...]:
    """Split a comma separated key spec such as ``"0,Region"``."""
    return tuple(part.strip() for part in raw_spec.split(",") if part.strip())


def resolve_primary_key(headers: Sequence[str], tokens: Sequence[str]) -> tuple[int, ...]:
    """Resolve key tokens into column indices.

    A token naming a header resolves by name first; otherwise it must be
    a zero-based integer index.

    Args:
        headers: Table headers.
        tokens: Header names and/or index strings.

    Returns:
        Ordered column indices.

    Raises:
        SchemaError: If a token matches no column.
    """
    indices: list[int] = []
    for token in tokens:
        if token in headers:
            indices.append(list(headers).index(token))
            continue
        try:
            index = int(token)
        except ValueError as error:
            raise SchemaError(
                f"Primary key column '{token}' not found. "
                f"Available columns: {', '.join(headers)}."
            ) from error
        indices.append(index)
    _validate_primary_key(headers, tuple(indices))
    return tuple(indices)


def _validate_rows(headers: tuple[str, ...], rows: tuple[tuple[str, ...], ...]) -> None:
    expected = len(headers)
    for row_index, row in enumerate(rows):
        if len(row) != expected:
            raise SchemaError(
                f"Row {row_index} has {len(row)} cells but the table has {expected} "
                f"columns ({', '.join(headers)}). Fix the row before snapshotting."
            )


def _validate_primary_key(headers: Sequence[str], primary_key: tuple[int, ...]) -> None:
    seen: set[int] = set()
    for index in primary_key:
        if isinstance(index, bool) or not isinstance(index, int):
            raise SchemaError(f"Primary key index {index!r} must be an integer.")
        if index < 0 or index >= len(headers):
            raise SchemaError(
                f"Primary key index {index} is out of range for {len(headers)} columns. "
                f"Use indices 0..{len(headers) - 1}."
            )
        if index in seen:
            raise SchemaError(
                f"Primary key index {index} ('{headers[index]}') is listed more than once."
            )
        seen.add(index)
