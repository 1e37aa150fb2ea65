"""git-sheets exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type for debuggability.
"""

from __future__ import annotations


class SheetsError(Exception):
    """Base exception for all git-sheets failures."""


class SheetsConfigError(SheetsError):
    """Raised for invalid runtime or repository configuration."""


class SheetsIngestError(SheetsError):
    """Raised when a source CSV file cannot be read."""


class SheetsDependencyError(SheetsError):
    """Raised when an optional runtime dependency is missing."""


class SheetsGitError(SheetsError):
    """Raised when a git command fails."""


class SchemaError(SheetsError):
    """Raised for malformed tables.

    Covers row/header length mismatches and invalid primary-key indices.
    """


class AmbiguousKeyError(SheetsError):
    """Raised when a primary-key tuple identifies more than one row."""

    def __init__(self, key: tuple[str, ...], side: str, row_indices: tuple[int, ...]) -> None:
        self.key = key
        self.side = side
        self.row_indices = row_indices
        super().__init__(
            f"Primary key {list(key)} is not unique in the '{side}' table "
            f"(rows {', '.join(str(index) for index in row_indices)}). "
            "Choose key columns that identify each row exactly once."
        )


class PrimaryKeyMismatchError(SheetsError):
    """Raised when two tables being diffed use different primary keys."""


class SnapshotStoreError(SheetsError):
    """Raised for snapshot persistence failures."""


class SnapshotNotFoundError(SnapshotStoreError):
    """Raised when a snapshot reference does not resolve."""


class CorruptSnapshotError(SnapshotStoreError):
    """Raised when a persisted snapshot record is structurally invalid."""


class IdCollisionError(SnapshotStoreError):
    """Raised when a new snapshot id is already taken."""


class TamperedDataError(SheetsError):
    """Raised when a caller requires an intact snapshot and it is not."""

    def __init__(self, snapshot_id: str, mismatched: frozenset[str]) -> None:
        self.snapshot_id = snapshot_id
        self.mismatched = mismatched
        super().__init__(
            f"Snapshot {snapshot_id} failed integrity verification: "
            f"mismatched hashes for {', '.join(sorted(mismatched))}."
        )
