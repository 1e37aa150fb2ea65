"""Shared typed models.

This module defines immutable snapshot models used by the hash engine,
the snapshot store, the SDK, and the CLI to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Mapping

from core.table import Table


@dataclass(frozen=True)
class TableHashes:
    """Hashes used for integrity verification.

    Attributes:
        table_hash: Digest of headers, primary key, and all rows.
        header_hashes: Digest per column label.
        row_hashes: Digest per row, in row order.
    """

    table_hash: str
    header_hashes: Mapping[str, str] = field(default_factory=dict)
    row_hashes: tuple[str, ...] = ()


@dataclass(frozen=True)
class Dependency:
    """External file a snapshot was taken against.

    Attributes:
        name: Display name of the dependency.
        path: File path when the dependency is a local file.
        hash: Content digest captured at snapshot time.
    """

    name: str
    path: str | None
    hash: str


@dataclass(frozen=True)
class Snapshot:
    """Immutable capture of a table at one point in time.

    Attributes:
        snapshot_id: Unique id built from creation time and table hash.
        timestamp: UTC creation timestamp.
        message: User-provided description, empty when omitted.
        source_name: Stem of the tracked source file.
        table: Captured table data.
        hashes: Hashes stored at creation time.
        dependencies: External files recorded with the snapshot.
    """

    snapshot_id: str
    timestamp: datetime
    message: str
    source_name: str
    table: Table
    hashes: TableHashes
    dependencies: tuple[Dependency, ...] = ()


@dataclass(frozen=True)
class SnapshotSummary:
    """Listing row for one persisted snapshot.

    Attributes:
        snapshot_id: Snapshot id.
        source_name: Tracked source stem.
        timestamp: UTC creation timestamp.
        message: Snapshot message.
        row_count: Number of data rows.
        column_count: Number of columns.
        table_hash: Stored table hash.
        path: Location of the persisted record.
    """

    snapshot_id: str
    source_name: str
    timestamp: datetime
    message: str
    row_count: int
    column_count: int
    table_hash: str
    path: Path


def summarize_snapshot(snapshot: Snapshot, path: Path) -> SnapshotSummary:
    """Build a listing row from a loaded snapshot."""
    return SnapshotSummary(
        snapshot_id=snapshot.snapshot_id,
        source_name=snapshot.source_name,
        timestamp=snapshot.timestamp,
        message=snapshot.message,
        row_count=snapshot.table.row_count,
        column_count=snapshot.table.column_count,
        table_hash=snapshot.hashes.table_hash,
        path=path,
    )
