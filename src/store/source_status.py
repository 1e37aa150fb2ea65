"""Status and log over one tracked source.

Operations take an explicit tracking context instead of reading the
process working directory, so they can run against any repository.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.diff_types import TableDiff
from core.errors import PrimaryKeyMismatchError, SheetsError
from core.table import Table
from core.types import SnapshotSummary, summarize_snapshot
from diff.table_diff import diff_tables
from ingest.csv_reader import read_csv_table
from store.snapshot_store import SnapshotStore
from store.storage_keys import source_name_for

WORKING_COPY_ID = "working"


@dataclass(frozen=True)
class TrackingContext:
    """Store handle plus the tracked source file.

    Status keys live data by the latest snapshot, so the context carries
    no key of its own.

    Attributes:
        store: Snapshot store holding the source's history.
        source_path: Live CSV file.
    """

    store: SnapshotStore
    source_path: Path

    @property
    def source_name(self) -> str:
        """Source name under which snapshots are stored."""
        return source_name_for(self.source_path)


@dataclass(frozen=True)
class SourceStatus:
    """Live source compared with its most recent snapshot.

    Attributes:
        source_name: Tracked source name.
        source_path: Live CSV path.
        source_exists: Whether the live file is present.
        latest: Most recent snapshot summary, if any.
        diff: Latest snapshot versus live data, when both exist.
    """

    source_name: str
    source_path: Path
    source_exists: bool
    latest: SnapshotSummary | None
    diff: TableDiff | None

    @property
    def has_changes(self) -> bool:
        """Whether live data differs from the latest snapshot."""
        return self.diff is not None and len(self.diff.changes) > 0


def compute_source_status(context: TrackingContext) -> SourceStatus:
    """Diff the live source against its most recent snapshot.

    Args:
        context: Tracking context.

    Returns:
        Status with an optional live diff.

    Raises:
        PrimaryKeyMismatchError: If live data lacks the snapshot's key columns.
        AmbiguousKeyError: If live data repeats a key.
    """
    latest = context.store.latest_snapshot(context.source_name)
    source_exists = context.source_path.is_file()
    latest_summary = (
        summarize_snapshot(latest, context.store.snapshot_path(latest)) if latest else None
    )
    if latest is None or not source_exists:
        return SourceStatus(
            source_name=context.source_name,
            source_path=context.source_path,
            source_exists=source_exists,
            latest=latest_summary,
            diff=None,
        )
    live_table = key_like(read_csv_table(context.source_path), latest.table)
    diff = diff_tables(
        latest.table,
        live_table,
        from_id=latest.snapshot_id,
        to_id=WORKING_COPY_ID,
    )
    return SourceStatus(
        source_name=context.source_name,
        source_path=context.source_path,
        source_exists=True,
        latest=latest_summary,
        diff=diff,
    )


def read_source_log(context: TrackingContext, limit: int | None = None) -> list[SnapshotSummary]:
    """Return a source's snapshots newest first.

    Args:
        context: Tracking context.
        limit: Optional maximum number of rows.

    Returns:
        Snapshot summaries, newest first.
    """
    return newest_first(context.store.list_snapshots(context.source_name), limit)


def newest_first(
    summaries: list[SnapshotSummary], limit: int | None = None
) -> list[SnapshotSummary]:
    """Reverse oldest-first summaries and keep at most ``limit`` of them.

    Raises:
        SheetsError: If the limit is negative.
    """
    if limit is not None and limit < 0:
        raise SheetsError(f"Log limit must be zero or more, got {limit}.")
    ordered = list(reversed(summaries))
    return ordered if limit is None else ordered[:limit]


def key_like(table: Table, reference: Table) -> Table:
    """Key a table by the same column labels as a reference table.

    Raises:
        PrimaryKeyMismatchError: If a reference key column is missing.
    """
    if not reference.has_primary_key:
        return table.with_primary_key(())
    positions = {label: index for index, label in enumerate(table.column_labels)}
    missing = [label for label in reference.key_labels if label not in positions]
    if missing:
        raise PrimaryKeyMismatchError(
            f"Key column(s) {', '.join(missing)} of the latest snapshot are missing "
            "from the live source. Snapshot again with a new key to continue."
        )
    return table.with_primary_key([positions[label] for label in reference.key_labels])
