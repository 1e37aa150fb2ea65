"""Snapshot store.

This module persists immutable table snapshots as JSON records.
It provides create, load, list, and latest operations for the SDK.
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

from core.config import SheetsConfig
from core.errors import IdCollisionError, SnapshotNotFoundError, SnapshotStoreError
from core.logging_config import get_logger
from core.table import Table
from core.types import Dependency, Snapshot, SnapshotSummary, summarize_snapshot
from hashing.table_hashes import compute_table_hashes
from store.atomic_io import write_text_atomic
from store.snapshot_payload import read_snapshot_file, render_snapshot_json
from store.storage_keys import build_snapshot_id, parse_storage_key, storage_key

_LOGGER = get_logger(__name__)


class SnapshotStore:
    """Immutable snapshot store implementation.

    This class owns the snapshots directory. Records are written once
    and never edited; a correction is always a new snapshot.
    """

    def __init__(self, config: SheetsConfig) -> None:
        """Initialize snapshot store from config.

        Args:
            config: Runtime configuration.
        """
        self._config = config
        self._snapshots_dir = config.snapshots_dir

    @property
    def snapshots_dir(self) -> Path:
        """Directory holding snapshot records."""
        return self._snapshots_dir

    def create_snapshot(
        self,
        table: Table,
        message: str,
        source_name: str,
        dependencies: tuple[Dependency, ...] = (),
    ) -> Snapshot:
        """Create and persist a new immutable snapshot.

        Args:
            table: Table to capture.
            message: User-provided description.
            source_name: Stem of the tracked source file.
            dependencies: External files recorded with the snapshot.

        Returns:
            Persisted snapshot.

        Raises:
            IdCollisionError: If the generated id is already stored.
            SnapshotStoreError: If persistence fails.
        """
        hashes = compute_table_hashes(table)
        created_at = datetime.now(timezone.utc)
        snapshot = Snapshot(
            snapshot_id=build_snapshot_id(hashes.table_hash, created_at),
            timestamp=created_at,
            message=message,
            source_name=source_name,
            table=table,
            hashes=hashes,
            dependencies=dependencies,
        )
        snapshot_path = self._write_snapshot(snapshot)
        _LOGGER.info(
            "snapshot_created",
            snapshot_id=snapshot.snapshot_id,
            source_name=source_name,
            row_count=table.row_count,
            column_count=table.column_count,
            path=str(snapshot_path),
        )
        return snapshot

    def load_snapshot(self, ref: str) -> Snapshot:
        """Load a snapshot by file path, id, or unique id prefix.

        Args:
            ref: Snapshot reference.

        Returns:
            Parsed snapshot. Hashes are not checked.

        Raises:
            SnapshotNotFoundError: If the reference does not resolve.
            CorruptSnapshotError: If the record is structurally invalid.
        """
        snapshot_path = self.resolve_path(ref)
        snapshot = read_snapshot_file(snapshot_path)
        _LOGGER.debug("snapshot_loaded", snapshot_id=snapshot.snapshot_id, path=str(snapshot_path))
        return snapshot

    def resolve_path(self, ref: str) -> Path:
        """Resolve a snapshot reference into a record path.

        Raises:
            SnapshotNotFoundError: If nothing or more than one record matches.
        """
        candidate = Path(ref).expanduser()
        if candidate.is_file():
            return candidate
        paths_by_id = self._paths_by_id()
        if ref in paths_by_id:
            return paths_by_id[ref]
        matches = sorted(snapshot_id for snapshot_id in paths_by_id if snapshot_id.startswith(ref))
        if len(matches) == 1:
            return paths_by_id[matches[0]]
        if len(matches) > 1:
            raise SnapshotNotFoundError(
                f"Snapshot reference '{ref}' is ambiguous: matches {', '.join(matches)}. "
                "Use a longer id."
            )
        raise SnapshotNotFoundError(
            f"Snapshot '{ref}' not found in {self._snapshots_dir}. "
            "Use 'git-sheets log' to list snapshot ids."
        )

    def list_snapshots(self, source_name: str | None = None) -> list[SnapshotSummary]:
        """List snapshots in creation order.

        Args:
            source_name: Optional source filter.

        Returns:
            Summaries sorted by timestamp, then id.

        Raises:
            CorruptSnapshotError: If a stored record cannot be parsed.
        """
        summaries: list[SnapshotSummary] = []
        for stored_source, snapshot_path in self._record_paths():
            if source_name is not None and stored_source != source_name:
                continue
            snapshot = read_snapshot_file(snapshot_path)
            if source_name is not None and snapshot.source_name != source_name:
                continue
            summaries.append(summarize_snapshot(snapshot, snapshot_path))
        return sorted(summaries, key=lambda item: (item.timestamp, item.snapshot_id))

    def latest_snapshot(self, source_name: str) -> Snapshot | None:
        """Return the most recent snapshot of a source, if any."""
        summaries = self.list_snapshots(source_name)
        if not summaries:
            return None
        return read_snapshot_file(summaries[-1].path)

    def snapshot_path(self, snapshot: Snapshot) -> Path:
        """Return the record path for a snapshot."""
        return self._snapshots_dir / storage_key(snapshot.source_name, snapshot.snapshot_id)

    def _write_snapshot(self, snapshot: Snapshot) -> Path:
        """Persist one record without ever replacing an existing file.

        Raises:
            IdCollisionError: If the id is already used.
            SnapshotStoreError: If the write fails.
        """
        if snapshot.snapshot_id in self._paths_by_id():
            raise IdCollisionError(
                f"Snapshot id {snapshot.snapshot_id} already exists in {self._snapshots_dir}. "
                "Refusing to overwrite; retry to get a new id."
            )
        snapshot_path = self.snapshot_path(snapshot)
        try:
            write_text_atomic(snapshot_path, render_snapshot_json(snapshot), exclusive=True)
        except FileExistsError as error:
            raise IdCollisionError(
                f"Snapshot file {snapshot_path} already exists. Refusing to overwrite."
            ) from error
        except OSError as error:
            raise SnapshotStoreError(
                f"Failed to write snapshot {snapshot_path}: {error}. "
                "Check directory permissions and free space."
            ) from error
        return snapshot_path

    def _record_paths(self) -> list[tuple[str, Path]]:
        return [(source_name, path) for source_name, _, path in self._scan_records()]

    def _paths_by_id(self) -> dict[str, Path]:
        return {snapshot_id: path for _, snapshot_id, path in self._scan_records()}

    def _scan_records(self) -> list[tuple[str, str, Path]]:
        if not self._snapshots_dir.is_dir():
            return []
        rows: list[tuple[str, str, Path]] = []
        for snapshot_path in sorted(self._snapshots_dir.iterdir()):
            parsed = parse_storage_key(snapshot_path.name)
            if parsed is None or not snapshot_path.is_file():
                continue
            rows.append((parsed[0], parsed[1], snapshot_path))
        return rows
