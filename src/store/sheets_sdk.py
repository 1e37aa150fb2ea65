"""Python SDK for snapshot operations.

This module exposes high-level APIs for snapshotting CSV sources,
diffing, verifying, and inspecting history, backed by the snapshot store.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Sequence, Union

from core.config import SheetsConfig
from core.diff_types import TableDiff
from core.errors import SheetsIngestError
from core.repo_config import RepoConfig, load_repo_config
from core.table import Table
from core.types import Dependency, Snapshot, SnapshotSummary
from core.verification_types import VerificationResult
from diff.table_diff import diff_snapshots
from hashing.table_hashes import compute_file_hash
from ingest.csv_reader import read_csv_table
from store.diff_artifacts import save_diff
from store.snapshot_store import SnapshotStore
from store.source_status import (
    SourceStatus,
    TrackingContext,
    compute_source_status,
    newest_first,
    read_source_log,
)
from store.storage_keys import source_name_for
from verify.snapshot_verification import require_intact, verify_snapshot
from workspace.git_client import commit_paths

SnapshotRef = Union[str, Snapshot]


class SheetsClient:
    """Primary SDK entry point."""

    def __init__(self, config: SheetsConfig | None = None) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
        """
        self._config = config or SheetsConfig.from_env()
        self._store = SnapshotStore(self._config)

    @property
    def config(self) -> SheetsConfig:
        """Runtime configuration used by this client."""
        return self._config

    def create_snapshot(
        self,
        table: Table,
        message: str = "",
        source_name: str = "table",
        dependencies: tuple[Dependency, ...] = (),
    ) -> Snapshot:
        """Persist a snapshot of an in-memory table.

        Args:
            table: Table to capture.
            message: Snapshot message.
            source_name: Name the snapshot is stored under.
            dependencies: External files recorded with the snapshot.

        Returns:
            Persisted snapshot.
        """
        return self._store.create_snapshot(table, message, source_name, dependencies)

    def snapshot_file(
        self,
        source_path: Path,
        message: str = "",
        primary_key: Sequence[str] = (),
        depends_on: Sequence[Path] = (),
    ) -> Snapshot:
        """Read a CSV source and snapshot it.

        The key falls back to the source's entry in gitsheets.yaml.

        Args:
            source_path: CSV file path.
            message: Snapshot message.
            primary_key: Key columns as header names or index strings.
            depends_on: External files to record as dependencies.

        Returns:
            Persisted snapshot.
        """
        key_tokens = tuple(primary_key) or self._configured_key(source_path)
        table = read_csv_table(source_path, key_tokens)
        dependencies = tuple(build_dependency(path) for path in depends_on)
        return self.create_snapshot(table, message, source_name_for(source_path), dependencies)

    def load_snapshot(self, ref: str) -> Snapshot:
        """Load a snapshot by path, id, or unique id prefix."""
        return self._store.load_snapshot(ref)

    def diff_snapshots(self, from_ref: SnapshotRef, to_ref: SnapshotRef) -> TableDiff:
        """Diff two snapshots.

        Args:
            from_ref: Older snapshot or its reference.
            to_ref: Newer snapshot or its reference.

        Returns:
            Ordered diff.
        """
        return diff_snapshots(self._resolve(from_ref), self._resolve(to_ref))

    def verify_snapshot(self, ref: SnapshotRef, strict: bool = False) -> VerificationResult:
        """Verify a snapshot's stored hashes.

        Args:
            ref: Snapshot or its reference.
            strict: Raise ``TamperedDataError`` instead of returning ``Tampered``.

        Returns:
            Verification result.
        """
        result = verify_snapshot(self._resolve(ref))
        if strict:
            require_intact(result)
        return result

    def list_snapshots(self, source_name: str | None = None) -> list[SnapshotSummary]:
        """List snapshots oldest first."""
        return self._store.list_snapshots(source_name)

    def log(self, source_name: str | None = None, limit: int | None = None) -> list[SnapshotSummary]:
        """List snapshots newest first.

        Args:
            source_name: Optional source filter.
            limit: Optional maximum number of rows.

        Returns:
            Snapshot summaries.

        Raises:
            SheetsError: If the limit is negative.
        """
        return newest_first(self._store.list_snapshots(source_name), limit)

    def source_log(self, context: TrackingContext, limit: int | None = None) -> list[SnapshotSummary]:
        """List one tracked source's snapshots newest first."""
        return read_source_log(context, limit)

    def tracking_context(self, source_path: Path) -> TrackingContext:
        """Build the tracking context for one source file."""
        resolved = source_path.expanduser()
        if not resolved.is_absolute():
            resolved = (Path.cwd() / resolved).resolve()
        return TrackingContext(store=self._store, source_path=resolved)

    def tracked_contexts(self) -> list[TrackingContext]:
        """Tracking contexts for every source declared in gitsheets.yaml."""
        return [
            TrackingContext(
                store=self._store,
                source_path=(self._config.repo_root / source.path).resolve(),
            )
            for source in self.repo_config().sources
        ]

    def status(self, context: TrackingContext) -> SourceStatus:
        """Compare a source's live data with its latest snapshot."""
        return compute_source_status(context)

    def save_diff(self, diff: TableDiff) -> Path:
        """Persist a diff artifact under the diffs directory."""
        return save_diff(self._config.diffs_dir, diff)

    def commit_snapshot(self, snapshot: Snapshot, message: str) -> Path:
        """Commit a snapshot record to git and return its path."""
        snapshot_path = self._store.snapshot_path(snapshot)
        commit_paths(self._config.repo_root, [snapshot_path], message)
        return snapshot_path

    def snapshot_path(self, snapshot: Snapshot) -> Path:
        """Return the record path of a snapshot."""
        return self._store.snapshot_path(snapshot)

    def repo_config(self) -> RepoConfig:
        """Load gitsheets.yaml from the repository root."""
        return load_repo_config(self._config.repo_config_path)

    def with_repo_root(self, repo_root: str) -> "SheetsClient":
        """Clone the client with a different repository root.

        Args:
            repo_root: New repository root path.

        Returns:
            New SDK client instance.
        """
        resolved_root = Path(repo_root).expanduser().resolve()
        return SheetsClient(replace(self._config, repo_root=resolved_root))

    def _resolve(self, ref: SnapshotRef) -> Snapshot:
        if isinstance(ref, Snapshot):
            return ref
        return self._store.load_snapshot(ref)

    def _configured_key(self, source_path: Path) -> tuple[str, ...]:
        tracked = self.repo_config().find_source(source_path, self._config.repo_root)
        return tracked.primary_key if tracked else ()


def build_dependency(dependency_path: Path) -> Dependency:
    """Record an external file with its current content hash.

    Raises:
        SheetsIngestError: If the file cannot be read.
    """
    try:
        file_bytes = dependency_path.read_bytes()
    except OSError as error:
        raise SheetsIngestError(
            f"Failed to read dependency {dependency_path}: {error}."
        ) from error
    return Dependency(
        name=dependency_path.name,
        path=str(dependency_path),
        hash=compute_file_hash(file_bytes),
    )
