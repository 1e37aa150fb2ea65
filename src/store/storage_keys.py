"""Snapshot identity and storage naming.

This module isolates id generation and file naming so the on-disk
layout can change without touching the table or snapshot models.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

from core.constants import (
    DIFF_FILE_SUFFIX,
    SNAPSHOT_FILE_SUFFIX,
    SNAPSHOT_ID_TOKEN_LENGTH,
    TEMP_FILE_SUFFIX,
)


def build_snapshot_id(table_hash: str, created_at: datetime) -> str:
    """Build a snapshot id from creation time and table content.

    Args:
        table_hash: Hex digest of the captured table.
        created_at: UTC creation timestamp.

    Returns:
        Snapshot id such as ``20261018T212500123456Z-3f2a9c1b0d``.
    """
    timestamp = created_at.strftime("%Y%m%dT%H%M%S%fZ")
    return f"{timestamp}-{table_hash[:SNAPSHOT_ID_TOKEN_LENGTH]}"


def source_name_for(source_path: Path) -> str:
    """Return the source name recorded for a tracked file."""
    return source_path.stem


def storage_key(source_name: str, snapshot_id: str) -> str:
    """Return the file name of a persisted snapshot."""
    return f"{source_name}_{snapshot_id}{SNAPSHOT_FILE_SUFFIX}"


def parse_storage_key(file_name: str) -> tuple[str, str] | None:
    """Split a snapshot file name into source name and snapshot id.

    Snapshot ids never contain underscores, so the id is everything
    after the last one. Source names may start with a dot; in-flight
    temp files are told apart by their suffix.

    Returns:
        ``(source_name, snapshot_id)`` or None for non-snapshot files.
    """
    if file_name.endswith(TEMP_FILE_SUFFIX) or not file_name.endswith(SNAPSHOT_FILE_SUFFIX):
        return None
    stem = file_name[: -len(SNAPSHOT_FILE_SUFFIX)]
    source_name, separator, snapshot_id = stem.rpartition("_")
    if not separator or not source_name or not snapshot_id:
        return None
    return source_name, snapshot_id


def diff_storage_key(from_id: str, to_id: str) -> str:
    """Return the file name of a saved diff artifact."""
    return f"{from_id}_to_{to_id}{DIFF_FILE_SUFFIX}"
