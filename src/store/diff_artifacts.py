"""Saved diff artifacts.

Diffs are derived and disposable, so saving the same pair again
replaces the previous file atomically.
"""

from __future__ import annotations

from pathlib import Path

from core.diff_types import TableDiff
from core.errors import SnapshotStoreError
from core.logging_config import get_logger
from diff.diff_payload import render_diff_json
from store.atomic_io import write_text_atomic
from store.storage_keys import diff_storage_key

_LOGGER = get_logger(__name__)


def save_diff(diffs_dir: Path, diff: TableDiff) -> Path:
    """Write a diff artifact under the diffs directory.

    Args:
        diffs_dir: Target directory.
        diff: Diff to persist.

    Returns:
        Written artifact path.

    Raises:
        SnapshotStoreError: If the write fails.
    """
    diff_path = diffs_dir / diff_storage_key(diff.from_id, diff.to_id)
    try:
        write_text_atomic(diff_path, render_diff_json(diff), exclusive=False)
    except OSError as error:
        raise SnapshotStoreError(f"Failed to write diff {diff_path}: {error}.") from error
    _LOGGER.info("diff_saved", from_id=diff.from_id, to_id=diff.to_id, path=str(diff_path))
    return diff_path
