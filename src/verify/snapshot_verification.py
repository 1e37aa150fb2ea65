"""Hash-based tamper detection for stored snapshots.

Verification recomputes every hash from the stored table and compares
it with the stored values. It never modifies the snapshot, so a
tampered record stays loadable for forensic diffing.
"""

from __future__ import annotations

from typing import Mapping

from core.constants import TABLE_HASH_LABEL
from core.errors import TamperedDataError
from core.logging_config import get_logger
from core.types import Snapshot
from core.verification_types import Intact, Tampered, VerificationResult
from hashing.table_hashes import compute_table_hashes

_LOGGER = get_logger(__name__)


def verify_snapshot(snapshot: Snapshot) -> VerificationResult:
    """Check a snapshot's stored hashes against its stored table.

    Args:
        snapshot: Loaded snapshot.

    Returns:
        ``Intact`` or ``Tampered`` naming every mismatched hash.
    """
    stored = snapshot.hashes
    computed = compute_table_hashes(snapshot.table)
    mismatched = set(_mismatched_labels(stored.header_hashes, computed.header_hashes))
    table_hash_changed = stored.table_hash != computed.table_hash
    if table_hash_changed:
        mismatched.add(TABLE_HASH_LABEL)
    tampered_rows = _mismatched_rows(stored.row_hashes, computed.row_hashes)
    if not mismatched and not tampered_rows:
        _LOGGER.debug("verification_passed", snapshot_id=snapshot.snapshot_id)
        return Intact(snapshot_id=snapshot.snapshot_id)
    _LOGGER.warning(
        "verification_failed",
        snapshot_id=snapshot.snapshot_id,
        mismatched=sorted(mismatched),
        tampered_rows=list(tampered_rows),
        table_hash_changed=table_hash_changed,
    )
    return Tampered(
        snapshot_id=snapshot.snapshot_id,
        mismatched=frozenset(mismatched),
        tampered_rows=tampered_rows,
        table_hash_changed=table_hash_changed,
    )


def require_intact(result: VerificationResult) -> None:
    """Raise when a verification result is not intact.

    Raises:
        TamperedDataError: If the result is ``Tampered``.
    """
    if isinstance(result, Tampered):
        raise TamperedDataError(result.snapshot_id, result.mismatched)


def _mismatched_labels(stored: Mapping[str, str], computed: Mapping[str, str]) -> list[str]:
    """Labels whose digests differ or exist on one side only."""
    return [
        label
        for label in sorted(stored.keys() | computed.keys())
        if stored.get(label) != computed.get(label)
    ]


def _mismatched_rows(stored: tuple[str, ...], computed: tuple[str, ...]) -> tuple[int, ...]:
    """Row indices whose digests differ, including extra or missing rows.

    Records written without row hashes skip this check.
    """
    if not stored:
        return ()
    return tuple(
        row_index
        for row_index in range(max(len(stored), len(computed)))
        if row_index >= len(stored)
        or row_index >= len(computed)
        or stored[row_index] != computed[row_index]
    )
