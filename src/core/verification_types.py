"""Typed results for snapshot integrity verification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Intact:
    """All stored hashes match the stored table."""

    snapshot_id: str

    @property
    def is_intact(self) -> bool:
        """Always true for intact results."""
        return True


@dataclass(frozen=True)
class Tampered:
    """At least one stored hash disagrees with the stored table.

    Attributes:
        snapshot_id: Verified snapshot id.
        mismatched: ``"table"`` and/or column labels whose hashes differ.
            A column may itself be labelled ``"table"``, so read
            ``table_hash_changed`` to tell the whole-table hash apart.
        tampered_rows: Row indices whose stored row hash differs.
        table_hash_changed: Whether the whole-table hash differs.
    """

    snapshot_id: str
    mismatched: frozenset[str]
    tampered_rows: tuple[int, ...] = ()
    table_hash_changed: bool = False

    @property
    def is_intact(self) -> bool:
        """Always false for tampered results."""
        return False


VerificationResult = Union[Intact, Tampered]
