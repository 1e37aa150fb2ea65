"""Public SDK surface for git-sheets.

This module provides a stable import path for library users.
It re-exports the primary client, the table model, and typed results.
"""

from __future__ import annotations

from core.config import SheetsConfig
from core.diff_types import (
    CellChanged,
    ColumnAdded,
    ColumnRemoved,
    DiffSummary,
    RowAdded,
    RowRemoved,
    TableDiff,
)
from core.table import Table, build_table
from core.types import Dependency, Snapshot, SnapshotSummary, TableHashes
from core.verification_types import Intact, Tampered
from diff.table_diff import diff_tables
from hashing.table_hashes import compute_table_hashes
from ingest.csv_reader import read_csv_table
from store.sheets_sdk import SheetsClient
from verify.snapshot_verification import verify_snapshot

__all__ = [
    "CellChanged",
    "ColumnAdded",
    "ColumnRemoved",
    "Dependency",
    "DiffSummary",
    "Intact",
    "RowAdded",
    "RowRemoved",
    "SheetsClient",
    "SheetsConfig",
    "Snapshot",
    "SnapshotSummary",
    "Table",
    "TableDiff",
    "TableHashes",
    "Tampered",
    "build_table",
    "compute_table_hashes",
    "diff_tables",
    "read_csv_table",
    "verify_snapshot",
]
