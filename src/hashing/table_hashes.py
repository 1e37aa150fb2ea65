"""Deterministic table, column, and row hashing.

Each digest covers a compact JSON rendering of a fixed-shape payload.
JSON string escaping keeps the encoding injective, so delimiter
characters inside cells cannot make two different tables collide.
"""

from __future__ import annotations

import hashlib
import json
from typing import Sequence

from core.constants import HASH_ALGORITHM
from core.table import Table
from core.types import TableHashes


def compute_table_hash(table: Table) -> str:
    """Hash headers, primary key, and all rows of a table.

    Args:
        table: Table to hash.

    Returns:
        Hex digest string.
    """
    payload = {
        "headers": list(table.headers),
        "primary_key": list(table.primary_key),
        "rows": [list(row) for row in table.rows],
    }
    return _hash_payload(payload)


def compute_header_hash(table: Table, column_index: int) -> str:
    """Hash one column's header and its values in row order.

    Args:
        table: Table holding the column.
        column_index: Zero-based column index.

    Returns:
        Hex digest string.
    """
    payload = {
        "header": table.headers[column_index],
        "values": list(table.column_values(column_index)),
    }
    return _hash_payload(payload)


def compute_row_hash(row: Sequence[str]) -> str:
    """Hash the cells of one row."""
    return _hash_payload({"cells": list(row)})


def compute_table_hashes(table: Table) -> TableHashes:
    """Compute every hash stored with a snapshot.

    Args:
        table: Table to hash.

    Returns:
        Table, per-column, and per-row digests.
    """
    header_hashes = {
        label: compute_header_hash(table, column_index)
        for column_index, label in enumerate(table.column_labels)
    }
    return TableHashes(
        table_hash=compute_table_hash(table),
        header_hashes=header_hashes,
        row_hashes=tuple(compute_row_hash(row) for row in table.rows),
    )


def compute_file_hash(file_bytes: bytes) -> str:
    """Hash raw file bytes, used for snapshot dependencies."""
    hash_builder = hashlib.new(HASH_ALGORITHM)
    hash_builder.update(file_bytes)
    return hash_builder.hexdigest()


def _hash_payload(payload: dict[str, object]) -> str:
    normalized = json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    hash_builder = hashlib.new(HASH_ALGORITHM)
    hash_builder.update(normalized.encode("utf-8"))
    return hash_builder.hexdigest()
