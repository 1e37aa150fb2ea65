"""JSON serialization for persisted snapshot records.

This module centralizes the snapshot file format. Deserialization
validates structure strictly and never checks or repairs hashes, so
tampered records still load for forensic inspection.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from core.constants import SNAPSHOT_FORMAT_VERSION
from core.errors import CorruptSnapshotError, SchemaError
from core.table import Table
from core.types import Dependency, Snapshot, TableHashes


def snapshot_to_payload(snapshot: Snapshot) -> dict[str, object]:
    """Serialize a snapshot into a JSON-safe payload.

    Args:
        snapshot: Snapshot instance.

    Returns:
        Dictionary payload for JSON encoding.
    """
    table = snapshot.table
    return {
        "format_version": SNAPSHOT_FORMAT_VERSION,
        "id": snapshot.snapshot_id,
        "timestamp": snapshot.timestamp.isoformat(),
        "message": snapshot.message,
        "source_name": snapshot.source_name,
        "table": {
            "headers": list(table.headers),
            "primary_key": list(table.primary_key),
            "rows": [list(row) for row in table.rows],
        },
        "hashes": {
            "table_hash": snapshot.hashes.table_hash,
            "header_hashes": dict(snapshot.hashes.header_hashes),
            "row_hashes": list(snapshot.hashes.row_hashes),
        },
        "dependencies": [
            {"name": dependency.name, "path": dependency.path, "hash": dependency.hash}
            for dependency in snapshot.dependencies
        ],
    }


def render_snapshot_json(snapshot: Snapshot) -> str:
    """Render the on-disk text of a snapshot record."""
    return json.dumps(snapshot_to_payload(snapshot), indent=2, ensure_ascii=False) + "\n"


def read_snapshot_file(snapshot_path: Path) -> Snapshot:
    """Read and validate one snapshot record.

    Args:
        snapshot_path: Record file path.

    Returns:
        Parsed snapshot.

    Raises:
        CorruptSnapshotError: If the file is unreadable or structurally invalid.
    """
    try:
        payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise CorruptSnapshotError(
            f"Failed to parse snapshot at {snapshot_path}: {error.msg} "
            f"(line {error.lineno}). The record is corrupt and will not be repaired."
        ) from error
    except (OSError, UnicodeDecodeError) as error:
        raise CorruptSnapshotError(
            f"Failed to read snapshot at {snapshot_path}: {error}."
        ) from error
    return snapshot_from_payload(payload, str(snapshot_path))


def snapshot_from_payload(payload: object, origin: str) -> Snapshot:
    """Deserialize a JSON payload into a snapshot.

    Args:
        payload: Decoded JSON value.
        origin: Source description used in error messages.

    Returns:
        Parsed snapshot.

    Raises:
        CorruptSnapshotError: If required fields are missing or mistyped.
    """
    root = _expect_dict(payload, "snapshot", origin)
    format_version = root.get("format_version")
    if format_version != SNAPSHOT_FORMAT_VERSION:
        raise CorruptSnapshotError(
            f"Snapshot at {origin} has unsupported format_version {format_version!r}; "
            f"expected {SNAPSHOT_FORMAT_VERSION}."
        )
    return Snapshot(
        snapshot_id=_expect_str(root.get("id"), "id", origin),
        timestamp=_parse_timestamp(root.get("timestamp"), origin),
        message=_expect_str(root.get("message", ""), "message", origin),
        source_name=_expect_str(root.get("source_name"), "source_name", origin),
        table=_parse_table(root.get("table"), origin),
        hashes=_parse_hashes(root.get("hashes"), origin),
        dependencies=_parse_dependencies(root.get("dependencies", []), origin),
    )


def _parse_table(value: object, origin: str) -> Table:
    table_payload = _expect_dict(value, "table", origin)
    headers = _expect_str_list(table_payload.get("headers"), "table.headers", origin)
    raw_rows = _expect_list(table_payload.get("rows"), "table.rows", origin)
    rows = [
        _expect_str_list(row, f"table.rows[{row_index}]", origin)
        for row_index, row in enumerate(raw_rows)
    ]
    raw_key = _expect_list(table_payload.get("primary_key", []), "table.primary_key", origin)
    primary_key = []
    for item in raw_key:
        if isinstance(item, bool) or not isinstance(item, int):
            raise CorruptSnapshotError(
                f"Snapshot at {origin} has a non-integer primary key index {item!r}."
            )
        primary_key.append(item)
    try:
        return Table(
            headers=tuple(headers),
            rows=tuple(tuple(row) for row in rows),
            primary_key=tuple(primary_key),
        )
    except SchemaError as error:
        raise CorruptSnapshotError(f"Snapshot at {origin} holds an invalid table: {error}") from error


def _parse_hashes(value: object, origin: str) -> TableHashes:
    hashes_payload = _expect_dict(value, "hashes", origin)
    raw_header_hashes = _expect_dict(
        hashes_payload.get("header_hashes"), "hashes.header_hashes", origin
    )
    header_hashes = {
        str(label): _expect_str(digest, f"hashes.header_hashes[{label}]", origin)
        for label, digest in raw_header_hashes.items()
    }
    row_hashes = _expect_str_list(hashes_payload.get("row_hashes", []), "hashes.row_hashes", origin)
    return TableHashes(
        table_hash=_expect_str(hashes_payload.get("table_hash"), "hashes.table_hash", origin),
        header_hashes=header_hashes,
        row_hashes=tuple(row_hashes),
    )


def _parse_dependencies(value: object, origin: str) -> tuple[Dependency, ...]:
    dependencies = []
    for index, item in enumerate(_expect_list(value, "dependencies", origin)):
        context = f"dependencies[{index}]"
        dependency_payload = _expect_dict(item, context, origin)
        raw_path = dependency_payload.get("path")
        dependencies.append(
            Dependency(
                name=_expect_str(dependency_payload.get("name"), f"{context}.name", origin),
                path=None if raw_path is None else _expect_str(raw_path, f"{context}.path", origin),
                hash=_expect_str(dependency_payload.get("hash"), f"{context}.hash", origin),
            )
        )
    return tuple(dependencies)


def _parse_timestamp(value: object, origin: str) -> datetime:
    raw_timestamp = _expect_str(value, "timestamp", origin)
    try:
        timestamp = datetime.fromisoformat(raw_timestamp.replace("Z", "+00:00"))
    except ValueError as error:
        raise CorruptSnapshotError(
            f"Snapshot at {origin} has an invalid timestamp '{raw_timestamp}'."
        ) from error
    if timestamp.tzinfo is None:
        return timestamp.replace(tzinfo=timezone.utc)
    return timestamp


def _expect_dict(value: object, field_name: str, origin: str) -> dict[str, Any]:
    if isinstance(value, dict):
        return value
    raise CorruptSnapshotError(
        f"Snapshot at {origin}: field '{field_name}' must be an object, "
        f"got {type(value).__name__}."
    )


def _expect_list(value: object, field_name: str, origin: str) -> list[Any]:
    if isinstance(value, list):
        return value
    raise CorruptSnapshotError(
        f"Snapshot at {origin}: field '{field_name}' must be a list, got {type(value).__name__}."
    )


def _expect_str(value: object, field_name: str, origin: str) -> str:
    if isinstance(value, str):
        return value
    raise CorruptSnapshotError(
        f"Snapshot at {origin}: field '{field_name}' must be a string, got {type(value).__name__}."
    )


def _expect_str_list(value: object, field_name: str, origin: str) -> list[str]:
    items = _expect_list(value, field_name, origin)
    for item in items:
        if not isinstance(item, str):
            raise CorruptSnapshotError(
                f"Snapshot at {origin}: field '{field_name}' must contain only strings."
            )
    return items
