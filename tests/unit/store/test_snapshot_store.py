"""Unit tests for snapshot store persistence."""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime

import pytest

from core.config import SheetsConfig
from core.errors import CorruptSnapshotError, IdCollisionError, SnapshotNotFoundError
from core.table import build_table
from store.snapshot_store import SnapshotStore


def _sales_table(amount: str = "100"):
    return build_table(
        ["ID", "Name", "Amount"],
        [["1", "Alice", amount], ["2", "Bob", "200"]],
        [0],
    )


def _store(tmp_path) -> SnapshotStore:
    config = replace(SheetsConfig.from_env(), repo_root=tmp_path)
    return SnapshotStore(config)


def test_create_snapshot_persists_record(tmp_path) -> None:
    """Store should write one JSON record named after source and id."""
    store = _store(tmp_path)

    snapshot = store.create_snapshot(_sales_table(), "Initial import", "sales")

    snapshot_path = tmp_path / "snapshots" / f"sales_{snapshot.snapshot_id}.json"
    assert snapshot_path.is_file() and store.snapshot_path(snapshot) == snapshot_path


def test_create_snapshot_id_embeds_table_hash(tmp_path) -> None:
    """Snapshot ids should end with a prefix of the table hash."""
    store = _store(tmp_path)

    snapshot = store.create_snapshot(_sales_table(), "", "sales")

    assert snapshot.snapshot_id.endswith(f"-{snapshot.hashes.table_hash[:10]}")


def test_load_snapshot_round_trips_table(tmp_path) -> None:
    """Loading by id should return the captured table and hashes."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "Initial import", "sales")

    loaded = store.load_snapshot(created.snapshot_id)

    assert loaded == created


def test_load_snapshot_accepts_path_and_prefix(tmp_path) -> None:
    """References may be a record path or a unique id prefix."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "", "sales")

    by_path = store.load_snapshot(str(store.snapshot_path(created)))
    by_prefix = store.load_snapshot(created.snapshot_id[:12])

    assert by_path.snapshot_id == by_prefix.snapshot_id == created.snapshot_id


def test_load_snapshot_raises_for_unknown_reference(tmp_path) -> None:
    """Unknown references should raise a not-found error."""
    store = _store(tmp_path)

    with pytest.raises(SnapshotNotFoundError, match="git-sheets log"):
        store.load_snapshot("19990101")


def test_load_snapshot_raises_for_ambiguous_prefix(tmp_path) -> None:
    """A prefix matching several ids should not pick one silently."""
    store = _store(tmp_path)
    store.create_snapshot(_sales_table(), "", "sales")
    store.create_snapshot(_sales_table("101"), "", "sales")

    with pytest.raises(SnapshotNotFoundError, match="ambiguous"):
        store.load_snapshot("2")


def test_create_snapshot_refuses_id_collision(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """An existing id must never be overwritten."""
    store = _store(tmp_path)
    monkeypatch.setattr(
        "store.snapshot_store.build_snapshot_id",
        lambda table_hash, created_at: "20260101T000000000000Z-fixed",
    )
    first = store.create_snapshot(_sales_table(), "first", "sales")

    with pytest.raises(IdCollisionError):
        store.create_snapshot(_sales_table("101"), "second", "sales")

    assert store.load_snapshot(first.snapshot_id).message == "first"


def test_list_snapshots_orders_by_creation_time(tmp_path) -> None:
    """Listing should return snapshots oldest first."""
    store = _store(tmp_path)
    first = store.create_snapshot(_sales_table(), "first", "sales")
    second = store.create_snapshot(_sales_table("101"), "second", "sales")

    summaries = store.list_snapshots()

    assert [summary.snapshot_id for summary in summaries] == [
        first.snapshot_id,
        second.snapshot_id,
    ]


def test_list_snapshots_filters_by_source(tmp_path) -> None:
    """A source filter should only return that source's snapshots."""
    store = _store(tmp_path)
    store.create_snapshot(_sales_table(), "", "sales")
    other = store.create_snapshot(_sales_table(), "", "sales_eu")

    summaries = store.list_snapshots("sales_eu")

    assert [summary.snapshot_id for summary in summaries] == [other.snapshot_id]


def test_list_snapshots_empty_store(tmp_path) -> None:
    """A missing snapshots directory lists nothing."""
    assert _store(tmp_path).list_snapshots() == []


def test_list_snapshots_ignores_temp_files(tmp_path) -> None:
    """Leftover temp files should not be listed as snapshots."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "", "sales")
    (tmp_path / "snapshots" / ".sales_x.json.abc.tmp").write_text("{", encoding="utf-8")

    summaries = store.list_snapshots()

    assert [summary.snapshot_id for summary in summaries] == [created.snapshot_id]


def test_dot_prefixed_source_is_listed_and_loadable(tmp_path) -> None:
    """Sources such as ``.sales.csv`` should stay visible after snapshotting."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "hidden source", ".sales")
    (tmp_path / "snapshots" / "..sales_x.json.abc.tmp").write_text("{", encoding="utf-8")

    summaries = store.list_snapshots()
    latest = store.latest_snapshot(".sales")

    assert [summary.snapshot_id for summary in summaries] == [created.snapshot_id]
    assert latest is not None and latest.snapshot_id == created.snapshot_id
    assert store.load_snapshot(created.snapshot_id).source_name == ".sales"


def test_dot_prefixed_source_refuses_id_collision(
    tmp_path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """The collision check should see records of dot-prefixed sources."""
    store = _store(tmp_path)
    monkeypatch.setattr(
        "store.snapshot_store.build_snapshot_id",
        lambda table_hash, created_at: "20260101T000000000000Z-fixed",
    )
    store.create_snapshot(_sales_table(), "first", ".sales")

    with pytest.raises(IdCollisionError):
        store.create_snapshot(_sales_table("101"), "second", "sales")


def test_list_snapshots_raises_for_corrupt_record(tmp_path) -> None:
    """A truncated record should be reported, not skipped."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "", "sales")
    snapshot_path = store.snapshot_path(created)
    snapshot_path.write_text(snapshot_path.read_text(encoding="utf-8")[:40], encoding="utf-8")

    with pytest.raises(CorruptSnapshotError):
        store.list_snapshots()


def test_latest_snapshot_returns_newest(tmp_path) -> None:
    """Latest should pick the most recent snapshot of a source."""
    store = _store(tmp_path)
    store.create_snapshot(_sales_table(), "first", "sales")
    store.create_snapshot(_sales_table("101"), "second", "sales")

    latest = store.latest_snapshot("sales")

    assert latest is not None and latest.message == "second"


def test_latest_snapshot_none_without_history(tmp_path) -> None:
    """A source without snapshots has no latest snapshot."""
    assert _store(tmp_path).latest_snapshot("sales") is None


def test_persisted_record_is_readable_json(tmp_path) -> None:
    """Records should be plain JSON with table, hashes, and metadata."""
    store = _store(tmp_path)
    created = store.create_snapshot(_sales_table(), "Initial import", "sales")

    payload = json.loads(store.snapshot_path(created).read_text(encoding="utf-8"))

    assert payload["table"]["rows"][0] == ["1", "Alice", "100"]
    assert payload["hashes"]["table_hash"] == created.hashes.table_hash
    assert datetime.fromisoformat(payload["timestamp"]) == created.timestamp
