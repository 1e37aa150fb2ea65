"""Unit tests for the SDK client."""

from __future__ import annotations

import json
import shutil
from dataclasses import replace
from pathlib import Path

import pytest

from core.config import SheetsConfig
from core.diff_types import CellChanged
from core.errors import SheetsError, SheetsIngestError, TamperedDataError
from core.verification_types import Intact, Tampered
from store.sheets_sdk import SheetsClient
from tests.fixture_paths import csv_fixture


def _client(tmp_path) -> SheetsClient:
    return SheetsClient(replace(SheetsConfig.from_env(), repo_root=tmp_path))


def _copy_source(tmp_path, fixture_name: str, target_name: str = "sales.csv") -> Path:
    source_path = tmp_path / target_name
    shutil.copyfile(csv_fixture(fixture_name), source_path)
    return source_path


def test_snapshot_file_uses_source_stem(tmp_path) -> None:
    """Snapshots should be stored under the CSV file stem."""
    client = _client(tmp_path)

    snapshot = client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"), "Initial")

    assert snapshot.source_name == "sales" and snapshot.table.row_count == 3


def test_snapshot_file_from_dotfile_is_listed(tmp_path) -> None:
    """A source such as ``.sales.csv`` should show up in list and status."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv", ".sales.csv")

    snapshot = client.snapshot_file(source_path, primary_key=["ID"])
    status = client.status(client.tracking_context(source_path))

    assert [summary.snapshot_id for summary in client.list_snapshots()] == [snapshot.snapshot_id]
    assert status.latest is not None and status.latest.snapshot_id == snapshot.snapshot_id


def test_snapshot_file_resolves_key_argument(tmp_path) -> None:
    """Key tokens should resolve to column indices."""
    client = _client(tmp_path)

    snapshot = client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"), primary_key=["ID"])

    assert snapshot.table.primary_key == (0,)


def test_snapshot_file_reads_key_from_repo_config(tmp_path) -> None:
    """Sources declared in gitsheets.yaml should pick up their key."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")
    (tmp_path / "gitsheets.yaml").write_text(
        "version: 1\nsources:\n  - path: sales.csv\n    primary_key: [Name]\n",
        encoding="utf-8",
    )

    snapshot = client.snapshot_file(source_path)

    assert snapshot.table.key_labels == ("Name",)


def test_snapshot_file_records_dependencies(tmp_path) -> None:
    """Dependencies should carry the file name and content hash."""
    client = _client(tmp_path)
    rates_path = _copy_source(tmp_path, "rates.csv", "rates.csv")

    snapshot = client.snapshot_file(
        _copy_source(tmp_path, "sales_v1.csv"),
        depends_on=[rates_path],
    )

    dependency = snapshot.dependencies[0]
    assert dependency.name == "rates.csv" and len(dependency.hash) == 64


def test_snapshot_file_raises_for_missing_dependency(tmp_path) -> None:
    """A missing dependency should fail before anything is written."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")

    with pytest.raises(SheetsIngestError, match="dependency"):
        client.snapshot_file(source_path, depends_on=[tmp_path / "missing.csv"])

    assert client.list_snapshots() == []


def test_diff_snapshots_accepts_ids(tmp_path) -> None:
    """Diffs may be requested by snapshot id."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")
    first = client.snapshot_file(source_path, primary_key=["ID"])
    _copy_source(tmp_path, "sales_v2.csv")
    second = client.snapshot_file(source_path, primary_key=["ID"])

    diff = client.diff_snapshots(first.snapshot_id, second.snapshot_id)

    assert (diff.summary.rows_added, diff.summary.rows_removed, diff.summary.rows_modified) == (
        1,
        1,
        1,
    )


def test_verify_snapshot_intact(tmp_path) -> None:
    """Fresh snapshots should verify as intact."""
    client = _client(tmp_path)
    snapshot = client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"))

    result = client.verify_snapshot(snapshot.snapshot_id)

    assert result == Intact(snapshot_id=snapshot.snapshot_id)


def test_verify_snapshot_strict_raises_on_tampering(tmp_path) -> None:
    """Strict verification should raise for tampered records."""
    client = _client(tmp_path)
    snapshot = client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"))
    snapshot_path = client.snapshot_path(snapshot)
    payload = json.loads(snapshot_path.read_text(encoding="utf-8"))
    payload["table"]["rows"][0][2] = "999"
    snapshot_path.write_text(json.dumps(payload), encoding="utf-8")

    assert isinstance(client.verify_snapshot(snapshot.snapshot_id), Tampered)
    with pytest.raises(TamperedDataError):
        client.verify_snapshot(snapshot.snapshot_id, strict=True)


def test_log_lists_newest_first(tmp_path) -> None:
    """Log should reverse creation order and apply the limit."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")
    client.snapshot_file(source_path, "first")
    client.snapshot_file(source_path, "second")

    summaries = client.log(limit=1)

    assert [summary.message for summary in summaries] == ["second"]


def test_save_diff_writes_artifact(tmp_path) -> None:
    """Saved diffs should land under diffs/ and be replaceable."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")
    first = client.snapshot_file(source_path, primary_key=["ID"])
    _copy_source(tmp_path, "sales_v2.csv")
    second = client.snapshot_file(source_path, primary_key=["ID"])
    diff = client.diff_snapshots(first, second)

    client.save_diff(diff)
    diff_path = client.save_diff(diff)

    payload = json.loads(diff_path.read_text(encoding="utf-8"))
    assert diff_path.parent == tmp_path / "diffs"
    assert payload["summary"]["rows_modified"] == 1


def test_tracked_contexts_follow_repo_config(tmp_path) -> None:
    """Every declared source should get a tracking context."""
    client = _client(tmp_path)
    (tmp_path / "gitsheets.yaml").write_text(
        "version: 1\nsources:\n  - path: sales.csv\n    primary_key: ID\n  - notes.csv\n",
        encoding="utf-8",
    )

    contexts = client.tracked_contexts()

    assert [(context.source_name, context.source_path) for context in contexts] == [
        ("sales", (tmp_path / "sales.csv").resolve()),
        ("notes", (tmp_path / "notes.csv").resolve()),
    ]


def test_status_keys_live_data_by_latest_snapshot(tmp_path) -> None:
    """Status should follow the snapshot's key over the one in gitsheets.yaml."""
    client = _client(tmp_path)
    source_path = _copy_source(tmp_path, "sales_v1.csv")
    client.snapshot_file(source_path, primary_key=["ID"])
    (tmp_path / "gitsheets.yaml").write_text(
        "version: 1\nsources:\n  - path: sales.csv\n    primary_key: [Name]\n",
        encoding="utf-8",
    )
    _copy_source(tmp_path, "sales_v2.csv")

    (context,) = client.tracked_contexts()
    status = client.status(context)

    assert status.diff is not None
    assert CellChanged(row_ref=("1",), column="Amount", old="100", new="150") in status.diff.changes


def test_log_rejects_negative_limit(tmp_path) -> None:
    """A negative limit should raise instead of dropping the oldest snapshot."""
    client = _client(tmp_path)
    client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"))

    with pytest.raises(SheetsError, match="limit"):
        client.log(limit=-1)


def test_commit_snapshot_commits_record(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Committing should stage exactly the snapshot record."""
    client = _client(tmp_path)
    snapshot = client.snapshot_file(_copy_source(tmp_path, "sales_v1.csv"), "Initial")
    calls: list[tuple[Path, list[Path], str]] = []
    monkeypatch.setattr(
        "store.sheets_sdk.commit_paths",
        lambda repo_root, paths, message: calls.append((repo_root, list(paths), message)),
    )

    snapshot_path = client.commit_snapshot(snapshot, "Initial")

    assert calls == [(tmp_path, [snapshot_path], "Initial")]


def test_with_repo_root_clones_client(tmp_path) -> None:
    """Cloning should keep settings and swap the repository root."""
    client = _client(tmp_path)

    clone = client.with_repo_root(str(tmp_path / "other"))

    assert clone.config.repo_root == (tmp_path / "other").resolve()
    assert clone.config.log_level == client.config.log_level
