"""Unit tests for repository initialization."""

from __future__ import annotations

from dataclasses import replace

import pytest

from core.config import SheetsConfig
from core.repo_config import load_repo_config
from workspace.repository_init import initialize_repository


def _config(tmp_path) -> SheetsConfig:
    return replace(SheetsConfig.from_env(), repo_root=tmp_path)


def test_initialize_creates_layout(tmp_path) -> None:
    """Init should create directories and starter files."""
    config = _config(tmp_path)

    result = initialize_repository(config, init_git=False)

    assert config.snapshots_dir.is_dir() and config.diffs_dir.is_dir()
    assert (tmp_path / ".gitignore").is_file() and (tmp_path / "README.md").is_file()
    assert len(result.created) == 5 and not result.git_initialized


def test_initialize_writes_loadable_repo_config(tmp_path) -> None:
    """The starter gitsheets.yaml should parse with no sources."""
    config = _config(tmp_path)

    initialize_repository(config, init_git=False)

    assert load_repo_config(config.repo_config_path).sources == ()


def test_initialize_keeps_existing_files(tmp_path) -> None:
    """Running init twice should not overwrite user edits."""
    config = _config(tmp_path)
    (tmp_path / "README.md").write_text("custom", encoding="utf-8")

    initialize_repository(config, init_git=False)
    second = initialize_repository(config, init_git=False)

    assert (tmp_path / "README.md").read_text(encoding="utf-8") == "custom"
    assert second.created == ()


def test_initialize_runs_git_init_once(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    """git init should only run when no .git directory exists."""
    calls: list[object] = []
    monkeypatch.setattr("workspace.repository_init.init_repository", calls.append)
    config = _config(tmp_path)

    first = initialize_repository(config)
    (tmp_path / ".git").mkdir()
    second = initialize_repository(config)

    assert calls == [tmp_path] and first.git_initialized and not second.git_initialized
