"""Pytest configuration for repository test runs."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest


def pytest_sessionstart() -> None:
    """Add src directory to sys.path for test imports."""
    project_root = Path(__file__).resolve().parent.parent
    src_path = project_root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


@pytest.fixture(autouse=True)
def _clear_sheets_env(monkeypatch) -> None:
    """Keep developer GITSHEETS_* settings out of test runs."""
    for variable_name in ("GITSHEETS_ROOT", "GITSHEETS_LOG_LEVEL", "GITSHEETS_AUTO_COMMIT"):
        monkeypatch.delenv(variable_name, raising=False)
