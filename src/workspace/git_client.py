"""Thin git command wrapper."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Sequence

from core.errors import SheetsGitError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)


def init_repository(repo_root: Path) -> None:
    """Run ``git init`` in the repository root."""
    _run_git(repo_root, ["init"])


def commit_paths(repo_root: Path, paths: Sequence[Path], message: str) -> None:
    """Stage and commit specific files.

    Args:
        repo_root: Repository root used as working directory.
        paths: Files to stage.
        message: Commit message.

    Raises:
        SheetsGitError: If git add or git commit fails.
    """
    _run_git(repo_root, ["add", "--", *(str(path) for path in paths)])
    _run_git(repo_root, ["commit", "-m", message, "--", *(str(path) for path in paths)])
    _LOGGER.info("git_committed", paths=[str(path) for path in paths])


def short_status(repo_root: Path) -> str | None:
    """Return ``git status --short`` output, or None outside a git repository."""
    if not is_git_repository(repo_root):
        return None
    return _run_git(repo_root, ["status", "--short"])


def is_git_repository(repo_root: Path) -> bool:
    """Whether the root is inside a git work tree."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--is-inside-work-tree"],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        return False
    return result.returncode == 0 and result.stdout.strip() == "true"


def _run_git(repo_root: Path, args: list[str]) -> str:
    """Run one git command and return stdout.

    Raises:
        SheetsGitError: If git is missing or exits non-zero.
    """
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as error:
        raise SheetsGitError("git executable not found. Install git or skip --commit.") from error
    except subprocess.CalledProcessError as error:
        raise SheetsGitError(
            f"git {' '.join(args)} failed with exit code {error.returncode}: "
            f"{(error.stderr or '').strip()}"
        ) from error
    return result.stdout
