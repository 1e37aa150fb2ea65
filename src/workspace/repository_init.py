"""Repository layout bootstrap for ``git-sheets init``.

Creates the snapshot and diff directories plus starter files. Files
that already exist are left untouched.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from core.config import SheetsConfig
from core.constants import GITIGNORE_FILE_NAME, README_FILE_NAME
from core.logging_config import get_logger
from workspace.git_client import init_repository

_LOGGER = get_logger(__name__)

GITIGNORE_TEMPLATE = """\
# git-sheets: keep raw sheets out of history, keep snapshots and diffs
*.csv
*.xlsx
*.xls
*.tmp

!snapshots/
!diffs/
"""

README_TEMPLATE = """\
# git-sheets repository

This directory is managed by git-sheets for version control of spreadsheets.

## Structure

- `snapshots/` - snapshot records (.json)
- `diffs/` - saved diffs (.json)
- `gitsheets.yaml` - tracked sources and their primary keys

## Usage

```bash
git-sheets snapshot data.csv -m "Initial import" -k ID
git-sheets diff <snapshot-id> <snapshot-id>
git-sheets verify <snapshot-id>
git-sheets status
git-sheets log
```

## Principles

1. User-triggered only: no automatic snapshots.
2. Snapshots are immutable: corrections create new snapshots.
3. Every snapshot carries hashes that expose edits made outside the tool.
4. Local-first: data stays on this machine.
"""

REPO_CONFIG_TEMPLATE = """\
version: 1
# sources:
#   - path: data.csv
#     primary_key: [ID]
sources: []
"""


@dataclass(frozen=True)
class InitResult:
    """Paths created by repository initialization."""

    created: tuple[Path, ...]
    git_initialized: bool


def initialize_repository(config: SheetsConfig, init_git: bool = True) -> InitResult:
    """Create the repository layout under the configured root.

    Args:
        config: Runtime configuration.
        init_git: Run ``git init`` when no ``.git`` directory exists.

    Returns:
        Paths that did not exist before, and whether git was initialized.

    Raises:
        SheetsGitError: If ``git init`` fails.
    """
    repo_root = config.repo_root
    created: list[Path] = []
    for directory in (config.snapshots_dir, config.diffs_dir):
        if not directory.exists():
            directory.mkdir(parents=True)
            created.append(directory)
    starter_files = (
        (repo_root / GITIGNORE_FILE_NAME, GITIGNORE_TEMPLATE),
        (repo_root / README_FILE_NAME, README_TEMPLATE),
        (config.repo_config_path, REPO_CONFIG_TEMPLATE),
    )
    for file_path, content in starter_files:
        if not file_path.exists():
            file_path.write_text(content, encoding="utf-8")
            created.append(file_path)
    git_initialized = False
    if init_git and not (repo_root / ".git").exists():
        init_repository(repo_root)
        git_initialized = True
    _LOGGER.info(
        "repository_initialized",
        repo_root=str(repo_root),
        created=[str(path) for path in created],
        git_initialized=git_initialized,
    )
    return InitResult(created=tuple(created), git_initialized=git_initialized)
