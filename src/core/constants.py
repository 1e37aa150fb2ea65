"""Core constants used across git-sheets modules.

This module centralizes repository layout names and hashing settings.
Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from pathlib import Path

DEFAULT_REPO_ROOT = Path(".")
SNAPSHOTS_DIR_NAME = "snapshots"
DIFFS_DIR_NAME = "diffs"
REPO_CONFIG_FILE_NAME = "gitsheets.yaml"
GITIGNORE_FILE_NAME = ".gitignore"
README_FILE_NAME = "README.md"
SNAPSHOT_FILE_SUFFIX = ".json"
DIFF_FILE_SUFFIX = ".json"
TEMP_FILE_SUFFIX = ".tmp"
SNAPSHOT_FORMAT_VERSION = 1
REPO_CONFIG_VERSION = 1
HASH_ALGORITHM = "sha256"
SNAPSHOT_ID_TOKEN_LENGTH = 10
HASH_PREVIEW_LENGTH = 16
TABLE_HASH_LABEL = "table"
DEFAULT_LOG_LEVEL = "WARNING"
SUPPORTED_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
SUPPORTED_DIFF_FORMATS = ("text", "json", "git")
DEFAULT_DIFF_FORMAT = "text"
