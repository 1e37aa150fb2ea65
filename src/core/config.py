"""Runtime configuration model for git-sheets.

This module owns all environment variable parsing and validation.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from core.constants import (
    DEFAULT_LOG_LEVEL,
    DEFAULT_REPO_ROOT,
    DIFFS_DIR_NAME,
    REPO_CONFIG_FILE_NAME,
    SNAPSHOTS_DIR_NAME,
    SUPPORTED_LOG_LEVELS,
)
from core.errors import SheetsConfigError

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class SheetsConfig:
    """Validated runtime configuration.

    Attributes:
        repo_root: Repository root holding snapshots, diffs, and gitsheets.yaml.
        log_level: Minimum structured log level.
        auto_commit: Commit new snapshot files to git without a CLI flag.
    """

    repo_root: Path
    log_level: str
    auto_commit: bool

    @property
    def snapshots_dir(self) -> Path:
        """Directory holding persisted snapshot records."""
        return self.repo_root / SNAPSHOTS_DIR_NAME

    @property
    def diffs_dir(self) -> Path:
        """Directory holding saved diff artifacts."""
        return self.repo_root / DIFFS_DIR_NAME

    @property
    def repo_config_path(self) -> Path:
        """Path of the tracked-sources YAML file."""
        return self.repo_root / REPO_CONFIG_FILE_NAME

    @classmethod
    def from_env(cls) -> "SheetsConfig":
        """Build config from process environment variables.

        Returns:
            A validated config object.

        Raises:
            SheetsConfigError: If environment values are invalid.
        """
        repo_root_value = os.getenv("GITSHEETS_ROOT", str(DEFAULT_REPO_ROOT))
        log_level = _parse_log_level(os.getenv("GITSHEETS_LOG_LEVEL", DEFAULT_LOG_LEVEL))
        auto_commit = _parse_bool("GITSHEETS_AUTO_COMMIT", os.getenv("GITSHEETS_AUTO_COMMIT", ""))
        return cls(
            repo_root=Path(repo_root_value).expanduser().resolve(),
            log_level=log_level,
            auto_commit=auto_commit,
        )


def _parse_log_level(raw_value: str) -> str:
    """Parse the log level environment value.

    Args:
        raw_value: Raw string from environment.

    Returns:
        Upper-cased level name.

    Raises:
        SheetsConfigError: If the level is not supported.
    """
    level = raw_value.strip().upper()
    if level in SUPPORTED_LOG_LEVELS:
        return level
    raise SheetsConfigError(
        f"Invalid GITSHEETS_LOG_LEVEL value '{raw_value}'. "
        f"Use one of: {', '.join(SUPPORTED_LOG_LEVELS)}."
    )


def _parse_bool(variable_name: str, raw_value: str) -> bool:
    """Parse a boolean environment flag.

    Args:
        variable_name: Variable name for error context.
        raw_value: Raw string from environment.

    Returns:
        Parsed flag.

    Raises:
        SheetsConfigError: If value is not a recognized boolean.
    """
    normalized = raw_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise SheetsConfigError(
        f"Invalid {variable_name} value: expected true/false, got '{raw_value}'. "
        f"Set {variable_name} to 1 or 0."
    )
