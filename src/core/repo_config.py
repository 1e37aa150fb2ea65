"""Typed parsing for the gitsheets.yaml repository file.

This module loads and validates the list of tracked CSV sources and
their primary-key columns. Status and snapshot commands read it so a
key only has to be declared once per source.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Sequence, cast

from core.constants import REPO_CONFIG_VERSION
from core.errors import SheetsConfigError, SheetsDependencyError
from core.table import split_key_spec


@dataclass(frozen=True)
class TrackedSource:
    """One tracked CSV source.

    Attributes:
        path: Source path relative to the repository root.
        primary_key: Key columns as header names or index strings, empty if unkeyed.
    """

    path: str
    primary_key: tuple[str, ...] = ()


@dataclass(frozen=True)
class RepoConfig:
    """Validated repository file root object."""

    version: int
    sources: tuple[TrackedSource, ...]

    def find_source(self, source_path: Path, repo_root: Path) -> TrackedSource | None:
        """Return the tracked entry for a source path, if declared."""
        target = source_path.expanduser().resolve()
        for source in self.sources:
            if (repo_root / source.path).resolve() == target:
                return source
        return None


def empty_repo_config() -> RepoConfig:
    """Return the config used when no gitsheets.yaml exists."""
    return RepoConfig(version=REPO_CONFIG_VERSION, sources=())


def load_repo_config(config_path: Path) -> RepoConfig:
    """Load and validate a gitsheets.yaml file.

    Args:
        config_path: Path to the YAML file.

    Returns:
        Parsed repository config, empty when the file is missing.

    Raises:
        SheetsDependencyError: If PyYAML is unavailable.
        SheetsConfigError: If the file is invalid or schema checks fail.
    """
    if not config_path.exists():
        return empty_repo_config()
    payload = _load_yaml_payload(config_path)
    if payload is None:
        return empty_repo_config()
    root_mapping = _expect_mapping(payload, "repository config root")
    _validate_keys(root_mapping, {"version", "sources"}, "repository config")
    version = _parse_version(root_mapping)
    sources = _parse_sources(root_mapping)
    return RepoConfig(version=version, sources=sources)


def _load_yaml_payload(config_path: Path) -> object:
    try:
        import yaml
    except ImportError as error:  # pragma: no cover - dependency failure
        raise SheetsDependencyError(
            "Reading gitsheets.yaml requires PyYAML. Install with 'pip install pyyaml'."
        ) from error
    try:
        return cast(object, yaml.safe_load(config_path.read_text(encoding="utf-8")))
    except OSError as error:
        raise SheetsConfigError(
            f"Failed to read {config_path}: {error}. Check file permissions and retry."
        ) from error
    except yaml.YAMLError as error:
        raise SheetsConfigError(
            f"Failed to parse YAML at {config_path}: {error}. Fix YAML syntax and retry."
        ) from error


def _expect_mapping(value: object, context: str) -> Mapping[str, object]:
    if isinstance(value, Mapping):
        normalized_mapping = {}
        for key, payload in value.items():
            if not isinstance(key, str):
                raise SheetsConfigError(
                    f"Invalid {context}: expected string keys, got {type(key).__name__}."
                )
            normalized_mapping[key] = payload
        return normalized_mapping
    raise SheetsConfigError(
        f"Invalid {context}: expected mapping, got {type(value).__name__}."
    )


def _expect_sequence(value: object, context: str) -> Sequence[object]:
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return value
    raise SheetsConfigError(f"Invalid {context}: expected list, got {type(value).__name__}.")


def _parse_version(root_mapping: Mapping[str, object]) -> int:
    raw_version = root_mapping.get("version", REPO_CONFIG_VERSION)
    if not isinstance(raw_version, int) or isinstance(raw_version, bool):
        raise SheetsConfigError("Field 'version' must be an integer. Set version: 1.")
    if raw_version != REPO_CONFIG_VERSION:
        raise SheetsConfigError(
            f"Unsupported repository config version {raw_version}. Use version: 1."
        )
    return raw_version


def _parse_sources(root_mapping: Mapping[str, object]) -> tuple[TrackedSource, ...]:
    raw_sources = root_mapping.get("sources")
    if raw_sources is None:
        return ()
    rows = _expect_sequence(raw_sources, "sources")
    return tuple(_parse_source(row, index) for index, row in enumerate(rows))


def _parse_source(value: object, index: int) -> TrackedSource:
    context = f"source #{index + 1}"
    if isinstance(value, str):
        return TrackedSource(path=value)
    source_mapping = _expect_mapping(value, context)
    _validate_keys(source_mapping, {"path", "primary_key"}, context)
    raw_path = source_mapping.get("path")
    if not isinstance(raw_path, str) or not raw_path.strip():
        raise SheetsConfigError(f"Invalid {context}: field 'path' must be a non-empty string.")
    return TrackedSource(
        path=raw_path.strip(),
        primary_key=_parse_key_spec(source_mapping.get("primary_key"), context),
    )


def _parse_key_spec(raw_value: object, context: str) -> tuple[str, ...]:
    if raw_value is None:
        return ()
    if isinstance(raw_value, bool):
        raise SheetsConfigError(f"Invalid {context}: 'primary_key' cannot be a boolean.")
    if isinstance(raw_value, (str, int)):
        return split_key_spec(str(raw_value))
    items = _expect_sequence(raw_value, f"{context} primary_key")
    parts = []
    for item in items:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            raise SheetsConfigError(
                f"Invalid {context}: primary_key entries must be column names or indices."
            )
        parts.append(str(item).strip())
    return tuple(part for part in parts if part)


def _validate_keys(mapping: Mapping[str, object], allowed_keys: set[str], context: str) -> None:
    unknown_keys = sorted(set(mapping) - allowed_keys)
    if unknown_keys:
        raise SheetsConfigError(
            f"Invalid {context}: unknown fields {', '.join(unknown_keys)}."
        )
