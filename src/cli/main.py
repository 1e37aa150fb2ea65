"""git-sheets CLI entry points.

This module maps argparse commands onto SDK calls. Command output goes to
stdout as ``key=value`` lines or rendered diffs; structured logs go to stderr.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from cli.diff_render import render_diff
from core.config import SheetsConfig
from core.constants import DEFAULT_DIFF_FORMAT, HASH_PREVIEW_LENGTH, SUPPORTED_DIFF_FORMATS
from core.errors import SheetsError
from core.logging_config import configure_logging
from core.table import split_key_spec
from core.types import Snapshot, SnapshotSummary
from core.verification_types import Tampered
from store.sheets_sdk import SheetsClient
from store.source_status import SourceStatus
from workspace.git_client import short_status
from workspace.repository_init import initialize_repository


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="git-sheets",
        description="Immutable, verifiable snapshots of CSV tables",
    )
    parser.add_argument("--root", help="Override GITSHEETS_ROOT for this command")
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_init_command(subparsers)
    _add_snapshot_command(subparsers)
    _add_diff_command(subparsers)
    _add_verify_command(subparsers)
    _add_status_command(subparsers)
    _add_log_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the git-sheets CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        client = _build_client(args.root)
        configure_logging(client.config.log_level)
        return _dispatch(client, args)
    except SheetsError as error:
        print(f"error={error}", file=sys.stderr)
        return 1


def _dispatch(client: SheetsClient, args: argparse.Namespace) -> int:
    if args.command == "init":
        return _run_init_command(client, args)
    if args.command == "snapshot":
        return _run_snapshot_command(client, args)
    if args.command == "diff":
        return _run_diff_command(client, args)
    if args.command == "verify":
        return _run_verify_command(client, args)
    if args.command == "status":
        return _run_status_command(client, args)
    if args.command == "log":
        return _run_log_command(client, args)
    raise SheetsError(f"Unsupported command: {args.command}")


def _build_client(repo_root: str | None) -> SheetsClient:
    """Build SDK client with optional repository-root override.

    Args:
        repo_root: Optional override path.

    Returns:
        Configured SDK client.
    """
    config = SheetsConfig.from_env()
    if repo_root:
        config = replace(config, repo_root=Path(repo_root).expanduser().resolve())
    return SheetsClient(config)


def _run_init_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle init command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    result = initialize_repository(client.config, init_git=not args.no_git)
    print(f"repo_root={client.config.repo_root}")
    for created_path in result.created:
        print(f"created={created_path}")
    print(f"git_initialized={str(result.git_initialized).lower()}")
    return 0


def _run_snapshot_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle snapshot command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    snapshot = client.snapshot_file(
        Path(args.file),
        message=args.message or "",
        primary_key=split_key_spec(args.key or ""),
        depends_on=[Path(path) for path in args.depends_on],
    )
    snapshot_path = client.snapshot_path(snapshot)
    print(f"snapshot_id={snapshot.snapshot_id}")
    print(f"path={snapshot_path}")
    print(f"rows={snapshot.table.row_count}")
    print(f"columns={snapshot.table.column_count}")
    print(f"table_hash={snapshot.hashes.table_hash}")
    if args.commit or client.config.auto_commit:
        client.commit_snapshot(snapshot, _commit_message(snapshot))
        print(f"committed={snapshot_path}")
        return 0
    print("To commit to git:")
    print(f"  git add {snapshot_path}")
    print(f"  git commit -m \"{_commit_message(snapshot)}\"")
    return 0


def _run_diff_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle diff command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    diff = client.diff_snapshots(args.from_ref, args.to_ref)
    print(render_diff(diff, args.format))
    if args.save:
        print(f"diff_path={client.save_diff(diff)}")
    return 0


def _run_verify_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle verify command.

    Returns:
        Zero when intact, one when any hash mismatches.
    """
    snapshot = client.load_snapshot(args.ref)
    result = client.verify_snapshot(snapshot)
    print(f"snapshot_id={snapshot.snapshot_id}")
    if isinstance(result, Tampered):
        print("status=tampered")
        print(f"mismatched={','.join(sorted(result.mismatched)) or '-'}")
        print(f"tampered_rows={','.join(str(index) for index in result.tampered_rows) or '-'}")
        print(f"table_hash={'mismatch' if result.table_hash_changed else 'ok'}")
        return 1
    print("status=intact")
    print(f"timestamp={snapshot.timestamp.isoformat()}")
    print(f"message={snapshot.message or '-'}")
    print(f"table_hash={snapshot.hashes.table_hash}")
    return 0


def _run_status_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle status command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    git_status = short_status(client.config.repo_root)
    if git_status is None:
        print("git_repository=missing (run 'git-sheets init')")
    else:
        print("git_repository=ok")
        if git_status.strip():
            print("uncommitted:")
            print(git_status.rstrip())
    print(f"snapshots={len(client.list_snapshots())}")
    contexts = (
        [client.tracking_context(Path(args.file))] if args.file else client.tracked_contexts()
    )
    for context in contexts:
        _print_source_status(client.status(context))
    return 0


def _run_log_command(client: SheetsClient, args: argparse.Namespace) -> int:
    """Handle log command.

    Args:
        client: SDK client.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    for summary in client.log(source_name=args.source, limit=args.limit):
        print(_format_log_line(summary))
    return 0


def _print_source_status(status: SourceStatus) -> None:
    print(f"source={status.source_name}")
    if status.latest is None:
        print("  latest=- (no snapshots)")
    else:
        print(f"  latest={status.latest.snapshot_id}")
    if not status.source_exists:
        print(f"  source_missing={status.source_path}")
        return
    if status.diff is None:
        return
    summary = status.diff.summary
    if not status.has_changes:
        print("  changes=none")
        return
    print(
        f"  changes=rows +{summary.rows_added} -{summary.rows_removed} ~{summary.rows_modified}"
        f" columns +{summary.columns_added} -{summary.columns_removed}"
    )


def _format_log_line(summary: SnapshotSummary) -> str:
    return (
        f"{summary.snapshot_id}\t"
        f"{summary.timestamp.isoformat()}\t"
        f"{summary.row_count}x{summary.column_count}\t"
        f"{summary.table_hash[:HASH_PREVIEW_LENGTH]}\t"
        f"{summary.message or '-'}"
    )


def _commit_message(snapshot: Snapshot) -> str:
    return snapshot.message or f"Snapshot {snapshot.source_name} {snapshot.snapshot_id}"


def _non_negative_int(raw_value: str) -> int:
    """Parse a count argument that may not be negative."""
    try:
        value = int(raw_value)
    except ValueError as error:
        raise argparse.ArgumentTypeError(f"expected an integer, got {raw_value!r}") from error
    if value < 0:
        raise argparse.ArgumentTypeError(f"must be zero or more, got {value}")
    return value


def _add_init_command(subparsers: Any) -> None:
    """Register init subcommand."""
    parser = subparsers.add_parser("init", help="Create snapshot and diff directories")
    parser.add_argument("--no-git", action="store_true", help="Skip git init")


def _add_snapshot_command(subparsers: Any) -> None:
    """Register snapshot subcommand."""
    parser = subparsers.add_parser("snapshot", help="Snapshot a CSV file")
    parser.add_argument("file", help="CSV file to snapshot")
    parser.add_argument("-m", "--message", help="Snapshot message")
    parser.add_argument(
        "-k",
        "--key",
        help="Primary-key columns as comma separated header names or indices",
    )
    parser.add_argument(
        "-c",
        "--commit",
        action="store_true",
        help="Commit the snapshot file to git",
    )
    parser.add_argument(
        "--depends-on",
        action="append",
        default=[],
        help="External file to record with its hash; repeatable",
    )


def _add_diff_command(subparsers: Any) -> None:
    """Register diff subcommand."""
    parser = subparsers.add_parser("diff", help="Diff two snapshots")
    parser.add_argument("from_ref", help="Older snapshot path, id, or id prefix")
    parser.add_argument("to_ref", help="Newer snapshot path, id, or id prefix")
    parser.add_argument(
        "--format",
        choices=SUPPORTED_DIFF_FORMATS,
        default=DEFAULT_DIFF_FORMAT,
        help="Output format",
    )
    parser.add_argument("--save", action="store_true", help="Write the diff under diffs/")


def _add_verify_command(subparsers: Any) -> None:
    """Register verify subcommand."""
    parser = subparsers.add_parser("verify", help="Check a snapshot for tampering")
    parser.add_argument("ref", help="Snapshot path, id, or id prefix")


def _add_status_command(subparsers: Any) -> None:
    """Register status subcommand."""
    parser = subparsers.add_parser("status", help="Compare sources with their latest snapshots")
    parser.add_argument("file", nargs="?", help="Optional CSV file; defaults to gitsheets.yaml sources")


def _add_log_command(subparsers: Any) -> None:
    """Register log subcommand."""
    parser = subparsers.add_parser("log", help="List snapshots newest first")
    parser.add_argument("--source", help="Only show snapshots of this source")
    parser.add_argument("--limit", type=_non_negative_int, help="Maximum number of snapshots")
