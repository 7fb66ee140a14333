"""Archive tool CLI entry points.
This module exposes commands for ingesting the archive and inspecting the store.
It maps argparse commands onto pipeline and store calls.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import ArchiveConfig
from core.types import IngestOptions, IngestResult
from ingest.pipeline import ingest_archive
from store.archive_store import ArchiveStore


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="bangumi-archive",
        description="Rebuild a local snapshot of the Bangumi archive",
    )
    _add_location_arguments(parser, default=None)
    location_parser = argparse.ArgumentParser(add_help=False)
    _add_location_arguments(location_parser, default=argparse.SUPPRESS)
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_ingest_command(subparsers, location_parser)
    _add_counts_command(subparsers, location_parser)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the archive CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args)
    if args.command == "ingest":
        return _run_ingest_command(config, args)
    if args.command == "counts":
        return _run_counts_command(config)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> ArchiveConfig:
    """Build config with CLI overrides applied."""
    config = ArchiveConfig.from_env()
    if args.database:
        config = replace(config, database_path=Path(args.database).expanduser().resolve())
    if args.data_root:
        config = replace(config, data_root=Path(args.data_root).expanduser().resolve())
    return config


def _run_ingest_command(config: ArchiveConfig, args: argparse.Namespace) -> int:
    """Handle ingest command.

    Args:
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    overrides: dict[str, Any] = {}
    if args.token:
        overrides["github_token"] = args.token
    for field_name in ("chunk_size", "sub_batch_count", "max_workers"):
        value = getattr(args, field_name)
        if value is not None:
            overrides[field_name] = value
    config = replace(config, **overrides)
    options = IngestOptions(
        bundle_path=_optional_path(args.bundle),
        source_dir=_optional_path(args.source_dir),
        recreate=args.recreate,
    )
    print(config.database_path)
    result = ingest_archive(options, config)
    print(_format_result(result))
    return 0 if result.success else 1


def _run_counts_command(config: ArchiveConfig) -> int:
    """Handle counts command."""
    store = ArchiveStore(config.database_path)
    store.ensure_schema()
    for kind_value, row_count in store.count_all().items():
        print(f"{kind_value}\t{row_count}")
    store.dispose()
    return 0


def _format_result(result: IngestResult) -> str:
    if result.success:
        return f"success=true database_path={result.database_path}"
    return f"success=false error={result.error_message}"


def _optional_path(value: str | None) -> Path | None:
    return Path(value).expanduser().resolve() if value else None


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _add_location_arguments(parser: argparse.ArgumentParser, default: Any) -> None:
    """Register store and scratch location overrides.

    Subcommands register them with a suppressed default so a value given
    before the subcommand is not reset.
    """
    parser.add_argument(
        "--database", default=default, help="Override BANGUMI_ARCHIVE_DATABASE_PATH"
    )
    parser.add_argument(
        "--data-root", default=default, help="Override BANGUMI_ARCHIVE_DATA_ROOT"
    )


def _add_ingest_command(subparsers: Any, location_parser: argparse.ArgumentParser) -> None:
    """Register ingest subcommand."""
    parser = subparsers.add_parser(
        "ingest",
        parents=[location_parser],
        help="Download and ingest the latest archive",
    )
    parser.add_argument("--token", help="GitHub access token sent as a bearer header")
    source_group = parser.add_mutually_exclusive_group()
    source_group.add_argument("--bundle", help="Ingest a local bundle zip instead of downloading")
    source_group.add_argument(
        "--source-dir",
        help="Ingest an already-extracted directory of .jsonlines files",
    )
    parser.add_argument(
        "--recreate",
        action="store_true",
        help="Drop and recreate all tables before ingesting",
    )
    parser.add_argument("--chunk-size", type=_positive_int, help="Lines per committed chunk")
    parser.add_argument(
        "--sub-batch-count",
        type=_positive_int,
        help="Target sub-batches per chunk",
    )
    parser.add_argument("--max-workers", type=_positive_int, help="Deserialization threads")


def _add_counts_command(subparsers: Any, location_parser: argparse.ArgumentParser) -> None:
    """Register counts subcommand."""
    subparsers.add_parser(
        "counts",
        parents=[location_parser],
        help="Print stored row counts per entity kind",
    )
