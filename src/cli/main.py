"""songbulk CLI entry points.
This module exposes the bulk import job and output inspection commands.
It maps argparse commands onto the ingest driver and store readers.
"""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Sequence

from core.config import SongbulkConfig
from core.errors import SongbulkError
from core.job_spec import load_job_spec
from core.logging_config import configure_logging
from core.types import BulkImportOptions
from ingest.bulk_import import run_bulk_import
from store.cell_file_writer import read_cell_file, read_cell_file_metadata
from transforms.metadata_packer import unpack_metadata


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="songbulk",
        description="Build sorted bulk-load files from song metadata JSON lines",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Override SONGBULK_LOG_LEVEL for this command",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_import_command(subparsers)
    _add_inspect_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the songbulk CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    try:
        config = SongbulkConfig.from_env()
        configure_logging(args.log_level or config.log_level)
        if args.command == "import":
            return _run_import_command(parser, config, args)
        if args.command == "inspect":
            return _run_inspect_command(args)
    except SongbulkError as error:
        print(f"songbulk: {error}", file=sys.stderr)
        return 1
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _run_import_command(
    parser: argparse.ArgumentParser,
    config: SongbulkConfig,
    args: argparse.Namespace,
) -> int:
    """Handle import command.

    Args:
        parser: Parser used to report usage errors.
        config: Runtime configuration.
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    options = _build_import_options(parser, config, args)
    result = run_bulk_import(options, config)
    for shard in result.shards:
        print(f"{shard.output_path}\t{shard.cell_count}\t{len(shard.rejected)}")
    print(f"manifest={result.manifest_path}")
    return 0


def _build_import_options(
    parser: argparse.ArgumentParser,
    config: SongbulkConfig,
    args: argparse.Namespace,
) -> BulkImportOptions:
    """Build job options from a job file or individual flags."""
    if args.job_file:
        options = load_job_spec(args.job_file, config)
        return replace(options, strict=options.strict or args.strict)
    missing_flags = [
        flag
        for flag, value in (
            ("--table-uri", args.table_uri),
            ("--input", args.input),
            ("--output", args.output),
        )
        if not value
    ]
    if missing_flags:
        parser.error(f"import requires --job-file or {', '.join(missing_flags)}")
    return BulkImportOptions(
        table_uri=args.table_uri,
        input_uri=args.input,
        output_dir=args.output,
        strict=args.strict,
        shard_size=config.shard_size if args.shard_size is None else args.shard_size,
        max_workers=config.max_workers if args.max_workers is None else args.max_workers,
    )


def _run_inspect_command(args: argparse.Namespace) -> int:
    """Handle inspect command.

    Args:
        args: Parsed CLI args.

    Returns:
        Exit code.
    """
    file_path = Path(args.file).expanduser()
    if args.show_metadata:
        print(json.dumps(read_cell_file_metadata(file_path), indent=2, sort_keys=True))
    cells = read_cell_file(file_path)
    limit = len(cells) if args.limit is None else args.limit
    for cell in cells[:limit]:
        record = unpack_metadata(cell.payload)
        row_key = cell.row_key.decode("utf-8", "backslashreplace")
        print(f"{row_key}\t{cell.column}\t{json.dumps(asdict(record), sort_keys=True)}")
    return 0


def _add_import_command(subparsers: Any) -> None:
    """Register import subcommand."""
    parser = subparsers.add_parser("import", help="Build bulk-load files from JSON lines input")
    parser.add_argument("--job-file", help="YAML job file with table_uri, input and output")
    parser.add_argument("--table-uri", help="Target table, kiji://cluster/instance/table")
    parser.add_argument("--input", help="Input file, directory, or s3://bucket/prefix")
    parser.add_argument("--output", help="Fresh local output directory")
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail the shard on the first malformed record",
    )
    parser.add_argument("--shard-size", type=int, help="Maximum records per shard")
    parser.add_argument("--max-workers", type=int, help="Shard tasks run concurrently")


def _add_inspect_command(subparsers: Any) -> None:
    """Register inspect subcommand."""
    parser = subparsers.add_parser("inspect", help="Decode cells from a bulk-load file")
    parser.add_argument("file", help="Bulk-load file path")
    parser.add_argument("--limit", type=int, help="Maximum cells to print")
    parser.add_argument(
        "--show-metadata",
        action="store_true",
        help="Print file metadata before the cells",
    )
