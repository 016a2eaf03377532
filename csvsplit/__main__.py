"""CLI entry point for splitting CSV files.

Usage:
    python -m csvsplit --line-bytes 1048576 < orders.csv
    python -m csvsplit orders.csv --line-bytes 1048576 --prefix out/orders_ --additional-suffix .csv
    python -m csvsplit orders.csv --config orders_split.yaml --verbose
    python -m csvsplit --verify-manifest out/orders_manifest.json

Output files are named prefix + zero-padded number + additional suffix.
Rows are never split across files, even when a quoted field contains
newlines.
"""

from __future__ import annotations

import argparse
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, List, Optional

from csvsplit.lib.checksum import verify_chunk_manifest, write_chunk_manifest
from csvsplit.lib.chunker import SplitResult, split
from csvsplit.lib.config import SplitConfig
from csvsplit.lib.config_loader import build_config, load_config_file
from csvsplit.lib.env import load_env_file
from csvsplit.lib.errors import SplitError, StreamIOError
from csvsplit.lib.logging import setup_logging
from csvsplit.lib.sinks import FileSinkFactory
from csvsplit.lib.tokenizer import iter_rows

logger = logging.getLogger(__name__)


@contextmanager
def open_input(input_path: Optional[str]) -> Iterator[BinaryIO]:
    """Open the input as a binary stream; None or "-" means stdin."""
    if input_path in (None, "-"):
        yield sys.stdin.buffer
        return

    try:
        stream = open(input_path, "rb")
    except OSError as e:
        raise StreamIOError(
            f"Failed to open input {input_path}",
            operation="open",
            path=input_path,
            cause=e,
        ) from e
    with stream:
        yield stream


def run_split(config: SplitConfig, input_path: Optional[str] = None) -> SplitResult:
    """Split the input into chunk files as described by config.

    Chunk files already written stay on disk if the split fails.
    """
    with open_input(input_path) as stream, FileSinkFactory.from_config(config) as factory:
        rows = iter_rows(stream, max_row_bytes=config.max_row_bytes)
        result = split(rows, config.line_bytes, factory)

    logger.debug(
        "Done. %d chunk(s), %d rows, %d bytes",
        result.chunk_count,
        result.rows_written,
        result.bytes_written,
    )

    if config.manifest_path:
        write_chunk_manifest(config.manifest_path, result, line_bytes=config.line_bytes)

    return result


def verify_manifest_command(manifest_path: str) -> int:
    """Check chunk files against a manifest and report the outcome."""
    result = verify_chunk_manifest(manifest_path)
    print(result)
    for name in result.missing_files:
        print(f"  missing:    {name}")
    for name in result.mismatched_files:
        print(f"  mismatched: {name}")
    return 0 if result.valid else 1


def _overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "line_bytes": args.line_bytes,
        "suffix_length": args.suffix_length,
        "numeric_start": args.numeric_suffixes,
        "prefix": args.prefix,
        "additional_suffix": args.additional_suffix,
        "verbose": args.verbose,
        "json_log": args.json_log,
        "log_file": args.log_file,
        "max_row_bytes": args.max_row_bytes,
        "manifest_path": args.manifest,
    }


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Defaults are None so that only flags given on the command line
    override values from --config.
    """
    parser = argparse.ArgumentParser(
        prog="csvsplit",
        description="Split a CSV into files of at most SIZE bytes, never splitting a row",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Split stdin into 00, 01, ... of at most 1 MiB each
    csvsplit --line-bytes 1048576 < orders.csv

    # Named chunks in a directory, 4-digit numbers starting at 1
    csvsplit orders.csv --line-bytes 50000000 --prefix out/orders_ \\
        --suffix-length 4 --numeric-suffixes 1 --additional-suffix .csv

    # Settings from a YAML file, plus a checksum manifest
    csvsplit orders.csv --config orders_split.yaml --manifest out/manifest.json

    # Check chunk files against a manifest
    csvsplit --verify-manifest out/manifest.json
        """,
    )

    parser.add_argument(
        "input",
        nargs="?",
        help="Input CSV file (default: standard input; '-' also means standard input)",
    )
    parser.add_argument(
        "--line-bytes",
        type=int,
        metavar="SIZE",
        help="Put at most SIZE bytes of records per output file (required)",
    )
    parser.add_argument(
        "--suffix-length",
        type=int,
        metavar="N",
        help="Generate suffixes of length N (default: 2)",
    )
    parser.add_argument(
        "--numeric-suffixes",
        type=int,
        metavar="X",
        help="Use numeric suffixes starting at X (default: 0)",
    )
    parser.add_argument(
        "--prefix",
        help="Prefix for file names (may include a directory)",
    )
    parser.add_argument(
        "--additional-suffix",
        metavar="SUFFIX",
        help="Append an additional SUFFIX to file names",
    )
    parser.add_argument(
        "--max-row-bytes",
        type=int,
        metavar="N",
        help="Fail if a single row is larger than N bytes (default: 10 MiB)",
    )
    parser.add_argument(
        "--manifest",
        metavar="PATH",
        help="Write a JSON manifest with sizes and SHA256 of each chunk",
    )
    parser.add_argument(
        "--verify-manifest",
        metavar="PATH",
        help="Verify chunk files against a manifest instead of splitting",
    )
    parser.add_argument(
        "--config",
        metavar="FILE",
        help="YAML file with split settings; command-line flags take precedence",
    )
    parser.add_argument(
        "--env-file",
        metavar="FILE",
        help="Load environment variables from FILE before reading --config",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=None,
        help="Generate verbose output",
    )
    parser.add_argument(
        "--json-log",
        action="store_true",
        default=None,
        help="Output logs in JSON format (for log aggregation systems)",
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        if args.verify_manifest:
            return verify_manifest_command(args.verify_manifest)

        if args.env_file:
            if not load_env_file(args.env_file):
                print(f"Warning: no variables loaded from {args.env_file}", file=sys.stderr)

        file_values = load_config_file(Path(args.config)) if args.config else {}
        config = build_config(file_values, _overrides_from_args(args))

        setup_logging(
            verbose=config.verbose,
            json_format=config.json_log,
            log_file=config.log_file,
        )

        run_split(config, args.input)
    except SplitError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        # e.g. an unwritable --log-file
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
