#!/usr/bin/env python3
"""
Command-Line Interface for the Macro Trie Compressor

Usage:
    macrotrie < input.txt                    # One record per line from stdin
    macrotrie -p 16 a.txt b.txt              # At most 16 passes over two files
    macrotrie -m 2 notes.txt                 # Ignore single-byte substrings
    macrotrie -f --max-length 32 data.bin    # 64KB blocks, substrings up to 32 bytes
    macrotrie -c config.yaml --annotate      # Settings from YAML, readable listing
    macrotrie --verify input.txt             # Check the output expands back
"""

import argparse
import sys
from typing import List, Optional

import yaml

from .controller import PassController
from .expand import verify_round_trip
from .loader import load_paths
from .models import (
    DEFAULT_PASSES,
    MAX_PASSES,
    InvalidConfiguration,
    LoadMode,
    MacroConfig,
    MacroError,
    OutputFormat,
)
from .output import write_result


# Exit statuses
EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_VERIFY = 3


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="macrotrie",
        description="Build a substitution dictionary of repeated substrings",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Each pass replaces the substring with the largest length x count by a
single byte code (0x80 for the first pass, 0x81 for the next, ...).
Output is the macro table, a blank line, then the rewritten records.

Examples:
  macrotrie notes.txt                 # Default {DEFAULT_PASSES} passes
  macrotrie -p 8 --annotate notes.txt # Readable listing of 8 passes
        """
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "-l", "--lines",
        dest="mode",
        action="store_const",
        const=LoadMode.LINES.value,
        help="One record per input line (default)",
    )
    mode.add_argument(
        "-f", "--blocks",
        dest="mode",
        action="store_const",
        const=LoadMode.BLOCKS.value,
        help=(
            "One record per fixed-size block of input. Index memory grows with "
            "record length x max length, so pair large blocks with --max-length"
        ),
    )
    parser.add_argument(
        "-p", "--passes",
        type=int,
        default=None,
        help=f"Maximum number of passes, 0-{MAX_PASSES} (default: {DEFAULT_PASSES})",
    )
    parser.add_argument(
        "-m", "--min-length",
        type=int,
        default=None,
        help="Shortest substring worth a macro (default: 1)",
    )
    parser.add_argument(
        "--max-length",
        type=int,
        default=None,
        help="Longest substring indexed (default: unbounded)",
    )
    parser.add_argument(
        "-c", "--config",
        default=None,
        help="Path to YAML config file",
    )
    parser.add_argument(
        "--annotate",
        action="store_true",
        help="Print a readable macro/record listing",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Check that every rewritten record expands back to its input",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (default: from config or WARNING)",
    )
    parser.add_argument(
        "paths",
        nargs="*",
        help="Input files ('-' or none for standard input)",
    )
    return parser


def load_config(args: argparse.Namespace) -> MacroConfig:
    """Config file values, overridden by command-line options."""
    config = MacroConfig.from_yaml(args.config) if args.config else MacroConfig()

    if args.mode is not None:
        config.mode = args.mode
    if args.passes is not None:
        config.passes = args.passes
    if args.min_length is not None:
        config.min_length = args.min_length
    if args.max_length is not None:
        config.max_length = args.max_length
    if args.log_level is not None:
        config.log_level = args.log_level

    return config.validate()


def main(argv: Optional[List[str]] = None) -> int:
    """Command-line entry point."""
    args = build_parser().parse_args(argv)

    # Load config
    try:
        config = load_config(args)
    except FileNotFoundError:
        print(f"Error: Config file not found: {args.config}", file=sys.stderr)
        return EXIT_FAILURE
    except InvalidConfiguration as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return EXIT_FAILURE

    controller = PassController(config)
    logger = controller.logger

    try:
        records = load_paths(
            args.paths,
            mode=config.load_mode,
            block_size=config.block_size,
            max_records=config.max_records,
        )
        result = controller.compress(records)
    except OSError as e:
        logger.error(f"Cannot read input: {e}")
        return EXIT_FAILURE
    except MacroError as e:
        logger.error(f"{type(e).__name__}: {e}")
        return EXIT_FAILURE

    if args.verify:
        bad = verify_round_trip(records, result)
        if bad:
            logger.error(f"Round trip failed for records {bad[:10]}")
            return EXIT_VERIFY
        logger.info(f"Round trip verified for {len(records)} records")

    fmt = OutputFormat.ANNOTATED if args.annotate else OutputFormat.PLAIN
    write_result(result, fmt)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
