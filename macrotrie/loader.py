#!/usr/bin/env python3
"""
Record Loading

Splits input streams into records, either one per line or one per
fixed-size block.
"""

import logging
import sys
from typing import BinaryIO, Iterator, List, Optional, Sequence

from .models import BLOCK_SIZE, MAX_RECORDS, CapacityExceeded, LoadMode


logger = logging.getLogger(__name__)

STDIN_NAME = "-"


def iter_lines(stream: BinaryIO, block_size: int = BLOCK_SIZE) -> Iterator[bytes]:
    """
    Yield one record per line without its trailing newline.

    Lines longer than ``block_size`` are split into several records.
    """
    for line in stream:
        if line.endswith(b"\n"):
            line = line[:-1]
        if not line:
            yield line
            continue
        for start in range(0, len(line), block_size):
            yield line[start:start + block_size]


def iter_blocks(stream: BinaryIO, block_size: int = BLOCK_SIZE) -> Iterator[bytes]:
    """Yield fixed-size chunks of the stream (the last may be shorter)."""
    while True:
        chunk = stream.read(block_size)
        if not chunk:
            return
        yield chunk


def load_stream(
    stream: BinaryIO,
    mode: LoadMode = LoadMode.LINES,
    block_size: int = BLOCK_SIZE,
) -> Iterator[bytes]:
    """Records from one stream in the given mode."""
    if mode is LoadMode.BLOCKS:
        return iter_blocks(stream, block_size)
    return iter_lines(stream, block_size)


def load_paths(
    paths: Optional[Sequence[str]] = None,
    mode: LoadMode = LoadMode.LINES,
    block_size: int = BLOCK_SIZE,
    max_records: int = MAX_RECORDS,
    stdin: Optional[BinaryIO] = None,
) -> List[bytes]:
    """
    Read every path in order into a list of records.

    Args:
        paths: Files to read; empty or ``-`` means standard input.
        mode: Line or block splitting.
        block_size: Largest record produced by a single read.
        max_records: Input record limit.
        stdin: Stream used for ``-`` (defaults to ``sys.stdin.buffer``).

    Raises:
        CapacityExceeded: If the inputs produce more than ``max_records``.
        OSError: If a file cannot be opened.
    """
    records: List[bytes] = []

    for path in paths or [STDIN_NAME]:
        logger.debug(f"Processing [{path}]: by {mode.value} BEGIN")

        if path == STDIN_NAME:
            _extend(records, load_stream(stdin or sys.stdin.buffer, mode, block_size), max_records)
        else:
            with open(path, "rb") as f:
                _extend(records, load_stream(f, mode, block_size), max_records)

        logger.debug(f"Processing [{path}]: {len(records)} records so far END")

    return records


def _extend(records: List[bytes], source: Iterator[bytes], max_records: int):
    for record in source:
        if len(records) >= max_records:
            raise CapacityExceeded(f"More than {max_records} input records")
        records.append(record)
