#!/usr/bin/env python3
"""
Substitution Engine

Rewrites every occurrence of the winning substring with a one-byte macro
code and appends the substring itself as a new macro record.

Rewrite Order:
    Occurrences of one substring may overlap inside a record ("aa" occurs at
    offsets 0, 1 and 2 of "aaaa"). Occurrences are therefore grouped per
    record and walked from the highest offset down; an occurrence is kept
    only if it ends at or before the start of the previously kept one.
    Rewriting right-to-left never touches bytes that a kept occurrence to
    the left still needs.

    "aaaa", "aa" -> keep 2, drop 1, keep 0 -> "\\x80\\x80"

All rewrites of a pass are computed before any record is touched, so a
failing pass leaves the store unchanged.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Tuple

from .models import CODE_BASE, InvalidConfiguration, OverlapUnresolved, ShrinkInvariantViolated
from .selector import Selection
from .store import RecordStore


logger = logging.getLogger(__name__)


@dataclass
class SubstitutionResult:
    """What a substitution did to the store."""
    macro_id: int
    applied: int
    records_changed: int
    bytes_saved: int


def resolve_occurrences(
    occurrences: Iterable[Tuple[int, int]],
    length: int,
) -> Dict[int, List[int]]:
    """
    Group occurrences by record and drop overlapping ones.

    Args:
        occurrences: (record_id, offset) pairs.
        length: Substring length shared by every occurrence.

    Returns:
        Mapping of record id to kept offsets in descending order.
    """
    by_record: Dict[int, List[int]] = defaultdict(list)
    for record_id, offset in occurrences:
        by_record[record_id].append(offset)

    resolved: Dict[int, List[int]] = {}
    for record_id, offsets in by_record.items():
        kept: List[int] = []
        for offset in sorted(set(offsets), reverse=True):
            if not kept or offset + length <= kept[-1]:
                kept.append(offset)
        resolved[record_id] = kept

    return resolved


def rewrite_record(text: bytes, offsets: List[int], pattern: bytes, code: int) -> bytes:
    """
    Collapse each occurrence of ``pattern`` at ``offsets`` to ``code``.

    Args:
        text: Current record contents.
        offsets: Kept offsets, strictly descending and non-overlapping.
        pattern: The substring being replaced.
        code: Macro code byte.

    Raises:
        OverlapUnresolved: If offsets are out of order or no longer match.
        ShrinkInvariantViolated: If the result would be longer than ``text``.
    """
    length = len(pattern)
    buf = bytearray(text)
    previous = None

    for offset in offsets:
        if previous is not None and offset + length > previous:
            raise OverlapUnresolved(
                f"Occurrence at {offset} overlaps the rewrite at {previous}"
            )
        if buf[offset:offset + length] != pattern:
            raise OverlapUnresolved(
                f"Occurrence at {offset} no longer matches {pattern!r}"
            )
        buf[offset:offset + length] = bytes((code,))
        previous = offset

    if len(buf) > len(text):
        raise ShrinkInvariantViolated(
            f"Rewrite grew record from {len(text)} to {len(buf)} bytes"
        )
    return bytes(buf)


def substitute(
    store: RecordStore,
    occurrences: List[Tuple[int, int]],
    selection: Selection,
    code: int,
) -> SubstitutionResult:
    """
    Apply one pass's substitution to the store.

    Args:
        store: Record store the occurrences were indexed from.
        occurrences: (record_id, offset) pairs of the winning node.
        selection: Winning substring.
        code: Macro code byte for this pass.

    Returns:
        Summary of the substitution.
    """
    if not CODE_BASE <= code <= 0xFF:
        raise InvalidConfiguration(f"Macro code out of range: 0x{code:02x}")

    pattern = selection.substring
    resolved = resolve_occurrences(occurrences, selection.length)

    # Plan every rewrite first
    planned: List[Tuple[int, bytes]] = []
    applied = 0
    saved = 0
    for record_id in sorted(resolved):
        offsets = resolved[record_id]
        before = store.get(record_id)
        after = rewrite_record(before, offsets, pattern, code)
        planned.append((record_id, after))
        applied += len(offsets)
        saved += len(before) - len(after)

    dropped = len(occurrences) - applied
    if dropped:
        logger.debug(f"Dropped {dropped} overlapping occurrences of {pattern!r}")

    # Commit
    macro_id = store.append(pattern)
    for record_id, after in planned:
        store.set(record_id, after)

    return SubstitutionResult(
        macro_id=macro_id,
        applied=applied,
        records_changed=len(planned),
        bytes_saved=saved,
    )
