#!/usr/bin/env python3
"""
Best-Substring Selector

Scores every repeated substring in an index by length x occurrence count
and picks the highest. Ties go to the lexicographically smallest substring,
which is the first one met in the index's pre-order walk.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .index import SubstringIndex


# Benefit of substituting nothing (the root)
BASELINE_VALUE = 0


@dataclass(frozen=True)
class Selection:
    """The winning node of a pass."""
    node_id: int
    substring: bytes
    length: int
    count: int
    value: int


def score(length: int, count: int) -> int:
    """Greedy benefit of a substring."""
    return length * count


def candidates(index: SubstringIndex, min_length: int = 1) -> Iterator[Tuple[int, int]]:
    """Yield (node_id, value) for every node of at least min_length that repeats."""
    min_length = max(min_length, 1)  # the root never counts
    for node_id in index.walk():
        node = index.node(node_id)
        if node.length >= min_length and node.count >= 2:
            yield node_id, score(node.length, node.count)


def select_best(index: SubstringIndex, min_length: int = 1) -> Optional[Selection]:
    """
    Find the node maximising length x count.

    Args:
        index: Index of the current records.
        min_length: Shortest substring considered.

    Returns:
        The winning selection, or None if nothing beats the baseline.
    """
    best_id = None
    best_value = BASELINE_VALUE

    for node_id, value in candidates(index, min_length):
        # Strictly greater keeps the first (smallest) substring on ties
        if value > best_value:
            best_id = node_id
            best_value = value

    if best_id is None:
        return None

    node = index.node(best_id)
    return Selection(
        node_id=best_id,
        substring=index.substring(best_id),
        length=node.length,
        count=node.count,
        value=best_value,
    )
