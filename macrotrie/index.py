#!/usr/bin/env python3
"""
Substring Frequency Index

A prefix tree over every suffix of every record. Each node stands for one
distinct substring (the path from the root) and carries:

    length       depth from the root (substring length)
    count        number of suffixes passing through the node
    occurrences  (record_id, offset) pairs, in suffix insertion order

Nodes live in an arena (a flat list) and refer to their children by index,
so occurrences are plain value pairs and never alias record buffers.

Example (records ["banana", "bandana"]):

    root ── a ── n ── a        "ana": length 3, count 3
                 │             occurrences (0, 1) (0, 3) (1, 4)
                 └── d ...

The index reads a snapshot of the store taken when it is built and is
discarded at the end of the pass that built it.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .store import RecordStore


# =============================================================================
# Constants
# =============================================================================

ROOT = 0

logger = logging.getLogger(__name__)


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class TrieNode:
    """One distinct substring in the index."""
    length: int
    count: int = 0
    children: Dict[int, int] = field(default_factory=dict)  # byte -> node id
    occurrences: List[Tuple[int, int]] = field(default_factory=list)


# =============================================================================
# Index
# =============================================================================

class SubstringIndex:
    """
    Arena-backed suffix trie over a snapshot of a record store.

    The root only counts suffixes; it keeps no occurrence list since its
    substring is empty.
    """

    def __init__(self, texts: Sequence[bytes] = (), max_length: Optional[int] = None):
        """
        Initialize and fill the index.

        Args:
            texts: Record contents, indexed by record id.
            max_length: Longest substring to index (None for unbounded).
        """
        self.max_length = max_length
        self.texts: List[bytes] = []
        self.nodes: List[TrieNode] = [TrieNode(length=0)]

        for text in texts:
            self.add_record(text)

    @classmethod
    def build(cls, store: RecordStore, max_length: Optional[int] = None) -> "SubstringIndex":
        """Index the current contents of every record in the store."""
        index = cls(list(store), max_length=max_length)
        logger.debug(
            f"Indexed {len(index.texts)} records: {len(index.nodes)} nodes, "
            f"{index.root.count} suffixes"
        )
        return index

    def __enter__(self) -> "SubstringIndex":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.clear()

    def __len__(self) -> int:
        return len(self.nodes)

    @property
    def root(self) -> TrieNode:
        return self.nodes[ROOT]

    def node(self, node_id: int) -> TrieNode:
        return self.nodes[node_id]

    def add_record(self, text: bytes) -> int:
        """
        Insert every suffix of a record, the empty one included.

        Returns:
            Record id assigned to the text.
        """
        record_id = len(self.texts)
        self.texts.append(bytes(text))

        for offset in range(len(text) + 1):
            self._add_suffix(record_id, offset)

        return record_id

    def _add_suffix(self, record_id: int, offset: int) -> None:
        text = self.texts[record_id]
        end = len(text)
        if self.max_length is not None:
            end = min(end, offset + self.max_length)

        nodes = self.nodes
        current = nodes[ROOT]
        current.count += 1

        for pos in range(offset, end):
            byte = text[pos]
            child_id = current.children.get(byte)
            if child_id is None:
                child_id = len(nodes)
                nodes.append(TrieNode(length=current.length + 1))
                current.children[byte] = child_id
            current = nodes[child_id]
            current.count += 1
            current.occurrences.append((record_id, offset))

    def find(self, substring: bytes) -> Optional[int]:
        """Node id for a substring, or None if it never occurs."""
        node_id = ROOT
        for byte in substring:
            node_id = self.nodes[node_id].children.get(byte)
            if node_id is None:
                return None
        return node_id

    def substring(self, node_id: int) -> bytes:
        """Bytes of the substring a node stands for."""
        node = self.nodes[node_id]
        if not node.occurrences:
            return b""
        record_id, offset = node.occurrences[0]
        return self.texts[record_id][offset:offset + node.length]

    def walk(self) -> Iterator[int]:
        """
        Pre-order walk of node ids, children in ascending byte order.

        Substrings therefore come out in lexicographic order.
        """
        stack = [ROOT]
        while stack:
            node_id = stack.pop()
            yield node_id
            children = self.nodes[node_id].children
            stack.extend(children[b] for b in sorted(children, reverse=True))

    def clear(self) -> None:
        """Drop every node and the text snapshot."""
        self.nodes = [TrieNode(length=0)]
        self.texts = []
