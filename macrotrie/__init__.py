"""
Macro Trie Compressor

Builds a small substitution dictionary over a set of text records. Each pass
finds the repeated substring with the largest length x occurrence count,
replaces every (non-overlapping) occurrence with a one-byte macro code and
records the substring as a macro.

Architecture:
    Input records
        │
        ▼
    RecordStore (inputs below the mark, macros above it)
        │
        ├── pass i (code 0x80 + i)
        │     SubstringIndex   suffix trie over the current records
        │     select_best      node maximising length x count
        │     substitute       collapse occurrences right-to-left
        ▼
    MacroResult (macros in pass order, rewritten inputs)

Usage:
    from macrotrie import MacroConfig, PassController, expand_all

    controller = PassController(MacroConfig(passes=1))
    result = controller.compress([b"banana", b"bandana"])

    result.macros      # [b"ana"]
    result.records     # [b"ban\\x80", b"band\\x80"]
    expand_all(result) # [b"banana", b"bandana"]
"""

from .controller import PassController
from .expand import expand_all, expand_record, verify_round_trip
from .index import SubstringIndex, TrieNode
from .models import (
    CODE_BASE,
    DEFAULT_PASSES,
    MAX_PASSES,
    MAX_RECORDS,
    CapacityExceeded,
    InvalidConfiguration,
    InvalidRecord,
    LoadMode,
    MacroConfig,
    MacroError,
    MacroResult,
    OutputFormat,
    OverlapUnresolved,
    PassReport,
    PassState,
    ShrinkInvariantViolated,
)
from .selector import Selection, select_best
from .store import RecordStore
from .substitution import substitute

__version__ = "0.1.0"
__all__ = [
    # Controller
    "PassController",
    "MacroConfig",
    "MacroResult",
    "PassReport",
    "PassState",
    "LoadMode",
    "OutputFormat",
    # Core
    "RecordStore",
    "SubstringIndex",
    "TrieNode",
    "Selection",
    "select_best",
    "substitute",
    # Expansion
    "expand_record",
    "expand_all",
    "verify_round_trip",
    # Constants
    "CODE_BASE",
    "DEFAULT_PASSES",
    "MAX_PASSES",
    "MAX_RECORDS",
    # Errors
    "MacroError",
    "CapacityExceeded",
    "InvalidConfiguration",
    "InvalidRecord",
    "OverlapUnresolved",
    "ShrinkInvariantViolated",
]
