#!/usr/bin/env python3
"""
Data Models for the Macro Trie Compressor

This module contains the constants, enums, exceptions and data classes
shared by the record store, the substring index and the pass controller.
"""

import logging
import yaml
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


# =============================================================================
# Constants (NASA Rule 2: Fixed bounds for all limits)
# =============================================================================

# Maximum number of input records
MAX_RECORDS = 512

# Default number of substitution passes
DEFAULT_PASSES = 64

# First macro code; pass i is encoded as CODE_BASE + i
CODE_BASE = 0x80

# Single-byte codes leave room for this many passes
MAX_PASSES = 0x100 - CODE_BASE

# Largest record produced by one read (line or block)
BLOCK_SIZE = 65535

# Maximum handlers per event type (NASA Rule 2: bounded collections)
MAX_EVENT_HANDLERS = 32

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# =============================================================================
# Enums
# =============================================================================

class PassState(Enum):
    """Pass controller states."""
    IDLE = "idle"
    RUNNING = "running"
    DONE = "done"            # Every configured pass produced a macro
    EXHAUSTED = "exhausted"  # No repeated substring left
    ERROR = "error"


class LoadMode(Enum):
    """How input streams are split into records."""
    LINES = "lines"
    BLOCKS = "blocks"


class OutputFormat(Enum):
    """Layout used when printing the result."""
    PLAIN = "plain"
    ANNOTATED = "annotated"


# =============================================================================
# Exceptions
# =============================================================================

class MacroError(RuntimeError):
    """Base class for every fatal compressor condition."""


class CapacityExceeded(MacroError):
    """Too many records for the record store."""


class InvalidConfiguration(MacroError):
    """A setting cannot be honoured (e.g. pass count beyond the code space)."""


class OverlapUnresolved(MacroError):
    """An occurrence no longer matches the bytes it was indexed from."""


class ShrinkInvariantViolated(MacroError):
    """A rewrite would make a record longer."""


class InvalidRecord(MacroError):
    """A record contains a NUL byte."""


# =============================================================================
# Data Classes
# =============================================================================

@dataclass
class PassReport:
    """
    Outcome of one successful pass.

    ``count`` is the number of indexed occurrences used for scoring,
    ``applied`` the number actually rewritten once overlaps are dropped.
    """
    index: int
    code: int
    substring: bytes
    length: int
    count: int
    value: int
    applied: int = 0


@dataclass
class MacroResult:
    """Macros (in pass order) and the rewritten input records."""
    macros: List[bytes] = field(default_factory=list)
    records: List[bytes] = field(default_factory=list)
    reports: List[PassReport] = field(default_factory=list)
    state: PassState = PassState.IDLE

    @property
    def passes(self) -> int:
        """Number of passes that produced a macro."""
        return len(self.macros)

    def code_for(self, macro_index: int) -> int:
        return CODE_BASE + macro_index


@dataclass
class MacroConfig:
    """Configuration for a compression run."""
    # Compression settings
    passes: int = DEFAULT_PASSES
    min_length: int = 1  # Shortest substring worth a macro
    max_length: Optional[int] = None  # Longest substring indexed, None = unbounded

    # Input settings
    mode: str = LoadMode.LINES.value
    max_records: int = MAX_RECORDS
    block_size: int = BLOCK_SIZE

    # Logging
    log_level: str = "WARNING"
    log_file: str = ""

    @property
    def load_mode(self) -> LoadMode:
        return LoadMode(self.mode)

    @property
    def store_capacity(self) -> int:
        """Input records plus one macro per pass."""
        return self.max_records + self.passes

    def validate(self) -> "MacroConfig":
        """
        Reject settings the compressor cannot honour.

        Raises:
            InvalidConfiguration: On the first offending field.
        """
        if not _is_int(self.passes) or not 0 <= self.passes <= MAX_PASSES:
            raise InvalidConfiguration(
                f"Pass count must be between 0 and {MAX_PASSES}, got {self.passes!r}"
            )
        if not isinstance(self.mode, str) or self.mode not in {m.value for m in LoadMode}:
            raise InvalidConfiguration(f"Unknown input mode: {self.mode!r}")
        for name in ("max_records", "block_size", "min_length"):
            value = getattr(self, name)
            if not _is_int(value) or value < 1:
                raise InvalidConfiguration(f"{name} must be a positive integer, got {value!r}")
        if self.max_length is not None:
            if not _is_int(self.max_length) or self.max_length < 1:
                raise InvalidConfiguration(
                    f"max_length must be a positive integer, got {self.max_length!r}"
                )
            if self.max_length < self.min_length:
                raise InvalidConfiguration(
                    f"max_length {self.max_length} is shorter than min_length {self.min_length}"
                )
        if not isinstance(self.log_level, str) or self.log_level.upper() not in LOG_LEVELS:
            raise InvalidConfiguration(f"Unknown log level: {self.log_level!r}")
        if not isinstance(self.log_file, str):
            raise InvalidConfiguration(f"log_file must be a path, got {self.log_file!r}")
        return self

    @property
    def logging_level(self) -> int:
        return getattr(logging, self.log_level.upper())

    @classmethod
    def from_yaml(cls, path: str) -> "MacroConfig":
        """
        Load configuration from YAML file.

        Raises:
            InvalidConfiguration: If the document or one of its sections
                is not a mapping.
        """
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise InvalidConfiguration(
                f"Config must be a mapping, got {type(data).__name__}"
            )

        comp = _section(data, "compression")
        inp = _section(data, "input")
        log = _section(data, "logging")

        return cls(
            passes=comp.get("passes", DEFAULT_PASSES),
            min_length=comp.get("min_length", 1),
            max_length=comp.get("max_length"),
            mode=inp.get("mode", LoadMode.LINES.value),
            max_records=inp.get("max_records", MAX_RECORDS),
            block_size=inp.get("block_size", BLOCK_SIZE),
            log_level=log.get("level", "WARNING"),
            log_file=log.get("file") or "",
        )

    def to_dict(self) -> Dict:
        """Convert config to dictionary."""
        return {
            "compression": {
                "passes": self.passes,
                "min_length": self.min_length,
                "max_length": self.max_length,
            },
            "input": {
                "mode": self.mode,
                "max_records": self.max_records,
                "block_size": self.block_size,
            },
            "logging": {
                "level": self.log_level,
                "file": self.log_file,
            },
        }


def _is_int(value) -> bool:
    # YAML turns "yes"/"no" into bools, which are ints to isinstance
    return isinstance(value, int) and not isinstance(value, bool)


def _section(data: Dict, name: str) -> Dict:
    """A top-level config section; an empty section reads as no settings."""
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise InvalidConfiguration(
            f"Config section '{name}' must be a mapping, got {type(section).__name__}"
        )
    return section
