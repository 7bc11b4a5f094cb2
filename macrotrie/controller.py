#!/usr/bin/env python3
"""
Pass Controller

Drives the greedy substitution loop over a record store:

    RecordStore
        │
        ├── pass i:  build index ─► select best ─► substitute (code 0x80 + i)
        │               ▲                                  │
        │               └──────── index discarded ◄────────┘
        ▼
    MacroResult (macros in pass order, rewritten inputs)

States:
    IDLE ─► RUNNING ─► DONE        every configured pass produced a macro
                  └──► EXHAUSTED   no substring repeats any more
                  └──► ERROR       a fatal MacroError was raised
"""

import logging
import sys
from typing import Callable, Iterable, List, Optional

from .index import SubstringIndex
from .models import (
    CODE_BASE,
    MAX_EVENT_HANDLERS,
    CapacityExceeded,
    MacroConfig,
    MacroError,
    MacroResult,
    PassReport,
    PassState,
)
from .selector import select_best
from .store import RecordStore
from .substitution import substitute


class PassController:
    """
    Runs up to ``config.passes`` build/select/substitute passes.

    Each pass builds a fresh index over the current store and tears it
    down before the next pass starts.
    """

    def __init__(self, config: Optional[MacroConfig] = None):
        """
        Initialize the controller.

        Args:
            config: Run configuration; validated here.

        Raises:
            InvalidConfiguration: If the configuration is unusable.
        """
        self.config = (config or MacroConfig()).validate()
        self._setup_logging()

        self.logger = logging.getLogger("PassController")
        self.state = PassState.IDLE

        # Event handlers
        self._pass_handlers: List[Callable[[PassReport], None]] = []
        self._state_handlers: List[Callable[[PassState, PassState], None]] = []

    def _setup_logging(self):
        """Configure logging (stdout carries the compressed output)."""
        handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
        if self.config.log_file:
            handlers.append(logging.FileHandler(self.config.log_file))

        logging.basicConfig(
            level=self.config.logging_level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            handlers=handlers,
        )

    def _set_state(self, state: PassState):
        """Update controller state and notify handlers."""
        old_state = self.state
        self.state = state
        self.logger.info(f"State: {old_state.value} -> {state.value}")

        for handler in self._state_handlers:
            try:
                handler(old_state, state)
            except Exception as e:
                self.logger.error(f"State handler error: {e}")

    # -------------------------------------------------------------------------
    # Event Handlers
    # -------------------------------------------------------------------------

    def on_pass(self, handler: Callable[[PassReport], None]) -> bool:
        """Register a handler called after every successful pass."""
        if len(self._pass_handlers) >= MAX_EVENT_HANDLERS:
            self.logger.warning("Max pass handlers reached")
            return False
        self._pass_handlers.append(handler)
        return True

    def on_state_change(self, handler: Callable[[PassState, PassState], None]) -> bool:
        """Register a state change handler."""
        if len(self._state_handlers) >= MAX_EVENT_HANDLERS:
            self.logger.warning("Max state handlers reached")
            return False
        self._state_handlers.append(handler)
        return True

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def load(self, records: Iterable[bytes]) -> RecordStore:
        """
        Put input records into a fresh store sized for this run.

        Raises:
            CapacityExceeded: If there are more than ``max_records`` inputs.
            InvalidRecord: If a record contains a NUL byte.
        """
        store = RecordStore(capacity=self.config.store_capacity)
        for record in records:
            if len(store) >= self.config.max_records:
                raise CapacityExceeded(
                    f"More than {self.config.max_records} input records"
                )
            store.append(record)
        return store

    def compress(self, records: Iterable[bytes]) -> MacroResult:
        """Load records and run every pass over them."""
        return self.run(self.load(records))

    def run(self, store: RecordStore) -> MacroResult:
        """
        Run the pass loop over a store.

        Records already in the store when the loop starts are the inputs;
        macros are appended after them.

        Raises:
            MacroError: Any fatal condition; the store keeps the state of
                the last completed pass.
        """
        mark = store.mark()
        self._warn_code_collisions(store, mark)

        result = MacroResult()
        self._set_state(PassState.RUNNING)

        try:
            for i in range(self.config.passes):
                report = self._run_pass(store, i)
                if report is None:
                    self._set_state(PassState.EXHAUSTED)
                    break
                result.reports.append(report)
                self._notify_pass(report)
            else:
                self._set_state(PassState.DONE)
        except MacroError as e:
            self.logger.error(f"Pass loop aborted: {e}")
            self._set_state(PassState.ERROR)
            raise

        result.macros = store.records_from(mark)
        result.records = store.records_before(mark)
        result.state = self.state

        self.logger.info(
            f"{result.passes} macros, {store.total_bytes()} bytes in "
            f"{len(store)} records"
        )
        return result

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _run_pass(self, store: RecordStore, i: int) -> Optional[PassReport]:
        """Build, select and substitute once. None when nothing repeats."""
        code = CODE_BASE + i

        with SubstringIndex.build(store, max_length=self.config.max_length) as index:
            selection = select_best(index, min_length=self.config.min_length)
            if selection is None:
                self.logger.info(f"Pass {i}: no repeated substring left")
                return None

            occurrences = index.node(selection.node_id).occurrences
            outcome = substitute(store, occurrences, selection, code)

        self.logger.info(
            f"Pass {i} [0x{code:02x}]: {selection.substring!r} "
            f"l={selection.length} n={selection.count} value={selection.value} "
            f"applied={outcome.applied} saved={outcome.bytes_saved}"
        )

        return PassReport(
            index=i,
            code=code,
            substring=selection.substring,
            length=selection.length,
            count=selection.count,
            value=selection.value,
            applied=outcome.applied,
        )

    def _notify_pass(self, report: PassReport):
        for handler in self._pass_handlers:
            try:
                handler(report)
            except Exception as e:
                self.logger.error(f"Pass handler error: {e}")

    def _warn_code_collisions(self, store: RecordStore, mark: int):
        """Input bytes inside the code range make expansion ambiguous."""
        codes = set(range(CODE_BASE, CODE_BASE + self.config.passes))
        for record_id, text in enumerate(store.records_before(mark)):
            clash = codes.intersection(text)
            if clash:
                self.logger.warning(
                    f"Record {record_id} contains macro code bytes "
                    f"{sorted(clash)[:4]}; its expansion will be ambiguous"
                )
