#!/usr/bin/env python3
"""
Substitution Engine Tests

Overlap resolution, right-to-left rewriting and the all-or-nothing
commit of a pass.
"""

import pytest

from macrotrie.index import SubstringIndex
from macrotrie.models import CapacityExceeded, InvalidConfiguration, OverlapUnresolved
from macrotrie.selector import Selection, select_best
from macrotrie.store import RecordStore
from macrotrie.substitution import resolve_occurrences, rewrite_record, substitute


def selection_for(pattern: bytes, count: int = 2) -> Selection:
    return Selection(
        node_id=0,
        substring=pattern,
        length=len(pattern),
        count=count,
        value=len(pattern) * count,
    )


# =============================================================================
# Overlap Resolution
# =============================================================================

def test_resolve_keeps_non_overlapping_from_the_right():
    occurrences = [(0, 0), (0, 1), (0, 2)]  # "aa" in "aaaa"

    assert resolve_occurrences(occurrences, 2) == {0: [2, 0]}


def test_resolve_odd_run_keeps_rightmost():
    assert resolve_occurrences([(0, 0), (0, 1)], 2) == {0: [1]}


def test_resolve_groups_by_record():
    occurrences = [(0, 1), (0, 3), (1, 4)]  # "ana" in banana / bandana

    assert resolve_occurrences(occurrences, 3) == {0: [3], 1: [4]}


def test_resolve_adjacent_occurrences_all_kept():
    assert resolve_occurrences([(0, 0), (0, 2), (0, 4)], 2) == {0: [4, 2, 0]}


# =============================================================================
# Record Rewrite
# =============================================================================

def test_rewrite_collapses_each_span():
    assert rewrite_record(b"aaaa", [2, 0], b"aa", 0x80) == b"\x80\x80"
    assert rewrite_record(b"xabyabz", [4, 1], b"ab", 0x81) == b"x\x81y\x81z"


def test_rewrite_single_byte_keeps_length():
    assert rewrite_record(b"abc", [1], b"b", 0x80) == b"a\x80c"


def test_rewrite_rejects_left_to_right_overlap():
    with pytest.raises(OverlapUnresolved):
        rewrite_record(b"aaaa", [0, 1], b"aa", 0x80)


def test_rewrite_rejects_stale_occurrence():
    with pytest.raises(OverlapUnresolved):
        rewrite_record(b"abcd", [0], b"xy", 0x80)


# =============================================================================
# Store Substitution
# =============================================================================

def test_substitute_banana():
    store = RecordStore(records=[b"banana", b"bandana"])
    store.mark()
    index = SubstringIndex.build(store)
    selection = select_best(index)

    outcome = substitute(store, index.node(selection.node_id).occurrences, selection, 0x80)

    assert list(store) == [b"ban\x80", b"band\x80", b"ana"]
    assert outcome.macro_id == 2
    assert outcome.applied == 2
    assert outcome.records_changed == 2
    assert outcome.bytes_saved == 4


def test_failed_rewrite_leaves_store_untouched():
    store = RecordStore(records=[b"abab", b"abab"])
    occurrences = [(0, 0), (1, 1)]  # second one points at "ba"

    with pytest.raises(OverlapUnresolved):
        substitute(store, occurrences, selection_for(b"ab"), 0x80)

    assert list(store) == [b"abab", b"abab"]


def test_full_store_leaves_records_untouched():
    store = RecordStore(capacity=2, records=[b"abab", b"abab"])

    with pytest.raises(CapacityExceeded):
        substitute(store, [(0, 0), (1, 0)], selection_for(b"ab"), 0x80)

    assert list(store) == [b"abab", b"abab"]


def test_code_must_be_high_byte():
    store = RecordStore(records=[b"abab"])

    with pytest.raises(InvalidConfiguration):
        substitute(store, [(0, 0), (0, 2)], selection_for(b"ab"), 0x7F)
