#!/usr/bin/env python3
"""
Record Store Tests

Append/get/set semantics, the capacity bound, the shrink-only rule and
the input/macro mark.
"""

import pytest

from macrotrie.models import CapacityExceeded, InvalidRecord, ShrinkInvariantViolated
from macrotrie.store import RecordStore


# =============================================================================
# Append / Get
# =============================================================================

def test_append_returns_slot_index():
    store = RecordStore(capacity=4)

    assert store.append(b"banana") == 0
    assert store.append(b"bandana") == 1
    assert len(store) == 2
    assert store.get(1) == b"bandana"
    assert list(store) == [b"banana", b"bandana"]


def test_get_returns_copy():
    store = RecordStore(records=[b"abc"])
    view = store.get(0)
    store.set(0, b"x")

    assert view == b"abc"
    assert store.get(0) == b"x"


def test_append_beyond_capacity_fails():
    store = RecordStore(capacity=2, records=[b"a", b"b"])

    with pytest.raises(CapacityExceeded):
        store.append(b"c")
    assert len(store) == 2


def test_nul_byte_rejected():
    store = RecordStore()

    with pytest.raises(InvalidRecord):
        store.append(b"ab\x00cd")
    assert len(store) == 0


# =============================================================================
# Set (shrink only)
# =============================================================================

def test_set_shrinks_record():
    store = RecordStore(records=[b"banana"])
    store.set(0, b"ban\x80")

    assert store.get(0) == b"ban\x80"
    assert store.total_bytes() == 4


def test_set_same_length_allowed():
    store = RecordStore(records=[b"abc"])
    store.set(0, b"xyz")

    assert store.get(0) == b"xyz"


def test_set_growing_record_fails():
    store = RecordStore(records=[b"abc"])

    with pytest.raises(ShrinkInvariantViolated):
        store.set(0, b"abcd")
    assert store.get(0) == b"abc"


# =============================================================================
# Mark
# =============================================================================

def test_mark_separates_inputs_from_macros():
    store = RecordStore(records=[b"one", b"two"])
    mark = store.mark()
    store.append(b"macro")

    assert mark == 2
    assert store.records_before(mark) == [b"one", b"two"]
    assert store.records_from(mark) == [b"macro"]


def test_mark_is_set_once():
    store = RecordStore(records=[b"one"])
    first = store.mark()
    store.append(b"two")

    assert store.mark() == first == 1
