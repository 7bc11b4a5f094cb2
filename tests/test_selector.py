#!/usr/bin/env python3
"""
Best-Substring Selector Tests
"""

from macrotrie.index import SubstringIndex
from macrotrie.selector import candidates, score, select_best


def test_banana_picks_ana():
    selection = select_best(SubstringIndex([b"banana", b"bandana"]))

    assert selection.substring == b"ana"
    assert selection.length == 3
    assert selection.count == 3
    assert selection.value == 9


def test_selection_is_maximum_over_candidates():
    index = SubstringIndex([b"the cat sat on the mat", b"the hat"])
    selection = select_best(index)

    assert selection.value == max(value for _, value in candidates(index))
    assert selection.value == score(selection.length, selection.count)


def test_no_repeats_returns_none():
    assert select_best(SubstringIndex([b"abc", b"def"])) is None


def test_empty_index_returns_none():
    assert select_best(SubstringIndex([])) is None
    assert select_best(SubstringIndex([b""])) is None


def test_single_repeated_byte_is_enough():
    selection = select_best(SubstringIndex([b"ab", b"cb"]))

    assert selection.substring == b"b"
    assert selection.value == 2


def test_tie_goes_to_smallest_substring():
    forward = select_best(SubstringIndex([b"xy", b"xy", b"zw", b"zw"]))
    backward = select_best(SubstringIndex([b"zw", b"zw", b"xy", b"xy"]))

    assert forward.substring == backward.substring == b"xy"
    assert forward.value == 4


def test_tie_prefers_prefix_over_extension():
    # "aa": 2 x 3 == "aaa": 3 x 2
    selection = select_best(SubstringIndex([b"aaaa"]))

    assert selection.substring == b"aa"
    assert selection.value == 6
