#!/usr/bin/env python3
"""
Output Emitter Tests
"""

import io

from macrotrie.models import MacroResult, OutputFormat
from macrotrie.output import render, write_result


RESULT = MacroResult(macros=[b"ana"], records=[b"ban\x80", b"band\x80"])


def test_plain_layout():
    assert render(RESULT) == b"ana\n\nban\x80\nband\x80\n"


def test_plain_without_macros():
    assert render(MacroResult(records=[b"abc"])) == b"\nabc\n"


def test_empty_result_is_single_blank_line():
    assert render(MacroResult()) == b"\n"


def test_annotated_layout():
    expected = (
        b"  macro[0x80] = [ana]\n"
        b"\n"
        b"  string[0] = [ban\x80]\n"
        b"  string[1] = [band\x80]\n"
    )

    assert render(RESULT, OutputFormat.ANNOTATED) == expected


def test_write_result_to_stream():
    stream = io.BytesIO()

    written = write_result(RESULT, stream=stream)

    assert stream.getvalue() == b"ana\n\nban\x80\nband\x80\n"
    assert written == len(stream.getvalue())
