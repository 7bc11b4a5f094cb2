#!/usr/bin/env python3
"""
Output Emitter

Plain layout (one record per line):

    <macro 0x80>
    <macro 0x81>
    ...
    <blank line>
    <rewritten record 0>
    <rewritten record 1>
    ...

Annotated layout (for inspection):

      macro[0x80] = [ana]
    <blank line>
      string[0] = [ban\\x80]
"""

import sys
from typing import BinaryIO, List, Optional

from .models import MacroResult, OutputFormat


def render_plain(result: MacroResult) -> bytes:
    """Macros, a blank line, then the rewritten records."""
    lines: List[bytes] = list(result.macros)
    lines.append(b"")
    lines.extend(result.records)
    return b"".join(line + b"\n" for line in lines)


def render_annotated(result: MacroResult) -> bytes:
    lines: List[bytes] = []
    for i, macro in enumerate(result.macros):
        lines.append(b"  macro[0x%02x] = [%s]" % (result.code_for(i), macro))
    lines.append(b"")
    for i, record in enumerate(result.records):
        lines.append(b"  string[%d] = [%s]" % (i, record))
    return b"".join(line + b"\n" for line in lines)


def render(result: MacroResult, fmt: OutputFormat = OutputFormat.PLAIN) -> bytes:
    if fmt is OutputFormat.ANNOTATED:
        return render_annotated(result)
    return render_plain(result)


def write_result(
    result: MacroResult,
    fmt: OutputFormat = OutputFormat.PLAIN,
    stream: Optional[BinaryIO] = None,
) -> int:
    """Write the rendered result; returns the number of bytes written."""
    data = render(result, fmt)
    out = stream or sys.stdout.buffer
    out.write(data)
    out.flush()
    return len(data)
