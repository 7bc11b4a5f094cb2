#!/usr/bin/env python3
"""
Macro Expansion

Turns rewritten records back into their original bytes. A macro's text may
itself contain codes of other macros (macros are rewritten by later passes
like any record), so expansion is recursive.
"""

from typing import Dict, List, Sequence, Set

from .models import CODE_BASE, MacroResult


def expand_record(data: bytes, macros: Sequence[bytes]) -> bytes:
    """
    Expand every macro code in ``data``.

    Bytes ``CODE_BASE + k`` with ``k < len(macros)`` are replaced by the
    expansion of ``macros[k]``; every other byte is literal.

    Raises:
        ValueError: If macros refer to each other in a cycle.
    """
    return _expand(data, macros, {}, set())


def _expand(
    data: bytes,
    macros: Sequence[bytes],
    cache: Dict[int, bytes],
    active: Set[int],
) -> bytes:
    out = bytearray()
    for byte in data:
        k = byte - CODE_BASE
        if not 0 <= k < len(macros):
            out.append(byte)
            continue

        if k not in cache:
            if k in active:
                raise ValueError(f"Macro 0x{byte:02x} refers to itself")
            active.add(k)
            cache[k] = _expand(macros[k], macros, cache, active)
            active.discard(k)
        out.extend(cache[k])

    return bytes(out)


def expand_all(result: MacroResult) -> List[bytes]:
    """Expanded form of every rewritten input record."""
    cache: Dict[int, bytes] = {}
    return [_expand(r, result.macros, cache, set()) for r in result.records]


def verify_round_trip(original: Sequence[bytes], result: MacroResult) -> List[int]:
    """
    Compare expanded records against the inputs.

    Returns:
        Indices of records that do not expand back to their input.
    """
    expanded = expand_all(result)
    if len(expanded) != len(original):
        return list(range(max(len(expanded), len(original))))
    return [i for i, (a, b) in enumerate(zip(original, expanded)) if bytes(a) != b]
