"""
Bracket resolver — second compiler pass.

Walks the folded instruction list with a stack of open-bracket indices
and rewrites each `[`/`]` pair so that both ends carry the other's index
as their jump target. Mirrors the label pass of a two-pass assembler:
the lexer sizes the stream, this pass fixes up the addresses.
"""

from __future__ import annotations
from dataclasses import replace
from typing import List, Sequence, Tuple

from .errors import UnmatchedOpenBracket, UnmatchedCloseBracket
from .instructions import Instruction, Op


def resolve_jumps(instructions: Sequence[Instruction],
                  source: bytes = b"") -> Tuple[Instruction, ...]:
    """Return a new instruction tuple with every bracket pair resolved.

    Raises UnmatchedCloseBracket at the first `]` with nothing open, or
    UnmatchedOpenBracket at the first (outermost) `[` left unclosed.
    """
    resolved = list(instructions)
    stack: List[int] = []

    for index, inst in enumerate(resolved):
        if inst.op is Op.JUMP_IF_ZERO:
            stack.append(index)
        elif inst.op is Op.JUMP_IF_NONZERO:
            if not stack:
                raise UnmatchedCloseBracket(inst.offset, source)
            start = stack.pop()
            resolved[start] = replace(resolved[start], target=index)
            resolved[index] = replace(inst, target=start)

    if stack:
        raise UnmatchedOpenBracket(resolved[stack[0]].offset, source)

    return tuple(resolved)
