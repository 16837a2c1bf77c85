"""
Tape-language compiler
======================
Turns raw source for the eight-instruction tape language into a compact,
immutable instruction stream that bf_vm executes.

Architecture:
    ┌──────────┐    ┌──────────────┐    ┌──────────────┐    ┌──────────┐
    │  Source  │───>│    Lexer     │───>│   Resolver   │───>│ Program  │
    │ (bytes)  │    │ (scan+fold)  │    │ ([ ] pairs)  │    │ (tuple)  │
    └──────────┘    └──────────────┘    └──────────────┘    └──────────┘

    - lexer.py:        Single pass; folds +/- and >/< runs, skips { } comments
    - resolver.py:     Stack-based bracket matching → absolute jump targets
    - instructions.py: Op enum, frozen Instruction / Program dataclasses
    - builder.py:      Emits source from builder calls (emit_loop etc.)
    - errors.py:       CompileError taxonomy with byte offsets
"""

import logging

__version__ = "0.4.0"

from .instructions import Op, Instruction, Program, OPCODES
from .errors import (
    CompileError, UnexpectedCharacter, UnmatchedOpenBracket, UnmatchedCloseBracket,
)
from .lexer import Lexer, to_bytes
from .resolver import resolve_jumps
from .builder import ProgramBuilder, construct

log = logging.getLogger(__name__)


def compile_source(source, *, comments: bool = True) -> Program:
    """Compile tape-language source into an immutable Program.

    Full pipeline: Lexer (scan + fold) -> resolve_jumps -> Program.

    Args:
        source: bytes, bytearray or str (str is UTF-8 encoded first).
        comments: accept `{ ... }` comment blocks; when False the braces
            are unexpected characters.

    Raises:
        UnexpectedCharacter, UnmatchedOpenBracket, UnmatchedCloseBracket
    """
    data = to_bytes(source)
    lexer = Lexer(data, comments=comments)
    instructions = resolve_jumps(lexer.tokenize(), data)
    program = Program(instructions, source_length=len(data))
    log.debug("compiled %d source bytes into %d instructions",
              len(data), len(program))
    return program


__all__ = [
    "Op", "Instruction", "Program", "OPCODES",
    "CompileError", "UnexpectedCharacter", "UnmatchedOpenBracket", "UnmatchedCloseBracket",
    "Lexer", "to_bytes", "resolve_jumps", "ProgramBuilder", "construct", "compile_source",
]
