"""
Compile-time error taxonomy.

Every error carries the source byte offset it was detected at, plus the
1-based line/column derived from the source so the CLI can point at it.
"""

from __future__ import annotations
from typing import Tuple


def line_col(source: bytes, position: int) -> Tuple[int, int]:
    """Convert a byte offset into a 1-based (line, col) pair."""
    line = source.count(b"\n", 0, position) + 1
    last_nl = source.rfind(b"\n", 0, position)
    return line, position - last_nl


class CompileError(Exception):
    def __init__(self, message: str, position: int, source: bytes = b""):
        self.position = position
        self.line, self.col = line_col(source, position)
        self.message = message
        super().__init__(f"{message} at offset {position} (L{self.line}:{self.col})")


class UnexpectedCharacter(CompileError):
    def __init__(self, position: int, source: bytes = b""):
        self.char = source[position:position + 1]
        super().__init__(f"Unexpected character {self.char!r}", position, source)


class UnmatchedOpenBracket(CompileError):
    def __init__(self, position: int, source: bytes = b"", bracket: str = "["):
        self.bracket = bracket
        super().__init__(f"Unmatched '{bracket}'", position, source)


class UnmatchedCloseBracket(CompileError):
    def __init__(self, position: int, source: bytes = b"", bracket: str = "]"):
        self.bracket = bracket
        super().__init__(f"Unmatched '{bracket}'", position, source)
