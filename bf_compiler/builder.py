"""
Program builder — emits tape-language source from builder calls.

Each emit_* call appends raw instruction characters to a growable byte
buffer; nothing is folded or validated here beyond argument checks. The
result is plain source text and goes through compile_source() like any
hand-written program.

Usage:
    def hello(b):
        b.emit_increment(72).emit_output()

    source = construct(hello)          # b"+++...+."
"""

from __future__ import annotations
from typing import Callable, TypeVar

from .instructions import Program

T = TypeVar("T")


class ProgramBuilder:
    """Appends instruction characters to an internal bytearray."""

    def __init__(self):
        self._buf = bytearray()

    def _repeat(self, char: bytes, amount: int) -> "ProgramBuilder":
        if amount < 0:
            raise ValueError(f"count must be non-negative, got {amount}")
        self._buf += char * amount
        return self

    def emit_increment(self, amount: int = 1) -> "ProgramBuilder":
        return self._repeat(b"+", amount)

    def emit_decrement(self, amount: int = 1) -> "ProgramBuilder":
        return self._repeat(b"-", amount)

    def emit_move_right(self, amount: int = 1) -> "ProgramBuilder":
        return self._repeat(b">", amount)

    def emit_move_left(self, amount: int = 1) -> "ProgramBuilder":
        return self._repeat(b"<", amount)

    def emit_output(self) -> "ProgramBuilder":
        self._buf += b"."
        return self

    def emit_input(self) -> "ProgramBuilder":
        self._buf += b","
        return self

    def emit_loop(self, body: Callable[["ProgramBuilder"], T]) -> T:
        """Wrap whatever `body` emits in `[` ... `]` and return body's result."""
        self._buf += b"["
        result = body(self)
        self._buf += b"]"
        return result

    def emit_comment(self, text: str) -> "ProgramBuilder":
        """Emit a `{text}` comment block. Braces inside must balance."""
        depth = 0
        for ch in text:
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth < 0:
                    break
        if depth != 0:
            raise ValueError(f"unbalanced braces in comment: {text!r}")
        self._buf += b"{" + text.encode("utf-8") + b"}"
        return self

    def getvalue(self) -> bytes:
        return bytes(self._buf)

    def compile(self) -> Program:
        from . import compile_source
        return compile_source(self.getvalue())

    def __len__(self) -> int:
        return len(self._buf)


def construct(build: Callable[[ProgramBuilder], object]) -> bytes:
    """Run `build` against a fresh builder and return the emitted source."""
    builder = ProgramBuilder()
    build(builder)
    return builder.getvalue()
