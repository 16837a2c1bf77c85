"""
Lexer / folder for the tape language.

Converts raw source bytes into a flat list of Instructions in one
left-to-right pass. Consecutive compatible characters are folded into a
single instruction:

    +++--     → ADD 1
    +--       → SUB 1         (net count flips direction, never saturates)
    >>><      → MOVE_RIGHT 2
    <>        → MOVE_LEFT 0 (reach 1)   (still bound-checked)

Comment blocks `{ ... }` are skipped with nesting; anything inside is
ignored. Every other byte outside `+-<>.,[]` is rejected. Jump targets
are left unresolved here; see resolver.py.
"""

from __future__ import annotations
from typing import List, Optional, Union

from .errors import UnexpectedCharacter, UnmatchedOpenBracket, UnmatchedCloseBracket
from .instructions import Instruction, Op, OPCODES


PLUS, MINUS = ord("+"), ord("-")
RIGHT, LEFT = ord(">"), ord("<")
COMMENT_OPEN, COMMENT_CLOSE = ord("{"), ord("}")


def to_bytes(source: Union[bytes, bytearray, str]) -> bytes:
    """Normalise source to bytes; text is UTF-8 encoded so offsets are byte offsets."""
    if isinstance(source, str):
        return source.encode("utf-8")
    return bytes(source)


class Lexer:
    """Scans and folds source bytes into unresolved Instructions."""

    def __init__(self, source: Union[bytes, bytearray, str], comments: bool = True):
        self.source = to_bytes(source)
        self.comments = comments
        self.pos = 0
        self.instructions: List[Instruction] = []

    def _fold(self, up: int, down: int) -> tuple:
        """Consume a run of up/down characters.

        Returns (net, low): the signed net count and the lowest running
        total seen, which is <= 0.
        """
        net = 0
        low = 0
        src = self.source
        while self.pos < len(src) and src[self.pos] in (up, down):
            net += 1 if src[self.pos] == up else -1
            low = min(low, net)
            self.pos += 1
        return net, low

    def _read_arith(self) -> Optional[Instruction]:
        start = self.pos
        net, _ = self._fold(PLUS, MINUS)
        if net > 0:
            op, count = Op.ADD, net % 256
        else:
            op, count = Op.SUB, -net % 256
        if count == 0:
            return None
        return Instruction(op, count, offset=start)

    def _read_move(self) -> Optional[Instruction]:
        start = self.pos
        net, low = self._fold(RIGHT, LEFT)
        reach = -low
        if net > 0:
            return Instruction(Op.MOVE_RIGHT, net, offset=start, reach=reach)
        if net < 0 or reach:
            return Instruction(Op.MOVE_LEFT, -net, offset=start, reach=reach)
        return None

    def _skip_comment(self):
        start = self.pos
        depth = 0
        src = self.source
        while self.pos < len(src):
            byte = src[self.pos]
            self.pos += 1
            if byte == COMMENT_OPEN:
                depth += 1
            elif byte == COMMENT_CLOSE:
                depth -= 1
                if depth == 0:
                    return
        raise UnmatchedOpenBracket(start, self.source, bracket="{")

    def tokenize(self) -> List[Instruction]:
        """Scan the entire source and return the folded instruction list."""
        self.instructions = []
        self.pos = 0
        src = self.source

        while self.pos < len(src):
            byte = src[self.pos]

            if byte in (PLUS, MINUS):
                inst = self._read_arith()
            elif byte in (RIGHT, LEFT):
                inst = self._read_move()
            elif byte in OPCODES:
                inst = Instruction(OPCODES[byte], offset=self.pos)
                self.pos += 1
            elif self.comments and byte == COMMENT_OPEN:
                self._skip_comment()
                continue
            elif self.comments and byte == COMMENT_CLOSE:
                raise UnmatchedCloseBracket(self.pos, src, bracket="}")
            else:
                raise UnexpectedCharacter(self.pos, src)

            if inst is not None:
                self.instructions.append(inst)

        return self.instructions
