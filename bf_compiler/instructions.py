"""
Instruction definitions for the tape-language compiler.

Defines the compact instruction stream produced by the lexer/resolver
and consumed by the executor. Each instruction is one folded run of
source characters; jump instructions carry the absolute index of their
matching bracket once resolved.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Iterator, Optional, Tuple


# ──────────────────────────────────────────────
# Opcodes
# ──────────────────────────────────────────────

class Op(enum.Enum):
    ADD = "+"
    SUB = "-"
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    OUTPUT = "."
    INPUT = ","
    JUMP_IF_ZERO = "["
    JUMP_IF_NONZERO = "]"

    @property
    def char(self) -> str:
        return self.value

    @property
    def is_jump(self) -> bool:
        return self in (Op.JUMP_IF_ZERO, Op.JUMP_IF_NONZERO)

    @property
    def is_move(self) -> bool:
        return self in (Op.MOVE_RIGHT, Op.MOVE_LEFT)


# Source byte -> opcode (comment braces are handled by the lexer)
OPCODES = {ord(op.value): op for op in Op}


# ──────────────────────────────────────────────
# Instruction
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Instruction:
    """One folded instruction.

    count:  folded magnitude (mod 256 for ADD/SUB, net distance for moves)
    target: index of the matching bracket instruction (jumps only)
    offset: source byte offset of the first folded character
    reach:  deepest leftward excursion of a folded move run; the executor
            refuses the move when the cell pointer is below it
    """
    op: Op
    count: int = 1
    target: Optional[int] = None
    offset: int = 0
    reach: int = 0

    def __str__(self) -> str:
        if self.op.is_jump:
            target = "?" if self.target is None else self.target
            return f"{self.op.name} -> {target}"
        if self.op in (Op.OUTPUT, Op.INPUT):
            return self.op.name
        if self.op.is_move and self.reach > (self.count if self.op is Op.MOVE_LEFT else 0):
            return f"{self.op.name} {self.count} (reach {self.reach})"
        return f"{self.op.name} {self.count}"


@dataclass(frozen=True)
class Program:
    """Immutable compiled instruction stream.

    Shared read-only by every executor built from it.
    """
    instructions: Tuple[Instruction, ...]
    source_length: int = 0

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def listing(self) -> str:
        """Return a one-instruction-per-line dump with source offsets."""
        width = max(4, len(str(len(self.instructions))))
        lines = []
        for index, inst in enumerate(self.instructions):
            lines.append(f"{index:>{width}}  @{inst.offset:<6} {inst}")
        return "\n".join(lines)
