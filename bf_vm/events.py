"""
Tape VM — execution events

An Event is what step()/run() hand back to the caller when execution
needs attention:

  EMIT              — an Output instruction produced a byte (value)
  NEEDS_INPUT       — an Input instruction found the queue empty; feed()
                      and call step() again to resume on the same instruction
  HALTED            — instruction pointer ran off the end; sticky
  ERROR             — the instruction could not execute (error, position,
                      offset); machine state is untouched
  BUDGET_EXHAUSTED  — run_bounded() spent max_steps without an event (value)

step() returns None for instructions that produce no event.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class EventKind(Enum):
    EMIT = 'EMIT'
    NEEDS_INPUT = 'NEEDS_INPUT'
    HALTED = 'HALTED'
    ERROR = 'ERROR'
    BUDGET_EXHAUSTED = 'BUDGET_EXHAUSTED'


class ErrorKind(Enum):
    OUT_OF_BOUNDS = 'OUT_OF_BOUNDS'
    # Direct mode only: found lazily when the offending byte is reached
    UNEXPECTED_CHARACTER = 'UNEXPECTED_CHARACTER'
    UNMATCHED_OPEN = 'UNMATCHED_OPEN'
    UNMATCHED_CLOSE = 'UNMATCHED_CLOSE'


@dataclass(frozen=True)
class Event:
    kind: EventKind
    value: Optional[int] = None
    error: Optional[ErrorKind] = None
    position: Optional[int] = None
    offset: Optional[int] = None

    @classmethod
    def output(cls, value: int) -> "Event":
        return cls(EventKind.EMIT, value=value)

    @classmethod
    def needs_input(cls) -> "Event":
        return cls(EventKind.NEEDS_INPUT)

    @classmethod
    def halted(cls) -> "Event":
        return cls(EventKind.HALTED)

    @classmethod
    def fault(cls, error: ErrorKind, position: int, offset: Optional[int] = None) -> "Event":
        return cls(EventKind.ERROR, error=error, position=position,
                   offset=position if offset is None else offset)

    @classmethod
    def budget(cls, steps: int) -> "Event":
        return cls(EventKind.BUDGET_EXHAUSTED, value=steps)

    @property
    def is_terminal(self) -> bool:
        """True for events after which run() would make no progress."""
        return self.kind in (EventKind.HALTED, EventKind.ERROR)

    def __str__(self) -> str:
        if self.kind is EventKind.EMIT:
            return f"EMIT({self.value})"
        if self.kind is EventKind.ERROR:
            return f"ERROR({self.error.value} @ {self.position}, offset {self.offset})"
        if self.kind is EventKind.BUDGET_EXHAUSTED:
            return f"BUDGET_EXHAUSTED({self.value})"
        return self.kind.value
