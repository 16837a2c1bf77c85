"""
Tape VM — reversible execution history

While recording is enabled the executor appends one Delta per executed
instruction, in execution order:

  CELL_CHANGED(value[, consumed])  — Add/Sub/Input; value is the cell's
                                     previous content, consumed the input
                                     byte an Input took off the queue
  MOVED(value)                     — signed pointer offset that was applied
  JUMPED(value)                    — taken jump or comment skip; value is
                                     the instruction pointer before it
  NOOP                             — Output or untaken jump

Undo pops the last Delta and applies its inverse (see BaseExecutor.undo).
Disabling recording clears the log.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class DeltaKind(Enum):
    CELL_CHANGED = 'CELL_CHANGED'
    MOVED = 'MOVED'
    JUMPED = 'JUMPED'
    NOOP = 'NOOP'


@dataclass(frozen=True)
class Delta:
    kind: DeltaKind
    value: int = 0
    consumed: Optional[int] = None


class History:
    """Ordered undo log owned by a single executor."""

    def __init__(self):
        self.enabled = False
        self._log: List[Delta] = []

    def enable(self, enable: bool = True):
        self.enabled = enable
        if not enable:
            self._log.clear()

    def record(self, kind: DeltaKind, value: int = 0, consumed: Optional[int] = None):
        if self.enabled:
            self._log.append(Delta(kind, value, consumed))

    def pop(self) -> Optional[Delta]:
        return self._log.pop() if self._log else None

    def clear(self):
        self._log.clear()

    @property
    def entries(self) -> Tuple[Delta, ...]:
        return tuple(self._log)

    def __len__(self) -> int:
        return len(self._log)

    def __iter__(self) -> Iterator[Delta]:
        return iter(self._log)
