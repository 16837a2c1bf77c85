"""
Tape VM — machine registers

Register model:
  ip     — instruction pointer, index of the next instruction to execute
           (a compiled instruction index, or a source byte offset in
           direct mode)
  ptr    — cell pointer, current tape address; never below zero
  steps  — number of instructions executed so far
"""


class Registers:
    """Tape VM register set."""

    __slots__ = ('ip', 'ptr', 'steps')

    def __init__(self):
        self.ip: int = 0
        self.ptr: int = 0
        self.steps: int = 0

    def reset(self):
        self.ip = 0
        self.ptr = 0
        self.steps = 0

    def display(self) -> str:
        return f"IP={self.ip:05d} PTR={self.ptr:05d} STEPS={self.steps}"

    def __repr__(self) -> str:
        return f"Registers({self.display()})"
