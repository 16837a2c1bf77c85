"""
Tape VM — growable byte tape

Memory model:
  - contiguous bytearray, index 0 is the hard left bound
  - conceptually unbounded to the right: addressing past the end grows
    the tape in fixed blocks (default 100 cells), new cells are zero
  - every cell is 8-bit; writes are masked to 0..255
"""

from typing import Tuple


class Tape:
    """Byte-addressable tape with lazy block growth."""

    DEFAULT_SIZE = 30_000
    DEFAULT_BLOCK = 100

    def __init__(self, size: int = DEFAULT_SIZE, growth_block: int = DEFAULT_BLOCK):
        self.initial_size = size
        self.growth_block = growth_block
        self._cells = bytearray(size)

    def __len__(self) -> int:
        return len(self._cells)

    # --- Core read/write ---

    def read(self, index: int) -> int:
        return self._cells[index]

    def write(self, index: int, value: int):
        self._cells[index] = value & 0xFF

    # --- Growth ---

    def ensure(self, index: int) -> int:
        """Grow the tape so `index` is addressable.

        Returns the number of cells added (0 if no growth was needed).
        """
        missing = index + 1 - len(self._cells)
        if missing <= 0:
            return 0
        blocks = -(-missing // self.growth_block)  # ceiling division
        added = blocks * self.growth_block
        self._cells.extend(bytes(added))
        return added

    # --- Inspection ---

    def window(self, center: int, radius: int = 5) -> Tuple[int, bytes]:
        """Return (start, cells) for the cells within `radius` of `center`."""
        start = max(0, center - radius)
        end = min(len(self._cells), center + radius + 1)
        return start, bytes(self._cells[start:end])

    def snapshot(self) -> bytes:
        return bytes(self._cells)

    def used(self) -> bytes:
        """Tape contents with trailing zero cells removed."""
        return bytes(self._cells).rstrip(b"\x00")

    def reset(self):
        """Shrink back to the initial size, all cells zero."""
        self._cells = bytearray(self.initial_size)
