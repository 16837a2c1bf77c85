"""
Tape VM — stepping engine

This is the top-level class that integrates:
  - Registers (cpu/regs.py): instruction pointer, cell pointer, step count
  - Tape (mem/tape.py): growable byte tape
  - History (history.py): optional reversible undo log
  - pending input: FIFO deque of bytes, filled by feed()

Execution model (one call to step()):
  1. Halt check: ip past the end → HALTED (sticky, nothing mutates)
  2. Fetch instruction at ip
  3. Execute handler → update tape / pointers / ip, record a Delta
  4. Return an Event if the caller must act, else None

Suspension points:
  - EMIT:        byte produced, ip already advanced
  - NEEDS_INPUT: input queue empty, ip NOT advanced — feed() and step()
                 again re-executes the same Input instruction
  - ERROR:       instruction refused (e.g. moving left of cell 0), state
                 left exactly as before the attempt

BaseExecutor holds state and the shared instruction semantics; Executor
runs a compiled Program, DirectExecutor (direct.py) runs raw source.
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple, Union

from bf_compiler import Instruction, Op, Program, compile_source

from .config import VMConfig
from .cpu.regs import Registers
from .events import Event, EventKind, ErrorKind
from .history import Delta, DeltaKind, History
from .mem.tape import Tape

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Snapshot:
    """Read-only view of machine state for observers (debuggers, UIs)."""
    instruction_pointer: int
    cell_pointer: int
    current_cell: int
    tape_start: int
    tape_window: bytes
    next_instruction: Optional[str]
    pending_input: int
    steps: int
    halted: bool


class BaseExecutor:
    """Machine state plus the stepping protocol shared by both engines.

    Subclasses provide _length(), _describe(ip) and _execute(ip).
    """

    def __init__(self, config: Optional[VMConfig] = None):
        self.config = config or VMConfig()
        self.regs = Registers()
        self.tape = Tape(self.config.tape_size, self.config.growth_block)
        self.pending_input: deque = deque()

        self._history = History()
        self._history.enable(self.config.history)

        # Trace output
        self._trace = False
        self._trace_output: List[str] = []
        self._halt_logged = False

    # ══════════════════════════════════════════════
    # Engine hooks
    # ══════════════════════════════════════════════

    def _length(self) -> int:
        raise NotImplementedError

    def _describe(self, ip: int) -> str:
        raise NotImplementedError

    def _execute(self, ip: int) -> Optional[Event]:
        raise NotImplementedError

    # ══════════════════════════════════════════════
    # State access
    # ══════════════════════════════════════════════

    @property
    def instruction_pointer(self) -> int:
        return self.regs.ip

    @property
    def cell_pointer(self) -> int:
        return self.regs.ptr

    @property
    def current_cell(self) -> int:
        return self.tape.read(self.regs.ptr)

    @property
    def steps(self) -> int:
        return self.regs.steps

    @property
    def halted(self) -> bool:
        return self.regs.ip >= self._length()

    def feed(self, data: Union[bytes, bytearray, str, int]):
        """Append input bytes to the pending-input queue (FIFO)."""
        if isinstance(data, int):
            if not 0 <= data <= 0xFF:
                raise ValueError(f"input byte out of range: {data}")
            self.pending_input.append(data)
            return
        if isinstance(data, str):
            data = data.encode("utf-8")
        self.pending_input.extend(bytes(data))

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def step(self) -> Optional[Event]:
        """Execute one instruction. Returns an Event if the caller must act, else None."""
        ip = self.regs.ip
        if ip >= self._length():
            if not self._halt_logged:
                log.debug("halted at ip=%d after %d steps", ip, self.regs.steps)
                self._halt_logged = True
            return Event.halted()

        if self._trace:
            line = f"{ip:05d}: {self._describe(ip):<24} ptr={self.regs.ptr} cell={self.current_cell}"

        event = self._execute(ip)

        if event is not None and event.kind in (EventKind.NEEDS_INPUT, EventKind.ERROR):
            if event.kind is EventKind.ERROR:
                log.debug("refused instruction: %s", event)
            return event

        self.regs.steps += 1
        if self._trace:
            self._trace_output.append(line)
        return event

    def run(self) -> Event:
        """Step until an EMIT, NEEDS_INPUT, HALTED or ERROR event."""
        while True:
            event = self.step()
            if event is not None:
                return event

    def run_bounded(self, max_steps: Optional[int] = None) -> Event:
        """Like run(), but give up with BUDGET_EXHAUSTED after max_steps
        instructions that produced no event.

        max_steps defaults to config.max_steps; with neither set this is run().
        """
        if max_steps is None:
            max_steps = self.config.max_steps
            if max_steps is None:
                return self.run()
        if max_steps < 0:
            raise ValueError(f"max_steps must be >= 0, got {max_steps}")

        executed = 0
        while executed < max_steps:
            event = self.step()
            if event is not None:
                return event
            executed += 1
        if self.halted:
            return self.step()
        return Event.budget(executed)

    # ── Shared instruction semantics ──

    def _add(self, amount: int):
        ptr = self.regs.ptr
        old = self.tape.read(ptr)
        self.tape.write(ptr, old + amount)
        self._history.record(DeltaKind.CELL_CHANGED, old)
        self.regs.ip += 1

    def _move(self, distance: int, floor: int, ip: int, offset: int) -> Optional[Event]:
        """Move the cell pointer by `distance`; refuse if pointer < floor."""
        ptr = self.regs.ptr
        if ptr < floor:
            return Event.fault(ErrorKind.OUT_OF_BOUNDS, ip, offset)
        ptr += distance
        if ptr >= len(self.tape):
            added = self.tape.ensure(ptr)
            log.debug("tape grew by %d cells to %d", added, len(self.tape))
        self.regs.ptr = ptr
        self._history.record(DeltaKind.MOVED, distance)
        self.regs.ip += 1
        return None

    def _output(self) -> Event:
        value = self.tape.read(self.regs.ptr)
        self._history.record(DeltaKind.NOOP)
        self.regs.ip += 1
        return Event.output(value)

    def _input(self) -> Optional[Event]:
        if not self.pending_input:
            return Event.needs_input()
        byte = self.pending_input.popleft()
        ptr = self.regs.ptr
        old = self.tape.read(ptr)
        self.tape.write(ptr, byte)
        self._history.record(DeltaKind.CELL_CHANGED, old, consumed=byte)
        self.regs.ip += 1
        return None

    def _branch(self, taken: bool, target: int):
        if taken:
            self._history.record(DeltaKind.JUMPED, self.regs.ip)
            self.regs.ip = target
        else:
            self._history.record(DeltaKind.NOOP)
            self.regs.ip += 1

    # ══════════════════════════════════════════════
    # History / Undo
    # ══════════════════════════════════════════════

    def enable_history(self, enable: bool = True):
        """Start (or stop and clear) recording one Delta per executed instruction."""
        self._history.enable(enable)
        log.debug("history %s", "enabled" if enable else "disabled")

    @property
    def history_enabled(self) -> bool:
        return self._history.enabled

    @property
    def history(self) -> Tuple[Delta, ...]:
        return self._history.entries

    def undo(self) -> bool:
        """Reverse the most recent recorded instruction. False if the log is empty."""
        delta = self._history.pop()
        if delta is None:
            return False

        if delta.kind is DeltaKind.JUMPED:
            self.regs.ip = delta.value
        else:
            self.regs.ip -= 1
            if delta.kind is DeltaKind.CELL_CHANGED:
                self.tape.write(self.regs.ptr, delta.value)
                if delta.consumed is not None:
                    self.pending_input.appendleft(delta.consumed)
            elif delta.kind is DeltaKind.MOVED:
                self.regs.ptr -= delta.value

        self.regs.steps -= 1
        self._halt_logged = False
        return True

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable per-instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def snapshot(self, window: int = 5) -> Snapshot:
        ip = self.regs.ip
        start, cells = self.tape.window(self.regs.ptr, window)
        return Snapshot(
            instruction_pointer=ip,
            cell_pointer=self.regs.ptr,
            current_cell=self.current_cell,
            tape_start=start,
            tape_window=cells,
            next_instruction=None if self.halted else self._describe(ip),
            pending_input=len(self.pending_input),
            steps=self.regs.steps,
            halted=self.halted,
        )

    def reset(self):
        """Back to the initial machine state; the program is kept."""
        self.regs.reset()
        self.tape.reset()
        self.pending_input.clear()
        self._history.clear()
        self._trace_output.clear()
        self._halt_logged = False


class Executor(BaseExecutor):
    """Runs a compiled Program.

    Usage:
        vm = Executor(compile_source(b",."))
        vm.step()            # Event NEEDS_INPUT
        vm.feed(b"A")
        vm.step()            # None (input consumed)
        vm.step()            # Event EMIT(65)
        vm.step()            # Event HALTED
    """

    def __init__(self, program: Program, config: Optional[VMConfig] = None):
        super().__init__(config)
        self.program = program
        self._dispatch = self._build_dispatch()

    @classmethod
    def from_source(cls, source, config: Optional[VMConfig] = None) -> "Executor":
        config = config or VMConfig()
        return cls(compile_source(source, comments=config.comments), config)

    def _length(self) -> int:
        return len(self.program)

    def _describe(self, ip: int) -> str:
        return str(self.program[ip])

    def _execute(self, ip: int) -> Optional[Event]:
        inst = self.program[ip]
        return self._dispatch[inst.op](ip, inst)

    def _build_dispatch(self) -> Dict[Op, Callable[[int, Instruction], Optional[Event]]]:
        return {
            Op.ADD:             self._op_add,
            Op.SUB:             self._op_sub,
            Op.MOVE_RIGHT:      self._op_move_right,
            Op.MOVE_LEFT:       self._op_move_left,
            Op.OUTPUT:          self._op_output,
            Op.INPUT:           self._op_input,
            Op.JUMP_IF_ZERO:    self._op_jump_if_zero,
            Op.JUMP_IF_NONZERO: self._op_jump_if_nonzero,
        }

    # ── Handlers ──

    def _op_add(self, ip, inst):
        self._add(inst.count)

    def _op_sub(self, ip, inst):
        self._add(-inst.count)

    def _op_move_right(self, ip, inst):
        return self._move(inst.count, inst.reach, ip, inst.offset)

    def _op_move_left(self, ip, inst):
        return self._move(-inst.count, max(inst.count, inst.reach), ip, inst.offset)

    def _op_output(self, ip, inst):
        return self._output()

    def _op_input(self, ip, inst):
        return self._input()

    def _op_jump_if_zero(self, ip, inst):
        self._branch(self.current_cell == 0, inst.target)

    def _op_jump_if_nonzero(self, ip, inst):
        self._branch(self.current_cell != 0, inst.target)


def collect_output(executor: BaseExecutor,
                   max_steps: Optional[int] = None) -> Tuple[bytes, Event]:
    """Run until something other than EMIT happens.

    Returns (bytes emitted, final event). With max_steps the whole call is
    capped at that many executed instructions.
    """
    out = bytearray()
    start = executor.steps
    while True:
        if max_steps is None:
            event = executor.run()
        else:
            event = executor.run_bounded(max(0, max_steps - (executor.steps - start)))
        if event.kind is EventKind.EMIT:
            out.append(event.value)
            continue
        return bytes(out), event
