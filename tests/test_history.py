"""
Tape VM — History / Undo Tests

One Delta per executed instruction while recording, nothing for steps
that execute nothing, and undo() walking the machine back exactly.
"""

from bf_compiler import compile_source
from bf_vm import (
    Delta, DeltaKind, DirectExecutor, Event, EventKind, Executor, History, VMConfig,
)


def _recording(source, input_data=b"") -> Executor:
    vm = Executor(compile_source(source))
    vm.enable_history()
    if input_data:
        vm.feed(input_data)
    return vm


def _state(vm):
    return (vm.instruction_pointer, vm.cell_pointer, vm.tape.snapshot(),
            list(vm.pending_input), vm.steps)


class TestRecording:
    def test_one_delta_per_instruction(self):
        vm = _recording(b"+>.[]")
        assert vm.run() == Event.output(0)
        assert vm.run() == Event.halted()
        assert vm.history == (
            Delta(DeltaKind.CELL_CHANGED, 0),
            Delta(DeltaKind.MOVED, 1),
            Delta(DeltaKind.NOOP),
            Delta(DeltaKind.JUMPED, 3),
            Delta(DeltaKind.NOOP),
        )
        assert len(vm.history) == vm.steps

    def test_input_records_consumed_byte(self):
        vm = _recording(b"+,", input_data=b"Z")
        vm.run()
        assert vm.history[-1] == Delta(DeltaKind.CELL_CHANGED, 1, consumed=ord("Z"))

    def test_off_by_default(self):
        vm = Executor(compile_source(b"+++"))
        vm.run()
        assert not vm.history_enabled
        assert vm.history == ()

    def test_enabled_from_config(self):
        vm = Executor(compile_source(b"+"), VMConfig(history=True))
        assert vm.history_enabled
        vm.step()
        assert len(vm.history) == 1

    def test_suspensions_record_nothing(self):
        vm = _recording(b",")
        assert vm.step() == Event.needs_input()
        assert vm.history == ()

        vm = _recording(b"<")
        assert vm.step().kind is EventKind.ERROR
        assert vm.history == ()

        vm = _recording(b"")
        assert vm.step() == Event.halted()
        assert vm.history == ()

    def test_disable_clears_log(self):
        vm = _recording(b"++>")
        vm.run()
        assert vm.history
        vm.enable_history(False)
        assert vm.history == ()
        assert vm.undo() is False

    def test_history_class(self):
        log = History()
        log.record(DeltaKind.NOOP)
        assert len(log) == 0
        log.enable()
        log.record(DeltaKind.MOVED, -2)
        assert list(log) == [Delta(DeltaKind.MOVED, -2)]
        assert log.pop() == Delta(DeltaKind.MOVED, -2)
        assert log.pop() is None


class TestUndo:
    def test_undo_everything_restores_start(self):
        vm = _recording(b"++>+<[->+<]>.")
        start = _state(vm)
        assert vm.run() == Event.output(3)
        assert vm.run() == Event.halted()
        while vm.undo():
            pass
        assert _state(vm) == start
        assert not vm.halted

    def test_undo_requeues_input(self):
        vm = _recording(b",,", input_data=b"ab")
        vm.run()
        assert not vm.pending_input
        assert vm.undo()
        assert list(vm.pending_input) == [ord("b")]
        assert vm.current_cell == ord("a")
        assert vm.undo()
        assert list(vm.pending_input) == [ord("a"), ord("b")]
        assert vm.current_cell == 0

    def test_undo_taken_jump(self):
        vm = _recording(b"[+]")
        vm.step()
        assert vm.instruction_pointer == 2
        vm.undo()
        assert vm.instruction_pointer == 0

    def test_undo_move_and_wrap(self):
        vm = _recording(b"->")
        vm.run()
        vm.undo()
        assert vm.cell_pointer == 0
        assert vm.current_cell == 255
        vm.undo()
        assert vm.current_cell == 0

    def test_undo_on_empty_log(self):
        vm = _recording(b"+")
        assert vm.undo() is False
        assert vm.instruction_pointer == 0

    def test_rerun_after_undo(self):
        vm = _recording(b"+.")
        assert vm.run() == Event.output(1)
        vm.undo()
        vm.undo()
        assert vm.run() == Event.output(1)

    def test_reset_clears_history(self):
        vm = _recording(b"++")
        vm.run()
        vm.reset()
        assert vm.history == ()
        assert vm.history_enabled

    def test_direct_mode_comment_skip_undo(self):
        vm = DirectExecutor(b"{x}+", VMConfig(history=True))
        vm.run()
        assert vm.history == (
            Delta(DeltaKind.JUMPED, 0),
            Delta(DeltaKind.CELL_CHANGED, 0),
        )
        vm.undo()
        vm.undo()
        assert vm.instruction_pointer == 0
        assert vm.current_cell == 0
