"""Tests for ProgramBuilder / construct()."""

import pytest

from bf_compiler import Op, Program, ProgramBuilder, compile_source, construct
from bf_vm import Executor, collect_output


class TestEmit:
    def test_basic_emits(self):
        b = ProgramBuilder()
        b.emit_increment(3).emit_decrement().emit_move_right(2).emit_move_left()
        b.emit_output().emit_input()
        assert b.getvalue() == b"+++->><.,"
        assert len(b) == 9

    def test_default_amount_is_one(self):
        b = ProgramBuilder().emit_increment().emit_move_right()
        assert b.getvalue() == b"+>"

    def test_zero_amount_emits_nothing(self):
        assert ProgramBuilder().emit_increment(0).getvalue() == b""

    @pytest.mark.parametrize("method", [
        "emit_increment", "emit_decrement", "emit_move_right", "emit_move_left",
    ])
    def test_negative_amount_rejected(self, method):
        with pytest.raises(ValueError):
            getattr(ProgramBuilder(), method)(-1)

    def test_loop_wraps_body(self):
        b = ProgramBuilder().emit_increment(2)
        b.emit_loop(lambda body: body.emit_decrement())
        assert b.getvalue() == b"++[-]"

    def test_loop_returns_body_result(self):
        b = ProgramBuilder()
        assert b.emit_loop(lambda body: 42) == 42
        assert b.getvalue() == b"[]"

    def test_comment(self):
        b = ProgramBuilder().emit_comment("set {cell} to 1").emit_increment()
        assert b.getvalue() == b"{set {cell} to 1}+"
        assert [inst.op for inst in b.compile()] == [Op.ADD]

    @pytest.mark.parametrize("text", ["a}", "{", "}{"])
    def test_unbalanced_comment_rejected(self, text):
        with pytest.raises(ValueError):
            ProgramBuilder().emit_comment(text)


class TestConstruct:
    def test_multiply_loop(self):
        def build(b):
            b.emit_increment(8)
            b.emit_loop(lambda b: b.emit_move_right().emit_increment(8)
                        .emit_move_left().emit_decrement())
            b.emit_move_right().emit_increment().emit_output()

        source = construct(build)
        assert source == b"++++++++[>++++++++<-]>+."
        out, _ = collect_output(Executor(compile_source(source)))
        assert out == b"A"

    def test_compile_returns_program(self):
        program = ProgramBuilder().emit_increment(65).emit_output().compile()
        assert isinstance(program, Program)
        assert len(program) == 2
        assert program[0].count == 65

    def test_construct_ignores_build_result(self):
        assert construct(lambda b: b.emit_input()) == b","
