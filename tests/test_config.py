"""Tests for VMConfig, PROFILES and load_config()."""

import dataclasses

import pytest

from bf_compiler import compile_source
from bf_vm import MODES, PROFILES, Executor, VMConfig, load_config


class TestVMConfig:
    def test_defaults(self):
        config = VMConfig()
        assert config.tape_size == 30_000
        assert config.growth_block == 100
        assert config.mode == "compiled"
        assert config.comments is True
        assert config.history is False
        assert config.max_steps is None

    def test_frozen(self):
        with pytest.raises(dataclasses.FrozenInstanceError):
            VMConfig().tape_size = 5

    @pytest.mark.parametrize("kwargs", [
        {"tape_size": 0},
        {"growth_block": 0},
        {"mode": "jit"},
        {"max_steps": -1},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            VMConfig(**kwargs)

    def test_executor_uses_tape_size(self):
        vm = Executor(compile_source(b""), VMConfig(tape_size=64))
        assert len(vm.tape) == 64


class TestProfiles:
    @pytest.mark.parametrize("name", list(PROFILES))
    def test_every_profile_loads(self, name):
        config = load_config(name)
        assert config.mode in MODES
        assert PROFILES[name]["description"]

    def test_compact(self):
        config = load_config("compact")
        assert config.tape_size == 256
        assert config.growth_block == 16

    def test_direct(self):
        assert load_config("direct").mode == "direct"

    def test_overrides(self):
        config = load_config("compact", tape_size=1024, history=True)
        assert config.tape_size == 1024
        assert config.growth_block == 16
        assert config.history is True

    def test_none_overrides_ignored(self):
        config = load_config("direct", mode=None, max_steps=None)
        assert config.mode == "direct"
        assert config.max_steps is None

    def test_unknown_profile(self):
        with pytest.raises(ValueError, match="Unknown profile"):
            load_config("huge")

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown config field"):
            load_config(tape_width=3)

    def test_override_validated(self):
        with pytest.raises(ValueError):
            load_config(tape_size=-5)
