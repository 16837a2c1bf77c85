# Tape VM — stepping virtual machine for the eight-instruction tape language
# Part of the bf toolchain (bf_compiler → bf_vm)
#
# Two engines share one stepping interface (BaseExecutor):
#   - Executor:       runs a compiled, folded Program from bf_compiler
#   - DirectExecutor: interprets raw source, lazy memoized jump resolution
#
# Neither engine blocks or raises at runtime: every suspension (output,
# input needed, halt, refused instruction) comes back as an Event.

from .config import VMConfig, PROFILES, MODES, load_config
from .events import Event, EventKind, ErrorKind
from .history import Delta, DeltaKind, History
from .mem.tape import Tape
from .executor import BaseExecutor, Executor, Snapshot, collect_output
from .direct import DirectExecutor


def create_executor(source, config: VMConfig = None) -> BaseExecutor:
    """Build the engine selected by config.mode.

    An already compiled Program always gets an Executor. Raw source is
    compiled (mode "compiled") or interpreted as-is (mode "direct").
    """
    from bf_compiler import Program

    config = config or VMConfig()
    if isinstance(source, Program):
        return Executor(source, config)
    if config.mode == "direct":
        return DirectExecutor(source, config)
    return Executor.from_source(source, config)


__all__ = [
    "VMConfig", "PROFILES", "MODES", "load_config",
    "Event", "EventKind", "ErrorKind",
    "Delta", "DeltaKind", "History", "Tape",
    "BaseExecutor", "Executor", "DirectExecutor", "Snapshot",
    "collect_output", "create_executor",
]
