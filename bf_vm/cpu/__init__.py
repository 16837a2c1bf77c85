from .regs import Registers

__all__ = ["Registers"]
