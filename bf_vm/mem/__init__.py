from .tape import Tape

__all__ = ["Tape"]
