"""
Tape VM — direct interpretation mode

Runs raw source bytes without a compile step: one source character per
instruction, no folding. Useful for large one-shot programs where the
compile pass is not worth it.

Bracket matching is lazy and memoized. The first time a `[` or `]` is
reached, a depth-counting scan (forward for `[`, backward for `]`) finds
its partner and both positions are cached, keyed by the instruction
pointer at the jump decision. A loop therefore costs one scan in total,
however many times it iterates. `{ ... }` comment blocks are skipped with
the same lazy scan, once per distinct opening brace.

Malformed source is only noticed when execution reaches it and is
reported as an ERROR event; machine state stays untouched.
"""

from typing import Dict, Optional, Union

from bf_compiler import to_bytes

from .config import VMConfig
from .events import Event, ErrorKind
from .executor import BaseExecutor


OPEN, CLOSE = ord("["), ord("]")
COMMENT_OPEN, COMMENT_CLOSE = ord("{"), ord("}")


class _ScanError(Exception):
    def __init__(self, error: ErrorKind, position: int):
        self.error = error
        self.position = position
        super().__init__(f"{error.value} at {position}")


class DirectExecutor(BaseExecutor):
    """Interprets source bytes directly behind the BaseExecutor interface."""

    def __init__(self, source: Union[bytes, bytearray, str],
                 config: Optional[VMConfig] = None):
        super().__init__(config)
        self.source = to_bytes(source)
        self._jump_cache: Dict[int, int] = {}
        self._comment_cache: Dict[int, int] = {}
        self.cache_misses = 0
        self.comment_scans = 0
        self._dispatch = self._build_dispatch()

    def _build_dispatch(self) -> dict:
        table = {
            ord("+"): self._op_inc,
            ord("-"): self._op_dec,
            ord(">"): self._op_right,
            ord("<"): self._op_left,
            ord("."): self._op_output,
            ord(","): self._op_input,
            OPEN:     self._op_open,
            CLOSE:    self._op_close,
        }
        if self.config.comments:
            table[COMMENT_OPEN] = self._op_comment
            table[COMMENT_CLOSE] = self._op_stray_close
        return table

    def _length(self) -> int:
        return len(self.source)

    def _describe(self, ip: int) -> str:
        return repr(chr(self.source[ip]))

    def _execute(self, ip: int) -> Optional[Event]:
        handler = self._dispatch.get(self.source[ip])
        if handler is None:
            return Event.fault(ErrorKind.UNEXPECTED_CHARACTER, ip)
        try:
            return handler(ip)
        except _ScanError as e:
            return Event.fault(e.error, e.position)

    @property
    def cached_jumps(self) -> int:
        """Number of bracket pairs resolved so far."""
        return len(self._jump_cache) // 2

    # ── Handlers ──

    def _op_inc(self, ip):
        self._add(1)

    def _op_dec(self, ip):
        self._add(-1)

    def _op_right(self, ip):
        return self._move(1, 0, ip, ip)

    def _op_left(self, ip):
        return self._move(-1, 1, ip, ip)

    def _op_output(self, ip):
        return self._output()

    def _op_input(self, ip):
        return self._input()

    def _op_open(self, ip):
        target = self._match_bracket(ip)
        self._branch(self.current_cell == 0, target)

    def _op_close(self, ip):
        target = self._match_bracket(ip)
        self._branch(self.current_cell != 0, target)

    def _op_comment(self, ip):
        end = self._match_comment(ip)
        self._branch(True, end + 1)

    def _op_stray_close(self, ip):
        # Matched closing braces are always jumped over
        return Event.fault(ErrorKind.UNMATCHED_CLOSE, ip)

    # ══════════════════════════════════════════════
    # Lazy jump resolution
    # ══════════════════════════════════════════════

    def _match_bracket(self, ip: int) -> int:
        target = self._jump_cache.get(ip)
        if target is None:
            self.cache_misses += 1
            if self.source[ip] == OPEN:
                target = self._scan_forward(ip)
            else:
                target = self._scan_backward(ip)
            self._jump_cache[ip] = target
            self._jump_cache[target] = ip
        return target

    def _scan_forward(self, start: int) -> int:
        src = self.source
        depth = 0
        i = start
        while i < len(src):
            byte = src[i]
            if byte == OPEN:
                depth += 1
            elif byte == CLOSE:
                depth -= 1
                if depth == 0:
                    return i
            elif byte == COMMENT_OPEN and self.config.comments:
                i = self._match_comment(i)
            i += 1
        raise _ScanError(ErrorKind.UNMATCHED_OPEN, start)

    def _scan_backward(self, start: int) -> int:
        src = self.source
        depth = 0
        i = start
        while i >= 0:
            byte = src[i]
            if byte == CLOSE:
                depth += 1
            elif byte == OPEN:
                depth -= 1
                if depth == 0:
                    return i
            elif byte == COMMENT_CLOSE and self.config.comments:
                i = self._match_comment(i)
            i -= 1
        raise _ScanError(ErrorKind.UNMATCHED_CLOSE, start)

    def _match_comment(self, pos: int) -> int:
        """Return the position of the brace matching the one at `pos`."""
        partner = self._comment_cache.get(pos)
        if partner is not None:
            return partner

        self.comment_scans += 1
        src = self.source
        forward = src[pos] == COMMENT_OPEN
        step = 1 if forward else -1
        opener, closer = (COMMENT_OPEN, COMMENT_CLOSE) if forward else (COMMENT_CLOSE, COMMENT_OPEN)
        depth = 0
        i = pos
        while 0 <= i < len(src):
            if src[i] == opener:
                depth += 1
            elif src[i] == closer:
                depth -= 1
                if depth == 0:
                    self._comment_cache[pos] = i
                    self._comment_cache[i] = pos
                    return i
            i += step

        error = ErrorKind.UNMATCHED_OPEN if forward else ErrorKind.UNMATCHED_CLOSE
        raise _ScanError(error, pos)
