#!/usr/bin/env python3
"""
bfrun — tape-language runner CLI

Usage:
    python bfrun.py <program.bf> [--input TEXT | --input-file PATH]
                                 [--mode compiled|direct] [--profile standard|compact|direct]
                                 [--tape-size N] [--max-steps N] [--eof zero|stop]
                                 [--no-comments] [--listing] [--trace] [--verbose]
    python bfrun.py -c '++++++++[>++++++++<-]>+.'

Without --input/--input-file, input is read from stdin one line at a time
whenever the program asks for it. At end of input the program receives
0 bytes (--eof zero, default) or the run stops cleanly (--eof stop).

Exit codes:
    0  program halted (or stopped at end of input)
    1  compile error, runtime error, bad arguments or unreadable file
    2  internal error
    3  step budget (--max-steps) exhausted

Examples:
    python bfrun.py hello.bf
    python bfrun.py rot13.bf --input "Hello" --eof stop
    python bfrun.py big.bf --mode direct --max-steps 50000000
    python bfrun.py hello.bf --listing
"""

import argparse
import logging
import sys
import os

# Allow running from project root or as module
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from rich.console import Console
from rich.logging import RichHandler

from bf_compiler import __version__, compile_source, CompileError
from bf_vm import EventKind, MODES, PROFILES, create_executor, load_config

log = logging.getLogger("bfrun")


def setup_logging(verbose: bool = False):
    """Route log records to stderr through rich; WARNING+ unless -v."""
    level = logging.DEBUG if verbose else logging.WARNING
    handler = RichHandler(
        level=level,
        console=Console(stderr=True),
        show_time=verbose,
        show_path=False,
        rich_tracebacks=True,
    )
    logging.basicConfig(level=level, format="%(message)s", handlers=[handler], force=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfrun",
        description="Run tape-language programs on the stepping VM",
        epilog="Profiles: " + ", ".join(
            f"{name} ({p['description']})" for name, p in PROFILES.items()),
    )
    parser.add_argument("source", nargs="?", help="Program source file")
    parser.add_argument("-c", "--code", help="Program text given inline instead of a file")
    parser.add_argument("--input", help="Input text fed to the program up front")
    parser.add_argument("--input-file", help="File whose bytes are fed to the program")
    parser.add_argument("--mode", choices=list(MODES), default=None,
                        help="Execution engine (default: from profile)")
    parser.add_argument("--profile", choices=list(PROFILES), default="standard",
                        help="Runtime profile (default: standard)")
    parser.add_argument("--tape-size", type=int, default=None,
                        help="Initial tape size in cells")
    parser.add_argument("--max-steps", type=int, default=None,
                        help="Stop after this many executed instructions")
    parser.add_argument("--eof", choices=["zero", "stop"], default="zero",
                        help="What happens when input runs out (default: zero)")
    parser.add_argument("--no-comments", action="store_true",
                        help="Reject { } comment blocks")
    parser.add_argument("--listing", action="store_true",
                        help="Print the compiled instruction listing and exit")
    parser.add_argument("--trace", action="store_true",
                        help="Print an instruction trace to stderr after the run")
    parser.add_argument("--verbose", "-v", action="store_true",
                        help="Debug logging to stderr")
    parser.add_argument("--version", action="version",
                        version=f"bfrun {__version__}")
    return parser


def main(argv=None, stdin=None, stdout=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    # Read program
    if args.code is not None:
        source = args.code.encode("utf-8")
    elif args.source:
        try:
            with open(args.source, "rb") as f:
                source = f.read()
        except OSError as e:
            print(f"Error reading {args.source}: {e}", file=sys.stderr)
            return 1
    else:
        parser.print_usage(sys.stderr)
        print("Error: a source file or -c CODE is required", file=sys.stderr)
        return 1

    try:
        config = load_config(
            args.profile,
            mode=args.mode,
            tape_size=args.tape_size,
            max_steps=args.max_steps,
            comments=False if args.no_comments else None,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    log.debug("source: %d bytes, mode=%s, tape=%d, profile=%s",
              len(source), config.mode, config.tape_size, args.profile)

    try:
        if args.listing:
            program = compile_source(source, comments=config.comments)
            stdout.write(program.listing().encode("utf-8") + b"\n")
            stdout.flush()
            return 0
        executor = create_executor(source, config)
    except CompileError as e:
        print(f"Compile error: {e}", file=sys.stderr)
        return 1

    interactive = args.input is None and args.input_file is None
    try:
        if args.input is not None:
            executor.feed(args.input)
        elif args.input_file:
            with open(args.input_file, "rb") as f:
                executor.feed(f.read())
    except OSError as e:
        print(f"Error reading {args.input_file}: {e}", file=sys.stderr)
        return 1

    if args.trace:
        executor.enable_trace()

    try:
        code = _drive(executor, args.eof, interactive, stdin, stdout)
    except Exception as e:
        print(f"Internal error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        return 2

    if args.trace:
        print(executor.get_trace(), file=sys.stderr)
    return code


def _drive(executor, eof_policy: str, interactive: bool, stdin, stdout) -> int:
    """Pump events until the program halts, fails, or runs out of budget."""
    budget = executor.config.max_steps
    at_eof = False

    while True:
        if budget is None:
            event = executor.run()
        else:
            event = executor.run_bounded(max(0, budget - executor.steps))

        if event.kind is EventKind.EMIT:
            stdout.write(bytes([event.value]))
            stdout.flush()
            continue

        if event.kind is EventKind.NEEDS_INPUT:
            data = stdin.readline() if interactive and not at_eof else b""
            if data:
                executor.feed(data)
                continue
            at_eof = True
            if eof_policy == "stop":
                log.info("input exhausted after %d steps, stopping", executor.steps)
                return 0
            executor.feed(0)
            continue

        if event.kind is EventKind.HALTED:
            log.debug("halted after %d steps", executor.steps)
            return 0

        if event.kind is EventKind.BUDGET_EXHAUSTED:
            print(f"Step budget exhausted after {executor.steps} steps", file=sys.stderr)
            return 3

        snap = executor.snapshot()
        print(f"Runtime error: {event} (cell pointer {snap.cell_pointer}, "
              f"next {snap.next_instruction})", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
