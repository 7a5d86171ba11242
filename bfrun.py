#!/usr/bin/env python3
"""
bfrun — bfvm interpreter CLI

Usage:
    python bfrun.py <program.bf> [-v...] [-q] [--log-file run.log]
                                 [-c CELL_LOWER] [-C CELL_UPPER] [-m MEMORY]
                                 [-l] [-N] [--max-steps N]
    python bfrun.py -r '++++++++[>++++++++<-]>+.'

Verbosity (-v, -vv) goes to stderr through logging; program output ('.')
goes to stdout.
    -v    phase narration (parsing, pairing, memory, completion)
    -vv   every executed step with pointer and cell

Exit codes:
    0  program completed
    1  could not read the program file
    2  unbalanced brackets
    3  invalid memory options
    4  an instruction failed at run time
    5  --max-steps reached before the program completed

Command-line usage errors are reported by argparse (exit status 2).

Examples:
    python bfrun.py hello.bf
    python bfrun.py hello.bf -C 0xFFFF -m 30000 -l
    python bfrun.py commented.bf -N -v
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from bfvm import __version__
from bfvm.debugger import DEFAULT_CAPACITY, EventLog
from bfvm.engine import Engine, StopReason
from bfvm.events import BfError, MemoryOptionsError
from bfvm.lexer import CommentLexer, Lexer
from bfvm.vm.memory import MemoryOptions

log = logging.getLogger('bfrun')

EXIT_OK = 0
EXIT_INPUT = 1
EXIT_BRACKETS = 2
EXIT_OPTIONS = 3
EXIT_RUNTIME = 4
EXIT_TIMEOUT = 5


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    negative = value.startswith("-")
    if negative:
        value = value[1:]
    if value.startswith("0x") or value.startswith("0X"):
        result = int(value, 16)
    elif value.startswith("$"):
        result = int(value[1:], 16)
    else:
        result = int(value)
    return -result if negative else result


def _int_arg(value: str) -> int:
    try:
        return parse_int_arg(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}") from None


def _capacity_arg(value: str) -> int:
    capacity = _int_arg(value)
    if capacity < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {value!r}")
    return capacity


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bfrun",
        description="Interpreter for the eight-instruction tape language",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("input", nargs="?", help="Program file")
    source.add_argument("-r", "--raw", metavar="RAW-PROGRAM",
                        help="Program text given directly on the command line")

    parser.add_argument("-c", "--cell-lower", type=_int_arg, default=None,
                        help="Lower bound of a cell (default 0)")
    parser.add_argument("-C", "--cell-upper", type=_int_arg, default=None,
                        help="Upper bound of a cell (default 255)")
    parser.add_argument("-m", "--memory", type=_int_arg, default=None,
                        help="Initial number of cells on the tape (default 65535)")
    parser.add_argument("-l", "--variable-length", action="store_true",
                        help="Grow the tape when the pointer moves past its end "
                             "instead of wrapping to cell 0")
    parser.add_argument("-N", "--new-parser", action="store_true",
                        help="Comment-tolerant parser: '#' comments out the rest of a line")
    parser.add_argument("--max-steps", type=_int_arg, default=None,
                        help="Stop after this many executed instructions")
    parser.add_argument("--log-capacity", type=_capacity_arg, default=DEFAULT_CAPACITY,
                        help=f"Events retained in the event log (default {DEFAULT_CAPACITY})")

    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Suppress all diagnostics except errors")
    parser.add_argument("--log-file", type=str,
                        help="Write a full DEBUG log to file")
    parser.add_argument("--version", action="version",
                        version=f"bfrun {__version__}")
    return parser


def setup_logging(verbose: int = 0, quiet: bool = False, log_file: Optional[str] = None):
    """Configure logging based on arguments."""
    if quiet:
        level = logging.ERROR
    elif verbose == 0:
        level = logging.WARNING
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.DEBUG

    handlers = []

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    handlers.append(console)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        ))
        handlers.append(file_handler)

    logging.basicConfig(
        level=logging.DEBUG if log_file else level,
        handlers=handlers,
        force=True
    )


def options_from_args(args) -> MemoryOptions:
    options = MemoryOptions(variable_length=args.variable_length)
    if args.cell_lower is not None:
        options.lower_bound = args.cell_lower
    if args.cell_upper is not None:
        options.upper_bound = args.cell_upper
    if args.memory is not None:
        options.initial_length = args.memory
    return options


def run(argv=None, stdin=None, stdout=None) -> int:
    """Run the CLI and return the exit code."""
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.quiet, args.log_file)

    log.info(f"Input: {args.input if args.input else 'raw program'}")
    log.info(f"Parser: {'comment-tolerant' if args.new_parser else 'strict'}")

    # Read + tokenize
    lexer_cls = CommentLexer if args.new_parser else Lexer
    try:
        lexer = lexer_cls.from_file(args.input) if args.input else lexer_cls(args.raw)
    except BfError as e:
        log.error(str(e))
        return EXIT_INPUT
    tokens = lexer.tokenize()
    log.info(f"Parsing ok: {len(tokens)} instructions")
    log.debug(f"Parsed program: {tokens!r}")

    # Memory
    options = options_from_args(args)
    log.info(f"Memory options: {options!r}")
    try:
        memory = options.generate()
    except MemoryOptionsError as e:
        log.error(str(e))
        return EXIT_OPTIONS

    # Jump table + engine
    event_log = EventLog(capacity=args.log_capacity)
    try:
        engine = Engine(tokens, memory=memory, event_log=event_log,
                        stdin=stdin, stdout=stdout)
    except BfError as e:
        log.error(str(e))
        return EXIT_BRACKETS
    log.info("Runner created.")

    reason = engine.run(max_steps=args.max_steps)

    log.info(f"Executed {engine.steps} steps; {event_log.total_ok()} ok, "
             f"{event_log.total_err()} errors")
    if reason is StopReason.ERROR:
        log.error(f"{engine.last_event}")
        return EXIT_RUNTIME
    if reason is StopReason.TIMEOUT:
        log.warning(f"Stopped after {args.max_steps} steps at token {engine.pc}")
        return EXIT_TIMEOUT
    log.info("All OK.")
    return EXIT_OK


def main():
    sys.exit(run())


if __name__ == "__main__":
    main()
