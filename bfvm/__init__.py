"""
bfvm — bounded-tape interpreter for the eight-instruction language
===================================================================
Runs programs made of the eight commands + - < > . , [ ] on a tape of
bounded integer cells, emitting one structured Event per instruction.

Architecture:
    ┌──────────┐    ┌──────────┐    ┌────────────┐    ┌──────────┐    ┌──────────┐
    │  Source  │───>│  Lexer   │───>│ Jump Table │───>│  Engine  │───>│ EventLog │
    │  (text)  │    │ (tokens) │    │ (pairing)  │    │ (steps)  │    │ (events) │
    └──────────┘    └──────────┘    └────────────┘    └────┬─────┘    └──────────┘
                                                           │
                                                      ┌────┴─────┐
                                                      │  Memory  │
                                                      │  (tape)  │
                                                      └──────────┘

    - lexer.py:     strict and comment-tolerant front ends → Token list
    - brackets.py:  bracket pairing, validated before execution starts
    - engine.py:    fetch/decode/execute, one Event per step
    - vm/:          Cell, Pointer, MemoryOptions, Memory (CommandRunner)
    - debugger.py:  bounded EventLog sink
    - events.py:    Event, ErrorKind, BfError
"""

__version__ = "0.3.0"

from typing import Optional, TextIO

from .events import BfError, ErrorKind, Event, MemoryOptionsError, Severity
from .lexer import CommentLexer, Instruction, Lexer, Span, Token, tokenize
from .brackets import Bracket, JumpTable, Side, build_jump_table
from .vm import Cell, CommandRunner, Memory, MemoryOptions, Pointer
from .debugger import EventLog
from .engine import Engine, EngineState, StopReason


def run_source(source: str, *, options: Optional[MemoryOptions] = None,
               comments: bool = False, stdin: Optional[TextIO] = None,
               stdout: Optional[TextIO] = None,
               event_log: Optional[EventLog] = None,
               max_steps: Optional[int] = None) -> Engine:
    """Run a program from source text and return the finished Engine.

    Full pipeline: Lexer -> JumpTable -> Memory -> Engine.run().

    Args:
        source: Program text.
        options: Memory configuration (default MemoryOptions()).
        comments: Use the comment-tolerant front end ('#' comments).
        stdin / stdout: Streams for ',' and '.' (default sys.stdin/stdout).
        event_log: Optional sink receiving every step's Event.
        max_steps: Stop with StopReason.TIMEOUT after this many steps.

    Raises:
        BfError: unbalanced brackets (before anything runs).
        MemoryOptionsError: invalid options.

    Returns:
        The Engine, halted or timed out; inspect .state, .last_event,
        .pointer and .current_value.
    """
    memory = (options or MemoryOptions()).generate()
    engine = Engine(tokenize(source, comments=comments), memory=memory,
                    event_log=event_log, stdin=stdin, stdout=stdout)
    engine.run(max_steps=max_steps)
    return engine
