"""
bfvm — Execution Engine

Drives the fetch/decode/execute cycle over a finished token list.

Execution model (one run_once() call):
  1. Fetch the token at pc. No token → HALTED_COMPLETE.
  2. Dispatch on the instruction. Cell and pointer instructions go to the
     memory backend; '.' writes the projected character to stdout; ','
     reads one character from stdin; '[' / ']' test the cell and, when the
     jump is taken, set pc to the counterpart bracket.
  3. pc += 1, always. After a jump this steps past the counterpart, so a
     bracket is never executed twice by one transition.
  4. Push the step's Event to the event sink, if one is attached.
  5. Continue on an Ok event. An Err event is fatal → HALTED_ERROR.

Both halted states are terminal; a new Engine is needed to run again.

Stop reasons returned by run():
  - COMPLETE: ran off the end of the program
  - ERROR:    an instruction produced an Err event
  - TIMEOUT:  max_steps executed (resumable)
  - BREAK:    reached a breakpoint position (resumable)
"""

from __future__ import annotations
import enum
import logging
import sys
from typing import Callable, Dict, Iterator, List, Optional, Sequence, Set, TextIO

from .brackets import JumpTable, build_jump_table
from .events import ErrorKind, Event
from .lexer import Instruction, Token, tokenize
from .vm.base import CommandRunner
from .vm.memory import Memory

log = logging.getLogger('bfvm.engine')


class EngineState(enum.Enum):
    RUNNING = 'RUNNING'
    HALTED_COMPLETE = 'HALTED_COMPLETE'
    HALTED_ERROR = 'HALTED_ERROR'


class StopReason(enum.Enum):
    COMPLETE = 'COMPLETE'
    ERROR = 'ERROR'
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'


class Engine:
    """Interpreter for one program run.

    The jump table is built (and validated) here, before any instruction
    runs; unbalanced brackets raise BfError from the constructor.

    Usage:
        engine = Engine(tokenize("++."), event_log=EventLog())
        reason = engine.run()
        print(engine.pointer, engine.current_value)

    Or step manually:
        while engine.run_once() is None:
            pass
    """

    def __init__(self, tokens: Sequence[Token],
                 memory: Optional[CommandRunner] = None,
                 event_log=None,
                 stdin: Optional[TextIO] = None,
                 stdout: Optional[TextIO] = None):
        self.tokens = tokens
        self.jumps: JumpTable = build_jump_table(tokens)
        self.memory = memory if memory is not None else Memory()
        self.event_log = event_log
        self.stdin = stdin if stdin is not None else sys.stdin
        self.stdout = stdout if stdout is not None else sys.stdout

        self.pc: int = 0
        self.steps: int = 0
        self.state = EngineState.RUNNING
        self.last_event: Optional[Event] = None

        self._breakpoints: Set[int] = set()
        # Position of the last BREAK, skipped once so run() can resume past it
        self._break_pc: Optional[int] = None
        self._trace = False
        self._trace_output: List[str] = []

        self._dispatch = self._build_dispatch()

    @classmethod
    def from_source(cls, source: str, comments: bool = False, **kwargs) -> "Engine":
        """Tokenize source and build an Engine for it."""
        return cls(tokenize(source, comments=comments), **kwargs)

    # ══════════════════════════════════════════════
    # Introspection
    # ══════════════════════════════════════════════

    @property
    def pointer(self) -> Optional[int]:
        return self.memory.pointer

    @property
    def current_value(self) -> Optional[int]:
        return self.memory.current_value

    @property
    def halted(self) -> bool:
        return self.state is not EngineState.RUNNING

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def run_once(self) -> Optional[StopReason]:
        """Execute one instruction. Returns a StopReason once halted, else None."""
        if self.state is EngineState.HALTED_ERROR:
            return StopReason.ERROR
        if self.state is EngineState.HALTED_COMPLETE:
            return StopReason.COMPLETE

        # Fetch
        if self.pc >= len(self.tokens):
            self.state = EngineState.HALTED_COMPLETE
            log.info(f"Program complete after {self.steps} steps")
            return StopReason.COMPLETE
        position = self.pc
        token = self.tokens[position]

        # Decode + execute
        self._break_pc = None
        event = self._dispatch[token.instruction](token)
        self.pc += 1
        self.steps += 1
        self.last_event = event

        log.debug(f"{position:5d}: {token.instruction} ptr={self.pointer} "
                  f"cell={self.current_value} {event}")
        if self._trace:
            self._trace_output.append(
                f"{position:5d}: {token.instruction} ptr={self.pointer} "
                f"cell={self.current_value}"
            )

        if self.event_log is not None:
            self.event_log.push(event)

        if event.is_err:
            self.state = EngineState.HALTED_ERROR
            log.error(f"Halted at token {position} (offset {token.span.start}): {event}")
            if self._trace:
                self._trace_output.append(f"  ERROR: {event}")
            return StopReason.ERROR
        return None

    def run(self, max_steps: Optional[int] = None) -> StopReason:
        """Run until the program halts, a breakpoint is reached, or
        max_steps instructions have executed in this call.

        BREAK and TIMEOUT leave the engine RUNNING; call run() again to
        resume. Resuming from a BREAK executes the breakpoint's own token
        before any breakpoint can stop the run again.
        """
        executed = 0
        while True:
            if max_steps is not None and executed >= max_steps:
                return StopReason.TIMEOUT
            if (self.pc in self._breakpoints and self.pc != self._break_pc
                    and not self.halted):
                self._break_pc = self.pc
                return StopReason.BREAK
            reason = self.run_once()
            if reason is not None:
                return reason
            executed += 1

    def __iter__(self) -> Iterator[Event]:
        """Yield the Event of each executed instruction until the engine halts."""
        while not self.halted:
            if self.run_once() is StopReason.COMPLETE:
                return
            yield self.last_event

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════

    def _build_dispatch(self) -> Dict[Instruction, Callable[[Token], Event]]:
        return {
            Instruction.INCREMENT:  self._op_increment,
            Instruction.DECREMENT:  self._op_decrement,
            Instruction.MOVE_LEFT:  self._op_move_left,
            Instruction.MOVE_RIGHT: self._op_move_right,
            Instruction.READ:       self._op_read,
            Instruction.WRITE:      self._op_write,
            Instruction.LOOP_OPEN:  self._op_loop_open,
            Instruction.LOOP_CLOSE: self._op_loop_close,
        }

    def _op_increment(self, token: Token) -> Event:
        return self.memory.increment()

    def _op_decrement(self, token: Token) -> Event:
        return self.memory.decrement()

    def _op_move_left(self, token: Token) -> Event:
        return self.memory.move_left()

    def _op_move_right(self, token: Token) -> Event:
        return self.memory.move_right()

    def _op_read(self, token: Token) -> Event:
        """'.' — project the cell to a character and write it to stdout."""
        char, event = self.memory.read_out()
        if event.is_err:
            return event
        try:
            self.stdout.write(char)
            self.stdout.flush()
        except (OSError, UnicodeError) as e:
            return Event.error(ErrorKind.OTHER, f"Could not write output. stdout error: {e}")
        return event

    def _op_write(self, token: Token) -> Event:
        """',' — read one character from stdin into the cell."""
        try:
            self.stdout.flush()
            char = self.stdin.read(1)
        except (OSError, UnicodeError) as e:
            return Event.error(ErrorKind.OTHER, f"Could not read user input. stdin error: {e}")
        if not char:
            return Event.error(ErrorKind.OTHER,
                               f"Could not read user input at {token.span.start}: end of input")
        return self.memory.write_in(char)

    def _op_loop_open(self, token: Token) -> Event:
        """'[' — jump to the matching ']' when the cell is zero."""
        zero, event = self.memory.is_zero()
        if event.is_err:
            return event
        counterpart = self.jumps.get_counterpart(self.pc)
        if counterpart is None:
            return Event.error(ErrorKind.UNMATCHED_LEFT_BRACKET,
                               f"Could not get matching right bracket for {token.span.start}")
        if zero:
            self.pc = counterpart
        return event

    def _op_loop_close(self, token: Token) -> Event:
        """']' — jump back to the matching '[' when the cell is not zero."""
        not_zero, event = self.memory.is_not_zero()
        if event.is_err:
            return event
        counterpart = self.jumps.get_counterpart(self.pc)
        if counterpart is None:
            return Event.error(ErrorKind.UNMATCHED_RIGHT_BRACKET,
                               f"Could not get matching left bracket for {token.span.start}")
        if not_zero:
            self.pc = counterpart
        return event

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, position: int):
        """Stop run() before executing the token at this position.

        Also applies where run() starts, including position 0 on a fresh
        engine."""
        self._breakpoints.add(position)

    def remove_breakpoint(self, position: int):
        self._breakpoints.discard(position)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Record position, instruction, pointer and cell for every step."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()
