"""
bfvm VM — Tape Memory

The production CommandRunner: a tape of Cells plus a Pointer, configured by
MemoryOptions.

Tape model:
  - Starts with `initial_length` cells, all at `lower_bound`.
  - Fixed-length (default): moving right off the end wraps to cell 0.
  - Variable-length: moving right off the end appends one `lower_bound`
    cell. The tape never shrinks.
  - Moving left off cell 0 always wraps to the last cell.

Cell values stay within [lower_bound, upper_bound] through modular
wraparound against the modulo limit upper_bound + 1.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from itertools import zip_longest
from typing import Callable, Dict, List, Optional, Tuple

from ..events import ErrorKind, Event, MemoryOptionsError
from .base import CommandRunner
from .cell import CELL_MAX, DEFAULT_LOWER, DEFAULT_UPPER, Cell
from .pointer import Pointer

log = logging.getLogger('bfvm.memory')

DEFAULT_LENGTH = 0xFFFF


# ──────────────────────────────────────────────
# Options
# ──────────────────────────────────────────────

@dataclass
class MemoryOptions:
    """Memory configuration.

    Valid when upper_bound > lower_bound (or upper_bound == CELL_MAX, an
    effectively unbounded cell) and initial_length >= 1.
    """
    lower_bound: int = DEFAULT_LOWER
    upper_bound: int = DEFAULT_UPPER
    initial_length: int = DEFAULT_LENGTH
    variable_length: bool = False

    @property
    def lowest(self) -> int:
        return self.lower_bound

    @property
    def highest(self) -> int:
        """Modulo limit used for wrapping: one above the largest value."""
        return self.upper_bound + 1

    def problems(self) -> List[str]:
        found = []
        if self.upper_bound <= self.lower_bound and self.upper_bound != CELL_MAX:
            found.append(f"upper_bound ({self.upper_bound}) must be greater "
                         f"than lower_bound ({self.lower_bound})")
        if self.initial_length < 1:
            found.append(f"initial_length ({self.initial_length}) must be at least 1")
        return found

    def is_valid(self) -> bool:
        return not self.problems()

    def validate(self):
        """Raise MemoryOptionsError if the options are invalid."""
        found = self.problems()
        if found:
            raise MemoryOptionsError(
                f"This set of MemoryOptions is invalid: {self!r} ({'; '.join(found)})")

    def generate(self) -> "Memory":
        """Checked constructor: raises MemoryOptionsError on bad options."""
        return Memory.with_validation(self)

    def assume_and_generate(self) -> "Memory":
        """Convenience constructor for options known to be valid.

        Invalid options here are a programmer error and raise RuntimeError.
        Hosts handling user input should call generate() instead.
        """
        try:
            self.validate()
        except MemoryOptionsError as e:
            raise RuntimeError(str(e)) from e
        return Memory(self)


# ──────────────────────────────────────────────
# Memory
# ──────────────────────────────────────────────

class Memory(CommandRunner):
    """Tape of Cells with a Pointer.

    Every instruction method returns an Event. A pointer that does not index
    the tape produces an OutOfBounds error event rather than an exception.

    Cell watches fire on any value change at a watched index:
        mem.watch(0, lambda index, old, new: print(old, new))
    """

    def __init__(self, options: Optional[MemoryOptions] = None):
        if options is None:
            options = MemoryOptions()
        options.validate()
        self.options = MemoryOptions(**vars(options))
        self.tape: List[Cell] = []
        self._pointer = Pointer()
        self._watches: Dict[int, List[Callable]] = {}
        self._init()

    @classmethod
    def with_validation(cls, options: MemoryOptions) -> "Memory":
        """Checked constructor: raises MemoryOptionsError on bad options."""
        options.validate()
        return cls(options)

    def _init(self):
        lowest = self.options.lowest
        self.tape = [Cell(lowest) for _ in range(self.options.initial_length)]
        self._pointer.to_zero()
        log.debug(f"Memory initialised: {len(self.tape)} cells, "
                  f"bounds [{self.options.lower_bound}, {self.options.upper_bound}], "
                  f"variable_length={self.options.variable_length}")

    # --- Introspection ---

    @property
    def pointer(self) -> int:
        return self._pointer.index

    @property
    def tape_length(self) -> int:
        return len(self.tape)

    def get(self) -> Optional[Cell]:
        """Copy of the cell under the pointer, or None if out of range."""
        cell = self._current()
        if cell is None:
            return None
        return Cell(cell.value)

    @property
    def current_value(self) -> Optional[int]:
        cell = self._current()
        return None if cell is None else cell.value

    def cells(self) -> List[int]:
        return [cell.value for cell in self.tape]

    def _current(self) -> Optional[Cell]:
        index = self._pointer.index
        if 0 <= index < len(self.tape):
            return self.tape[index]
        return None

    def _out_of_bounds(self) -> Event:
        return Event.error(
            ErrorKind.OUT_OF_BOUNDS,
            f"Could not get cell with pointer {self._pointer.index} "
            f"(tape length {len(self.tape)})")

    def _notify(self, index: int, old: int, new: int):
        if old != new and index in self._watches:
            for cb in self._watches[index]:
                cb(index, old, new)

    # --- CommandRunner ---

    def increment(self) -> Event:
        cell = self._current()
        if cell is None:
            return self._out_of_bounds()
        old = cell.value
        cell.increment(self.options.lowest, self.options.highest)
        self._notify(self.pointer, old, cell.value)
        return Event.status("Increment successful")

    def decrement(self) -> Event:
        cell = self._current()
        if cell is None:
            return self._out_of_bounds()
        old = cell.value
        cell.decrement(self.options.lowest, self.options.highest)
        self._notify(self.pointer, old, cell.value)
        return Event.status("Decrement successful")

    def move_right(self) -> Event:
        grow = self._pointer.increment(len(self.tape), not self.options.variable_length)
        if grow:
            self.tape.append(Cell(self.options.lowest))
            log.debug(f"Tape grown to {len(self.tape)} cells")
        return Event.status("Successfully moved pointer to the next cell.")

    def move_left(self) -> Event:
        self._pointer.decrement(len(self.tape))
        return Event.status("Successfully moved pointer to the previous cell.")

    def read_out(self) -> Tuple[str, Event]:
        cell = self._current()
        if cell is None:
            return "", self._out_of_bounds()
        return cell.to_char()

    def write_in(self, char: str) -> Event:
        cell = self._current()
        if cell is None:
            return self._out_of_bounds()
        old = cell.value
        event = cell.from_char(char, self.options.lowest, self.options.highest)
        self._notify(self.pointer, old, cell.value)
        return event

    def is_zero(self) -> Tuple[bool, Event]:
        cell = self._current()
        if cell is None:
            return False, self._out_of_bounds()
        return cell.value == 0, Event.status("Check memory cell for zero: OK")

    # --- Whole-tape operations ---

    def flatten(self):
        """Set every cell back to lower_bound. The pointer does not move."""
        for cell in self.tape:
            cell.flatten(self.options.lowest)

    def reset(self):
        """Restore the initial tape length, values and pointer."""
        self._init()

    # --- Cell watches ---

    def watch(self, index: int, callback: Callable):
        """callback(index, old_value, new_value) runs whenever an instruction
        changes the cell at index. Moving the pointer or growing the tape
        does not count as a change."""
        self._watches.setdefault(index, []).append(callback)

    def unwatch(self, index: int, callback: Optional[Callable] = None) -> bool:
        """Drop one callback from index, or all of them when callback is None.
        Returns True if anything was removed."""
        callbacks = self._watches.get(index)
        if not callbacks:
            return False
        kept = [] if callback is None else [cb for cb in callbacks if cb != callback]
        if kept:
            self._watches[index] = kept
        else:
            del self._watches[index]
        return len(kept) != len(callbacks)

    # --- Snapshots ---

    def snapshot(self, start: int = 0, end: Optional[int] = None) -> Tuple[int, ...]:
        """Capture cell values in [start, end) for later diffing."""
        return tuple(cell.value for cell in self.tape[start:end])

    @staticmethod
    def diff(before: Tuple[int, ...], after: Tuple[int, ...],
             base: int = 0) -> Dict[int, Tuple[Optional[int], Optional[int]]]:
        """Changed cells between two snapshots as {index: (old, new)}.

        A variable-length tape can grow between snapshots; cells that exist
        in only one of them are reported with None on the missing side.
        """
        return {
            base + i: (old, new)
            for i, (old, new) in enumerate(zip_longest(before, after))
            if old != new
        }

    # --- Dump ---

    def hexdump(self, start: int = 0, length: int = 64) -> str:
        """Dump cell values, 16 per line, with a printable-ASCII column."""
        lines = []
        end = min(start + length, len(self.tape))
        for row in range(start, end, 16):
            values = [cell.value for cell in self.tape[row:min(row + 16, end)]]
            hex_cells = ' '.join(f'{v:02X}' for v in values)
            ascii_cells = ''.join(chr(v) if 0x20 <= v < 0x7F else '.' for v in values)
            lines.append(f'{row:04X}  {hex_cells}  {ascii_cells}')
        return '\n'.join(lines)

    def __repr__(self):
        return (f"Memory(pointer={self.pointer}, length={len(self.tape)}, "
                f"options={self.options!r})")
