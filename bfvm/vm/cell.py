"""
bfvm VM — Memory Cell

A Cell stores one bounded signed integer. Bounds are not stored on the
cell: the owning Memory passes them in on every mutation as
(lowest, highest) where `highest` is the modulo limit, one above the
largest legal value. All normalisation funnels through Cell.wrap().

CELL_MAX / CELL_MIN describe the numeric range of the cell type (a signed
128-bit integer). An upper bound of CELL_MAX means "effectively unbounded".
"""

from typing import Tuple

from ..events import Event

CELL_MAX = 2 ** 127 - 1
CELL_MIN = -(2 ** 127)

DEFAULT_LOWER = 0x00
DEFAULT_UPPER = 0xFF

# Largest Unicode scalar value
MAX_CODE_POINT = 0x10FFFF
REPLACEMENT_CHAR = "�"


class Cell:
    """One memory slot on the tape."""

    __slots__ = ('_value',)

    def __init__(self, value: int = DEFAULT_LOWER):
        self._value = value

    @property
    def value(self) -> int:
        return self._value

    # --- Bound checks ---

    def at_lowest(self, lowest: int) -> bool:
        return self._value == lowest

    def below_lowest(self, lowest: int) -> bool:
        return self._value < lowest

    def at_highest(self, highest: int) -> bool:
        return self._value == highest

    def above_highest(self, highest: int) -> bool:
        return self._value > highest

    # --- Mutation ---

    def wrap(self, lowest: int, highest: int):
        """Fold the value back into [lowest, highest) if it left the range."""
        if self.below_lowest(lowest) or self._value >= highest:
            self._value = lowest + (self._value - lowest) % (highest - lowest)

    def increment(self, lowest: int, highest: int) -> Event:
        if self._value == CELL_MAX:
            self._value = lowest
        else:
            self._value += 1
        self.wrap(lowest, highest)
        return Event.status("Increment memory cell: OK")

    def decrement(self, lowest: int, highest: int) -> Event:
        if self.below_lowest(lowest):
            self.wrap(lowest, highest)
        elif self.at_lowest(lowest):
            self._value = highest - 1
        else:
            self._value -= 1
        return Event.status("Decrement memory cell: OK")

    def flatten(self, lowest: int):
        self._value = lowest

    # --- Character projection ---

    def to_char(self) -> Tuple[str, Event]:
        """Project the value to one character.

        Values that are not a Unicode scalar (negative, surrogate, or above
        U+10FFFF) come out as U+FFFD.
        """
        value = self._value
        if 0 <= value <= MAX_CODE_POINT and not 0xD800 <= value <= 0xDFFF:
            return chr(value), Event.status("Output char: OK")
        return REPLACEMENT_CHAR, Event.status("Output char: OK")

    def from_char(self, char: str, lowest: int, highest: int) -> Event:
        self._value = ord(char)
        self.wrap(lowest, highest)
        return Event.status("Input char: OK")

    # --- Dunder helpers ---

    def __int__(self):
        return self._value

    def __eq__(self, other):
        if isinstance(other, Cell):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __hash__(self):
        return hash(self._value)

    def __repr__(self):
        return f"Cell({self._value})"

    def __str__(self):
        return str(self._value)
