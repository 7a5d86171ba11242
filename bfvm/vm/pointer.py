"""
bfvm VM — Tape Pointer

Index of the active cell. Moving right past the end either wraps to 0
(fixed-length tape) or asks the caller to grow the tape by one cell.
Moving left past 0 always wraps to the last cell, so the tape never needs
negative indices.
"""


class Pointer:

    __slots__ = ('index',)

    def __init__(self):
        self.index: int = 0

    def increment(self, tape_length: int, wrap: bool) -> bool:
        """Advance by one.

        Returns True when the tape must grow: the pointer is left at
        tape_length and becomes legal once the caller appends a cell.
        """
        self.index += 1
        if self.index >= tape_length:
            if wrap:
                self.index = 0
            else:
                self.index = tape_length
                return True
        return False

    def decrement(self, tape_length: int):
        """Step back by one, wrapping from 0 (or from past the end) to the
        last cell."""
        if tape_length <= 0:
            raise ValueError(
                f"Pointer.decrement: tape_length must be at least 1, got {tape_length}")
        if self.index <= 0 or self.index >= tape_length:
            self.index = tape_length - 1
        else:
            self.index -= 1

    def to_zero(self):
        self.index = 0

    def __int__(self):
        return self.index

    def __repr__(self):
        return f"Pointer({self.index})"
