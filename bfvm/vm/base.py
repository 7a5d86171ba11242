"""
bfvm VM — CommandRunner capability interface

The engine only talks to memory through these seven operations, so any
backend that implements them (the production Memory, or a recording
double in the tests) can execute a program.
"""

from typing import Optional, Tuple

from ..events import Event


class CommandRunner:
    """Base class for anything that can execute tape instructions.

    Every operation returns an Event. The query operations return their
    answer alongside the Event.
    """

    def increment(self) -> Event:
        raise NotImplementedError("Subclass must implement increment()")

    def decrement(self) -> Event:
        raise NotImplementedError("Subclass must implement decrement()")

    def move_left(self) -> Event:
        raise NotImplementedError("Subclass must implement move_left()")

    def move_right(self) -> Event:
        raise NotImplementedError("Subclass must implement move_right()")

    def read_out(self) -> Tuple[str, Event]:
        raise NotImplementedError("Subclass must implement read_out()")

    def write_in(self, char: str) -> Event:
        raise NotImplementedError("Subclass must implement write_in()")

    def is_zero(self) -> Tuple[bool, Event]:
        raise NotImplementedError("Subclass must implement is_zero()")

    def is_not_zero(self) -> Tuple[bool, Event]:
        zero, event = self.is_zero()
        return not zero, event

    # Introspection for hosts; backends without a tape report None.

    @property
    def pointer(self) -> Optional[int]:
        return None

    @property
    def current_value(self) -> Optional[int]:
        return None
