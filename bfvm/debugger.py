"""
bfvm — Event Log

A bounded sink for the engine's per-step Events. Only the most recent
`capacity` events are retained; events pushed out of the window are still
counted (evicted_ok / evicted_err), so the totals and all_ok() describe the
whole run, not just the retained tail.

The log is an ordinary object: construct one, pass it to the Engine (and to
anything else that wants to inspect the run).

    log = EventLog(capacity=100)
    engine = Engine(tokens, event_log=log)
    engine.run()
    print(log.total_events(), log.all_ok())
"""

from collections import deque
from typing import Deque, Iterator, List, Optional, Tuple

from .events import Event

DEFAULT_CAPACITY = 1000


class EventLog:

    def __init__(self, capacity: Optional[int] = DEFAULT_CAPACITY):
        if capacity is not None and capacity < 1:
            raise ValueError(f"EventLog capacity must be at least 1, got {capacity}")
        self.capacity = capacity
        self._events: Deque[Event] = deque(maxlen=capacity)
        self.evicted_ok = 0
        self.evicted_err = 0

    def push(self, event: Event):
        if self.capacity is not None and len(self._events) == self.capacity:
            if self._events[0].is_ok:
                self.evicted_ok += 1
            else:
                self.evicted_err += 1
        self._events.append(event)

    def clear(self):
        self._events.clear()
        self.evicted_ok = 0
        self.evicted_err = 0

    # --- Queries ---

    def last_event(self) -> Optional[Event]:
        if not self._events:
            return None
        return self._events[-1]

    def total_events(self) -> int:
        return len(self._events) + self.evicted_ok + self.evicted_err

    def total_ok(self) -> int:
        return sum(1 for e in self._events if e.is_ok) + self.evicted_ok

    def total_err(self) -> int:
        return self.total_events() - self.total_ok()

    def all_ok(self) -> bool:
        return self.total_err() == 0

    def is_ok(self) -> bool:
        """True if the last event is Ok. False for an empty log."""
        last = self.last_event()
        return last is not None and last.is_ok

    def is_err(self) -> bool:
        """True if the last event is Err. False for an empty log."""
        last = self.last_event()
        return last is not None and last.is_err

    def errors(self) -> List[Tuple[int, Event]]:
        """Retained Err events with their index in the whole run."""
        offset = self.evicted_ok + self.evicted_err
        return [(offset + i, e) for i, e in enumerate(self._events) if e.is_err]

    # --- Container protocol ---

    def __len__(self):
        return len(self._events)

    def __iter__(self) -> Iterator[Event]:
        return iter(self._events)

    def __repr__(self):
        return (f"EventLog(retained={len(self._events)}, total={self.total_events()}, "
                f"errors={self.total_err()})")
