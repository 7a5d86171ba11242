"""
Tests for the bounded event log (bfvm.debugger).
"""

import pytest

from bfvm.debugger import EventLog
from bfvm.events import ErrorKind, Event, Severity


def _ok(n=0):
    return Event.status(f"step {n}: OK")


def _err(n=0):
    return Event.error(ErrorKind.OTHER, f"step {n} failed")


class TestEvents:
    def test_constructors(self):
        assert _ok().severity is Severity.STATUS
        assert Event.warning("careful").is_ok
        warn = Event.err_warning(ErrorKind.CELL_OVERFLOW, "overflow")
        assert warn.is_err and warn.severity is Severity.WARNING
        assert _err().kind is ErrorKind.OTHER

    def test_str(self):
        assert str(Event.status("fine")) == "Status: fine"
        assert str(Event.warning("hmm")) == "Warning: hmm"
        assert str(Event.error(ErrorKind.OUT_OF_BOUNDS, "bad")) == "OutOfBounds: bad"


class TestEventLog:
    def test_empty_log(self):
        log = EventLog()
        assert log.last_event() is None
        assert log.total_events() == 0
        assert log.all_ok()
        assert not log.is_ok()
        assert not log.is_err()
        assert log.errors() == []

    def test_rejects_zero_capacity(self):
        with pytest.raises(ValueError):
            EventLog(capacity=0)

    def test_push_and_query(self):
        log = EventLog()
        log.push(_ok(0))
        log.push(_err(1))
        assert len(log) == 2
        assert log.total_ok() == 1
        assert log.total_err() == 1
        assert log.is_err()
        assert not log.all_ok()
        assert log.errors() == [(1, log.last_event())]

    def test_eviction_keeps_counts(self):
        log = EventLog(capacity=3)
        log.push(_err(0))
        for n in range(1, 6):
            log.push(_ok(n))
        assert len(log) == 3
        assert log.total_events() == 6
        assert log.evicted_err == 1
        assert log.evicted_ok == 2
        assert not log.all_ok()
        assert log.errors() == []
        assert [e.description for e in log] == ["step 3: OK", "step 4: OK", "step 5: OK"]

    def test_error_index_is_absolute(self):
        log = EventLog(capacity=2)
        for n in range(4):
            log.push(_ok(n))
        log.push(_err(4))
        assert log.errors()[0][0] == 4

    def test_unbounded(self):
        log = EventLog(capacity=None)
        for n in range(5000):
            log.push(_ok(n))
        assert len(log) == 5000
        assert log.evicted_ok == 0

    def test_clear(self):
        log = EventLog(capacity=1)
        log.push(_err())
        log.push(_ok())
        log.clear()
        assert log.total_events() == 0
        assert log.all_ok()

    def test_repr(self):
        log = EventLog()
        log.push(_ok())
        assert repr(log) == "EventLog(retained=1, total=1, errors=0)"
