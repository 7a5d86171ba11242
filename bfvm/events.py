"""
Events and errors for the bfvm interpreter.

Every memory operation and every executed instruction produces an Event:
either an Ok outcome (a status or a warning) or an Err outcome (a warning
or an error, each carrying an ErrorKind). The engine hands events to an
optional sink (see debugger.EventLog) and never keeps them itself.

Exceptions (BfError and subclasses) are reserved for the steps that happen
before execution starts: lexing, jump-table pairing and memory
configuration. Once the engine is running, failures arrive as Err events.
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from typing import Optional


# ──────────────────────────────────────────────
# Error kinds
# ──────────────────────────────────────────────

class ErrorKind(enum.Enum):
    # Front end
    UNRECOGNIZED_COMMAND = "UnrecognizedCommand"
    BAD_PROGRAM = "BadProgram"
    PARSING_ERROR = "ParsingError"

    # Jump table / engine
    UNMATCHED_LEFT_BRACKET = "UnmatchedLeftBracket"
    UNMATCHED_RIGHT_BRACKET = "UnmatchedRightBracket"

    # Memory
    OUT_OF_BOUNDS = "OutOfBounds"
    POINTER_ERROR = "PointerError"
    CELL_OVERFLOW = "CellOverflow"

    # I/O and everything else
    OTHER = "Other"

    def __str__(self):
        return self.value


class Severity(enum.Enum):
    STATUS = "Status"
    WARNING = "Warning"
    ERROR = "Error"


# ──────────────────────────────────────────────
# Event
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Event:
    """Outcome of one operation.

    ok=True events are statuses or warnings that need no handling.
    ok=False events are warnings or errors; the engine treats any of them
    as fatal for the current run.
    """
    ok: bool
    severity: Severity
    description: str
    kind: Optional[ErrorKind] = None

    @classmethod
    def status(cls, description: str) -> "Event":
        return cls(True, Severity.STATUS, description)

    @classmethod
    def warning(cls, description: str) -> "Event":
        return cls(True, Severity.WARNING, description)

    @classmethod
    def err_warning(cls, kind: ErrorKind, description: str) -> "Event":
        return cls(False, Severity.WARNING, description, kind)

    @classmethod
    def error(cls, kind: ErrorKind, description: str) -> "Event":
        return cls(False, Severity.ERROR, description, kind)

    @property
    def is_ok(self) -> bool:
        return self.ok

    @property
    def is_err(self) -> bool:
        return not self.ok

    def __str__(self):
        if self.severity is Severity.ERROR:
            return f"{self.kind}: {self.description}"
        return f"{self.severity.value}: {self.description}"


# ──────────────────────────────────────────────
# Exceptions
# ──────────────────────────────────────────────

class BfError(Exception):
    """Error raised before execution starts (lexing, pairing, config)."""

    def __init__(self, kind: ErrorKind, description: str,
                 position: Optional[int] = None):
        self.kind = kind
        self.description = description
        self.position = position
        super().__init__(f"{kind}: {description}")


class MemoryOptionsError(BfError, ValueError):
    """Raised by the checked constructors when MemoryOptions are invalid."""

    def __init__(self, description: str):
        super().__init__(ErrorKind.OTHER, description)
