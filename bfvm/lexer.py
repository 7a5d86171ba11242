"""
Lexer / Tokenizer for the bfvm interpreter.

Converts program text into a list of Tokens for the engine. There are two
interchangeable front ends:

    Lexer         strict: keeps the eight command characters and ignores
                  every other character.
    CommentLexer  comment-tolerant: as Lexer, but '#' starts a comment that
                  runs to the end of the line. Commands inside a comment are
                  ignored, so code can be set aside without deleting it.

Spans are byte offsets into the UTF-8 encoding of the source (end exclusive).
"""

from __future__ import annotations
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .brackets import Bracket, Side
from .events import BfError, ErrorKind


# ──────────────────────────────────────────────
# Instructions
# ──────────────────────────────────────────────

class Instruction(enum.Enum):
    INCREMENT = "+"
    DECREMENT = "-"
    MOVE_LEFT = "<"
    MOVE_RIGHT = ">"
    READ = "."
    WRITE = ","
    LOOP_OPEN = "["
    LOOP_CLOSE = "]"

    @classmethod
    def from_symbol(cls, symbol: str) -> "Instruction":
        try:
            return SYMBOLS[symbol]
        except KeyError:
            raise BfError(ErrorKind.UNRECOGNIZED_COMMAND,
                          f"{symbol} is not a valid command.") from None

    def bracket(self) -> Optional[Bracket]:
        """New unpaired Bracket for loop markers, None for everything else."""
        if self is Instruction.LOOP_OPEN:
            return Bracket(Side.LEFT, LOOP_FAMILY)
        if self is Instruction.LOOP_CLOSE:
            return Bracket(Side.RIGHT, LOOP_FAMILY)
        return None

    def __str__(self):
        return self.value


SYMBOLS: Dict[str, Instruction] = {ins.value: ins for ins in Instruction}

# Bracket family shared by '[' and ']'
LOOP_FAMILY = 1

COMMENT_CHAR = "#"


# ──────────────────────────────────────────────
# Token data classes
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Span:
    start: int
    end: int


@dataclass(frozen=True)
class Token:
    instruction: Instruction
    span: Span

    def __repr__(self):
        return f"Token({self.instruction.name}, {self.span.start}:{self.span.end})"


# ──────────────────────────────────────────────
# Lexers
# ──────────────────────────────────────────────

class Lexer:
    """Strict front end: filters the source down to command tokens."""

    comments = False

    def __init__(self, source: str):
        self.source = source
        self.tokens: List[Token] = []

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "Lexer":
        try:
            source = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BfError(ErrorKind.OTHER,
                          f"Could not open file with path: {path}\n{e}") from e
        return cls(source)

    def tokenize(self) -> List[Token]:
        self.tokens = []
        offset = 0
        in_comment = False
        for ch in self.source:
            width = len(ch.encode("utf-8"))
            if in_comment:
                if ch == "\n":
                    in_comment = False
            elif self.comments and ch == COMMENT_CHAR:
                in_comment = True
            elif ch in SYMBOLS:
                self.tokens.append(Token(SYMBOLS[ch], Span(offset, offset + width)))
            offset += width
        return self.tokens


class CommentLexer(Lexer):
    """Comment-tolerant front end: '#' comments out the rest of a line."""

    comments = True


def tokenize(source: str, comments: bool = False) -> List[Token]:
    """Tokenize source with the strict or the comment-tolerant front end."""
    lexer_cls = CommentLexer if comments else Lexer
    return lexer_cls(source).tokenize()
