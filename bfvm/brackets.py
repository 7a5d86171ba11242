"""
Jump table construction for loop brackets.

Each loop marker in the token list becomes a Bracket keyed by its token
position. Pairing replays the brackets in position order with a stack,
classic balanced-parenthesis style: a left bracket pushes, a right bracket
must match the family (kind) on top of the stack. Counterparts are stored as
token positions, so a JumpTable is a plain dict of small records that copies
cleanly.

Several bracket families can share one table; only the loop family ('[' with
']') is produced by the lexers today.
"""

from __future__ import annotations
import copy
import enum
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from .events import BfError, ErrorKind

log = logging.getLogger('bfvm.brackets')


class Side(enum.Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass
class Bracket:
    side: Side
    kind: int
    counterpart: Optional[int] = None

    @property
    def is_left(self) -> bool:
        return self.side is Side.LEFT

    @property
    def is_right(self) -> bool:
        return self.side is Side.RIGHT

    def set_counterpart(self, position: int) -> "Bracket":
        self.counterpart = position
        return self


class JumpTable:
    """Mapping of token position -> Bracket."""

    def __init__(self):
        self._map: Dict[int, Bracket] = {}

    def insert(self, bracket: Bracket, position: int) -> bool:
        """Register a bracket. Returns False and changes nothing if the
        position is already taken."""
        if position in self._map:
            return False
        self._map[position] = bracket
        return True

    def _sorted(self) -> List[Tuple[int, Bracket]]:
        return sorted(self._map.items())

    def _replay(self, brackets: List[Tuple[int, Bracket]], on_match=None):
        """Stack replay shared by is_balanced() and pair_up()."""
        stack: List[Tuple[int, Bracket]] = []
        for position, bracket in brackets:
            if bracket.is_left:
                stack.append((position, bracket))
                continue
            if not stack or stack[-1][1].kind != bracket.kind:
                raise BfError(ErrorKind.UNMATCHED_RIGHT_BRACKET,
                              f"Unmatched right bracket at {position}",
                              position)
            left_position, _ = stack.pop()
            if on_match is not None:
                on_match(left_position, position)
        if stack:
            # Report the outermost unmatched left bracket
            position = stack[0][0]
            raise BfError(ErrorKind.UNMATCHED_LEFT_BRACKET,
                          f"Unmatched left bracket at {position}",
                          position)

    def is_balanced(self) -> None:
        """Raise BfError if the brackets cannot all be paired. No mutation."""
        self._replay(self._sorted())

    def pair_up(self) -> None:
        """Write counterparts into both sides of every pair.

        Works on a copy and only replaces the live table when every bracket
        has been matched; on failure the table is left untouched.
        """
        working = copy.deepcopy(self._map)

        def link(left: int, right: int):
            working[left].set_counterpart(right)
            working[right].set_counterpart(left)

        self._replay(sorted(working.items()), on_match=link)
        self._map = working

    def get_counterpart(self, position: int) -> Optional[int]:
        bracket = self._map.get(position)
        if bracket is None:
            return None
        return bracket.counterpart

    def positions(self) -> List[int]:
        return sorted(self._map)

    def __getitem__(self, position: int) -> Bracket:
        return self._map[position]

    def __contains__(self, position: int) -> bool:
        return position in self._map

    def __len__(self):
        return len(self._map)

    def __repr__(self):
        pairs = ", ".join(f"{p}->{b.counterpart}" for p, b in self._sorted())
        return f"JumpTable({pairs})"


def build_jump_table(tokens: Iterable) -> JumpTable:
    """Populate a JumpTable from a token sequence and pair it up.

    Raises BfError naming the offending command and its token position when
    the brackets are unbalanced.
    """
    tokens = list(tokens)
    table = JumpTable()
    for position, token in enumerate(tokens):
        bracket = token.instruction.bracket()
        if bracket is not None:
            table.insert(bracket, position)
    log.debug(f"Populated jump table with {len(table)} brackets")

    try:
        table.pair_up()
    except BfError as e:
        command = tokens[e.position].instruction
        raise BfError(e.kind, f"Unmatched {command} at {e.position}",
                      e.position) from e

    log.info(f"Jump table paired: {len(table) // 2} loops")
    return table
