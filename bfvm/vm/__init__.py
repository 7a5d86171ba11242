# bfvm VM — tape memory model
#
#   cell.py     bounded integer Cell with modular wraparound
#   pointer.py  tape Pointer (wrap or grow on the right, wrap on the left)
#   memory.py   MemoryOptions + Memory, the production CommandRunner
#   base.py     CommandRunner capability interface used by the engine

from .base import CommandRunner
from .cell import Cell, CELL_MAX, CELL_MIN, DEFAULT_LOWER, DEFAULT_UPPER
from .pointer import Pointer
from .memory import Memory, MemoryOptions, DEFAULT_LENGTH
