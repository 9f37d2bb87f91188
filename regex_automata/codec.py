"""
Conversion between boards/tapes and the flat string buffers the regex runs on.

A board is a 2D numpy array of 0/1. In the buffer each cell is the character
"0" or "1" and rows follow each other in row-major order. With `bordered=True`
(the default) every row is written as ``0 <cells> 0 |`` and an all-dead row is
added above and below, so that a 3x3 window around any real cell only sees
real cells or dead padding. The ``|`` separator never matches a cell, which
keeps the padding from ever changing.

A tape holds exactly one head record::

    #<all states>:<all symbols>-<state>:<cursor>#

The position of the record in the buffer is the head position, and the
character under the head is the cursor.
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import numpy as np

from .machine import MachineDefinition

ALIVE = "1"
DEAD = "0"
BOARD_ALPHABET = frozenset(DEAD + ALIVE)
ROW_SEPARATOR = "|"

TAPE_LENGTH = 100
EMPTY_SYMBOL = "_"
HEAD_MARK = "#"


class AlphabetError(ValueError):
    """Input contains symbols outside the expected alphabet, or is malformed."""


def read_board_lines(filepath: str) -> List[str]:
    """Read a board file as stripped, non-empty lines."""
    text = Path(filepath).read_text()
    return [line.strip() for line in text.splitlines() if line.strip()]


def board_from_lines(lines: Sequence[str]) -> np.ndarray:
    """Validate rows of 0/1 characters and turn them into a uint8 array."""
    if not lines:
        raise AlphabetError("Board is empty")
    width = len(lines[0])
    for y, line in enumerate(lines):
        if len(line) != width:
            raise AlphabetError(f"Row {y} has length {len(line)}, expected {width}")
        unknown = set(line) - BOARD_ALPHABET
        if unknown:
            raise AlphabetError(f"Row {y} contains unknown symbols {''.join(sorted(unknown))!r}")
    return np.array([[int(c) for c in line] for line in lines], dtype=np.uint8)


def load_board(filepath: str) -> np.ndarray:
    """Load an input pattern of 0's and 1's to use as an initial board."""
    return board_from_lines(read_board_lines(filepath))


class BoardCodec:
    """Linearise a WxH board into a buffer and back, tracking the stride."""

    def __init__(self, width: int, height: int, bordered: bool = True):
        if width < 1 or height < 1:
            raise ValueError(f"Board must be at least 1x1, got {width}x{height}")
        self.width = width
        self.height = height
        self.bordered = bordered

    @classmethod
    def for_board(cls, grid: np.ndarray, bordered: bool = True) -> "BoardCodec":
        h, w = grid.shape
        return cls(w, h, bordered=bordered)

    @property
    def stride(self) -> int:
        """Distance in the buffer between vertically adjacent cells."""
        return self.width + 3 if self.bordered else self.width

    @property
    def buffer_length(self) -> int:
        rows = self.height + 2 if self.bordered else self.height
        return rows * self.stride

    def encode(self, grid: np.ndarray) -> str:
        grid = np.asarray(grid)
        if grid.shape != (self.height, self.width):
            raise ValueError(f"Expected a {self.height}x{self.width} board, got {grid.shape}")
        rows = ["".join(ALIVE if cell else DEAD for cell in row) for row in grid]
        if not self.bordered:
            return "".join(rows)
        padding = DEAD * (self.width + 2) + ROW_SEPARATOR
        body = "".join(DEAD + row + DEAD + ROW_SEPARATOR for row in rows)
        return padding + body + padding

    def decode(self, buffer: str) -> np.ndarray:
        if len(buffer) != self.buffer_length:
            raise ValueError(f"Buffer has length {len(buffer)}, expected {self.buffer_length}")
        rows = [buffer[i:i + self.stride] for i in range(0, len(buffer), self.stride)]
        if self.bordered:
            rows = [row[1:self.width + 1] for row in rows[1:-1]]
        return np.array([[int(c == ALIVE) for c in row] for row in rows], dtype=np.uint8)


@dataclass(frozen=True)
class HeadRecord:
    """The tape split around the machine head."""
    left: str
    state: str
    cursor: str
    right: str

    @property
    def position(self) -> int:
        """Index of the cell under the head on the plain tape."""
        return len(self.left)

    @property
    def tape(self) -> str:
        """The tape contents with the head removed."""
        return self.left + self.cursor + self.right


class TapeCodec:
    """Build tape buffers for a machine and read the head record back out."""

    def __init__(
        self,
        definition: MachineDefinition,
        tape_length: int = TAPE_LENGTH,
        empty_symbol: str = EMPTY_SYMBOL,
    ):
        self.definition = definition
        self.tape_length = tape_length
        self.empty_symbol = empty_symbol
        # Fixed part of every head record, it lists all states and all symbols
        self.listing = "".join(definition.states) + ":" + "".join(definition.symbols)
        self._head = re.compile(
            re.escape(HEAD_MARK + self.listing + "-") + r"(Q\d+):(.)" + re.escape(HEAD_MARK)
        )

    def validate(self, content: str):
        """Reject symbols that no transition mentions (other than the empty symbol)."""
        known = set(self.definition.symbols) | {self.empty_symbol}
        unknown = set(content) - known
        if unknown:
            raise AlphabetError(f"Tape input contains unknown symbols {''.join(sorted(unknown))!r}")

    def encode(self, content: str, state: Optional[str] = None, strict: bool = False) -> str:
        """
        Place `content` on a blank tape with the head on its first symbol.

        The tape is padded with `tape_length // 2` empty symbols on each side.
        """
        if strict:
            self.validate(content)
        padding = self.empty_symbol * (self.tape_length // 2)
        cursor, rest = (content[0], content[1:]) if content else (self.empty_symbol, "")
        head = HeadRecord(padding, state or self.definition.initial_state, cursor, rest + padding)
        return self.encode_head(head)

    def encode_head(self, head: HeadRecord) -> str:
        return (
            head.left + HEAD_MARK + self.listing + "-" + head.state + ":" + head.cursor
            + HEAD_MARK + head.right
        )

    def decode(self, buffer: str) -> HeadRecord:
        matches = list(self._head.finditer(buffer))
        if len(matches) != 1:
            raise AlphabetError(f"Expected exactly one head record, found {len(matches)}")
        m = matches[0]
        return HeadRecord(buffer[:m.start()], m.group(1), m.group(2), buffer[m.end():])
