"""
Compile single transition rules into regex clauses.

A clause matches the focal position of one rule and carries, in named
captures, the text the replacement template will write back. Capture names
are numbered per clause (``replace_7``, ``new_state_3``) because a Python
pattern cannot reuse a group name across alternatives.
"""

import re
from dataclasses import dataclass
from typing import Sequence, Tuple

from .automaton import Neighborhood
from .codec import ALIVE, DEAD, HEAD_MARK
from .machine import RIGHT, Transition

CENTER = 4


class CompileError(RuntimeError):
    """A rule cannot be expressed as a clause."""


@dataclass(frozen=True)
class Clause:
    """Regex text for one rule, the rule it came from and its capture names."""
    pattern: str
    source: str
    captures: Tuple[str, ...]


def neighborhood_label(neighborhood: Neighborhood) -> str:
    """Render a 3x3 neighbourhood as 'top/middle/bottom', e.g. '010/010/010'."""
    cells = "".join(neighborhood)
    return "/".join(cells[i:i + 3] for i in (0, 3, 6))


def skip(stride: int) -> str:
    """Fixed-width gap between the end of one window row and the start of the next."""
    return f"(?:.{{{stride - 3}}})"


def compile_life_clause(neighborhood: Neighborhood, stride: int, index: int = 0) -> Clause:
    """
    Compile a changing 3x3 neighbourhood into a lookbehind/lookahead clause.

    The match consumes only the centre cell. The lookbehind checks the top row
    and the two cells left of the centre; the lookahead checks the cell to its
    right and the bottom row. Rows are `stride` characters apart in the buffer.

    One window cell already holding the value the centre flips to is wrapped
    in the capture ``replace_<index>``. The all-live neighbourhood has no such
    cell; for a target of 0 the lookahead then scans forward to the next dead
    cell instead.
    """
    if len(neighborhood) != 9:
        raise CompileError(f"Neighbourhood must have 9 cells, got {len(neighborhood)}")
    if stride < 3:
        raise CompileError(f"Stride {stride} is narrower than the 3-cell window")

    center = neighborhood[CENTER]
    target = ALIVE if center == DEAD else DEAD
    name = f"replace_{index}"

    cells = [re.escape(c) for c in neighborhood]
    tail = ""
    for i, c in enumerate(neighborhood):
        if i != CENTER and c == target:
            cells[i] = f"(?P<{name}>{cells[i]})"
            break
    else:
        if target != DEAD:
            raise CompileError(
                f"No neighbour of {neighborhood_label(neighborhood)} holds {target!r} to copy"
            )
        tail = f".*?(?P<{name}>{re.escape(target)})"

    top, middle, bottom = "".join(cells[0:3]), cells[3:6], "".join(cells[6:9])
    gap = skip(stride)
    pattern = (
        f"(?<={top}{gap}{middle[0]})"
        f"{middle[1]}"
        f"(?={middle[2]}{gap}{bottom}{tail})"
    )
    return Clause(pattern, neighborhood_label(neighborhood), (name,))


def _listing(values: Sequence[str], wanted: str, name: str) -> str:
    """All values in order, with `wanted` wrapped in a named capture."""
    if wanted not in values:
        raise CompileError(f"{wanted!r} is missing from listing {''.join(values)!r}")
    return "".join(
        f"(?P<{name}>{re.escape(v)})" if v == wanted else re.escape(v)
        for v in values
    )


def compile_machine_clause(
    transition: Transition,
    states: Sequence[str],
    symbols: Sequence[str],
    index: int = 0,
) -> Clause:
    """
    Compile one transition into a clause that rewrites the whole head record.

    The clause matches a head record in `transition.state` reading
    `transition.symbol`, plus the tape cell on the side the head moves to.
    That cell is captured as the new cursor. The new state and the written
    symbol are captured out of the head record's listing of all states and all
    symbols, and the written symbol is dropped on the side the head leaves.
    """
    state_name = f"new_state_{index}"
    cursor_name = f"new_cursor_{index}"
    mark = re.escape(HEAD_MARK)
    states_part = _listing(states, transition.new_state, state_name)
    current = re.escape(f"-{transition.state}:{transition.symbol}")

    if transition.direction == RIGHT:
        written_name = f"new_left_{index}"
        symbols_part = _listing(symbols, transition.new_symbol, written_name)
        pattern = (
            f"{mark}{states_part}:{symbols_part}{current}{mark}"
            f"(?P<{cursor_name}>\\w)"
        )
    else:
        written_name = f"new_right_{index}"
        symbols_part = _listing(symbols, transition.new_symbol, written_name)
        pattern = (
            f"(?P<{cursor_name}>\\w)"
            f"{mark}{states_part}:{symbols_part}{current}{mark}"
        )
    return Clause(pattern, transition.to_string(), (state_name, written_name, cursor_name))
