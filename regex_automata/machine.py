"""Single-tape Turing machine definitions and a direct reference simulator."""

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Q{state}:{read}/{write}->{L|R}:Q{new_state}
TRANSITION_GRAMMAR = re.compile(r"(Q\d+):(\w)/(\w)->(L|R):(Q\d+)")
# A tape cell the head can move onto
CELL = re.compile(r"\w")

LEFT = "L"
RIGHT = "R"


class ParseError(ValueError):
    """A transition line does not follow the rule grammar."""

    def __init__(self, line: str):
        super().__init__(f"Malformed transition {line!r}: expected Q<n>:<symbol>/<symbol>-><L|R>:Q<n>")
        self.line = line


@dataclass(frozen=True)
class Transition:
    """(state, symbol) -> (new_symbol, direction, new_state)."""
    state: str
    symbol: str
    new_symbol: str
    direction: str
    new_state: str

    def to_string(self) -> str:
        return f"{self.state}:{self.symbol}/{self.new_symbol}->{self.direction}:{self.new_state}"


def parse_transition(line: str) -> Transition:
    """Parse one transition string, raising ParseError if it does not match exactly."""
    match = TRANSITION_GRAMMAR.fullmatch(line)
    if match is None:
        raise ParseError(line)
    return Transition(*match.groups())


def _first_seen(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


class MachineDefinition:
    """
    A parsed list of transitions plus the state and symbol sets it mentions.

    States and symbols are collected in first-seen order, the match side of a
    rule before its write side. The first state seen is the initial state.
    `accept_states` is optional; when given, a halted run can be classified as
    accepted or stuck.
    """

    def __init__(self, lines: Sequence[str], accept_states: Optional[Iterable[str]] = None):
        self.lines = list(lines)
        self.transitions: List[Transition] = [parse_transition(line) for line in self.lines]
        if not self.transitions:
            raise ValueError("A machine definition needs at least one transition")
        self.states = _first_seen(s for t in self.transitions for s in (t.state, t.new_state))
        self.symbols = _first_seen(s for t in self.transitions for s in (t.symbol, t.new_symbol))
        self.accept_states = frozenset(accept_states) if accept_states else frozenset()
        logger.debug(
            "Parsed %d transitions: %d states, %d symbols",
            len(self.transitions), len(self.states), len(self.symbols),
        )

    @classmethod
    def from_file(cls, filepath: str, accept_states: Optional[Iterable[str]] = None) -> "MachineDefinition":
        """Load a definition with one transition per line."""
        with open(filepath, "r") as f:
            lines = f.read().splitlines()
        return cls(lines, accept_states=accept_states)

    @property
    def initial_state(self) -> str:
        return self.states[0]

    def table(self) -> Dict[Tuple[str, str], Transition]:
        """Transition table keyed by (state, symbol); later duplicates do not override earlier ones."""
        table: Dict[Tuple[str, str], Transition] = {}
        for t in self.transitions:
            table.setdefault((t.state, t.symbol), t)
        return table

    def is_accepting(self, state: str) -> Optional[bool]:
        """True/False if accept states are declared, None if halting is ambiguous."""
        if not self.accept_states:
            return None
        return state in self.accept_states


class DirectMachine:
    """
    Turing machine run with an explicit cursor and a dictionary lookup.

    Works on the same (left, state, cursor, right) view of the tape as the
    head record, so its configurations can be compared with the regex engine's.
    """

    def __init__(self, definition: MachineDefinition, left: str, state: str, cursor: str, right: str):
        self.definition = definition
        self.table = definition.table()
        self.left = left
        self.state = state
        self.cursor = cursor
        self.right = right
        self.steps = 0

    def step(self) -> bool:
        """Apply one transition. Returns False if none applies or the head would leave the tape."""
        t = self.table.get((self.state, self.cursor))
        if t is None:
            return False
        if t.direction == RIGHT:
            if not CELL.match(self.right):
                return False
            self.left = self.left + t.new_symbol
            self.cursor, self.right = self.right[0], self.right[1:]
        else:
            if not CELL.match(self.left[-1:]):
                return False
            self.right = t.new_symbol + self.right
            self.left, self.cursor = self.left[:-1], self.left[-1]
        self.state = t.new_state
        self.steps += 1
        return True

    def run(self, max_steps: Optional[int] = None) -> int:
        while max_steps is None or self.steps < max_steps:
            if not self.step():
                break
        return self.steps

    def tape(self) -> str:
        return self.left + self.cursor + self.right
