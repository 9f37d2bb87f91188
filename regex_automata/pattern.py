"""Merge compiled clauses into one alternation and one replacement template."""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .automaton import GAME_OF_LIFE, Rule, changing_neighborhoods
from .codec import HEAD_MARK
from .compiler import Clause, compile_life_clause, compile_machine_clause
from .machine import MachineDefinition

logger = logging.getLogger(__name__)

NEVER_MATCHES = "(?!)"


def group_reference(name: str) -> str:
    return f"\\g<{name}>"


def escape_template(text: str) -> str:
    """Make literal text safe inside a replacement template."""
    return text.replace("\\", "\\\\")


@dataclass
class AggregatePattern:
    """
    All clauses of a rule set joined by alternation, with a shared template.

    Clauses are tried in order at each position, so when two clauses could
    match the same place the first listed one wins. With no clauses the
    pattern never matches and every buffer is a fixpoint.
    """
    clauses: List[Clause]
    template: str
    regex: "re.Pattern" = field(init=False, repr=False)

    def __post_init__(self):
        self.regex = re.compile(self.source or NEVER_MATCHES)

    @property
    def source(self) -> str:
        return "|".join(f"(?:{clause.pattern})" for clause in self.clauses)

    def apply(self, buffer: str) -> Tuple[str, int]:
        """
        Rewrite every non-overlapping match in one left-to-right pass.

        Assertions read the buffer as it was before the call; the result is a
        new string. Returns (new_buffer, number_of_replacements).
        """
        return self.regex.subn(self.template, buffer)

    def __len__(self):
        return len(self.clauses)


def build_life_pattern(stride: int, rule: Optional[Rule] = None) -> AggregatePattern:
    """One clause per neighbourhood whose centre changes under `rule`."""
    rule = rule or GAME_OF_LIFE
    clauses = [
        compile_life_clause(neighborhood, stride, index=i)
        for i, neighborhood in enumerate(changing_neighborhoods(rule))
    ]
    template = "".join(group_reference(c.captures[0]) for c in clauses)
    logger.debug("Compiled %d clauses for %s at stride %d", len(clauses), rule.to_string(), stride)
    return AggregatePattern(clauses, template)


def machine_template(definition: MachineDefinition, clauses: List[Clause]) -> str:
    """
    Rebuild a full head record from whichever clause matched.

    ``new_left`` + ``#<states>:<symbols>-`` + ``new_state`` + ``:`` +
    ``new_cursor`` + ``#`` + ``new_right``. Groups of clauses that did not
    match expand to nothing.
    """
    def refs(prefix: str) -> str:
        return "".join(
            group_reference(name)
            for clause in clauses
            for name in clause.captures
            if name.startswith(prefix)
        )

    listing = "".join(definition.states) + ":" + "".join(definition.symbols)
    return (
        refs("new_left_")
        + escape_template(HEAD_MARK + listing + "-")
        + refs("new_state_")
        + ":"
        + refs("new_cursor_")
        + escape_template(HEAD_MARK)
        + refs("new_right_")
    )


def build_machine_pattern(definition: MachineDefinition) -> AggregatePattern:
    """One clause per transition, in definition order."""
    clauses = [
        compile_machine_clause(t, definition.states, definition.symbols, index=i)
        for i, t in enumerate(definition.transitions)
    ]
    logger.debug("Compiled %d machine clauses", len(clauses))
    return AggregatePattern(clauses, machine_template(definition, clauses))
