"""Outer-totalistic rules and the array-based reference automaton."""

import numpy as np
from dataclasses import dataclass
from typing import Iterator, List, Optional, Set, Tuple
from scipy import ndimage

Neighborhood = Tuple[str, ...]

# Moore neighbourhood, centre excluded
NEIGHBOR_KERNEL = np.array([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=np.int32)


@dataclass
class Rule:
    """Outer-totalistic rule in Birth/Survival notation (e.g., B3/S23 for Game of Life)."""
    birth: Set[int]  # Neighbor counts that cause birth
    survival: Set[int]  # Neighbor counts that allow survival

    @classmethod
    def from_string(cls, rule_str: str) -> "Rule":
        """Parse rule from string like 'B3/S23' or 'B36/S125'."""
        rule_str = rule_str.upper().replace(" ", "")
        birth_part = ""
        survival_part = ""

        if "/" in rule_str:
            parts = rule_str.split("/")
            for part in parts:
                if part.startswith("B"):
                    birth_part = part[1:]
                elif part.startswith("S"):
                    survival_part = part[1:]
                else:
                    raise ValueError(f"Unrecognised rule component {part!r} in {rule_str!r}")
        else:
            # Handle format like "B3S23"
            if "S" in rule_str:
                idx = rule_str.index("S")
                birth_part = rule_str[1:idx] if rule_str.startswith("B") else ""
                survival_part = rule_str[idx+1:]
            elif rule_str.startswith("B"):
                birth_part = rule_str[1:]
            else:
                raise ValueError(f"Unrecognised rule {rule_str!r}")

        for c in birth_part + survival_part:
            if c not in "012345678":
                raise ValueError(f"Invalid neighbour count {c!r} in {rule_str!r}")

        birth = set(int(c) for c in birth_part)
        survival = set(int(c) for c in survival_part)

        return cls(birth=birth, survival=survival)

    def to_string(self) -> str:
        """Convert to standard notation like 'B3/S23'."""
        b_str = "".join(str(i) for i in sorted(self.birth))
        s_str = "".join(str(i) for i in sorted(self.survival))
        return f"B{b_str}/S{s_str}"

    def changes(self, alive: bool, neighbors: int) -> bool:
        """Whether a cell in this state with this many live neighbours flips."""
        if alive:
            return neighbors not in self.survival
        return neighbors in self.birth

    def __hash__(self):
        return hash((frozenset(self.birth), frozenset(self.survival)))

    def __eq__(self, other):
        if not isinstance(other, Rule):
            return False
        return self.birth == other.birth and self.survival == other.survival


def changing_neighborhoods(rule: Optional[Rule] = None) -> Iterator[Neighborhood]:
    """
    Yield every 3x3 neighbourhood whose centre cell changes under `rule`.

    Neighbourhoods are 9-tuples of "0"/"1" in row-major order, index 4 being
    the centre, produced in increasing order of their 9-bit value.
    """
    rule = rule or GAME_OF_LIFE
    for i in range(512):
        cells = tuple(format(i, "09b"))
        alive = cells[4] == "1"
        neighbors = cells.count("1") - (1 if alive else 0)
        if rule.changes(alive, neighbors):
            yield cells


class ReferenceAutomaton:
    """
    Straightforward array implementation of a 2D outer-totalistic automaton.

    Cells outside the grid count as dead. Used as the baseline the regex
    engine is checked against.
    """

    def __init__(self, grid: np.ndarray, rule: Optional[Rule] = None):
        self.grid = np.asarray(grid, dtype=np.uint8).copy()
        self.height, self.width = self.grid.shape
        self.rule = rule or GAME_OF_LIFE
        self.generation = 0
        self._history: List[np.ndarray] = []

    def count_neighbors(self) -> np.ndarray:
        """Count live neighbours for each cell, treating the border as dead."""
        return ndimage.convolve(
            self.grid.astype(np.int32), NEIGHBOR_KERNEL, mode="constant", cval=0
        )

    def step(self, record_history: bool = False):
        """Advance simulation by one generation."""
        if record_history:
            self._history.append(self.grid.copy())

        neighbors = self.count_neighbors()

        new_grid = np.zeros_like(self.grid)

        # Birth: dead cells with neighbor count in birth set become alive
        for n in self.rule.birth:
            new_grid |= ((self.grid == 0) & (neighbors == n)).astype(np.uint8)

        # Survival: live cells with neighbor count in survival set stay alive
        for n in self.rule.survival:
            new_grid |= ((self.grid == 1) & (neighbors == n)).astype(np.uint8)

        self.grid = new_grid
        self.generation += 1

    def run(self, steps: int, record_history: bool = False) -> List[np.ndarray]:
        """Run simulation for multiple steps."""
        for _ in range(steps):
            self.step(record_history=record_history)
        if record_history:
            self._history.append(self.grid.copy())
        return self._history


def naive_step(grid: np.ndarray, rule: Optional[Rule] = None) -> np.ndarray:
    """One generation computed cell by cell with explicit neighbour loops."""
    rule = rule or GAME_OF_LIFE
    h, w = grid.shape
    new_grid = np.zeros_like(grid)
    for y in range(h):
        for x in range(w):
            count = 0
            for ny in range(y - 1, y + 2):
                for nx in range(x - 1, x + 2):
                    if (ny, nx) == (y, x) or not (0 <= ny < h and 0 <= nx < w):
                        continue
                    count += int(grid[ny, nx])
            alive = bool(grid[y, x])
            new_grid[y, x] = int(alive != rule.changes(alive, count))
    return new_grid


# Some well-known rules
GAME_OF_LIFE = Rule.from_string("B3/S23")
HIGHLIFE = Rule.from_string("B36/S23")
SEEDS = Rule.from_string("B2/S")
