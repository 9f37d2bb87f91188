"""Synchronous rewrite engines: one regex substitution per generation."""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np

from .automaton import Rule
from .codec import BoardCodec, HeadRecord, TapeCodec, TAPE_LENGTH, EMPTY_SYMBOL
from .machine import MachineDefinition
from .pattern import AggregatePattern, build_life_pattern, build_machine_pattern

logger = logging.getLogger(__name__)

StepCallback = Callable[[int, str], None]


@dataclass
class RunResult:
    """Outcome of running an engine until nothing changes."""
    buffer: str
    steps: int
    halted: bool  # False if max_steps was reached first


@dataclass
class MachineResult(RunResult):
    """A halted machine run. `accepted` is None when no accept states are declared."""
    state: str = ""
    accepted: Optional[bool] = None


class RewriteEngine:
    """
    Owns a flat buffer and replaces it with pattern.apply(buffer) each step.

    Every match is found against the buffer as it was at the start of the
    step and matches never overlap, so all positions update from the same
    snapshot.
    """

    def __init__(self, pattern: AggregatePattern, buffer: str):
        self.pattern = pattern
        self.buffer = buffer
        self.generation = 0
        self._history: List[str] = []

    def step(self, record_history: bool = False) -> int:
        """Advance one generation. Returns the number of replacements made."""
        if record_history:
            self._history.append(self.buffer)
        self.buffer, count = self.pattern.apply(self.buffer)
        self.generation += 1
        return count

    def run(self, steps: Optional[int], callback: Optional[StepCallback] = None,
            record_history: bool = False) -> str:
        """
        Run `steps` generations, or forever if `steps` is None.

        `callback(generation, buffer)` is called before each step and once
        more after the last one.
        """
        done = 0
        while steps is None or done < steps:
            if callback:
                callback(self.generation, self.buffer)
            self.step(record_history=record_history)
            done += 1
        if callback:
            callback(self.generation, self.buffer)
        return self.buffer

    def run_until_fixpoint(self, max_steps: Optional[int] = None,
                           callback: Optional[StepCallback] = None) -> RunResult:
        """
        Step until a generation makes no replacement or leaves the buffer unchanged.

        `RunResult.steps` counts only the steps that changed the buffer. The
        final no-op step that detects the fixpoint still advances
        `generation`, so after a halt `generation` is one more than `steps`.
        """
        steps = 0
        while max_steps is None or steps < max_steps:
            if callback:
                callback(self.generation, self.buffer)
            previous = self.buffer
            count = self.step()
            if count == 0 or self.buffer == previous:
                logger.debug("Fixpoint after %d steps (%d replacements)", steps, count)
                return RunResult(self.buffer, steps, halted=True)
            steps += 1
        logger.debug("Stopped after %d steps without reaching a fixpoint", steps)
        return RunResult(self.buffer, steps, halted=False)

    def get_history(self) -> List[str]:
        return self._history


class LifeEngine(RewriteEngine):
    """Game of Life (or any B/S rule) on a linearised board."""

    def __init__(self, codec: BoardCodec, buffer: str, rule: Optional[Rule] = None):
        super().__init__(build_life_pattern(codec.stride, rule), buffer)
        self.codec = codec
        self.rule = rule

    @classmethod
    def from_board(cls, grid: np.ndarray, rule: Optional[Rule] = None,
                   bordered: bool = True) -> "LifeEngine":
        codec = BoardCodec.for_board(grid, bordered=bordered)
        return cls(codec, codec.encode(grid), rule)

    @property
    def board(self) -> np.ndarray:
        return self.codec.decode(self.buffer)


class MachineEngine(RewriteEngine):
    """Turing machine whose head moves by rewriting its own head record."""

    def __init__(self, definition: MachineDefinition, codec: TapeCodec, buffer: str):
        super().__init__(build_machine_pattern(definition), buffer)
        self.definition = definition
        self.codec = codec

    @classmethod
    def from_input(cls, definition: MachineDefinition, content: str,
                   tape_length: int = TAPE_LENGTH, empty_symbol: str = EMPTY_SYMBOL,
                   strict: bool = False) -> "MachineEngine":
        codec = TapeCodec(definition, tape_length=tape_length, empty_symbol=empty_symbol)
        return cls(definition, codec, codec.encode(content, strict=strict))

    @property
    def head(self) -> HeadRecord:
        return self.codec.decode(self.buffer)

    def run_until_fixpoint(self, max_steps: Optional[int] = None,
                           callback: Optional[StepCallback] = None) -> MachineResult:
        """
        Run until the tape stops changing.

        A fixpoint means no transition applies. Whether that is acceptance or
        a stuck configuration is only known if the definition declares accept
        states; otherwise `accepted` is None.
        """
        result = super().run_until_fixpoint(max_steps=max_steps, callback=callback)
        state = self.head.state
        return MachineResult(
            result.buffer,
            result.steps,
            result.halted,
            state=state,
            accepted=self.definition.is_accepting(state) if result.halted else None,
        )
