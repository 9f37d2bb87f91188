"""Regex Automata - Game of Life and Turing machines run as one regex substitution per step."""

from .automaton import GAME_OF_LIFE, ReferenceAutomaton, Rule, changing_neighborhoods
from .codec import AlphabetError, BoardCodec, TapeCodec, load_board
from .compiler import Clause, CompileError
from .engine import LifeEngine, MachineEngine, RewriteEngine
from .machine import MachineDefinition, ParseError, Transition
from .pattern import AggregatePattern, build_life_pattern, build_machine_pattern

__all__ = [
    "GAME_OF_LIFE", "ReferenceAutomaton", "Rule", "changing_neighborhoods",
    "AlphabetError", "BoardCodec", "TapeCodec", "load_board",
    "Clause", "CompileError",
    "LifeEngine", "MachineEngine", "RewriteEngine",
    "MachineDefinition", "ParseError", "Transition",
    "AggregatePattern", "build_life_pattern", "build_machine_pattern",
]
