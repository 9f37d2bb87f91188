import numpy as np
import pytest

from regex_automata.automaton import HIGHLIFE, ReferenceAutomaton, Rule, naive_step
from regex_automata.engine import LifeEngine, RewriteEngine
from regex_automata.pattern import AggregatePattern
from regex_automata.compiler import Clause


def board(rows):
    return np.array([[int(c) for c in row] for row in rows], dtype=np.uint8)


HORIZONTAL = board([
    "00000",
    "00000",
    "01110",
    "00000",
    "00000",
])
VERTICAL = HORIZONTAL.T.copy()


def test_blinker_oscillates():
    engine = LifeEngine.from_board(HORIZONTAL)
    for gen in range(1, 7):
        engine.step()
        expected = VERTICAL if gen % 2 else HORIZONTAL
        np.testing.assert_array_equal(engine.board, expected)
    assert engine.generation == 6


def test_block_is_still_life():
    grid = board([
        "0000",
        "0110",
        "0110",
        "0000",
    ])
    engine = LifeEngine.from_board(grid)
    result = engine.run_until_fixpoint(max_steps=10)
    assert result.halted
    assert result.steps == 0
    np.testing.assert_array_equal(engine.board, grid)


def test_block_touching_the_edges_is_still_life():
    grid = board(["11", "11"])
    engine = LifeEngine.from_board(grid)
    engine.run(5)
    np.testing.assert_array_equal(engine.board, grid)


@pytest.mark.parametrize("shape,seed", [
    ((8, 10), 0),
    ((1, 6), 1),
    ((6, 1), 2),
    ((3, 3), 3),
    ((12, 7), 4),
])
def test_step_matches_reference(shape, seed):
    rng = np.random.default_rng(seed)
    grid = (rng.random(shape) < 0.45).astype(np.uint8)
    engine = LifeEngine.from_board(grid)
    reference = ReferenceAutomaton(grid)
    for _ in range(8):
        expected = naive_step(engine.board)
        engine.step()
        reference.step()
        np.testing.assert_array_equal(engine.board, reference.grid)
        np.testing.assert_array_equal(engine.board, expected)


def test_other_rule_matches_reference():
    rng = np.random.default_rng(11)
    grid = (rng.random((9, 9)) < 0.5).astype(np.uint8)
    engine = LifeEngine.from_board(grid, rule=HIGHLIFE)
    reference = ReferenceAutomaton(grid, rule=HIGHLIFE)
    for _ in range(5):
        engine.step()
        reference.step()
        np.testing.assert_array_equal(engine.board, reference.grid)


def test_glider_moves_diagonally():
    grid = np.zeros((8, 8), dtype=np.uint8)
    grid[0:3, 0:3] = board(["010", "001", "111"])
    engine = LifeEngine.from_board(grid)
    engine.run(4)
    np.testing.assert_array_equal(engine.board, np.roll(np.roll(grid, 1, axis=0), 1, axis=1))


def test_unbordered_layout_never_updates_first_row():
    grid = board([
        "01110",
        "00000",
        "00000",
        "00000",
    ])
    engine = LifeEngine.from_board(grid, bordered=False)
    assert engine.codec.stride == 5
    engine.step()
    np.testing.assert_array_equal(engine.board, board([
        "01110",
        "00100",
        "00000",
        "00000",
    ]))


def test_unbordered_blinker_away_from_edges():
    engine = LifeEngine.from_board(HORIZONTAL, bordered=False)
    engine.step()
    np.testing.assert_array_equal(engine.board, VERTICAL)


def test_run_calls_back_each_generation():
    engine = LifeEngine.from_board(HORIZONTAL)
    seen = []
    engine.run(3, callback=lambda gen, buffer: seen.append((gen, engine.codec.decode(buffer).sum())))
    assert [gen for gen, _ in seen] == [0, 1, 2, 3]
    assert all(pop == 3 for _, pop in seen)


def test_history_keeps_previous_buffers():
    engine = LifeEngine.from_board(HORIZONTAL)
    first = engine.buffer
    engine.step(record_history=True)
    engine.step(record_history=True)
    history = engine.get_history()
    assert history[0] == first
    assert history[1] != first
    assert engine.buffer == first


def test_fixpoint_limit():
    engine = LifeEngine.from_board(HORIZONTAL)
    result = engine.run_until_fixpoint(max_steps=5)
    assert not result.halted
    assert result.steps == 5


def test_generic_engine_stops_when_nothing_matches():
    # Move a single 'x' to the right until it reaches the end
    pattern = AggregatePattern([Clause("x(?P<r_0>_)", "", ("r_0",))], "\\g<r_0>x")
    engine = RewriteEngine(pattern, "x___")
    result = engine.run_until_fixpoint()
    assert result.halted
    assert result.buffer == "___x"
    assert result.steps == 3


def test_fixpoint_generation_includes_detecting_step():
    pattern = AggregatePattern([Clause("x(?P<r_0>_)", "", ("r_0",))], "\\g<r_0>x")
    engine = RewriteEngine(pattern, "x__")
    result = engine.run_until_fixpoint()
    assert result.steps == 2
    assert engine.generation == 3


def test_rule_where_nothing_changes_leaves_board_alone():
    engine = LifeEngine.from_board(HORIZONTAL, rule=Rule.from_string("B/S012345678"))
    assert engine.step() == 0
    np.testing.assert_array_equal(engine.board, HORIZONTAL)
    result = engine.run_until_fixpoint()
    assert result.halted
    assert result.steps == 0
