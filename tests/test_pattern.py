import random

import numpy as np

from regex_automata.automaton import GAME_OF_LIFE, Rule
from regex_automata.codec import BoardCodec
from regex_automata.compiler import Clause
from regex_automata.machine import MachineDefinition
from regex_automata.pattern import AggregatePattern, build_life_pattern, build_machine_pattern
from regex_automata.presets import DUPLICATE_BINARY_STRING


def life_next(bits):
    alive = bits[4] == "1"
    count = bits.count("1") - (1 if alive else 0)
    return "1" if count == 3 or (alive and count == 2) else "0"


def test_every_neighbourhood_through_the_compiled_pattern():
    codec = BoardCodec(3, 3)
    pattern = build_life_pattern(codec.stride)
    center = codec.stride * 2 + 2  # row 1 of the board, column 1
    for i in range(512):
        bits = format(i, "09b")
        grid = np.array([int(b) for b in bits], dtype=np.uint8).reshape(3, 3)
        buffer = codec.encode(grid)
        assert buffer[center] == bits[4]
        new_buffer, _ = pattern.apply(buffer)
        assert new_buffer[center] == life_next(bits), bits
        assert len(new_buffer) == len(buffer)


def test_life_template_references_every_clause():
    pattern = build_life_pattern(10)
    assert len(pattern) == 228
    assert pattern.template.count("\\g<replace_") == 228
    assert "\\g<replace_0>" in pattern.template
    assert "\\g<replace_227>" in pattern.template


def test_compilation_is_repeatable():
    a = build_life_pattern(12, GAME_OF_LIFE)
    b = build_life_pattern(12, GAME_OF_LIFE)
    assert a.source == b.source
    assert a.template == b.template


def test_machine_compilation_independent_of_rule_order():
    shuffled = list(DUPLICATE_BINARY_STRING)
    random.Random(5).shuffle(shuffled)
    a = MachineDefinition(DUPLICATE_BINARY_STRING)
    b = MachineDefinition(shuffled)
    assert set(a.transitions) == set(b.transitions)
    assert set(a.states) == set(b.states)
    assert set(a.symbols) == set(b.symbols)
    assert {c.source for c in build_machine_pattern(a).clauses} == \
        {c.source for c in build_machine_pattern(b).clauses}


def test_machine_template():
    definition = MachineDefinition(["Q0:a/b->R:Q1", "Q1:b/a->L:Q0"])
    pattern = build_machine_pattern(definition)
    assert pattern.template == (
        "\\g<new_left_0>"
        "#Q0Q1:ab-"
        "\\g<new_state_0>\\g<new_state_1>"
        ":"
        "\\g<new_cursor_0>\\g<new_cursor_1>"
        "#"
        "\\g<new_right_1>"
    )


def test_first_listed_clause_wins():
    clauses = [
        Clause("(?P<a_0>x)", "first", ("a_0",)),
        Clause("(?P<a_1>x)", "second", ("a_1",)),
    ]
    pattern = AggregatePattern(clauses, "<\\g<a_0>|\\g<a_1>>")
    assert pattern.apply("x") == ("<x|>", 1)


def test_apply_reads_the_unmodified_buffer():
    # Each 'a' becomes 'b' only if the next character is an 'a' in the input
    pattern = AggregatePattern([Clause("(?P<r_0>a)(?=a)", "", ("r_0",))], "b")
    assert pattern.apply("aaab") == ("bbab", 2)


def test_empty_clause_list_never_matches():
    pattern = AggregatePattern([], "")
    assert len(pattern) == 0
    assert pattern.apply("0110|") == ("0110|", 0)


def test_rule_without_changing_neighbourhoods():
    pattern = build_life_pattern(8, Rule.from_string("B/S012345678"))
    assert len(pattern) == 0
    assert pattern.template == ""
