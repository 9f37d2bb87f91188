import numpy as np
import pytest

from regex_automata.codec import (
    AlphabetError,
    BoardCodec,
    HeadRecord,
    TapeCodec,
    board_from_lines,
    load_board,
)
from regex_automata.machine import MachineDefinition
from regex_automata.presets import DUPLICATE_BINARY_STRING

GLIDER = np.array([
    [0, 1, 0, 0],
    [0, 0, 1, 0],
    [1, 1, 1, 0],
], dtype=np.uint8)


@pytest.mark.parametrize("bordered", [True, False])
def test_board_round_trip(bordered):
    codec = BoardCodec.for_board(GLIDER, bordered=bordered)
    buffer = codec.encode(GLIDER)
    assert len(buffer) == codec.buffer_length
    np.testing.assert_array_equal(codec.decode(buffer), GLIDER)


def test_unbordered_layout_is_row_concatenation():
    codec = BoardCodec(4, 3, bordered=False)
    assert codec.stride == 4
    assert codec.encode(GLIDER) == "010000101110"


def test_bordered_layout():
    codec = BoardCodec(4, 3)
    assert codec.stride == 7
    assert codec.encode(GLIDER) == (
        "000000|"
        "001000|"
        "000100|"
        "011100|"
        "000000|"
    )


def test_random_round_trip():
    rng = np.random.default_rng(0)
    for h, w in [(1, 1), (1, 7), (6, 1), (5, 8)]:
        grid = (rng.random((h, w)) < 0.5).astype(np.uint8)
        codec = BoardCodec.for_board(grid)
        np.testing.assert_array_equal(codec.decode(codec.encode(grid)), grid)


def test_encode_rejects_wrong_shape():
    with pytest.raises(ValueError):
        BoardCodec(3, 3).encode(GLIDER)


def test_decode_rejects_wrong_length():
    with pytest.raises(ValueError):
        BoardCodec(4, 3).decode("0101")


def test_load_board(tmp_path):
    path = tmp_path / "board.txt"
    path.write_text("010\n 001 \n111\n\n")
    grid = load_board(str(path))
    np.testing.assert_array_equal(grid, [[0, 1, 0], [0, 0, 1], [1, 1, 1]])
    assert grid.dtype == np.uint8


@pytest.mark.parametrize("lines", [[], ["010", "01"], ["010", "0x0"]])
def test_board_from_lines_validates(lines):
    with pytest.raises(AlphabetError):
        board_from_lines(lines)


@pytest.fixture
def duplicate_codec():
    return TapeCodec(MachineDefinition(DUPLICATE_BINARY_STRING), tape_length=6)


def test_tape_encode(duplicate_codec):
    assert duplicate_codec.encode("B01") == "___#Q0Q1Q2Q3Q10Q20Q30Q99:B01CXY_-Q0:B#01___"


def test_tape_encode_empty_input(duplicate_codec):
    assert duplicate_codec.decode(duplicate_codec.encode("")).cursor == "_"


def test_tape_decode(duplicate_codec):
    head = duplicate_codec.decode(duplicate_codec.encode("B01"))
    assert head == HeadRecord("___", "Q0", "B", "01___")
    assert head.position == 3
    assert head.tape == "___B01___"
    assert duplicate_codec.encode_head(head) == duplicate_codec.encode("B01")


def test_tape_decode_requires_single_head(duplicate_codec):
    buffer = duplicate_codec.encode("B01")
    with pytest.raises(AlphabetError):
        duplicate_codec.decode("___B01___")
    with pytest.raises(AlphabetError):
        duplicate_codec.decode(buffer + buffer)


def test_strict_tape_validation(duplicate_codec):
    assert duplicate_codec.encode("B0_1", strict=True)
    with pytest.raises(AlphabetError):
        duplicate_codec.encode("B021", strict=True)
    # Without strict, unknown symbols are written as-is
    assert "2" in duplicate_codec.encode("B021")
