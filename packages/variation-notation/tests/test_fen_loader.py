import pytest

from variation_notation import PositionLoadError, load_fen, starting_ply
from variation_tree import STARTING_FEN, PythonChessOracle, RootMarker, make_move

ORACLE = PythonChessOracle()

BLACK_TO_MOVE_10 = "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 10"


class AcceptingOracle(PythonChessOracle):
    """Lets any string through validation so the loader's own checks run."""

    def validate_position(self, position: str) -> None:
        return None


def test_starting_ply():
    assert starting_ply("w", 1) == 0
    assert starting_ply("b", 1) == 1
    assert starting_ply("b", 10) == 19


def test_load_start_position_matches_fresh_tree():
    tree = load_fen(ORACLE, STARTING_FEN)
    assert tree.root.position == STARTING_FEN
    assert tree.root.record == RootMarker(ply=-1)
    assert tree.root.children == []


def test_black_to_move_offsets_ply():
    tree = load_fen(ORACLE, BLACK_TO_MOVE_10)
    assert tree.root.record.ply == 18
    node = make_move(ORACLE, tree.root, "b8", "c6")
    assert node is not None
    assert node.record.san == "Nc6"
    assert node.record.ply == 19
    assert node.record.move_number == 10
    reply = make_move(ORACLE, node, "f1", "b5")
    assert reply is not None
    assert reply.record.ply == 20
    assert reply.record.move_number == 11


def test_surrounding_whitespace_is_ignored():
    tree = load_fen(ORACLE, "  " + BLACK_TO_MOVE_10.replace(" ", "   ") + "\n")
    assert tree.root.position == BLACK_TO_MOVE_10


def test_five_fields_is_malformed():
    five = " ".join(STARTING_FEN.split()[:5])
    with pytest.raises(PositionLoadError, match="Malformed FEN: expected 6 fields, got 5"):
        load_fen(ORACLE, five)


def test_invalid_position_is_reported_by_the_oracle():
    with pytest.raises(PositionLoadError, match="^Invalid FEN: "):
        load_fen(ORACLE, "8/8/8/8/8/8/8/8 w - - 0 1")


def test_non_numeric_fullmove_is_rejected():
    with pytest.raises(PositionLoadError, match="fullmove number must be an integer, got 'x'"):
        load_fen(AcceptingOracle(), "8/8/8/8/8/8/8/k6K w - - 0 x")


def test_errors_are_value_errors():
    with pytest.raises(ValueError):
        load_fen(ORACLE, "")


def test_fullmove_zero_is_malformed():
    with pytest.raises(PositionLoadError, match="Malformed FEN: fullmove number must be at least 1, got 0"):
        load_fen(ORACLE, STARTING_FEN.rsplit(" ", 1)[0] + " 0")
