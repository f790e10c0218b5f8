import pytest

from variation_notation import export_movetext, export_pgn, load_fen, parse_pgn
from variation_tree import HistoryTree, PythonChessOracle, iter_nodes, main_line, make_move

ORACLE = PythonChessOracle()

NESTED = "1. e4 e5 (1... c5 2. Nf3 (2. Nc3 Nc6) d6) 2. Nf3"


def _build(*moves):
    tree = HistoryTree.fresh()
    node = tree.root
    for uci in moves:
        node = make_move(ORACLE, node, uci[:2], uci[2:4])
        assert node is not None
    return tree


def test_main_line_replays_through_the_parser():
    tree = _build("e2e4", "e7e5", "g1f3", "b8c6", "f1b5", "a7a6", "b5a4", "g8f6", "e1g1")
    text = export_pgn(tree, headers={"Event": "Replay"})
    game = parse_pgn(ORACLE, text)
    assert main_line(game.tree.root).sans() == main_line(tree.root).sans()
    assert main_line(tree.root).sans()[-1] == "O-O"
    assert game.headers["Event"] == "Replay"


def test_variations_are_written_with_move_numbers():
    game = parse_pgn(ORACLE, NESTED)
    assert export_movetext(game.tree.root) == "1. e4 e5 (1... c5 2. Nf3 (2. Nc3 Nc6) 2... d6) 2. Nf3"


def test_export_then_parse_keeps_every_node():
    game = parse_pgn(ORACLE, NESTED)
    again = parse_pgn(ORACLE, export_pgn(game.tree))
    assert [n.san for n in iter_nodes(again.tree.root)] == [n.san for n in iter_nodes(game.tree.root)]


def test_export_pgn_layout():
    tree = _build("e2e4")
    text = export_pgn(tree, headers={"White": 'A "B"'}, result="1-0")
    assert text.splitlines() == ['[White "A \\"B\\""]', '[Result "1-0"]', "", "1. e4 1-0"]


def test_export_pgn_of_empty_tree():
    assert export_pgn(HistoryTree.fresh()).splitlines()[-1] == "*"


def test_custom_start_writes_fen_header_and_black_prefix():
    fen = "rnbqkbnr/pppp1ppp/8/4p3/4P3/5N2/PPPP1PPP/RNBQKB1R b KQkq - 1 10"
    tree = load_fen(ORACLE, fen)
    make_move(ORACLE, tree.root, "b8", "c6")
    text = export_pgn(tree)
    assert f'[FEN "{fen}"]' in text
    assert '[SetUp "1"]' in text
    assert "10... Nc6 *" in text
    again = parse_pgn(ORACLE, text)
    assert list(main_line(again.tree.root))[0].record.ply == 19


def test_export_rejects_unknown_result():
    with pytest.raises(ValueError, match="PGN result"):
        export_pgn(HistoryTree.fresh(), result="2-0")
