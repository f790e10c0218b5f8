import pickle

import pytest

from variation_tree import (
    HistoryTree,
    MoveFlag,
    PlayedMove,
    PythonChessOracle,
    RootMarker,
    depth,
    find_node,
    go_back,
    go_forward,
    iter_nodes,
    main_line,
    main_line_end,
    make_move,
    node_id,
    validate_tree,
)

ORACLE = PythonChessOracle()


def _play(node, *moves):
    for uci in moves:
        node = make_move(ORACLE, node, uci[:2], uci[2:4], uci[4:] or None)
        assert node is not None, uci
    return node


def test_fresh_tree_root_has_marker_and_no_children():
    tree = HistoryTree.fresh()
    assert isinstance(tree.root.record, RootMarker)
    assert tree.root.record.ply == -1
    assert tree.root.children == []
    assert tree.root.parent is None


def test_make_move_records_move_and_links_parent():
    tree = HistoryTree.fresh()
    node = make_move(ORACLE, tree.root, "e2", "e4")
    assert node is not None
    assert isinstance(node.record, PlayedMove)
    assert node.record.san == "e4"
    assert node.record.side == "white"
    assert node.record.ply == 0
    assert node.parent is tree.root
    assert tree.root.children == [node]
    assert node.position.split(" ")[1] == "b"


def test_same_move_twice_returns_same_child():
    tree = HistoryTree.fresh()
    first = make_move(ORACLE, tree.root, "e2", "e4")
    second = make_move(ORACLE, tree.root, "e2", "e4")
    assert first is second
    assert len(tree.root.children) == 1


def test_illegal_move_is_a_noop():
    tree = HistoryTree.fresh()
    assert make_move(ORACLE, tree.root, "e2", "e5") is None
    assert make_move(ORACLE, tree.root, "e7", "e5") is None
    assert tree.root.children == []


def test_ply_equals_depth_minus_one():
    tree = HistoryTree.fresh()
    end = _play(tree.root, "e2e4", "e7e5", "g1f3", "b8c6", "f1b5")
    for node in iter_nodes(tree.root):
        if node is tree.root:
            continue
        assert node.record.ply == depth(node) - 1
    assert end.record.ply == 4
    assert end.record.move_number == 3


def test_variation_does_not_replace_main_line():
    tree = HistoryTree.fresh()
    e4 = _play(tree.root, "e2e4")
    e5 = _play(e4, "e7e5")
    c5 = _play(e4, "c7c5")
    e6 = _play(e4, "e7e6")
    assert e4.children[0] is e5
    assert e4.children == [e5, c5, e6]
    assert [n.san for n in main_line(tree.root)] == ["e4", "e5"]


def test_main_line_is_restartable_and_follows_first_children():
    tree = HistoryTree.fresh()
    _play(tree.root, "d2d4", "d7d5", "c2c4")
    _play(tree.root.children[0], "g8f6")
    line = main_line(tree.root)
    first = list(line)
    assert first == list(line)
    assert len(line) == 3
    path = []
    cur = tree.root
    while cur.children:
        cur = cur.children[0]
        path.append(cur)
    assert first == path
    assert line.sans() == ["d4", "d5", "c4"]


def test_main_line_end_of_empty_tree_is_root():
    tree = HistoryTree.fresh()
    assert main_line_end(tree.root) is tree.root
    assert list(main_line(tree.root)) == []


def test_go_back_and_forward_stop_at_the_ends():
    tree = HistoryTree.fresh()
    e4 = _play(tree.root, "e2e4")
    assert go_back(tree.root) is tree.root
    assert go_forward(e4) is e4
    assert go_forward(tree.root) is e4
    assert go_back(e4) is tree.root


def test_promotion_defaults_to_queen():
    tree = HistoryTree.fresh("8/P7/8/8/8/8/8/k6K w - - 0 1")
    node = make_move(ORACLE, tree.root, "a7", "a8")
    assert node is not None
    assert node.record.promotion == "q"
    assert MoveFlag.PROMOTION in node.record.flags


def test_underpromotion_is_a_distinct_continuation():
    tree = HistoryTree.fresh("8/P7/8/8/8/8/8/k6K w - - 0 1")
    queen = make_move(ORACLE, tree.root, "a7", "a8", "q")
    knight = make_move(ORACLE, tree.root, "a7", "a8", "n")
    assert knight is not None and queen is not None
    assert knight is not queen
    assert knight.record.san == "a8=N"
    assert len(tree.root.children) == 2


def test_checkmate_flags():
    tree = HistoryTree.fresh()
    mate = _play(tree.root, "f2f3", "e7e5", "g2g4", "d8h4")
    assert mate.record.san == "Qh4#"
    assert MoveFlag.CHECKMATE in mate.record.flags
    assert MoveFlag.CHECK in mate.record.flags


def test_node_ids_follow_child_indices():
    tree = HistoryTree.fresh()
    e4 = _play(tree.root, "e2e4")
    _play(e4, "e7e5")
    c5 = _play(e4, "c7c5")
    assert node_id(tree.root) == "n:root"
    assert node_id(e4) == "n:0"
    assert node_id(c5) == "n:0.1"
    assert find_node(tree, "n:0.1") is c5
    assert find_node(tree, "n:root") is tree.root


@pytest.mark.parametrize("bad", ["n:1", "n:0.0", "x:0", "n:a", "n:-1", "n:+0", "n:", "n:0."])
def test_find_node_rejects_unknown_ids(bad):
    tree = HistoryTree.fresh()
    _play(tree.root, "e2e4")
    with pytest.raises(KeyError, match="Unknown node_id"):
        find_node(tree, bad)


def test_deep_tree_pickles_flat():
    tree = HistoryTree.fresh()
    node = tree.root
    for _ in range(150):
        for uci in ("g1f3", "g8f6", "f3g1", "f6g8"):
            node = make_move(ORACLE, node, uci[:2], uci[2:4])
    side = make_move(ORACLE, tree.root.children[0], "d7", "d5")
    assert side is not None

    again = pickle.loads(pickle.dumps(tree))
    validate_tree(again)
    assert [n.san for n in iter_nodes(again.root)] == [n.san for n in iter_nodes(tree.root)]
    assert len(main_line(again.root)) == 600
    assert find_node(again, "n:0.1").san == "d5"
    assert again.rows() == tree.rows()
