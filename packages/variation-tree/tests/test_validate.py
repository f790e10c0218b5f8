import pytest

from variation_tree import (
    HistoryTree,
    MoveNode,
    PlayedMove,
    PythonChessOracle,
    RootMarker,
    make_move,
    validate_tree,
)

ORACLE = PythonChessOracle()


def test_validate_tree_accepts_minimal_valid_tree():
    validate_tree(HistoryTree.fresh())


def test_validate_tree_accepts_played_variations():
    tree = HistoryTree.fresh()
    e4 = make_move(ORACLE, tree.root, "e2", "e4")
    make_move(ORACLE, e4, "e7", "e5")
    make_move(ORACLE, e4, "c7", "c5")
    validate_tree(tree)


def test_validate_tree_rejects_wrong_type():
    with pytest.raises(ValueError, match="HistoryTree"):
        validate_tree({"root": None})  # type: ignore[arg-type]


def test_validate_tree_rejects_played_root():
    record = PlayedMove("e2", "e4", None, "e4", "white", 0)
    tree = HistoryTree(root=MoveNode(position="x", record=record))
    with pytest.raises(ValueError, match="RootMarker"):
        validate_tree(tree)


def test_validate_tree_rejects_duplicate_continuations():
    tree = HistoryTree.fresh()
    e4 = make_move(ORACLE, tree.root, "e2", "e4")
    clone = MoveNode(position=e4.position, record=e4.record, parent=tree.root)
    tree.root.children.append(clone)
    with pytest.raises(ValueError, match="duplicate continuation 'e4'"):
        validate_tree(tree)


def test_validate_tree_rejects_ply_gap():
    tree = HistoryTree.fresh()
    record = PlayedMove("e2", "e4", None, "e4", "white", 5)
    tree.root.children.append(MoveNode(position="x", record=record, parent=tree.root))
    with pytest.raises(ValueError, match=r"Node\[n:0\]\.ply"):
        validate_tree(tree)


def test_validate_tree_rejects_broken_parent_link():
    tree = HistoryTree.fresh()
    e4 = make_move(ORACLE, tree.root, "e2", "e4")
    e4.parent = None
    with pytest.raises(ValueError, match="parent"):
        validate_tree(tree)


def test_validate_tree_accepts_synthetic_root_ply():
    tree = HistoryTree(root=MoveNode(position="x", record=RootMarker(ply=18)))
    validate_tree(tree)
