from .oracle import LegalTarget, MoveOutcome, PythonChessOracle, RulesOracle
from .tree import (
    MainLine,
    add_child,
    depth,
    go_back,
    go_forward,
    iter_nodes,
    main_line,
    main_line_end,
    make_move,
    variations,
)
from .types import (
    STARTING_FEN,
    HistoryTree,
    MoveFlag,
    MoveNode,
    MoveRecord,
    PieceKind,
    PlayedMove,
    RootMarker,
    SideName,
)
from .utils import ROOT_ID, contains, find_node, is_root, node_id, node_path
from .validate import validate_tree

__all__ = [
    "ROOT_ID",
    "STARTING_FEN",
    "HistoryTree",
    "LegalTarget",
    "MainLine",
    "MoveFlag",
    "MoveNode",
    "MoveOutcome",
    "MoveRecord",
    "PieceKind",
    "PlayedMove",
    "PythonChessOracle",
    "RootMarker",
    "RulesOracle",
    "SideName",
    "add_child",
    "contains",
    "depth",
    "find_node",
    "go_back",
    "go_forward",
    "is_root",
    "iter_nodes",
    "main_line",
    "main_line_end",
    "make_move",
    "node_id",
    "node_path",
    "validate_tree",
    "variations",
]
