from __future__ import annotations

from .tree import iter_nodes
from .types import HistoryTree, MoveNode, PlayedMove, RootMarker
from .utils import node_id


def _err(prefix: str, msg: str) -> ValueError:
    return ValueError(f"{prefix}: {msg}")


def validate_tree(tree: HistoryTree) -> None:
    """Soft validation of a live move tree.

    Raises ValueError with a human-readable message on invariant violations.
    """
    if not isinstance(tree, HistoryTree):
        raise _err("HistoryTree", f"expected HistoryTree, got {type(tree).__name__}")

    root = tree.root
    if not isinstance(root, MoveNode):
        raise _err("HistoryTree.root", "expected MoveNode")
    if root.parent is not None:
        raise _err("HistoryTree.root.parent", "root parent must be None")
    if not isinstance(root.record, RootMarker):
        raise _err("HistoryTree.root.record", "root must carry a RootMarker")

    for node in iter_nodes(root):
        if not isinstance(node.position, str) or not node.position:
            raise _err(f"Node[{node_id(node)}].position", "expected non-empty str")

        seen: set[str] = set()
        for child in node.children:
            cid = node_id(child)
            if child.parent is not node:
                raise _err(f"Node[{cid}].parent", "does not point at the owning node")
            rec = child.record
            if not isinstance(rec, PlayedMove):
                raise _err(f"Node[{cid}].record", "non-root node must carry a PlayedMove")
            if rec.ply != node.record.ply + 1:
                raise _err(f"Node[{cid}].ply", f"expected {node.record.ply + 1}, got {rec.ply}")
            if rec.san in seen:
                raise _err(f"Node[{node_id(node)}].children", f"duplicate continuation {rec.san!r}")
            seen.add(rec.san)
