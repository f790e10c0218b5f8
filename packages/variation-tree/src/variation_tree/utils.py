from __future__ import annotations

from .types import HistoryTree, MoveNode

ROOT_ID = "n:root"


def is_root(node_id: str) -> bool:
    return node_id == ROOT_ID


def node_path(node: MoveNode) -> list[int]:
    path: list[int] = []
    cur = node
    while cur.parent is not None:
        path.append(cur.parent.children.index(cur))
        cur = cur.parent
    path.reverse()
    return path


def node_id_from_path(path: list[int]) -> str:
    if not path:
        return ROOT_ID
    return "n:" + ".".join(str(i) for i in path)


def node_id(node: MoveNode) -> str:
    return node_id_from_path(node_path(node))


def find_node(tree: HistoryTree, node_id: str) -> MoveNode:
    if is_root(node_id):
        return tree.root
    if not node_id.startswith("n:"):
        raise KeyError(f"Unknown node_id: {node_id}")
    cur = tree.root
    try:
        for part in node_id[2:].split("."):
            if not (part.isascii() and part.isdigit()):
                raise KeyError(f"Unknown node_id: {node_id}")
            cur = cur.children[int(part)]
    except IndexError as e:
        raise KeyError(f"Unknown node_id: {node_id}") from e
    return cur


def contains(tree: HistoryTree, node: MoveNode) -> bool:
    cur = node
    while cur.parent is not None:
        cur = cur.parent
    return cur is tree.root
