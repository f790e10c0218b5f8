from __future__ import annotations

from collections.abc import Iterator

from loguru import logger

from .oracle import MoveOutcome, RulesOracle
from .types import MoveNode, PieceKind, PlayedMove


def add_child(node: MoveNode, outcome: MoveOutcome) -> MoveNode:
    """Attach the position reached by ``outcome`` below ``node``.

    An existing child with the same SAN is returned unchanged, so replaying a
    known continuation lands on that node instead of creating a sibling.
    """
    for child in node.children:
        if child.san == outcome.san:
            return child

    record = PlayedMove(
        from_square=outcome.from_square,
        to_square=outcome.to_square,
        promotion=outcome.promotion,
        san=outcome.san,
        side=outcome.side,
        ply=node.record.ply + 1,
        flags=outcome.flags,
    )
    child = MoveNode(position=outcome.position, record=record, parent=node)
    node.children.append(child)
    return child


def make_move(
    oracle: RulesOracle,
    node: MoveNode,
    from_square: str,
    to_square: str,
    promotion: PieceKind | None = None,
) -> MoveNode | None:
    """Play a move from ``node``; ``None`` if the oracle rejects it."""
    outcome = oracle.apply_move(node.position, from_square, to_square, promotion)
    if outcome is None:
        logger.debug("rejected move {}->{} from ply {}", from_square, to_square, node.ply)
        return None
    return add_child(node, outcome)


def go_back(node: MoveNode) -> MoveNode:
    return node.parent if node.parent is not None else node


def go_forward(node: MoveNode) -> MoveNode:
    return node.children[0] if node.children else node


class MainLine:
    """The nodes reached by following ``children[0]`` from a root.

    Iterating is lazy and can be repeated; the tree is never modified.
    """

    __slots__ = ("root",)

    def __init__(self, root: MoveNode) -> None:
        self.root = root

    def __iter__(self) -> Iterator[MoveNode]:
        cur = self.root
        while cur.children:
            cur = cur.children[0]
            yield cur

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def sans(self) -> list[str]:
        return [n.san or "?" for n in self]


def main_line(root: MoveNode) -> MainLine:
    return MainLine(root)


def main_line_end(root: MoveNode) -> MoveNode:
    end = root
    for end in MainLine(root):
        pass
    return end


def variations(node: MoveNode) -> list[MoveNode]:
    return node.children[1:]


def depth(node: MoveNode) -> int:
    n = 0
    cur = node
    while cur.parent is not None:
        cur = cur.parent
        n += 1
    return n


def iter_nodes(root: MoveNode) -> Iterator[MoveNode]:
    """Pre-order walk over every node below (and including) ``root``."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))
