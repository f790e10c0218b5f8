from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

STARTING_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

SideName = Literal["white", "black"]
PieceKind = Literal["q", "r", "b", "n"]


class MoveFlag(str, Enum):
    PROMOTION = "promotion"
    CAPTURE = "capture"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    DRAW = "draw"


@dataclass(frozen=True, slots=True)
class RootMarker:
    """Record of a tree root: no move, only the ply base for its children."""

    ply: int = -1


@dataclass(frozen=True, slots=True)
class PlayedMove:
    from_square: str
    to_square: str
    promotion: PieceKind | None
    san: str
    side: SideName
    ply: int
    flags: frozenset[MoveFlag] = frozenset()

    @property
    def move_number(self) -> int:
        return self.ply // 2 + 1

    @property
    def uci(self) -> str:
        return f"{self.from_square}{self.to_square}{self.promotion or ''}"


MoveRecord = RootMarker | PlayedMove


@dataclass(eq=False, slots=True)
class MoveNode:
    position: str
    record: MoveRecord
    children: list[MoveNode] = field(default_factory=list)
    # Back reference only; children own their nodes.
    parent: MoveNode | None = field(default=None, repr=False)

    @property
    def ply(self) -> int:
        return self.record.ply

    @property
    def san(self) -> str | None:
        rec = self.record
        return rec.san if isinstance(rec, PlayedMove) else None

    def __repr__(self) -> str:
        label = self.san or "root"
        return f"MoveNode({label!r}, ply={self.ply}, children={len(self.children)})"


# Pickled as a pre-order table of (parent index, position, record) rows so that
# deep games never recurse through nested nodes.
NodeRow = tuple[int, str, MoveRecord]


def _tree_from_rows(rows: list[NodeRow]) -> HistoryTree:
    nodes: list[MoveNode] = []
    for parent_index, position, record in rows:
        node = MoveNode(position=position, record=record)
        if parent_index >= 0:
            parent = nodes[parent_index]
            node.parent = parent
            parent.children.append(node)
        nodes.append(node)
    return HistoryTree(root=nodes[0])


@dataclass(eq=False, slots=True)
class HistoryTree:
    root: MoveNode

    @classmethod
    def fresh(cls, position: str = STARTING_FEN, *, base_ply: int = -1) -> HistoryTree:
        return cls(root=MoveNode(position=position, record=RootMarker(ply=base_ply)))

    @property
    def initial_position(self) -> str:
        return self.root.position

    def rows(self) -> list[NodeRow]:
        """Flatten the tree in pre-order; parents always precede their children."""
        rows: list[NodeRow] = []
        stack: list[tuple[MoveNode, int]] = [(self.root, -1)]
        while stack:
            node, parent_index = stack.pop()
            index = len(rows)
            rows.append((parent_index, node.position, node.record))
            stack.extend((child, index) for child in reversed(node.children))
        return rows

    def __reduce__(self):
        return (_tree_from_rows, (self.rows(),))
