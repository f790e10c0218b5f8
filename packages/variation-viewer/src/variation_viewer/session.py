"""Session: the tree and cursor a viewer works on, plus timed playback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from loguru import logger

from variation_notation import ParsedGame, export_pgn, load_fen, parse_pgn
from variation_tree import (
    STARTING_FEN,
    HistoryTree,
    LegalTarget,
    MoveNode,
    PieceKind,
    PythonChessOracle,
    RulesOracle,
    contains,
    find_node,
    go_back,
    go_forward,
    main_line_end,
    make_move,
    node_path,
    validate_tree,
)


class Session:
    """Explicit owner of the current tree and cursor.

    Every change of tree or cursor bumps ``generation``; loads go through
    ``replace`` so tree and cursor are swapped together or not at all.
    """

    def __init__(self, oracle: RulesOracle | None = None, position: str = STARTING_FEN) -> None:
        self.oracle: RulesOracle = oracle if oracle is not None else PythonChessOracle()
        self.tree = HistoryTree.fresh(position)
        self.cursor: MoveNode = self.tree.root
        self.headers: dict[str, str] = {}
        self.result = "*"
        self.generation = 0

    # The cursor is stored as its child-index path; the tree pickles itself flat.

    def __getstate__(self) -> dict[str, Any]:
        state = dict(self.__dict__)
        state["cursor"] = node_path(self.cursor)
        return state

    def __setstate__(self, state: dict[str, Any]) -> None:
        path = state.pop("cursor")
        self.__dict__.update(state)
        cursor = self.tree.root
        for index in path:
            cursor = cursor.children[index]
        self.cursor = cursor

    def _move_cursor(self, node: MoveNode) -> MoveNode:
        if node is not self.cursor:
            self.cursor = node
            self.generation += 1
        return node

    def replace(
        self,
        tree: HistoryTree,
        cursor: MoveNode | None = None,
        headers: dict[str, str] | None = None,
        result: str = "*",
    ) -> None:
        if cursor is None:
            cursor = tree.root
        if not contains(tree, cursor):
            raise ValueError("Session.replace: cursor is not part of the new tree")
        self.tree = tree
        self.cursor = cursor
        self.headers = dict(headers or {})
        self.result = result
        self.generation += 1

    # Mutation

    def make_move(
        self,
        from_square: str,
        to_square: str,
        promotion: PieceKind | None = None,
    ) -> MoveNode | None:
        node = make_move(self.oracle, self.cursor, from_square, to_square, promotion)
        if node is None:
            return None
        return self._move_cursor(node)

    def reset(self, position: str = STARTING_FEN) -> None:
        self.replace(HistoryTree.fresh(position))

    def load_fen(self, text: str) -> MoveNode:
        tree = load_fen(self.oracle, text)
        self.replace(tree)
        logger.info("loaded position {}", tree.root.position)
        return self.cursor

    def load_pgn(self, text: str) -> ParsedGame:
        game = parse_pgn(self.oracle, text)
        validate_tree(game.tree)
        self.replace(game.tree, game.cursor, game.headers, game.result)
        logger.info("loaded game: {} plies on the main line, {} tokens skipped", game.main_line_length, game.skipped)
        return game

    def export_pgn(self) -> str:
        return export_pgn(self.tree, headers=self.headers, result=self.result)

    # Navigation

    def go_back(self) -> MoveNode:
        return self._move_cursor(go_back(self.cursor))

    def go_forward(self) -> MoveNode:
        return self._move_cursor(go_forward(self.cursor))

    def go_start(self) -> MoveNode:
        return self._move_cursor(self.tree.root)

    def go_end(self) -> MoveNode:
        return self._move_cursor(main_line_end(self.tree.root))

    def jump_to(self, node: MoveNode) -> MoveNode:
        if not contains(self.tree, node):
            raise ValueError("Session.jump_to: node is not part of the current tree")
        return self._move_cursor(node)

    def jump_to_id(self, node_id: str) -> MoveNode:
        return self._move_cursor(find_node(self.tree, node_id))

    # Queries

    @property
    def can_go_back(self) -> bool:
        return self.cursor.parent is not None

    @property
    def can_go_forward(self) -> bool:
        return bool(self.cursor.children)

    def legal_targets(self, square: str) -> dict[str, LegalTarget]:
        return self.oracle.legal_moves_from(self.cursor.position, square)


@dataclass(frozen=True, slots=True)
class PlaybackTicket:
    run: int
    generation: int


class Playback:
    """Timed forward-stepping along the main line.

    The scheduler holds a ticket between steps. A ticket goes stale as soon as
    the session changes by any other means or playback is cancelled, and a
    stale ticket never advances the cursor.
    """

    def __init__(self, session: Session) -> None:
        self.session = session
        self._run = 0
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    def _ticket(self) -> PlaybackTicket:
        return PlaybackTicket(run=self._run, generation=self.session.generation)

    def start(self) -> PlaybackTicket | None:
        self._run += 1
        if not self.session.can_go_forward:
            self._active = False
            return None
        self._active = True
        return self._ticket()

    def cancel(self) -> None:
        self._run += 1
        self._active = False

    def is_current(self, ticket: PlaybackTicket) -> bool:
        return (
            self._active
            and ticket.run == self._run
            and ticket.generation == self.session.generation
        )

    def step(self, ticket: PlaybackTicket) -> PlaybackTicket | None:
        if not self.is_current(ticket):
            if ticket.run == self._run:
                # Someone else moved the cursor or swapped the tree.
                self._active = False
            return None
        self.session.go_forward()
        if not self.session.can_go_forward:
            self._active = False
            return None
        return self._ticket()

    def tick(self, ticket: PlaybackTicket) -> tuple[PlaybackTicket | None, bool]:
        """Run ``step`` and also report whether it moved the cursor.

        The last step of a run moves the cursor and still returns ``None``.
        """
        before = self.session.generation
        ticket = self.step(ticket)
        return ticket, self.session.generation != before
