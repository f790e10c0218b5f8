"""Rules oracle: the only place chess rules enter the move tree.

The tree and the ingestors only ever ask two questions: is this move legal
here, and what does playing it produce. ``PythonChessOracle`` answers them
with python-chess; anything implementing ``RulesOracle`` can stand in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

import chess
from loguru import logger

from .types import MoveFlag, PieceKind, SideName

_PROMOTION_PIECES: dict[str, int] = {
    "q": chess.QUEEN,
    "r": chess.ROOK,
    "b": chess.BISHOP,
    "n": chess.KNIGHT,
}


@dataclass(frozen=True, slots=True)
class LegalTarget:
    square: str
    is_promotion: bool = False
    is_capture: bool = False


@dataclass(frozen=True, slots=True)
class MoveOutcome:
    position: str
    san: str
    from_square: str
    to_square: str
    promotion: PieceKind | None
    side: SideName
    is_promotion: bool = False
    is_capture: bool = False
    is_check: bool = False
    is_checkmate: bool = False
    is_stalemate: bool = False
    is_draw: bool = False

    @property
    def flags(self) -> frozenset[MoveFlag]:
        pairs = (
            (self.is_promotion, MoveFlag.PROMOTION),
            (self.is_capture, MoveFlag.CAPTURE),
            (self.is_check, MoveFlag.CHECK),
            (self.is_checkmate, MoveFlag.CHECKMATE),
            (self.is_stalemate, MoveFlag.STALEMATE),
            (self.is_draw, MoveFlag.DRAW),
        )
        return frozenset(flag for on, flag in pairs if on)


class RulesOracle(Protocol):
    def legal_moves_from(self, position: str, square: str) -> dict[str, LegalTarget]: ...

    def apply_move(
        self,
        position: str,
        from_square: str,
        to_square: str,
        promotion: PieceKind | None = None,
    ) -> MoveOutcome | None: ...

    def apply_san(self, position: str, san: str) -> MoveOutcome | None: ...

    def validate_position(self, position: str) -> None: ...


def _board(position: str) -> chess.Board:
    return chess.Board(position)


def _outcome(board: chess.Board, move: chess.Move) -> MoveOutcome:
    """Play ``move`` on a copy of ``board`` and describe the result."""
    san = board.san(move)
    side: SideName = "white" if board.turn == chess.WHITE else "black"
    is_capture = board.is_capture(move)
    after = board.copy(stack=False)
    after.push(move)
    promotion = chess.piece_symbol(move.promotion) if move.promotion else None
    return MoveOutcome(
        position=after.fen(),
        san=san,
        from_square=chess.square_name(move.from_square),
        to_square=chess.square_name(move.to_square),
        promotion=promotion,  # type: ignore[arg-type]
        side=side,
        is_promotion=move.promotion is not None,
        is_capture=is_capture,
        is_check=after.is_check(),
        is_checkmate=after.is_checkmate(),
        is_stalemate=after.is_stalemate(),
        is_draw=after.is_insufficient_material() or after.can_claim_fifty_moves(),
    )


class PythonChessOracle:
    """``RulesOracle`` backed by ``chess.Board``."""

    def legal_moves_from(self, position: str, square: str) -> dict[str, LegalTarget]:
        try:
            board = _board(position)
            origin = chess.parse_square(square)
        except ValueError:
            return {}

        out: dict[str, LegalTarget] = {}
        for move in board.legal_moves:
            if move.from_square != origin:
                continue
            name = chess.square_name(move.to_square)
            # Four promotion moves share one destination.
            if name in out:
                continue
            out[name] = LegalTarget(
                square=name,
                is_promotion=move.promotion is not None,
                is_capture=board.is_capture(move),
            )
        return out

    def apply_move(
        self,
        position: str,
        from_square: str,
        to_square: str,
        promotion: PieceKind | None = None,
    ) -> MoveOutcome | None:
        try:
            board = _board(position)
            origin = chess.parse_square(from_square)
            target = chess.parse_square(to_square)
        except ValueError:
            return None

        piece_type = None
        if promotion is not None:
            piece_type = _PROMOTION_PIECES.get(str(promotion).lower())
            if piece_type is None:
                return None
        elif board.piece_type_at(origin) == chess.PAWN and chess.square_rank(target) in (0, 7):
            piece_type = chess.QUEEN

        move = chess.Move(origin, target, promotion=piece_type)
        if not board.is_legal(move):
            logger.debug("illegal move {}{} in {}", from_square, to_square, position)
            return None
        return _outcome(board, move)

    def apply_san(self, position: str, san: str) -> MoveOutcome | None:
        try:
            board = _board(position)
            move = board.parse_san(san)
        except ValueError:
            return None
        if not move:
            # "--" parses to a null move; the tree only records real moves.
            return None
        return _outcome(board, move)

    def validate_position(self, position: str) -> None:
        try:
            board = _board(position)
        except ValueError as e:
            raise ValueError(str(e)) from e
        if not board.is_valid():
            status = board.status()
            problems = [
                flag.name.lower().replace("_", " ")
                for flag in chess.Status
                if flag and flag in status and flag.name
            ]
            raise ValueError("illegal position (" + ", ".join(problems) + ")")
