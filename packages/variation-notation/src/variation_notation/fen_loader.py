from __future__ import annotations

from loguru import logger

from variation_tree import HistoryTree, RulesOracle

from .errors import PositionLoadError

FEN_FIELDS = 6


def starting_ply(side_to_move: str, fullmove_number: int) -> int:
    """Ply of the first move played from a position (0 = white's first move)."""
    return (fullmove_number - 1) * 2 + (1 if side_to_move == "b" else 0)


def load_fen(oracle: RulesOracle, text: str) -> HistoryTree:
    """Build a fresh single-node tree rooted at the FEN ``text``.

    The root carries ``starting_ply - 1`` so that moves played from it are
    numbered from the position's own move counter.
    """
    fen = " ".join(str(text or "").split())
    try:
        oracle.validate_position(fen)
    except ValueError as e:
        raise PositionLoadError(f"Invalid FEN: {e}") from e

    fields = fen.split(" ")
    if len(fields) != FEN_FIELDS:
        raise PositionLoadError(f"Malformed FEN: expected {FEN_FIELDS} fields, got {len(fields)}")

    side, fullmove_raw = fields[1], fields[5]
    try:
        fullmove = int(fullmove_raw)
    except ValueError as e:
        raise PositionLoadError(
            f"Malformed FEN: fullmove number must be an integer, got {fullmove_raw!r}"
        ) from e
    if fullmove < 1:
        raise PositionLoadError(f"Malformed FEN: fullmove number must be at least 1, got {fullmove}")

    base = starting_ply(side, fullmove) - 1
    logger.debug("FEN root ply {} for {}", base, fen)
    return HistoryTree.fresh(fen, base_ply=base)
