from .errors import MovetextParseError, NotationError, PositionLoadError
from .export import export_movetext, export_pgn, move_number_prefix
from .fen_loader import load_fen, starting_ply
from .movetext import (
    RESULT_TOKENS,
    ParsedGame,
    build_tree,
    extract_headers,
    normalize_movetext,
    parse_pgn,
    tokenize,
)
from .notation import (
    MoveRow,
    NotationLine,
    NotationToken,
    build_notation_lines,
    chess_notation,
    move_pairs,
)

__all__ = [
    "RESULT_TOKENS",
    "MoveRow",
    "MovetextParseError",
    "NotationError",
    "NotationLine",
    "NotationToken",
    "ParsedGame",
    "PositionLoadError",
    "build_notation_lines",
    "build_tree",
    "chess_notation",
    "export_movetext",
    "export_pgn",
    "extract_headers",
    "load_fen",
    "move_number_prefix",
    "move_pairs",
    "normalize_movetext",
    "parse_pgn",
    "starting_ply",
    "tokenize",
]
