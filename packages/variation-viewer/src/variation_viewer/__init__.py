from .config import ViewerSettings
from .logging import setup_logging
from .session import Playback, PlaybackTicket, Session
from .viewer import ChessViewerState, chess_viewer, cursor_view, status_text

__all__ = [
    "ChessViewerState",
    "Playback",
    "PlaybackTicket",
    "Session",
    "ViewerSettings",
    "chess_viewer",
    "cursor_view",
    "setup_logging",
    "status_text",
]
