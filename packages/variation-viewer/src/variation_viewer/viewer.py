from __future__ import annotations

import asyncio
import re
from typing import Any

import reflex as rx
from loguru import logger
from typing_extensions import NotRequired, TypedDict

from variation_notation import (
    MoveRow,
    NotationError,
    NotationLine,
    build_notation_lines,
    chess_notation,
    move_pairs,
)
from variation_tree import STARTING_FEN, MoveFlag, PlayedMove, node_id

from .config import ViewerSettings
from .session import Playback, Session

UPLOAD_ID = "pgn-upload"

_UCI_RE = re.compile(r"^([a-h][1-8])([a-h][1-8])([qrbn])?$", re.I)

SETTINGS = ViewerSettings.from_env()


# Move event sent by a board widget ("from" is a keyword, hence the functional form).
MovePayload = TypedDict(
    "MovePayload",
    {
        "from": str,
        "to": str,
        "promotion": NotRequired[str | None],
    },
)


def _move_from_payload(payload: dict[str, Any]) -> MovePayload | None:
    origin = payload.get("from")
    target = payload.get("to")
    if not isinstance(origin, str) or not isinstance(target, str) or not origin or not target:
        return None
    promotion = payload.get("promotion")
    return {
        "from": origin.lower(),
        "to": target.lower(),
        "promotion": str(promotion).lower() if promotion else None,
    }


def cursor_view(session: Session) -> dict[str, Any]:
    """UI vars describing the session cursor."""
    return {
        "selected_id": node_id(session.cursor),
        "fen": session.cursor.position,
        "status": status_text(session),
        "can_go_back": session.can_go_back,
        "can_go_forward": session.can_go_forward,
    }


def status_text(session: Session) -> str:
    """Human-readable game state at the cursor."""
    side_to_move = "White" if session.cursor.position.split(" ")[1] == "w" else "Black"
    rec = session.cursor.record
    flags = rec.flags if isinstance(rec, PlayedMove) else frozenset()
    if MoveFlag.CHECKMATE in flags:
        winner = "Black" if side_to_move == "White" else "White"
        return f"{winner} wins by checkmate!"
    if MoveFlag.STALEMATE in flags:
        return "Stalemate!"
    if MoveFlag.DRAW in flags:
        return "Draw!"
    if MoveFlag.CHECK in flags:
        return f"Turn: {side_to_move} ({side_to_move} is in check!)"
    return f"Turn: {side_to_move}"


class ChessViewerState(rx.State):
    pgn_error: str = ""
    fen_error: str = ""
    selected_id: str = "n:root"
    fen: str = STARTING_FEN
    status: str = "Turn: White"

    headers: dict[str, str] = {}
    notation_lines: list[NotationLine] = []
    move_rows: list[MoveRow] = []

    can_go_back: bool = False
    can_go_forward: bool = False
    is_playing: bool = False

    # Click-to-move: origin square, its legal targets, and a promotion waiting
    # for a piece choice.
    selected_square: str = ""
    targets: list[str] = []
    promotion_from: str = ""
    promotion_to: str = ""

    notation_options: dict[str, Any] = SETTINGS.notation_options()
    playback_seconds: float = SETTINGS.playback_seconds

    _session: Session | None = None
    _playback: Playback | None = None

    def _get_session(self) -> Session:
        if self._session is None:
            self._session = Session()
            self._playback = Playback(self._session)
        return self._session

    def _get_playback(self) -> Playback:
        session = self._get_session()
        if self._playback is None:
            self._playback = Playback(session)
        return self._playback

    def _stop_playback(self) -> None:
        if self._playback is not None:
            self._playback.cancel()
        self.is_playing = False

    def _clear_selection(self) -> None:
        self.selected_square = ""
        self.targets = []
        self.promotion_from = ""
        self.promotion_to = ""

    def _sync_cursor(self) -> None:
        for name, value in cursor_view(self._get_session()).items():
            setattr(self, name, value)

    def _sync_tree(self) -> None:
        session = self._get_session()
        self.headers = dict(session.headers)
        self.notation_lines = build_notation_lines(session.tree, options=self.notation_options)
        self.move_rows = move_pairs(session.tree.root)
        self._sync_cursor()

    # Import

    def load_pgn_text(self, pgn: str) -> None:
        self._stop_playback()
        self.pgn_error = ""
        session = self._get_session()
        try:
            session.load_pgn(pgn)
        except NotationError as e:
            self.pgn_error = str(e)
            return
        except ValueError as e:
            logger.exception("PGN import produced an invalid tree")
            self.pgn_error = str(e)
            return
        self._clear_selection()
        self._sync_tree()

    def load_fen_text(self, fen: str) -> None:
        self._stop_playback()
        self.fen_error = ""
        try:
            self._get_session().load_fen(fen)
        except NotationError as e:
            self.fen_error = str(e)
            return
        self._clear_selection()
        self._sync_tree()

    def submit_pgn(self, form_data: dict) -> None:
        self.load_pgn_text(str(form_data.get("pgn") or ""))

    def submit_fen(self, form_data: dict) -> None:
        self.load_fen_text(str(form_data.get("fen") or ""))

    def on_pgn_upload(self, files: list[rx.UploadFile]) -> None:
        # Read the first uploaded file and parse it as PGN.
        if not files:
            return
        f = files[0]
        try:
            raw = f.file.read()
            text = raw.decode("utf-8", errors="replace")
        except OSError as e:
            self.pgn_error = f"upload read failed: {e}"
            return
        self.load_pgn_text(text)

    def reset_game(self) -> None:
        self._stop_playback()
        self._get_session().reset()
        self.pgn_error = ""
        self.fen_error = ""
        self._clear_selection()
        self._sync_tree()

    # Navigation

    def on_select(self, payload: dict) -> None:
        node = payload.get("node_id")
        if not isinstance(node, str) or not node:
            return
        self._stop_playback()
        try:
            self._get_session().jump_to_id(node)
        except KeyError:
            return
        self._clear_selection()
        self._sync_cursor()

    def nav_start(self) -> None:
        self._stop_playback()
        self._get_session().go_start()
        self._clear_selection()
        self._sync_cursor()

    def nav_back(self) -> None:
        self._stop_playback()
        self._get_session().go_back()
        self._clear_selection()
        self._sync_cursor()

    def nav_forward(self) -> None:
        self._stop_playback()
        self._get_session().go_forward()
        self._clear_selection()
        self._sync_cursor()

    def nav_end(self) -> None:
        self._stop_playback()
        self._get_session().go_end()
        self._clear_selection()
        self._sync_cursor()

    # Moves

    def _play(self, from_square: str, to_square: str, promotion: str | None = None) -> None:
        self._stop_playback()
        node = self._get_session().make_move(from_square, to_square, promotion)  # type: ignore[arg-type]
        self._clear_selection()
        if node is None:
            return
        self._sync_tree()

    def select_square(self, square: str) -> None:
        square = square.strip().lower()
        if self.selected_square and square in self.targets:
            self.move_to(square)
            return
        if square == self.selected_square:
            self._clear_selection()
            return
        targets = self._get_session().legal_targets(square)
        if not targets:
            self._clear_selection()
            return
        self.selected_square = square
        self.targets = sorted(targets)
        self.promotion_from = ""
        self.promotion_to = ""

    def move_to(self, square: str) -> None:
        if not self.selected_square:
            return
        target = self._get_session().legal_targets(self.selected_square).get(square)
        if target is None:
            return
        if target.is_promotion:
            self.promotion_from = self.selected_square
            self.promotion_to = square
            return
        self._play(self.selected_square, square)

    def choose_promotion(self, piece: str) -> None:
        if not self.promotion_to:
            return
        self._play(self.promotion_from, self.promotion_to, piece.lower())

    def cancel_promotion(self) -> None:
        self._clear_selection()

    def on_move(self, payload: dict) -> None:
        move = _move_from_payload(payload)
        if move is None:
            return
        self._play(move["from"], move["to"], move.get("promotion"))

    def submit_uci(self, form_data: dict) -> None:
        m = _UCI_RE.match(str(form_data.get("uci") or "").strip())
        if m is None:
            return
        origin, target, promotion = m.groups()
        self._play(origin.lower(), target.lower(), promotion.lower() if promotion else None)

    # Playback

    @rx.event(background=True)
    async def toggle_playback(self):
        async with self:
            playback = self._get_playback()
            if playback.active:
                self._stop_playback()
                return
            ticket = playback.start()
            self.is_playing = playback.active
            interval = self.playback_seconds

        while ticket is not None:
            await asyncio.sleep(interval)
            async with self:
                playback = self._get_playback()
                ticket, moved = playback.tick(ticket)
                if moved:
                    self._sync_cursor()
                self.is_playing = playback.active


def chess_viewer() -> rx.Component:
    upload = rx.upload.root(
        rx.text("Drop PGN here or click to choose a file (.pgn)"),
        id=UPLOAD_ID,
        multiple=False,
        max_files=1,
        accept={"text/plain": [".pgn", ".txt"]},
        border="1px dashed rgba(0,0,0,0.25)",
        padding="12px",
        width="100%",
        on_drop=ChessViewerState.on_pgn_upload,
    )

    imports = rx.hstack(
        rx.form(
            rx.hstack(
                rx.text_area(name="pgn", placeholder="Paste PGN", width="320px"),
                rx.button("Load PGN", type="submit"),
            ),
            on_submit=ChessViewerState.submit_pgn,
            reset_on_submit=True,
        ),
        rx.form(
            rx.hstack(
                rx.input(name="fen", placeholder="FEN", width="320px"),
                rx.button("Load FEN", type="submit"),
            ),
            on_submit=ChessViewerState.submit_fen,
            reset_on_submit=True,
        ),
        spacing="4",
        wrap="wrap",
    )

    toolbar = rx.hstack(
        rx.button("Start", on_click=ChessViewerState.nav_start, disabled=~ChessViewerState.can_go_back),
        rx.button("Back", on_click=ChessViewerState.nav_back, disabled=~ChessViewerState.can_go_back),
        rx.button(
            rx.cond(ChessViewerState.is_playing, "Pause", "Play"),
            on_click=ChessViewerState.toggle_playback,
        ),
        rx.button("Forward", on_click=ChessViewerState.nav_forward, disabled=~ChessViewerState.can_go_forward),
        rx.button("End", on_click=ChessViewerState.nav_end, disabled=~ChessViewerState.can_go_forward),
        rx.button("New Game", on_click=ChessViewerState.reset_game),
        rx.form(
            rx.hstack(
                rx.input(name="uci", placeholder="e2e4", width="90px"),
                rx.button("Move", type="submit"),
            ),
            on_submit=ChessViewerState.submit_uci,
            reset_on_submit=True,
        ),
        spacing="2",
        wrap="wrap",
    )

    promotion = rx.cond(
        ChessViewerState.promotion_to != "",
        rx.hstack(
            rx.text("Promote to:"),
            rx.foreach(
                ["q", "r", "b", "n"],
                lambda p: rx.button(p, on_click=ChessViewerState.choose_promotion(p)),
            ),
            rx.button("Cancel", on_click=ChessViewerState.cancel_promotion),
            spacing="2",
        ),
    )

    move_list = rx.vstack(
        rx.foreach(
            ChessViewerState.move_rows,
            lambda row: rx.hstack(
                rx.text(row.number.to_string() + "."),
                rx.el.span(row.white_san, on_click=ChessViewerState.on_select({"node_id": row.white_id})),
                rx.el.span(row.black_san, on_click=ChessViewerState.on_select({"node_id": row.black_id})),
                spacing="3",
            ),
        ),
        spacing="1",
    )

    return rx.vstack(
        upload,
        imports,
        rx.cond(ChessViewerState.pgn_error != "", rx.callout(ChessViewerState.pgn_error, color_scheme="red")),
        rx.cond(ChessViewerState.fen_error != "", rx.callout(ChessViewerState.fen_error, color_scheme="red")),
        toolbar,
        promotion,
        rx.text(ChessViewerState.status),
        rx.code(ChessViewerState.fen),
        rx.hstack(
            move_list,
            chess_notation(
                lines=ChessViewerState.notation_lines,
                selected_id=ChessViewerState.selected_id,
                on_select=ChessViewerState.on_select,
            ),
            spacing="6",
            align="start",
            wrap="wrap",
        ),
        spacing="3",
    )
