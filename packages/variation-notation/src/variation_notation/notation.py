from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import reflex as rx
from pydantic import BaseModel

from variation_tree import HistoryTree, MoveNode, PlayedMove, main_line, node_id

from .export import move_number_prefix


@dataclass(frozen=True, slots=True)
class NotationOptions:
    show_move_numbers: bool = True
    max_variation_depth: int | None = None
    indent_px: int = 18


def _opts(options: dict[str, Any] | None) -> NotationOptions:
    if not options:
        return NotationOptions()
    return NotationOptions(
        show_move_numbers=bool(options.get("show_move_numbers", True)),
        max_variation_depth=(
            None
            if options.get("max_variation_depth") in (None, "")
            else int(options["max_variation_depth"])
        ),
        indent_px=int(options.get("indent_px", 18)),
    )


class NotationToken(BaseModel):
    kind: str
    text: str = ""
    node_id: str = ""
    san: str = ""


class NotationLine(BaseModel):
    indent: str  # e.g. "18px"
    tokens: list[NotationToken]


class MoveRow(BaseModel):
    """One row of the flat main-line list: move number plus both halves."""

    number: int
    white_id: str = ""
    white_san: str = ""
    black_id: str = ""
    black_san: str = ""


def _tok(kind: str, **kwargs: Any) -> NotationToken:
    return NotationToken(kind=kind, **kwargs)


def _move_tokens(node: MoveNode, *, line_start: bool, o: NotationOptions) -> list[NotationToken]:
    rec = node.record
    if not isinstance(rec, PlayedMove):
        return []

    out: list[NotationToken] = []
    prefix = move_number_prefix(rec, line_start=line_start) if o.show_move_numbers else None
    if prefix:
        out.append(_tok("moveno", text=prefix))
        out.append(_tok("text", text=" "))
    out.append(_tok("move", node_id=node_id(node), san=rec.san))
    out.append(_tok("text", text=" "))
    return out


def _trim(tokens: list[NotationToken]) -> None:
    while tokens and tokens[-1].kind == "text" and tokens[-1].text == " ":
        tokens.pop()


def _indent(depth: int, o: NotationOptions) -> str:
    return f"{depth * o.indent_px}px"


def _build_mainline_lines(
    *,
    start: MoveNode,
    depth: int,
    o: NotationOptions,
) -> list[NotationLine]:
    lines: list[NotationLine] = []
    tokens: list[NotationToken] = []
    first = True

    cur = start
    while cur.children:
        main = cur.children[0]
        tokens.extend(_move_tokens(main, line_start=first, o=o))
        # Alternatives to ``main`` are listed after the SAN they replace.
        lines.extend(_build_variation_lines(branch=cur, depth=depth, o=o))
        first = False
        cur = main

    if tokens:
        _trim(tokens)
        lines.insert(0, NotationLine(indent=_indent(depth, o), tokens=tokens))
    return lines


def _build_variation_lines(
    *,
    branch: MoveNode,
    depth: int,
    o: NotationOptions,
) -> list[NotationLine]:
    if len(branch.children) <= 1:
        return []

    next_depth = depth + 1
    if o.max_variation_depth is not None and next_depth > o.max_variation_depth:
        return [NotationLine(indent=_indent(next_depth, o), tokens=[_tok("comment", text="(…)")])]

    lines: list[NotationLine] = []
    for v in branch.children[1:]:
        head: list[NotationToken] = [_tok("text", text="("), _tok("text", text=" ")]
        head.extend(_move_tokens(v, line_start=True, o=o))

        nested: list[NotationLine] = []
        cur = v
        while cur.children:
            main = cur.children[0]
            head.extend(_move_tokens(main, line_start=False, o=o))
            nested.extend(_build_variation_lines(branch=cur, depth=next_depth, o=o))
            cur = main

        _trim(head)
        head.extend([_tok("text", text=" "), _tok("text", text=")")])

        lines.append(NotationLine(indent=_indent(next_depth, o), tokens=head))
        lines.extend(nested)

    return lines


def build_notation_lines(
    tree: HistoryTree,
    options: dict[str, Any] | None = None,
) -> list[NotationLine]:
    """Server-side builder: move tree -> renderable lines.

    The main line comes first; every variation gets its own indented line,
    followed by the variations nested inside it.
    """
    o = _opts(options)
    return _build_mainline_lines(start=tree.root, depth=0, o=o)


def move_pairs(root: MoveNode) -> list[MoveRow]:
    """Group the main line into numbered white/black rows."""
    rows: list[MoveRow] = []
    for node in main_line(root):
        rec = node.record
        if not isinstance(rec, PlayedMove):
            continue
        if rec.side == "white":
            rows.append(MoveRow(number=rec.move_number, white_id=node_id(node), white_san=rec.san))
        elif rows and rows[-1].number == rec.move_number and not rows[-1].black_id:
            rows[-1].black_id = node_id(node)
            rows[-1].black_san = rec.san
        else:
            # Game started with black to move.
            rows.append(MoveRow(number=rec.move_number, black_id=node_id(node), black_san=rec.san))
    return rows


def _render_token(token: NotationToken, *, selected_id: rx.Var, on_select: rx.EventHandler) -> rx.Component:
    move_style = {"cursor": "pointer", "padding": "1px 3px", "marginRight": "4px"}
    move_style_sel = {**move_style, "backgroundColor": "rgba(59, 130, 246, 0.18)"}
    return rx.cond(
        token.kind == "move",
        rx.cond(
            token.node_id == selected_id,
            rx.el.span(
                token.san,
                title=token.node_id,
                style=move_style_sel,
                on_click=on_select({"node_id": token.node_id}),
            ),
            rx.el.span(
                token.san,
                title=token.node_id,
                style=move_style,
                on_click=on_select({"node_id": token.node_id}),
            ),
        ),
        rx.el.span(token.text),
    )


def chess_notation(
    lines: list[NotationLine],
    selected_id: str,
    on_select: rx.EventHandler,
) -> rx.Component:
    """Render prebuilt notation lines (Var-friendly)."""
    selected_var = rx.Var.create(selected_id)

    def render_line(line: NotationLine) -> rx.Component:
        return rx.el.div(
            rx.foreach(
                line.tokens,
                lambda t: _render_token(t, selected_id=selected_var, on_select=on_select),
            ),
            style={"marginLeft": line.indent, "whiteSpace": "pre-wrap"},
        )

    return rx.el.div(rx.foreach(lines, render_line))
