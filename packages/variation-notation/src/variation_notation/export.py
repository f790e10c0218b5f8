from __future__ import annotations

from variation_tree import STARTING_FEN, HistoryTree, MoveNode, PlayedMove

from .movetext import RESULT_TOKENS


def move_number_prefix(record: PlayedMove, *, line_start: bool) -> str | None:
    """Return 'N.' / 'N...' prefix or None."""
    if record.side == "white":
        return f"{record.move_number}."
    if line_start:
        return f"{record.move_number}..."
    return None


def _emit(node: MoveNode, parts: list[str], *, line_start: bool) -> None:
    rec = node.record
    if not isinstance(rec, PlayedMove):
        return
    prefix = move_number_prefix(rec, line_start=line_start)
    if prefix:
        parts.append(prefix)
    parts.append(rec.san)


def _write_line(start: MoveNode, parts: list[str], *, line_start: bool) -> None:
    cur = start
    first = line_start
    while cur.children:
        main = cur.children[0]
        _emit(main, parts, line_start=first)

        alts = cur.children[1:]
        for alt in alts:
            parts.append("(")
            _emit(alt, parts, line_start=True)
            _write_line(alt, parts, line_start=False)
            parts.append(")")

        # A black move right after a closed variation needs its "N..." again.
        first = bool(alts)
        cur = main


def export_movetext(root: MoveNode) -> str:
    """Serialize the tree below ``root`` as PGN movetext with variations."""
    parts: list[str] = []
    _write_line(root, parts, line_start=True)
    return " ".join(parts).replace("( ", "(").replace(" )", ")")


def export_pgn(
    tree: HistoryTree,
    headers: dict[str, str] | None = None,
    result: str = "*",
) -> str:
    """Build a single-game PGN document from ``tree``."""
    if result not in RESULT_TOKENS:
        raise ValueError(f"PGN result must be one of {RESULT_TOKENS}, got {result!r}")

    tags = {k: v for k, v in (headers or {}).items() if k not in ("FEN", "SetUp", "Result")}
    tags["Result"] = result
    if tree.root.position != STARTING_FEN:
        tags["SetUp"] = "1"
        tags["FEN"] = tree.root.position

    lines: list[str] = []
    for key, value in tags.items():
        escaped = value.replace("\\", "\\\\").replace('"', '\\"')
        lines.append(f'[{key} "{escaped}"]')
    lines.append("")
    movetext = export_movetext(tree.root)
    lines.append(f"{movetext} {result}" if movetext else result)
    lines.append("")
    return "\n".join(lines)
