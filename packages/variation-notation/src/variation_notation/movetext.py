"""PGN import: headers, movetext normalization and variation-aware tree building."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from loguru import logger

from variation_tree import HistoryTree, MoveNode, RulesOracle, add_child, main_line, main_line_end

from .errors import MovetextParseError, NotationError
from .fen_loader import load_fen

RESULT_TOKENS = ("1-0", "0-1", "1/2-1/2", "*")

_HEADER_RE = re.compile(r'^\[\s*(\w+)\s+"((?:[^"\\]|\\.)*)"\s*\]$', re.S)
# Comments are matched alongside brackets so "[%clk ...]" or "; see [ref]"
# inside a comment is never mistaken for a tag pair.
_BLOCK_RE = re.compile(r"\{[^}]*\}?|;[^\n]*|\[[^\]]*\]?")
_COMMENT_RE = re.compile(r"\{[^}]*\}?|;[^\n]*")
_ESCAPE_LINE_RE = re.compile(r"^%[^\n]*", re.M)
_NAG_RE = re.compile(r"\$\d+")
_PAREN_RE = re.compile(r"([()])")
_MOVE_NUMBER_RE = re.compile(r"^[\d.]+$")
_MOVE_NUMBER_PREFIX_RE = re.compile(r"^\d+\.+")
_SUFFIX_RE = re.compile(r"[!?]+$")


@dataclass(slots=True)
class ParsedGame:
    tree: HistoryTree
    cursor: MoveNode
    headers: dict[str, str] = field(default_factory=dict)
    result: str = "*"
    skipped: list[str] = field(default_factory=list)

    @property
    def main_line_length(self) -> int:
        return len(main_line(self.tree.root))


def extract_headers(text: str) -> tuple[dict[str, str], str]:
    """Split ``text`` into its tag pairs and the remaining movetext."""
    headers: dict[str, str] = {}

    def take(match: re.Match[str]) -> str:
        block = match.group(0)
        if block.startswith(("{", ";")):
            return block
        m = _HEADER_RE.match(block)
        if m is None:
            raise MovetextParseError(f"Invalid PGN header: {block.strip()!r}")
        key, raw_value = m.groups()
        headers[key] = raw_value.replace('\\"', '"').replace("\\\\", "\\")
        return " "

    movetext = _BLOCK_RE.sub(take, text)
    return headers, movetext


def normalize_movetext(movetext: str) -> tuple[str, str]:
    """Strip comments, NAGs and the result marker; pad parentheses.

    Returns the normalized text and the result token (``"*"`` when absent).
    """
    text = _ESCAPE_LINE_RE.sub(" ", movetext)
    text = _COMMENT_RE.sub(" ", text)
    text = _NAG_RE.sub(" ", text)
    text = _PAREN_RE.sub(r" \1 ", text)
    text = " ".join(text.split())

    result = "*"
    for token in RESULT_TOKENS:
        if text == token or text.endswith(" " + token):
            result = token
            text = text[: -len(token)].rstrip()
            break
    return text, result


def tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    for raw in text.split():
        if _MOVE_NUMBER_RE.match(raw):
            continue
        token = _MOVE_NUMBER_PREFIX_RE.sub("", raw)
        token = _SUFFIX_RE.sub("", token)
        if token:
            tokens.append(token)
    return tokens


def build_tree(
    oracle: RulesOracle,
    tokens: list[str],
    tree: HistoryTree,
    skipped: list[str] | None = None,
) -> HistoryTree:
    """Graft ``tokens`` onto ``tree`` starting at its root.

    Variations are tracked with an explicit stack of resume points, so nesting
    depth is not bounded by the interpreter's recursion limit. Illegal tokens
    are dropped and parsing continues from the same node.
    """
    current = tree.root
    stack: list[MoveNode] = []

    for token in tokens:
        if token == "(":
            stack.append(current)
            # The variation replaces the last move, so it starts from its parent.
            if current.parent is not None:
                current = current.parent
            continue

        if token == ")":
            if stack:
                current = stack.pop()
            continue

        outcome = oracle.apply_san(current.position, token)
        if outcome is None:
            logger.debug("skipping illegal token {!r} at ply {}", token, current.ply + 1)
            if skipped is not None:
                skipped.append(token)
            continue
        current = add_child(current, outcome)

    if stack:
        logger.debug("{} unclosed variation(s) at end of movetext", len(stack))
    return tree


def parse_pgn(oracle: RulesOracle, text: str) -> ParsedGame:
    """Parse one PGN game (headers + movetext with variations) into a new tree."""
    if not text or not text.strip():
        raise MovetextParseError("PGN: no movetext found")

    try:
        headers, movetext = extract_headers(text)
        normalized, result = normalize_movetext(movetext)
        tokens = tokenize(normalized)

        start_fen = headers.get("FEN")
        tree = load_fen(oracle, start_fen) if start_fen else HistoryTree.fresh()

        skipped: list[str] = []
        build_tree(oracle, tokens, tree, skipped)
    except NotationError:
        raise
    except Exception as e:
        raise MovetextParseError(f"PGN: {e}") from e

    if result == "*" and headers.get("Result") in RESULT_TOKENS:
        result = headers["Result"]
    if skipped:
        logger.info("PGN import skipped {} token(s): {}", len(skipped), " ".join(skipped))

    return ParsedGame(
        tree=tree,
        cursor=main_line_end(tree.root),
        headers=headers,
        result=result,
        skipped=skipped,
    )
