from __future__ import annotations

from collections.abc import Iterable

from .gemtext import FENCE, GemtextToken, TokenKind
from .html import strip_terminator

LINE_PREFIXES = {
    TokenKind.HEADING: "# ",
    TokenKind.SUB_HEADING: "## ",
    TokenKind.SUB_SUB_HEADING: "### ",
    TokenKind.UNORDERED_LIST: "* ",
    TokenKind.BLOCKQUOTE: "> ",
}


def render_gemtext(tokens: Iterable[GemtextToken]) -> str:
    """Render tokens back into normalized gemtext, one line per token."""
    lines: list[str] = []
    for token in tokens:
        kind = token.kind
        if kind in LINE_PREFIXES:
            lines.append(f"{LINE_PREFIXES[kind]}{strip_terminator(token.data)}\n")
        elif kind is TokenKind.LINK:
            target = strip_terminator(token.data)
            label = strip_terminator(token.label)
            lines.append(f"=> {target} {label}\n" if label else f"=> {target}\n")
        elif kind is TokenKind.PREFORMATTED_TEXT:
            body = token.data
            if body and not body.endswith("\n"):
                body += "\n"
            opening = f"{FENCE}{token.alt}" if token.alt else FENCE
            lines.append(f"{opening}\n{body}{FENCE}\n")
        else:
            lines.append(f"{strip_terminator(token.data)}\n")
    return "".join(lines)


def render_plain(tokens: Iterable[GemtextToken]) -> str:
    """Render only the readable text of the tokens, without any markers.

    Links contribute their label, or their target when unlabeled. Blank lines
    are skipped.
    """
    parts: list[str] = []
    for token in tokens:
        if token.kind is TokenKind.PREFORMATTED_TEXT:
            value = token.data.rstrip("\r\n")
        elif token.kind is TokenKind.LINK:
            value = strip_terminator(token.label) or strip_terminator(token.data)
        else:
            value = strip_terminator(token.data)
        if value.strip():
            parts.append(value)
    return "\n".join(parts)
