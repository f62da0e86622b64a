from __future__ import annotations

import html as html_lib
from collections.abc import Iterable

from pygments import highlight as pygments_highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from .gemtext import GemtextToken, TokenKind

HEADING_TAGS = {
    TokenKind.HEADING: "h1",
    TokenKind.SUB_HEADING: "h2",
    TokenKind.SUB_SUB_HEADING: "h3",
}


def strip_terminator(text: str) -> str:
    if text.endswith("\r\n"):
        return text[:-2]
    if text.endswith(("\n", "\r")):
        return text[:-1]
    return text


def highlight_preformatted(data: str, alt: str) -> str | None:
    """Highlight a preformatted block when its alt text names a lexer."""
    name = alt.split(" ", 1)[0].strip()
    if not name:
        return None
    try:
        lexer = get_lexer_by_name(name)
    except ClassNotFound:
        return None
    formatter = HtmlFormatter(cssclass="codehilite")
    return pygments_highlight(data, lexer, formatter).rstrip("\n")


def render_token(token: GemtextToken, escape: bool = False, highlight: bool = False) -> str:
    """Render one token as HTML, without list wrapping.

    Returns an empty string for blank text lines.
    """

    def text(value: str) -> str:
        value = strip_terminator(value)
        return html_lib.escape(value) if escape else value

    kind = token.kind
    if kind in HEADING_TAGS:
        tag = HEADING_TAGS[kind]
        return f"<{tag}>{text(token.data)}</{tag}>\n"
    if kind is TokenKind.LINK:
        href = text(token.data)
        label = text(token.label) or href
        return f'<p><a href="{href}">{label}</a></p>\n'
    if kind is TokenKind.BLOCKQUOTE:
        return f"<blockquote>{text(token.data)}</blockquote>\n"
    if kind is TokenKind.PREFORMATTED_TEXT:
        if highlight and token.alt:
            highlighted = highlight_preformatted(token.data, token.alt)
            if highlighted is not None:
                return f"{highlighted}\n"
        body = html_lib.escape(token.data) if escape else token.data
        return f"<pre>{body}</pre>\n"
    if kind is TokenKind.UNORDERED_LIST:
        return f"<li>{text(token.data)}</li>\n"
    value = text(token.data)
    if not value:
        return ""
    return f"<p>{value}</p>\n"


def render_html(tokens: Iterable[GemtextToken], escape: bool = False, highlight: bool = False) -> str:
    """Render tokens into an HTML fragment.

    Runs of consecutive list items are wrapped in a single ``<ul>``. Content is
    interpolated as-is unless ``escape`` is set. With ``highlight`` set,
    preformatted blocks whose alt text names a Pygments lexer are highlighted.
    """
    parts: list[str] = []
    in_list = False
    for token in tokens:
        is_item = token.kind is TokenKind.UNORDERED_LIST
        if in_list and not is_item:
            parts.append("</ul>\n")
            in_list = False
        elif is_item and not in_list:
            parts.append("<ul>\n")
            in_list = True
        parts.append(render_token(token, escape=escape, highlight=highlight))
    if in_list:
        parts.append("</ul>\n")
    return "".join(parts)
