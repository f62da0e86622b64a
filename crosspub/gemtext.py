"""Gemtext tokenizer.

Each source line is classified into a typed token. Lines between two fences
are collected into a single preformatted token, so the tokenizer is a small
state machine that is either outside a block or accumulating one.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

FENCE = "```"


class TokenKind(Enum):
    TEXT = "text"
    LINK = "link"
    UNORDERED_LIST = "unordered_list"
    BLOCKQUOTE = "blockquote"
    HEADING = "heading"
    SUB_HEADING = "sub_heading"
    SUB_SUB_HEADING = "sub_sub_heading"
    PREFORMATTED_TEXT = "preformatted_text"


MARKERS = {
    "=>": TokenKind.LINK,
    "*": TokenKind.UNORDERED_LIST,
    ">": TokenKind.BLOCKQUOTE,
    "###": TokenKind.SUB_SUB_HEADING,
    "##": TokenKind.SUB_HEADING,
    "#": TokenKind.HEADING,
}


@dataclass(frozen=True)
class GemtextToken:
    kind: TokenKind
    data: str
    # Friendly name of a link; empty for everything else.
    label: str = ""
    # Alt text of the opening fence; only set on preformatted tokens.
    alt: str = ""


@dataclass
class _Normal:
    pass


@dataclass
class _InPreformattedBlock:
    alt: str = ""
    lines: list[str] = field(default_factory=list)


def split_lines(text: str) -> list[str]:
    """Split a document into lines, keeping their terminators.

    Only a line feed ends a line. A carriage return before it stays with the
    line, and other Unicode separators are ordinary characters.
    """
    pieces = text.split("\n")
    lines = [f"{piece}\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def is_fence(segment: str) -> bool:
    return segment.startswith(FENCE)


def fence_alt_text(line: str) -> str:
    return line.strip()[len(FENCE) :].strip()


def classify(segment: str) -> TokenKind:
    """Return the token kind for the leading segment of a line.

    The exact marker table is consulted first; a fence prefix then wins over
    whatever the table said.
    """
    kind = MARKERS.get(segment, TokenKind.TEXT)
    if is_fence(segment):
        kind = TokenKind.PREFORMATTED_TEXT
    return kind


def _line_token(kind: TokenKind, segments: list[str]) -> GemtextToken:
    if kind is TokenKind.TEXT:
        # Plain text has no marker, so the first segment is content too.
        return GemtextToken(kind, " ".join(segments))
    if len(segments) == 3:
        if kind is TokenKind.LINK:
            return GemtextToken(kind, segments[1], label=segments[2])
        return GemtextToken(kind, f"{segments[1]} {segments[2]}")
    if len(segments) == 2:
        return GemtextToken(kind, segments[1])
    return GemtextToken(kind, segments[0])


def tokenize(lines: Iterable[str]) -> list[GemtextToken]:
    """Convert gemtext lines into an ordered list of tokens.

    Lines may carry their terminators or not; whatever is present is kept in
    the token data. Every line either produces a token or is absorbed into a
    preformatted block. A block still open at the end of input is dropped.
    """
    tokens: list[GemtextToken] = []
    state: _Normal | _InPreformattedBlock = _Normal()

    for line in lines:
        segments = line.split(" ", 2)

        if isinstance(state, _InPreformattedBlock):
            if is_fence(segments[0]):
                tokens.append(
                    GemtextToken(
                        TokenKind.PREFORMATTED_TEXT,
                        "".join(state.lines),
                        alt=state.alt,
                    )
                )
                state = _Normal()
            else:
                state.lines.append(line)
            continue

        kind = classify(segments[0])
        if kind is TokenKind.PREFORMATTED_TEXT:
            state = _InPreformattedBlock(alt=fence_alt_text(line))
            continue
        tokens.append(_line_token(kind, segments))

    return tokens


def parse_gemtext(text: str) -> list[GemtextToken]:
    return tokenize(split_lines(text))
