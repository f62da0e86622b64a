from __future__ import annotations

import datetime as dt
import tomllib
from pathlib import Path

from .errors import FrontMatterError
from .gemtext import split_lines

DELIMITER = "---"
DATE_FMT = "%Y-%m-%d"


def split_front_matter(text: str, source: Path | None = None) -> tuple[dict, list[str]]:
    """Split a ``---`` delimited TOML header off a document.

    Returns the metadata and the body lines with their terminators. A single
    blank line right after the header is dropped. Documents without a header
    come back whole with empty metadata.
    """
    clean_text = text.lstrip("\ufeff")
    lines = split_lines(clean_text)
    if not lines or lines[0].strip() != DELIMITER:
        return {}, lines

    end = None
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            end = i
            break
    if end is None:
        raise FrontMatterError("front matter is missing its closing '---'", source)

    try:
        meta = tomllib.loads("".join(lines[1:end]))
    except tomllib.TOMLDecodeError as exc:
        raise FrontMatterError(f"malformed front matter: {exc}", source) from exc

    body = lines[end + 1 :]
    if body and not body[0].strip():
        body = body[1:]
    return meta, body


def require(meta: dict, keys: tuple[str, ...], source: Path | None = None) -> None:
    missing = [key for key in keys if not str(meta.get(key, "")).strip()]
    if missing:
        raise FrontMatterError(f"front matter is missing {', '.join(missing)}", source)


def parse_date(value: object, source: Path | None = None) -> dt.date:
    # TOML parses bare dates itself; quoted ones are still accepted.
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.datetime.strptime(str(value).strip(), DATE_FMT).date()
    except ValueError as exc:
        raise FrontMatterError(
            f"date {value!r} is formatted incorrectly, please use YYYY-MM-DD", source
        ) from exc
