from __future__ import annotations

import datetime as dt
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TypeVar

import markdown

from .errors import SourceError
from .frontmatter import parse_date, require, split_front_matter
from .gemini import render_gemtext, render_plain
from .gemtext import tokenize
from .html import render_html

SUMMARY_LENGTH = 200
SOURCE_SUFFIX = ".gmi"

T = TypeVar("T")


@dataclass(frozen=True)
class RenderOptions:
    escape: bool = False
    highlight: bool = False


@dataclass
class Post:
    title: str
    slug: str
    date: dt.date
    filename: str
    source: Path
    html_content: str
    gemini_content: str
    summary: str


@dataclass
class Topic:
    title: str
    slug: str
    filename: str
    source: Path
    html_content: str
    gemini_content: str


@dataclass
class About:
    title: str
    html_content: str
    gemini_content: str


def read_source(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise SourceError(f"could not open file {path}: {exc}") from exc


def post_filename(date: dt.date, slug: str) -> str:
    return f"{date:%Y%m%d}_{slug}"


def summarize(text: str, length: int = SUMMARY_LENGTH) -> str:
    summary = " ".join(text.split())
    return summary[:length] + ("..." if len(summary) > length else "")


def load_post(path: Path, options: RenderOptions = RenderOptions()) -> Post:
    meta, body = split_front_matter(read_source(path), path)
    require(meta, ("title", "slug", "date"), path)
    date = parse_date(meta["date"], path)
    slug = str(meta["slug"]).strip()
    tokens = tokenize(body)
    summary = str(meta.get("summary") or "").strip() or summarize(render_plain(tokens))
    return Post(
        title=str(meta["title"]),
        slug=slug,
        date=date,
        filename=post_filename(date, slug),
        source=path,
        html_content=render_html(tokens, escape=options.escape, highlight=options.highlight),
        gemini_content=render_gemtext(tokens),
        summary=summary,
    )


def load_topic(path: Path, options: RenderOptions = RenderOptions()) -> Topic:
    meta, body = split_front_matter(read_source(path), path)
    require(meta, ("title", "slug"), path)
    slug = str(meta["slug"]).strip()
    tokens = tokenize(body)
    return Topic(
        title=str(meta["title"]),
        slug=slug,
        filename=slug,
        source=path,
        html_content=render_html(tokens, escape=options.escape, highlight=options.highlight),
        gemini_content=render_gemtext(tokens),
    )


def load_about(path: Path, options: RenderOptions = RenderOptions()) -> About:
    """Load the about page.

    Gemtext sources go through the tokenizer. Markdown sources are converted
    with Python-Markdown for the HTML tree and copied as-is to the Gemini tree.
    """
    meta, body = split_front_matter(read_source(path), path)
    title = str(meta.get("title") or "About")
    if path.suffix.lower() == ".md":
        text = "".join(body)
        md = markdown.Markdown(extensions=["fenced_code", "tables"])
        return About(title=title, html_content=md.convert(text), gemini_content=text)
    tokens = tokenize(body)
    return About(
        title=title,
        html_content=render_html(tokens, escape=options.escape, highlight=options.highlight),
        gemini_content=render_gemtext(tokens),
    )


def load_dir(directory: Path, loader: Callable[[Path], T]) -> list[T]:
    """Load every gemtext source of a directory, in file name order."""
    if not directory.exists():
        return []
    if not directory.is_dir():
        raise SourceError(f"{directory} is not a directory")
    paths = sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == SOURCE_SUFFIX)
    return [loader(path) for path in paths]
