import datetime as dt
from pathlib import Path

import pytest

from crosspub.content import (
    RenderOptions,
    load_about,
    load_dir,
    load_post,
    load_topic,
    post_filename,
    summarize,
)
from crosspub.errors import FrontMatterError, SourceError


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_load_post(tmp_path: Path) -> None:
    path = write(
        tmp_path / "posts" / "hello.gmi",
        '---\ntitle = "Hello"\nslug = "hello-world"\ndate = "2024-03-05"\n---\n\n'
        "# Hello\n* one\n* two\n=> /x Elsewhere\n",
    )
    post = load_post(path)
    assert post.title == "Hello"
    assert post.date == dt.date(2024, 3, 5)
    assert post.filename == "20240305_hello-world"
    assert post.html_content == (
        "<h1>Hello</h1>\n<ul>\n<li>one</li>\n<li>two</li>\n</ul>\n"
        '<p><a href="/x">Elsewhere</a></p>\n'
    )
    assert post.gemini_content == "# Hello\n* one\n* two\n=> /x Elsewhere\n"
    assert post.summary == "Hello one two Elsewhere"


def test_load_post_summary_from_front_matter(tmp_path: Path) -> None:
    path = write(
        tmp_path / "a.gmi",
        '---\ntitle = "A"\nslug = "a"\ndate = 2024-01-01\nsummary = "Short."\n---\nbody\n',
    )
    assert load_post(path).summary == "Short."


def test_load_post_escaped(tmp_path: Path) -> None:
    path = write(tmp_path / "a.gmi", '---\ntitle = "A"\nslug = "a"\ndate = 2024-01-01\n---\n<b>\n')
    assert load_post(path, RenderOptions(escape=True)).html_content == "<p>&lt;b&gt;</p>\n"


def test_load_post_missing_date(tmp_path: Path) -> None:
    path = write(tmp_path / "a.gmi", '---\ntitle = "A"\nslug = "a"\n---\nbody\n')
    with pytest.raises(FrontMatterError, match="date"):
        load_post(path)


def test_load_topic(tmp_path: Path) -> None:
    path = write(tmp_path / "garden.gmi", '---\ntitle = "Garden"\nslug = "garden"\n---\n\n> wiki\n')
    topic = load_topic(path)
    assert topic.filename == "garden"
    assert topic.html_content == "<blockquote>wiki</blockquote>\n"
    assert topic.gemini_content == "> wiki\n"


def test_load_about_without_front_matter(tmp_path: Path) -> None:
    about = load_about(write(tmp_path / "about.gmi", "## Me\nHi there\n"))
    assert about.title == "About"
    assert about.html_content == "<h2>Me</h2>\n<p>Hi there</p>\n"


def test_load_about_markdown(tmp_path: Path) -> None:
    about = load_about(write(tmp_path / "about.md", "# Me\n\nSome *text*.\n"))
    assert "<em>text</em>" in about.html_content
    assert about.gemini_content == "# Me\n\nSome *text*.\n"


def test_load_dir_only_gemtext_in_name_order(tmp_path: Path) -> None:
    write(tmp_path / "b.gmi", "b\n")
    write(tmp_path / "a.gmi", "a\n")
    write(tmp_path / "notes.txt", "skip\n")
    assert load_dir(tmp_path, lambda p: p.name) == ["a.gmi", "b.gmi"]


def test_load_dir_missing_is_empty(tmp_path: Path) -> None:
    assert load_dir(tmp_path / "missing", lambda p: p) == []


def test_load_dir_not_a_directory(tmp_path: Path) -> None:
    path = write(tmp_path / "file.gmi", "x\n")
    with pytest.raises(SourceError):
        load_dir(path, lambda p: p)


def test_post_filename() -> None:
    assert post_filename(dt.date(2023, 1, 9), "slug") == "20230109_slug"


def test_summarize() -> None:
    assert summarize("a  b\nc") == "a b c"
    assert summarize("x" * 10, length=4) == "xxxx..."
