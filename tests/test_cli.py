from pathlib import Path

import pytest

from crosspub.cli import build_site, main
from crosspub.config import config_from_dict
from crosspub.errors import FrontMatterError, TemplateError

CONFIG = """\
[site]
name = "Example & Co"
url = "https://example.com/"
username = "me"
html_root = "public_html"
gemini_root = "public_gemini"

[homepage]
use_about_page = true

[feed]
limit = 1
"""


def write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


@pytest.fixture
def site(tmp_path: Path) -> Path:
    write(tmp_path / "config.toml", CONFIG)
    write(
        tmp_path / "posts" / "first.gmi",
        '---\ntitle = "First"\nslug = "first"\ndate = "2024-01-02"\n---\n\n# First\ntext\n',
    )
    write(
        tmp_path / "posts" / "second.gmi",
        '---\ntitle = "Second"\nslug = "second"\ndate = "2024-03-05"\n---\n\n'
        "```\ncode <here>\n```\n",
    )
    write(tmp_path / "topics" / "garden.gmi", '---\ntitle = "Garden"\nslug = "garden"\n---\n\n* plant\n')
    write(tmp_path / "about.gmi", "Hello, I write things.\n")
    return tmp_path


def load(site: Path, **overrides: dict):
    data = {
        "site": {
            "name": "Example & Co",
            "url": "https://example.com/",
            "username": "me",
            "html_root": "public_html",
            "gemini_root": "public_gemini",
        },
        "homepage": {"use_about_page": True},
        "feed": {"limit": 1},
    }
    data.update(overrides)
    return config_from_dict(data)


def test_build_site_writes_both_trees(site: Path) -> None:
    assert build_site(load(site), site, workers=2) == 2

    html_root = site / "public_html"
    gemini_root = site / "public_gemini"
    post = (html_root / "posts" / "20240305_second.html").read_text(encoding="utf-8")
    assert "<pre>code <here>\n</pre>" in post
    assert "March 5, 2024" in post
    assert "Example &amp; Co" in post
    assert '<link rel="stylesheet" href="../style.css">' in post
    assert '<a href="../about.html">About</a>' in post

    gemini_post = (gemini_root / "posts" / "20240102_first.gmi").read_text(encoding="utf-8")
    assert gemini_post.startswith("# First\nJanuary 2, 2024\n")
    assert "# First\ntext\n" in gemini_post

    assert (html_root / "topics" / "garden.html").read_text(encoding="utf-8").count("<li>plant</li>") == 1
    assert (gemini_root / "topics" / "garden.gmi").exists()
    assert "Hello, I write things." in (html_root / "about.html").read_text(encoding="utf-8")
    assert (gemini_root / "about.gmi").exists()
    assert (html_root / "style.css").exists()


def test_index_lists_newest_first(site: Path) -> None:
    build_site(load(site), site)
    index = (site / "public_html" / "index.html").read_text(encoding="utf-8")
    assert index.index("20240305_second.html") < index.index("20240102_first.html")
    assert "./topics/garden.html" in index

    gemini_index = (site / "public_gemini" / "index.gmi").read_text(encoding="utf-8")
    assert "=> posts/20240305_second.gmi 2024-03-05 Second\n" in gemini_index
    assert "=> topics/garden.gmi Garden\n" in gemini_index
    assert "=> ./about.gmi About\n" in gemini_index


def test_atom_feed(site: Path) -> None:
    build_site(load(site), site)
    feed = (site / "public_html" / "atom.xml").read_text(encoding="utf-8")
    assert feed.count("<entry>") == 1
    assert "<id>https://example.com/posts/20240305_second.html</id>" in feed
    assert "<updated>2024-03-05T00:00:00Z</updated>" in feed
    assert "&lt;pre&gt;" in feed
    assert "<author><name>me</name></author>" in feed


def test_custom_homepage_skips_index(site: Path) -> None:
    build_site(load(site, homepage={"custom_homepage": True}), site)
    assert not (site / "public_html" / "index.html").exists()
    assert not (site / "public_gemini" / "index.gmi").exists()


def test_custom_templates(site: Path) -> None:
    for name in ("post", "topic", "about", "index"):
        write(site / "tpl" / "html" / f"{name}.html", "[{{title}}]{{content}}")
        write(site / "tpl" / "gemini" / f"{name}.gmi", "{{content}}")
    config = load(
        site,
        templates={
            "custom_templates": True,
            "custom_html_path": "tpl/html",
            "custom_gemini_path": "tpl/gemini",
        },
    )
    build_site(config, site)
    page = (site / "public_html" / "posts" / "20240102_first.html").read_text(encoding="utf-8")
    assert page == "[First]<h1>First</h1>\n<p>text</p>\n"


def test_missing_custom_template(site: Path) -> None:
    write(site / "tpl" / "post.html", "{{content}}")
    config = load(site, templates={"custom_templates": True, "custom_html_path": "tpl"})
    with pytest.raises(TemplateError):
        build_site(config, site)
    assert not (site / "public_html").exists()


def test_bad_post_writes_nothing(site: Path) -> None:
    write(site / "posts" / "broken.gmi", '---\ntitle = "Broken"\n---\nbody\n')
    with pytest.raises(FrontMatterError):
        build_site(load(site), site)
    assert not (site / "public_html").exists()
    assert not (site / "public_gemini").exists()


def test_main_builds_site(site: Path, capsys: pytest.CaptureFixture[str]) -> None:
    main(["--config", str(site / "config.toml"), "--dir", str(site)])
    out = capsys.readouterr().out
    assert "Build completed" in out
    assert "Published 2 posts" in out
    assert (site / "public_html" / "index.html").exists()


def test_main_reports_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--config", str(tmp_path / "missing.toml"), "--dir", str(tmp_path)])
    assert excinfo.value.code == 1
    assert capsys.readouterr().err.startswith("Error: could not find config file")


def test_main_init(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    main(["--init", "--dir", str(tmp_path / "site")])
    assert (tmp_path / "xdg" / "crosspub" / "config.toml").exists()
    assert (tmp_path / "site" / "posts").is_dir()
    assert "Initialized crosspub" in capsys.readouterr().out
