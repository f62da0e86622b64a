from __future__ import annotations

import argparse
import os
import sys
import time
from functools import partial
from pathlib import Path

from .config import Config, config_from_dict, find_config_path, init_project, load_config
from .content import RenderOptions, load_about, load_dir, load_post, load_topic
from .errors import CrossPubError, SourceError
from .logger import configure_logging, get_logger
from .pages import (
    STYLE_NAME,
    OutputTree,
    build_about,
    build_atom,
    build_index,
    build_posts,
    build_topics,
)
from .render import DEFAULT_TEMPLATES, TemplateSet, copy_file

logger = get_logger(__name__)


def resolve(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def build_site(config: Config, source_dir: Path, workers: int = 0) -> int:
    """Build both output trees from the sources under ``source_dir``.

    Every source document is loaded and rendered before the first page is
    written, so a broken document stops the build with nothing written.
    Returns the number of posts published.
    """
    if not source_dir.is_dir():
        raise SourceError(f"{source_dir} is not a directory")
    if workers <= 0:
        workers = os.cpu_count() or 1
    workers = max(1, min(workers, 32))

    options = RenderOptions(
        escape=config.templates.escape_html,
        highlight=config.templates.highlight_preformatted,
    )
    posts = load_dir(source_dir / "posts", partial(load_post, options=options))
    posts.sort(key=lambda p: (p.date, p.filename), reverse=True)
    topics = load_dir(source_dir / "topics", partial(load_topic, options=options))
    topics.sort(key=lambda t: t.title.lower())
    logger.info("Loaded %d posts and %d topics from %s", len(posts), len(topics), source_dir)

    about = None
    if config.homepage.use_about_page:
        about_value = config.homepage.about_path or "about.gmi"
        about_path = resolve(source_dir, about_value)
        if not about_path.exists():
            raise SourceError(f"could not open about page {about_path}")
        about = load_about(about_path, options)
    has_about = about is not None

    trees = [
        OutputTree(
            root=resolve(source_dir, config.site.html_root),
            templates=TemplateSet.for_html(config.templates, source_dir),
            suffix=".html",
        ),
        OutputTree(
            root=resolve(source_dir, config.site.gemini_root),
            templates=TemplateSet.for_gemini(config.templates, source_dir),
            suffix=".gmi",
        ),
    ]
    names = ["post", "topic"]
    if has_about:
        names.append("about")
    if not config.homepage.custom_homepage:
        names.append("index")
    for tree in trees:
        for name in names:
            tree.templates.get(name)

    for tree in trees:
        build_posts(tree, posts, config, has_about, workers=workers)
        build_topics(tree, topics, config, has_about)
        if about is not None:
            build_about(tree, about, config)
        if not config.homepage.custom_homepage:
            build_index(tree, posts, topics, config, has_about)

    html_root = trees[0].root
    if not config.templates.custom_style:
        copy_file(DEFAULT_TEMPLATES / STYLE_NAME, html_root / STYLE_NAME)
    if config.feed.enabled:
        build_atom(html_root, posts, config)
    return len(posts)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Publish gemtext to an HTML site and a Gemini capsule.")
    parser.add_argument(
        "--init",
        action="store_true",
        help="Create a default config and the posts/ and topics/ directories, then exit.",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to the config file (TOML/YAML/JSON).")
    parser.add_argument("--dir", type=Path, default=Path("."), help="Directory containing posts/ and topics/.")
    parser.add_argument("--workers", type=int, default=0, help="Worker threads for writing posts (0 = auto).")
    parser.add_argument("-v", "--verbose", action="store_true", help="Report every file written.")
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        if args.init:
            config_path = init_project(args.dir)
            print(
                f"Initialized crosspub directories and created {config_path}.\n\n"
                "Blogs/articles go in posts/\n"
                "Wikis/digital gardens go in topics/"
            )
            return
        config = config_from_dict(load_config(find_config_path(args.config)))
        start = time.perf_counter()
        count = build_site(config, args.dir, workers=args.workers)
        elapsed = time.perf_counter() - start
    except CrossPubError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)
    print(f"Build completed in {elapsed:.2f}s.")
    print(f"Published {count} posts to {config.site.html_root} and {config.site.gemini_root}")
