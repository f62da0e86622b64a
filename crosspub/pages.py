from __future__ import annotations

import datetime as dt
import html
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from .config import Config
from .content import About, Post, Topic
from .logger import get_logger
from .render import TemplateSet, write_text
from .utils import iso_date, join_url, long_date

logger = get_logger(__name__)

STYLE_NAME = "style.css"


@dataclass
class OutputTree:
    """One output root and the templates used to fill it."""

    root: Path
    templates: TemplateSet
    suffix: str

    @property
    def is_html(self) -> bool:
        return self.suffix == ".html"


def page_context(config: Config, tree: OutputTree, root: str, has_about: bool) -> dict[str, str]:
    site = config.site

    def text(value: str) -> str:
        return html.escape(value) if tree.is_html else value

    if config.templates.custom_style and config.templates.custom_css_rel_path:
        css_path = f"{root}/{config.templates.custom_css_rel_path.lstrip('/')}"
    else:
        css_path = f"{root}/{STYLE_NAME}"
    about_link = ""
    if has_about:
        if tree.is_html:
            about_link = f'<a href="{root}/about.html">About</a>'
        else:
            about_link = f"=> {root}/about.gmi About\n"
    return {
        "site_name": text(site.name),
        "site_url": site.url,
        "site_description": text(site.description),
        "username": text(site.username),
        "root": root,
        "css_path": css_path,
        "about_link": about_link,
        "year": str(dt.date.today().year),
    }


def display_write_info(title: str, path: Path) -> None:
    logger.info('Writing "%s" to %s', title, path)


def build_posts(
    tree: OutputTree, posts: list[Post], config: Config, has_about: bool, workers: int = 1
) -> None:
    subdir = config.site.posts_subdir
    base_context = page_context(config, tree, "..", has_about)

    def render_post(post: Post) -> None:
        path = tree.root / subdir / f"{post.filename}{tree.suffix}"
        display_write_info(post.title, path)
        title = html.escape(post.title) if tree.is_html else post.title
        page = tree.templates.render(
            "post",
            **base_context,
            title=title,
            date=long_date(post.date),
            iso_date=post.date.isoformat(),
            content=post.html_content if tree.is_html else post.gemini_content,
        )
        write_text(path, page)

    workers = max(1, int(workers or 1))
    if workers <= 1 or len(posts) <= 1:
        for post in posts:
            render_post(post)
    else:
        with ThreadPoolExecutor(max_workers=min(workers, len(posts))) as executor:
            list(executor.map(render_post, posts))


def build_topics(tree: OutputTree, topics: list[Topic], config: Config, has_about: bool) -> None:
    subdir = config.site.topics_subdir
    base_context = page_context(config, tree, "..", has_about)
    for topic in topics:
        path = tree.root / subdir / f"{topic.filename}{tree.suffix}"
        display_write_info(topic.title, path)
        page = tree.templates.render(
            "topic",
            **base_context,
            title=html.escape(topic.title) if tree.is_html else topic.title,
            content=topic.html_content if tree.is_html else topic.gemini_content,
        )
        write_text(path, page)


def build_about(tree: OutputTree, about: About, config: Config) -> None:
    path = tree.root / f"about{tree.suffix}"
    display_write_info(about.title, path)
    page = tree.templates.render(
        "about",
        **page_context(config, tree, ".", True),
        title=html.escape(about.title) if tree.is_html else about.title,
        content=about.html_content if tree.is_html else about.gemini_content,
    )
    write_text(path, page)


def post_list_html(posts: list[Post], subdir: str) -> str:
    items = []
    for post in posts:
        url = f"./{subdir}/{post.filename}.html"
        items.append(
            f'<li><span class="post-date">{long_date(post.date)}</span> '
            f'<a href="{url}">{html.escape(post.title)}</a></li>'
        )
    return '<ul class="post-list">\n' + "\n".join(items) + "\n</ul>\n"


def topic_list_html(topics: list[Topic], subdir: str) -> str:
    items = [
        f'<li><a href="./{subdir}/{topic.filename}.html">{html.escape(topic.title)}</a></li>'
        for topic in topics
    ]
    return '<ul class="topic-list">\n' + "\n".join(items) + "\n</ul>\n"


def index_content_html(posts: list[Post], topics: list[Topic], config: Config) -> str:
    site = config.site
    parts = []
    if posts:
        latest = posts[0]
        parts.append(
            '<section class="latest-post"><h2>Latest post</h2>'
            f'<p><a href="./{site.posts_subdir}/{latest.filename}.html">'
            f"{html.escape(latest.title)}</a></p>"
            f"<p>{html.escape(latest.summary)}</p></section>\n"
        )
        if config.homepage.list_posts_on_homepage:
            parts.append("<h2>Posts</h2>\n")
            parts.append(post_list_html(posts, site.posts_subdir))
    if topics:
        parts.append("<h2>Topics</h2>\n")
        parts.append(topic_list_html(topics, site.topics_subdir))
    return "".join(parts)


def index_content_gemini(posts: list[Post], topics: list[Topic], config: Config) -> str:
    site = config.site
    lines = []
    if posts:
        latest = posts[0]
        lines.append("## Latest post\n")
        lines.append(f"=> {site.posts_subdir}/{latest.filename}.gmi {latest.title}\n")
        if config.homepage.list_posts_on_homepage:
            lines.append("\n## Posts\n")
            for post in posts:
                lines.append(
                    f"=> {site.posts_subdir}/{post.filename}.gmi {post.date.isoformat()} {post.title}\n"
                )
    if topics:
        lines.append("\n## Topics\n")
        for topic in topics:
            lines.append(f"=> {site.topics_subdir}/{topic.filename}.gmi {topic.title}\n")
    return "".join(lines)


def build_index(
    tree: OutputTree, posts: list[Post], topics: list[Topic], config: Config, has_about: bool
) -> None:
    path = tree.root / f"index{tree.suffix}"
    if tree.is_html:
        content = index_content_html(posts, topics, config)
        title = html.escape(config.site.name)
    else:
        content = index_content_gemini(posts, topics, config)
        title = config.site.name
    display_write_info(config.site.name, path)
    page = tree.templates.render(
        "index",
        **page_context(config, tree, ".", has_about),
        title=title,
        content=content,
    )
    write_text(path, page)


def build_atom(output_dir: Path, posts: list[Post], config: Config) -> None:
    site = config.site
    site_url = site.url.rstrip("/")
    updated = iso_date(posts[0].date) if posts else iso_date(dt.datetime.now(dt.timezone.utc))
    entries = []
    for post in posts[: config.feed.limit]:
        link = join_url(site_url, f"{site.posts_subdir}/{post.filename}.html")
        entries.append(
            "\n".join(
                [
                    "<entry>",
                    f"<title>{html.escape(post.title)}</title>",
                    f'<link href="{link}" />',
                    f"<id>{link}</id>",
                    f"<updated>{iso_date(post.date)}</updated>",
                    f"<summary>{html.escape(post.summary)}</summary>",
                    f'<content type="html">{html.escape(post.html_content)}</content>',
                    "</entry>",
                ]
            )
        )
    author = (
        f"<author><name>{html.escape(site.username)}</name></author>" if site.username else ""
    )
    atom = "\n".join(
        [
            '<?xml version="1.0" encoding="UTF-8"?>',
            '<feed xmlns="http://www.w3.org/2005/Atom">',
            f"<title>{html.escape(site.name)}</title>",
            f"<id>{site_url}/</id>",
            f"<updated>{updated}</updated>",
            f'<link href="{site_url}/atom.xml" rel="self" />',
            f'<link href="{site_url}/" />',
            *([author] if author else []),
            "\n".join(entries),
            "</feed>",
        ]
    )
    path = output_dir / "atom.xml"
    logger.info("Writing feed to %s", path)
    write_text(path, atom)
