from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field, fields
from pathlib import Path

import yaml

from .errors import ConfigError
from .logger import get_logger
from .utils import parse_bool

logger = get_logger(__name__)

APP_NAME = "crosspub"
CONFIG_NAME = "config.toml"

DEFAULT_CONFIG = """\
[site]
name = "My Site"
url = "https://example.com"
username = "me"
description = ""
html_root = "public_html"
gemini_root = "public_gemini"
posts_subdir = "posts"
topics_subdir = "topics"

[homepage]
custom_homepage = false
list_posts_on_homepage = true
use_about_page = false
# about_path = "about.gmi"

[templates]
custom_templates = false
# custom_html_path = "templates/html"
# custom_gemini_path = "templates/gemini"
custom_style = false
# custom_css_rel_path = "css/style.css"
highlight_preformatted = false
escape_html = false

[feed]
enabled = true
limit = 20
"""


@dataclass
class SiteConfig:
    name: str
    url: str
    html_root: str
    gemini_root: str
    username: str = ""
    description: str = ""
    posts_subdir: str = "posts"
    topics_subdir: str = "topics"


@dataclass
class HomepageConfig:
    custom_homepage: bool = False
    list_posts_on_homepage: bool = True
    use_about_page: bool = False
    about_path: str | None = None


@dataclass
class TemplateConfig:
    custom_templates: bool = False
    custom_html_path: str | None = None
    custom_gemini_path: str | None = None
    custom_style: bool = False
    custom_css_rel_path: str | None = None
    highlight_preformatted: bool = False
    escape_html: bool = False


@dataclass
class FeedConfig:
    enabled: bool = True
    limit: int = 20


@dataclass
class Config:
    site: SiteConfig
    homepage: HomepageConfig = field(default_factory=HomepageConfig)
    templates: TemplateConfig = field(default_factory=TemplateConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)


REQUIRED_SITE_KEYS = ("name", "url", "html_root", "gemini_root")


def load_config(path: Path) -> dict:
    """Read a config mapping from a TOML, YAML or JSON file."""
    if not path.exists():
        raise ConfigError(f"could not find config file {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"could not open config file {path}: {exc}") from exc
    suffix = path.suffix.lower()
    if suffix == ".toml":
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in config file {path}: {exc}") from exc
    elif suffix in {".yml", ".yaml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"invalid YAML in config file {path}: {exc}") from exc
        if data is None:
            data = {}
    else:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"invalid JSON in config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"config must be a mapping: {path}")
    return data


def _section(data: dict, name: str) -> dict:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"config section [{name}] must be a table")
    return value


def _build(cls: type, values: dict):
    flags = {item.name for item in fields(cls) if isinstance(item.default, bool)}
    known = {item.name for item in fields(cls)}
    unknown = sorted(set(values) - known)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            continue
        kwargs[key] = parse_bool(value) if key in flags else value
    return cls(**kwargs)


def config_from_dict(data: dict) -> Config:
    site = _section(data, "site")
    missing = [key for key in REQUIRED_SITE_KEYS if not str(site.get(key) or "").strip()]
    if missing:
        raise ConfigError(f"config section [site] is missing {', '.join(missing)}")
    feed = _build(FeedConfig, _section(data, "feed"))
    try:
        feed.limit = int(feed.limit)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"feed.limit must be an integer, got {feed.limit!r}") from exc
    if feed.limit < 0:
        raise ConfigError(f"feed.limit must not be negative, got {feed.limit}")
    return Config(
        site=_build(SiteConfig, site),
        homepage=_build(HomepageConfig, _section(data, "homepage")),
        templates=_build(TemplateConfig, _section(data, "templates")),
        feed=feed,
    )


def config_home() -> Path:
    value = os.environ.get("XDG_CONFIG_HOME", "").strip()
    base = Path(value) if value else Path.home() / ".config"
    return base / APP_NAME


def find_config_path(explicit: Path | None = None) -> Path:
    if explicit is not None:
        return explicit
    path = config_home() / CONFIG_NAME
    if not path.exists():
        raise ConfigError(f"could not find config file, expected {path}")
    return path


def init_project(directory: Path, config_dir: Path | None = None) -> Path:
    """Create a default config and the posts/ and topics/ source directories."""
    config_dir = config_dir or config_home()
    config_path = config_dir / CONFIG_NAME
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        if config_path.exists():
            logger.warning("Config already exists, leaving it alone: %s", config_path)
        else:
            config_path.write_text(DEFAULT_CONFIG, encoding="utf-8")
        for name in ("posts", "topics"):
            (directory / name).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigError(f"could not initialize {directory}: {exc}") from exc
    return config_path
