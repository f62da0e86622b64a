from __future__ import annotations

import shutil
from pathlib import Path

from .config import TemplateConfig
from .errors import SourceError, TemplateError

DEFAULT_TEMPLATES = Path(__file__).parent / "templates"


def render_template(template: str, **context: str) -> str:
    output = template
    late_keys = {"content"}
    for key, value in context.items():
        if key in late_keys:
            continue
        output = output.replace(f"{{{{{key}}}}}", value)
    for key in late_keys:
        if key in context:
            output = output.replace(f"{{{{{key}}}}}", context[key])
    return output


def read_template(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except OSError as exc:
        raise TemplateError(f"could not read template {path}: {exc}") from exc


def write_text(path: Path, text: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise SourceError(f"could not open {path} for writing: {exc}") from exc


def copy_file(source: Path, dest: Path) -> None:
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, dest)
    except OSError as exc:
        raise SourceError(f"could not copy {source} to {dest}: {exc}") from exc


class TemplateSet:
    """Page templates for one output tree.

    Templates are looked up by name in a custom directory when one is
    configured, and in the packaged defaults otherwise.
    """

    def __init__(self, directory: Path, suffix: str):
        self.directory = directory
        self.suffix = suffix
        self._cache: dict[str, str] = {}

    @classmethod
    def for_html(cls, options: TemplateConfig, base: Path) -> TemplateSet:
        return cls(cls._resolve(options, options.custom_html_path, base), ".html")

    @classmethod
    def for_gemini(cls, options: TemplateConfig, base: Path) -> TemplateSet:
        return cls(cls._resolve(options, options.custom_gemini_path, base), ".gmi")

    @staticmethod
    def _resolve(options: TemplateConfig, custom_path: str | None, base: Path) -> Path:
        if not options.custom_templates:
            return DEFAULT_TEMPLATES
        if not custom_path:
            raise TemplateError("custom_templates is set but no custom template path is configured")
        path = Path(custom_path).expanduser()
        if not path.is_absolute():
            path = base / path
        if not path.is_dir():
            raise TemplateError(f"template directory not found: {path}")
        return path

    def get(self, name: str) -> str:
        if name not in self._cache:
            path = self.directory / f"{name}{self.suffix}"
            if not path.exists():
                raise TemplateError(f"missing template {path}")
            self._cache[name] = read_template(path)
        return self._cache[name]

    def render(self, name: str, **context: str) -> str:
        return render_template(self.get(name), **context)
