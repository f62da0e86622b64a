"""Exceptions raised while building a site.

Parsing and rendering gemtext never fail; everything here comes from the
surrounding build (config, source files, templates). The CLI catches
``CrossPubError`` and stops the whole build.
"""

from __future__ import annotations

from pathlib import Path


class CrossPubError(Exception):
    """Base exception for all crosspub errors."""


class ConfigError(CrossPubError):
    """Missing, unreadable or invalid site configuration."""


class SourceError(CrossPubError):
    """A source file or directory could not be read."""


class TemplateError(CrossPubError):
    """A page template could not be found or read."""


class FrontMatterError(CrossPubError):
    """Malformed or incomplete front matter in a source document."""

    def __init__(self, message: str, source_file: Path | str | None = None) -> None:
        self.message = message
        self.source_file = source_file
        location = f"{source_file}: " if source_file else ""
        super().__init__(f"{location}{message}")
