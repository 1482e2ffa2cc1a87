"""Markdown conversion utilities for AmpSmith."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from threading import Lock
from typing import Any

import markdown

from ampsmith.core.exceptions import AmpsmithError


__all__ = [
    "DEFAULT_MARKDOWN_EXTENSIONS",
    "MarkdownConversionError",
    "MarkdownDocument",
    "render_markdown",
]


DEFAULT_MARKDOWN_EXTENSIONS = [
    "fenced_code",
    "tables",
    "attr_list",
    "def_list",
    "pymdownx.tilde",
]


DEFAULT_EXTENSION_CONFIGS: dict[str, dict[str, object]] = {
    "pymdownx.tilde": {
        "subscript": False,
    },
}


class MarkdownConversionError(AmpsmithError):
    """Raised when Markdown cannot be converted into HTML."""


@dataclass(slots=True)
class MarkdownDocument:
    """Result of converting Markdown into HTML."""

    html: str


class _MarkdownCacheEntry:
    __slots__ = ("lock", "processor")

    def __init__(self, processor: Any) -> None:
        self.processor = processor
        self.lock = Lock()


_MARKDOWN_CACHE: dict[tuple[str, ...], _MarkdownCacheEntry] = {}
_MARKDOWN_CACHE_GUARD = Lock()


def render_markdown(
    source: str,
    extensions: Sequence[str] | None = None,
) -> MarkdownDocument:
    """Convert Markdown source into HTML.

    Processors are cached per extension list. Each cached processor is reset
    under its own lock before converting, so state never carries over from
    one document to the next.
    """
    active_extensions = tuple(extensions or DEFAULT_MARKDOWN_EXTENSIONS)
    entry = _resolve_markdown_entry(active_extensions)

    try:
        with entry.lock:
            processor = entry.processor
            processor.reset()
            html = processor.convert(source)
    except Exception as exc:  # pragma: no cover - library-controlled
        raise MarkdownConversionError(f"Failed to convert Markdown source: {exc}") from exc

    return MarkdownDocument(html=html)


def _resolve_markdown_entry(extensions_key: tuple[str, ...]) -> _MarkdownCacheEntry:
    entry = _MARKDOWN_CACHE.get(extensions_key)
    if entry is not None:
        return entry
    with _MARKDOWN_CACHE_GUARD:
        entry = _MARKDOWN_CACHE.get(extensions_key)
        if entry is None:
            entry = _MarkdownCacheEntry(_build_markdown_processor(extensions_key))
            _MARKDOWN_CACHE[extensions_key] = entry
    return entry


def _build_markdown_processor(extensions_key: tuple[str, ...]) -> markdown.Markdown:
    active_extensions = list(extensions_key)
    extension_configs = {
        name: dict(DEFAULT_EXTENSION_CONFIGS[name])
        for name in active_extensions
        if name in DEFAULT_EXTENSION_CONFIGS
    }
    try:
        return markdown.Markdown(
            extensions=active_extensions, extension_configs=extension_configs
        )
    except Exception as exc:  # pragma: no cover - library-controlled
        raise MarkdownConversionError(f"Failed to initialize Markdown processor: {exc}") from exc
