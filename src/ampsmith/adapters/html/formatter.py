"""Utilities for rendering HTML partials (snippets)."""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import Any

from jinja2 import ChoiceLoader, Environment, FileSystemLoader, Template, TemplateNotFound
from markupsafe import Markup

from ampsmith.core.exceptions import ConfigurationError
from ampsmith.core.markup import format_attributes
from ampsmith.core.metadata import parse_date


TEMPLATE_DIR = Path(__file__).resolve().parent / "partials"
INLINE_DIR = Path(__file__).resolve().parent / "inline"


def format_date(value: str, layout: str) -> str:
    """Format a ``YYYY-MM-DD`` date with :meth:`datetime.date.strftime` codes.

    ``%-d`` is handled here so that day numbers are not zero padded on every
    platform.
    """
    parsed = parse_date(value)
    return parsed.strftime(layout.replace("%-d", str(parsed.day)))


def html_attributes(attrs: dict[str, Any] | None) -> Markup:
    """Serialise an attribute mapping for direct use inside a start tag."""
    return Markup(format_attributes(attrs or {}))


class HTMLFormatter:
    """Render HTML partials with Jinja2.

    Partials are looked up in ``template_dirs`` first, then in the built-in
    ``partials`` directory, so a site can override any fragment by name.
    """

    def __init__(self, template_dirs: Iterable[Path | str] = ()) -> None:
        loaders = [FileSystemLoader(str(path)) for path in template_dirs if Path(path).is_dir()]
        loaders.append(FileSystemLoader(str(TEMPLATE_DIR)))
        self.env = Environment(
            loader=ChoiceLoader(loaders),
            autoescape=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters.setdefault("format_date", format_date)
        self.env.filters.setdefault("attributes", html_attributes)
        self.templates: dict[str, Template] = {}

    def _get_template(self, name: str) -> Template:
        """Return a cached template instance loading it on demand."""
        template = self.templates.get(name)
        if template is not None:
            return template
        try:
            template = self.env.get_template(f"{name}.html")
        except TemplateNotFound as exc:
            raise ConfigurationError(f"Missing HTML partial '{name}'") from exc
        self.templates[name] = template
        return template

    def render(self, template: str, /, **values: Any) -> str:
        """Render the partial ``template`` with ``values``."""
        return self._get_template(template).render(**values)


def builtin_inline(name: str) -> str:
    """Return a bundled inline resource, or an empty string when none ships."""
    path = INLINE_DIR / name
    if not path.is_file():
        return ""
    return path.read_text(encoding="utf-8").strip()


__all__ = ["INLINE_DIR", "TEMPLATE_DIR", "HTMLFormatter", "builtin_inline", "format_date"]
