"""Default HTML serialisation for nodes that no rule claims."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from bs4.element import NavigableString, PageElement, Tag


_TEXT_ESCAPES = (("&", "&amp;"), ("<", "&lt;"), (">", "&gt;"), ('"', "&quot;"))

ESCAPED_QUOTE = "&quot;"
EMDASH = "—"
EMDASH_ENTITY = "&mdash;"


def escape_html(text: str) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"``."""
    for raw, entity in _TEXT_ESCAPES:
        text = text.replace(raw, entity)
    return text


def unescape_quotes(html: str) -> str:
    return html.replace(ESCAPED_QUOTE, '"')


def escape_emdashes(html: str) -> str:
    return html.replace(EMDASH, EMDASH_ENTITY)


def attribute_value(value: Any) -> str:
    """Flatten a BeautifulSoup attribute value (class lists become space separated)."""
    if isinstance(value, (list, tuple)):
        return " ".join(str(item) for item in value)
    return str(value)


def format_attributes(attrs: Mapping[str, Any]) -> str:
    """Serialise attributes; ``None`` values produce bare boolean attributes."""
    parts: list[str] = []
    for name, value in attrs.items():
        if value is None:
            parts.append(f" {name}")
        else:
            parts.append(f' {name}="{escape_html(attribute_value(value))}"')
    return "".join(parts)


def start_tag(tag: Tag, attrs: Mapping[str, Any] | None = None) -> str:
    """Return the opening markup of ``tag``, optionally overriding its attributes."""
    values = tag.attrs if attrs is None else attrs
    return f"<{tag.name}{format_attributes(values)}>"


def end_tag(tag: Tag) -> str:
    """Return the closing markup of ``tag`` (empty for void elements)."""
    if tag.can_be_empty_element and not tag.contents:
        return ""
    return f"</{tag.name}>"


def render_enter(node: PageElement) -> str:
    """Default output emitted when the walker enters ``node``."""
    if isinstance(node, Tag):
        return start_tag(node)
    if type(node) is NavigableString:
        return escape_html(str(node))
    # Comments, doctypes and script/style bodies keep their literal text.
    return node.output_ready()  # type: ignore[attr-defined]


def render_exit(node: PageElement) -> str:
    """Default output emitted when the walker leaves ``node``."""
    if isinstance(node, Tag):
        return end_tag(node)
    return ""


__all__ = [
    "EMDASH",
    "EMDASH_ENTITY",
    "ESCAPED_QUOTE",
    "attribute_value",
    "end_tag",
    "escape_emdashes",
    "escape_html",
    "format_attributes",
    "render_enter",
    "render_exit",
    "start_tag",
    "unescape_quotes",
]
