"""Internal helpers shared across handler modules."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, TypeVar, cast

from bs4.element import Tag
from pydantic import BaseModel, ValidationError
import yaml

from ampsmith.adapters.html.formatter import builtin_inline
from ampsmith.core.config import SiteConfig
from ampsmith.core.exceptions import MalformedInputError


ModelT = TypeVar("ModelT", bound=BaseModel)

LANGUAGE_PREFIX = "language-"


def coerce_attribute(value: Any) -> str | None:
    """Normalise a BeautifulSoup attribute value to a string when possible."""
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(value, Iterable):
        for item in value:
            if isinstance(item, str):
                return item
    return None


def gather_classes(value: Any) -> list[str]:
    """Return a list of classes extracted from a BeautifulSoup attribute."""
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable) and not isinstance(value, (bytes, bytearray)):
        return [cast(str, item) for item in value if isinstance(item, str)]
    return []


def code_language(element: Tag) -> str:
    """Return the fenced-code language of a ``<pre>`` block, or an empty string."""
    code = element.find("code", recursive=False)
    if not isinstance(code, Tag):
        return ""
    for name in gather_classes(code.get("class")):
        if name.startswith(LANGUAGE_PREFIX):
            return name[len(LANGUAGE_PREFIX) :]
    return ""


def code_literal(element: Tag) -> str:
    """Return the literal text of the ``<code>`` inside a ``<pre>`` block."""
    code = element.find("code", recursive=False)
    target = code if isinstance(code, Tag) else element
    return target.get_text()


def load_block(literal: str, model: type[ModelT], kind: str) -> ModelT:
    """Parse the YAML body of a fenced block into ``model``."""
    try:
        payload = yaml.safe_load(literal) or {}
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"failed to parse {kind} info from {literal!r}: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedInputError(f"failed to parse {kind} info from {literal!r}: not a mapping")
    try:
        return model.model_validate(payload)
    except ValidationError as exc:
        raise MalformedInputError(f"bad data in {literal!r}: {exc}") from exc


def read_inline(site: SiteConfig, name: str) -> str:
    """Return the site's inline resource ``name``, falling back to the bundled copy."""
    return site.read_inline(name) or builtin_inline(name)


__all__ = [
    "code_language",
    "code_literal",
    "coerce_attribute",
    "gather_classes",
    "load_block",
    "read_inline",
]
