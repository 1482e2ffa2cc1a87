"""Link handling."""

from __future__ import annotations

from bs4.element import Tag

from ampsmith.core.context import PageContext
from ampsmith.core.markup import start_tag
from ampsmith.core.rules import RenderPhase, WalkStatus, renders

from ._helpers import coerce_attribute


@renders("a", phase=RenderPhase.BODY, name="links")
def render_link(element: Tag, context: PageContext) -> WalkStatus | None:
    """Rewrite the link target for the page variant being rendered."""
    href = coerce_attribute(element.get("href"))
    if href is None:
        return None
    attrs = dict(element.attrs)
    attrs["href"] = context.links.rewrite(href)
    context.write(start_tag(element, attrs))
    return WalkStatus.CONTINUE


__all__ = ["render_link"]
