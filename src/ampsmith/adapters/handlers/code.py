"""Handlers for fenced code blocks.

The language of a fenced block selects its renderer: ``image``, ``graph``,
``map`` and ``clear`` blocks hold YAML describing a figure, ``page`` holds the
front matter consumed by the header handler, and anything else is literal
source code.
"""

from __future__ import annotations

from typing import Any

from bs4.element import Tag
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ampsmith.core.context import PageContext
from ampsmith.core.images import ImageSpec
from ampsmith.core.markup import escape_html, unescape_quotes
from ampsmith.core.rules import RenderPhase, WalkStatus, renders

from ._helpers import code_language, code_literal, load_block
from .page import PAGE_LANGUAGE


DESKTOP_ALT = "desktop_alt"

ALIGN_CLASSES = {
    "": "",
    "left": "left",
    "right": "right",
    "center": "center",
    "desktop_left": "desktop-left mobile-center",
    "desktop_right": "desktop-right mobile-center",
}


class FigureFields(BaseModel):
    """Presentation fields shared by figure blocks."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    align: str = ""
    caption: str = ""
    class_: str = Field(default="", alias="class")
    desktop_only: bool = False
    mobile_only: bool = False

    @field_validator("align")
    @classmethod
    def _check_align(cls, value: str) -> str:
        if value != DESKTOP_ALT and value not in ALIGN_CLASSES:
            msg = f"unknown alignment {value!r}"
            raise ValueError(msg)
        return value


class ImageBlock(FigureFields, ImageSpec):
    """An ``image`` block: a figure holding one image, optionally linked."""

    href: str = ""


class GraphBlock(FigureFields):
    """A ``graph`` block: a figure framing a page of the site's graph iframe."""

    href: str = ""
    name: str = ""
    width: int = 0
    height: int = 0


class MapBlock(ImageSpec):
    """A ``map`` block: a map iframe with a placeholder image."""

    href: str = ""


def figure_align(context: PageContext, align: str) -> str:
    """Resolve ``desktop_alt`` against the previous figure and remember the result."""
    if align == DESKTOP_ALT:
        align = "desktop_left" if context.state.last_figure_align != "desktop_left" else "desktop_right"
    context.state.last_figure_align = align
    return align


def figure_values(context: PageContext, fields: FigureFields) -> dict[str, Any]:
    """Return the values used by the figure macros."""
    classes = [ALIGN_CLASSES[figure_align(context, fields.align)]]
    if fields.class_:
        classes.append(fields.class_)
    if fields.desktop_only:
        classes.append("desktop-only")
    if fields.mobile_only:
        classes.append("mobile-only")
    return {"classes": [name for name in classes if name], "caption": fields.caption}


def iframe_href(context: PageContext, href: str) -> str:
    """Return the URL of a framed page.

    Framed pages are not AMP pages and are never served by the AMP cache, so
    AMP pages use absolute URLs.
    """
    if context.amp:
        return context.site.base_url + href
    return "/" + href


def render_image_block(element: Tag, context: PageContext) -> str:
    block = load_block(code_literal(element), ImageBlock, "image")
    image = context.images.resolve(block)
    figure = figure_values(context, block)
    href = block.href
    if not href and image.biggest_src != image.src:
        href = image.biggest_src
    if href:
        href = context.links.rewrite(href)
    return context.render("image_block", figure=figure, image=image, href=href)


def render_graph_block(element: Tag, context: PageContext) -> str:
    block = load_block(code_literal(element), GraphBlock, "graph")
    return context.render(
        "graph",
        figure=figure_values(context, block),
        href=iframe_href(context, block.href),
        name=block.name,
        width=block.width,
        height=block.height,
    )


def render_map_block(element: Tag, context: PageContext) -> str:
    block = load_block(code_literal(element), MapBlock, "map")
    image = context.images.resolve(
        block, layout="fill", attrs={"placeholder": None}, alt="[map placeholder]"
    )
    return context.render("map", image=image, href=iframe_href(context, block.href))


def render_clear_block(element: Tag, context: PageContext) -> str:
    return context.render("clear")


BLOCK_RENDERERS = {
    "image": render_image_block,
    "graph": render_graph_block,
    "map": render_map_block,
    "clear": render_clear_block,
}


@renders("pre", phase=RenderPhase.BODY, name="code_blocks")
def render_code_block(element: Tag, context: PageContext) -> WalkStatus:
    """Render a fenced block according to its language."""
    language = code_language(element)
    if language == PAGE_LANGUAGE:
        return WalkStatus.SKIP_CHILDREN

    renderer = BLOCK_RENDERERS.get(language)
    if renderer is not None:
        context.write(renderer(element, context))
        return WalkStatus.SKIP_CHILDREN

    # The language class is dropped so no class name leaks into the page.
    literal = code_literal(element)
    if literal.endswith("\n"):
        literal = literal[:-1]
    context.write(f"<pre><code>{unescape_quotes(escape_html(literal))}</code></pre>")
    return WalkStatus.SKIP_CHILDREN


__all__ = [
    "ALIGN_CLASSES",
    "BLOCK_RENDERERS",
    "FigureFields",
    "GraphBlock",
    "ImageBlock",
    "MapBlock",
    "figure_align",
    "figure_values",
    "iframe_href",
    "render_code_block",
]
