"""Inline handlers for text and pseudo-elements."""

from __future__ import annotations

from bs4.element import NavigableString, Tag

from ampsmith.core.context import PageContext
from ampsmith.core.markup import escape_emdashes, escape_html, unescape_quotes
from ampsmith.core.rules import CUSTOM_ELEMENT_NODE, TEXT_NODE, RenderPhase, WalkStatus, renders

from .elements import (
    ClearFloats,
    CodeUrl,
    InlineImage,
    OnlyAmp,
    OnlyNonAmp,
    PseudoElement,
    TextSize,
    parse_pseudo_element,
)


AMP_ONLY_START = "<!-- AMP-only content \n"
NONAMP_ONLY_START = "<!-- non-AMP-only content \n"
HIDDEN_CONTENT_END = "\n-->"


@renders(TEXT_NODE, phase=RenderPhase.BODY, name="text")
def render_text(node: NavigableString, context: PageContext) -> WalkStatus:
    """Escape text, keeping literal quotes; em dashes become entities outside code."""
    html = unescape_quotes(escape_html(str(node)))
    if node.find_parent("code") is None:
        html = escape_emdashes(html)
    context.write(html)
    return WalkStatus.SKIP_CHILDREN


def _hidden(element: PseudoElement, context: PageContext) -> bool:
    return (isinstance(element, OnlyAmp) and not context.amp) or (
        isinstance(element, OnlyNonAmp) and context.amp
    )


@renders(CUSTOM_ELEMENT_NODE, phase=RenderPhase.BODY, name="pseudo_element_start")
def start_pseudo_element(element: Tag, context: PageContext) -> WalkStatus:
    """Write the opening substitution of a pseudo-element.

    Content of ``only-amp`` and ``only-nonamp`` is always walked. In the other
    variant it is wrapped in an HTML comment so both outputs stay comparable.
    """
    parsed = parse_pseudo_element(element)
    if isinstance(parsed, ClearFloats):
        context.write('<span class="clear">')
    elif isinstance(parsed, CodeUrl):
        context.write('<code class="url">')
    elif isinstance(parsed, TextSize):
        context.write(f'<span class="{parsed.css_class}">')
    elif isinstance(parsed, InlineImage):
        image = context.images.resolve(parsed, classes=["inline"], layout="fixed", inline=True)
        context.write(context.render("img", image=image))
    elif _hidden(parsed, context):
        context.write(AMP_ONLY_START if isinstance(parsed, OnlyAmp) else NONAMP_ONLY_START)
    return WalkStatus.CONTINUE


@renders(
    CUSTOM_ELEMENT_NODE,
    phase=RenderPhase.BODY,
    name="pseudo_element_end",
    after_children=True,
)
def finish_pseudo_element(element: Tag, context: PageContext) -> WalkStatus:
    """Write the closing substitution of a pseudo-element."""
    parsed = parse_pseudo_element(element)
    if isinstance(parsed, (ClearFloats, TextSize)):
        context.write("</span>")
    elif isinstance(parsed, CodeUrl):
        context.write("</code>")
    elif _hidden(parsed, context):
        context.write(HIDDEN_CONTENT_END)
    return WalkStatus.CONTINUE


__all__ = ["finish_pseudo_element", "render_text", "start_pseudo_element"]
