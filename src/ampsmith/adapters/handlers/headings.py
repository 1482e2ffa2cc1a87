"""Heading handlers.

Level-one headings open flat box sections. Their content is captured into the
box tracker's title buffer while the heading is walked and the box is opened
once the heading closes. Heading IDs may carry slash-separated flags, e.g.
``# Title {#my-id/narrow/map_marker}``.
"""

from __future__ import annotations

from bs4.element import Tag

from ampsmith.core.boxes import HeadingAttributes, marker_label
from ampsmith.core.context import PageContext
from ampsmith.core.markup import start_tag
from ampsmith.core.rules import RenderPhase, WalkStatus, renders

from ._helpers import coerce_attribute, gather_classes


MAP_MARKER_COUNTER = "map_marker"


def _next_marker_label(context: PageContext) -> str:
    return marker_label(context.state.next_counter(MAP_MARKER_COUNTER) - 1)


@renders("h1", phase=RenderPhase.BODY, name="box_heading_start")
def start_box_heading(element: Tag, context: PageContext) -> WalkStatus:
    """Close the open box, if any, and start capturing the new box title."""
    if context.boxes.open_heading():
        context.write(context.render("box_end"))
    context.push_writer(context.boxes.title)
    return WalkStatus.CONTINUE


@renders("h1", phase=RenderPhase.BODY, name="box_heading_end", after_children=True)
def finish_box_heading(element: Tag, context: PageContext) -> WalkStatus:
    """Open the box with the captured title."""
    context.pop_writer()
    attributes = HeadingAttributes.parse(coerce_attribute(element.get("id")))
    label = _next_marker_label(context) if attributes.map_marker else ""
    header = context.boxes.close_heading(attributes, label)
    context.emitter.event("box_opened", {"id": attributes.id, "label": label})
    context.write(
        context.render(
            "box_start",
            title=header.title,
            id=attributes.id,
            classes=attributes.classes,
            label=header.label,
        )
    )
    return WalkStatus.CONTINUE


@renders("h2", "h3", "h4", "h5", "h6", phase=RenderPhase.BODY, name="flagged_heading")
def render_flagged_heading(element: Tag, context: PageContext) -> WalkStatus | None:
    """Split flags out of lower-level heading IDs; plain headings use the default markup."""
    raw_id = coerce_attribute(element.get("id"))
    if not raw_id or "/" not in raw_id:
        return None

    attributes = HeadingAttributes.parse(raw_id)
    attrs = {name: value for name, value in element.attrs.items() if name not in {"id", "class"}}
    if attributes.id:
        attrs["id"] = attributes.id
    classes = gather_classes(element.get("class")) + attributes.classes
    if classes:
        attrs["class"] = classes

    context.write(start_tag(element, attrs))
    if attributes.map_marker:
        label = _next_marker_label(context)
        context.write(f'<span class="location-label">{label}</span> ')
    return WalkStatus.CONTINUE


__all__ = ["finish_box_heading", "render_flagged_heading", "start_box_heading"]
