"""Standalone pages framed by graph and map blocks.

Each framed page is described by a YAML file holding either ``graphs`` (data
sets keyed by the name used in the page's ``graph`` block) or ``map_points``.
Framed pages are never AMP pages.
"""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError
import yaml

from ampsmith.core.config import SiteConfig
from ampsmith.core.csp import NONE, CSPBuilder, Directive
from ampsmith.core.exceptions import MalformedInputError

from .formatter import HTMLFormatter, builtin_inline


MAPS_API_URL = "https://maps.googleapis.com/maps/api/js?key={key}&callback=Function.prototype"


class GraphPoint(BaseModel):
    model_config = ConfigDict(extra="forbid")

    time: int
    value: float


class GraphNote(BaseModel):
    model_config = ConfigDict(extra="forbid")

    time: int
    text: str


class Graph(BaseModel):
    """One data set. Times are seconds since the Unix epoch."""

    model_config = ConfigDict(extra="forbid")

    title: str = ""
    points: list[GraphPoint] = Field(default_factory=list)
    notes: list[GraphNote] = Field(default_factory=list)
    range: tuple[float, float] | None = None
    units: str = ""


class MapPoint(BaseModel):
    """A point of interest; ``id`` matches a box ID on the framing page."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    name: str
    lat_long: tuple[float, float] = Field(serialization_alias="latLong")
    id: str = ""


class IframeData(BaseModel):
    model_config = ConfigDict(extra="forbid")

    graphs: dict[str, Graph] | None = None
    map_points: list[MapPoint] | None = None


def _script_json(value: Any) -> str:
    return json.dumps(value, indent=2).replace("<", "\\u003c")


def _style(site: SiteConfig, name: str) -> str:
    return builtin_inline(name) + site.read_inline(name)


def load_iframe_data(source: bytes | str) -> IframeData:
    """Parse the YAML description of a framed page."""
    try:
        payload = yaml.safe_load(source) or {}
    except yaml.YAMLError as exc:
        raise MalformedInputError(f"failed to parse iframe data: {exc}") from exc
    if not isinstance(payload, dict):
        raise MalformedInputError("iframe data must be a mapping")
    try:
        return IframeData.model_validate(payload)
    except ValidationError as exc:
        raise MalformedInputError(f"invalid iframe data: {exc}") from exc


def render_graph_page(
    site: SiteConfig, graphs: dict[str, Graph], formatter: HTMLFormatter
) -> str:
    data = {name: graph.model_dump() for name, graph in graphs.items()}
    script_urls = [site.d3_script_url]
    inline_scripts = [
        site.read_inline("graph-iframe.js"),
        f"const dataSets = {_script_json(data)};",
    ]
    inline_style = _style(site, "graph-iframe.css")

    csp = CSPBuilder()
    csp.add_source(Directive.DEFAULT, NONE)
    for url in script_urls:
        csp.add_source(Directive.SCRIPT, url)
    for script in inline_scripts:
        csp.add_hash(Directive.SCRIPT, script)
    csp.add_hash(Directive.STYLE, inline_style)

    return formatter.render(
        "graph_page",
        csp_meta=csp.meta_tag(),
        script_urls=script_urls,
        inline_scripts=inline_scripts,
        inline_style=inline_style,
    )


def render_map_page(site: SiteConfig, points: list[MapPoint], formatter: HTMLFormatter) -> str:
    # No CSP: the Maps API loads whatever it needs.
    data = [point.model_dump(by_alias=True) for point in points]
    return formatter.render(
        "map_page",
        script_urls=[MAPS_API_URL.format(key=site.google_maps_api_key)],
        inline_scripts=[
            f"const points = {_script_json(data)};",
            site.read_inline("map-iframe.js"),
        ],
        inline_style=_style(site, "map-iframe.css"),
    )


def render_iframe(
    site: SiteConfig, source: bytes | str, formatter: HTMLFormatter | None = None
) -> bytes:
    """Render the framed page described by the YAML ``source``."""
    data = load_iframe_data(source)
    formatter = formatter or HTMLFormatter([site.template_dir])
    if data.graphs is not None:
        html = render_graph_page(site, data.graphs, formatter)
    elif data.map_points is not None:
        html = render_map_page(site, data.map_points, formatter)
    else:
        raise MalformedInputError("unknown iframe type")
    return html.encode("utf-8")


__all__ = [
    "Graph",
    "GraphNote",
    "GraphPoint",
    "IframeData",
    "MapPoint",
    "load_iframe_data",
    "render_iframe",
]
