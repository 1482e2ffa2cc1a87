"""Rendering context primitives shared across the page pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from io import StringIO
from typing import TYPE_CHECKING, Any

from .boxes import BoxTracker
from .csp import CSPBuilder
from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import AmpsmithError
from .images import ImageResolver
from .links import LinkRewriter


if TYPE_CHECKING:  # pragma: no cover - typing only
    from ampsmith.adapters.html.formatter import HTMLFormatter

    from .config import SiteConfig
    from .metadata import PageInfo, StructuredData
    from .nav import NavItem
    from .rules import RenderPhase


class RenderMode(str, Enum):
    """Output variant produced by a render."""

    AMP = "amp"
    NONAMP = "nonamp"


@dataclass(slots=True)
class PageState:
    """In-memory state accumulated while rendering a page."""

    counters: dict[str, int] = field(default_factory=dict)
    thumbnails: dict[str, str | None] = field(default_factory=dict)
    defined_thumb_filter: bool = False
    last_figure_align: str = ""

    def next_counter(self, key: str = "default") -> int:
        """Increment and return the named counter."""
        value = self.counters.get(key, 0) + 1
        self.counters[key] = value
        return value


@dataclass(slots=True)
class PageMetadata:
    """Side-channel data produced by the header hook for the page template."""

    title: str = ""
    description: str = ""
    link_rel: str = ""
    link_href: str = ""
    structured_data: StructuredData | None = None
    csp_meta: str = ""
    styles: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)
    template_values: dict[str, Any] = field(default_factory=dict)


@dataclass
class PageContext:
    """Shared context passed to every handler during rendering."""

    site: SiteConfig
    formatter: HTMLFormatter
    document: Any
    mode: RenderMode = RenderMode.NONAMP
    state: PageState = field(default_factory=PageState)
    boxes: BoxTracker = field(default_factory=BoxTracker)
    csp: CSPBuilder = field(default_factory=CSPBuilder)
    metadata: PageMetadata = field(default_factory=PageMetadata)
    runtime: dict[str, Any] = field(default_factory=dict)
    phase: RenderPhase | None = None

    page: PageInfo | None = None
    nav_item: NavItem | None = None
    nav_items: list[NavItem] = field(default_factory=list)
    error: AmpsmithError | None = None

    _output: StringIO = field(default_factory=StringIO, init=False, repr=False)
    _writers: list[StringIO] = field(default_factory=list, init=False, repr=False)
    _links: LinkRewriter | None = field(default=None, init=False, repr=False)
    _images: ImageResolver | None = field(default=None, init=False, repr=False)

    @property
    def amp(self) -> bool:
        return self.mode is RenderMode.AMP

    @property
    def emitter(self) -> DiagnosticEmitter:
        return self.runtime.get("emitter") or NullEmitter()

    @property
    def links(self) -> LinkRewriter:
        if self._links is None:
            self._links = LinkRewriter(self.site, amp=self.amp)
        return self._links

    @property
    def images(self) -> ImageResolver:
        if self._images is None:
            self._images = ImageResolver(self.site, self.state, amp=self.amp, emitter=self.emitter)
        return self._images

    def enter_phase(self, phase: RenderPhase) -> None:
        self.phase = phase

    def attach_runtime(self, **runtime: Any) -> None:
        """Attach ad-hoc data visible to handlers."""
        self.runtime.update(runtime)

    def write(self, html: str) -> None:
        """Append ``html`` to the active output buffer."""
        target = self._writers[-1] if self._writers else self._output
        target.write(html)

    def push_writer(self, buffer: StringIO) -> None:
        """Redirect subsequent writes into ``buffer`` until :meth:`pop_writer`."""
        self._writers.append(buffer)

    def pop_writer(self) -> StringIO:
        return self._writers.pop()

    def render(self, template: str, /, **values: Any) -> str:
        """Render a formatter partial with the page mode exposed as ``amp``."""
        return self.formatter.render(template, amp=self.amp, **values)

    def fail(self, exc: AmpsmithError) -> None:
        """Latch ``exc`` unless an earlier error was already recorded."""
        if self.error is None:
            self.error = exc

    @property
    def failed(self) -> bool:
        return self.error is not None

    def getvalue(self) -> str:
        """Return everything written to the main output stream."""
        return self._output.getvalue()


__all__ = ["PageContext", "PageMetadata", "PageState", "RenderMode"]
