"""High-level Markdown to HTML page renderer based on the rule pipeline."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
from typing import Any

from bs4 import BeautifulSoup

from ampsmith.core.config import SiteConfig
from ampsmith.core.context import PageContext, RenderMode
from ampsmith.core.diagnostics import DiagnosticEmitter, NullEmitter
from ampsmith.core.exceptions import AmpsmithError, MalformedInputError, exception_hint
from ampsmith.core.metadata import PageInfo, StructuredData
from ampsmith.core.rules import RenderEngine

from ..markdown import DEFAULT_MARKDOWN_EXTENSIONS, render_markdown
from .formatter import HTMLFormatter


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RenderResult:
    """A rendered page and the metadata the surrounding build consumes."""

    html: bytes
    mode: RenderMode
    page: PageInfo | None = None
    title: str = ""
    description: str = ""
    structured_data: StructuredData | None = None
    csp_meta: str = ""
    link_rel: str = ""
    link_href: str = ""
    styles: list[str] = field(default_factory=list)
    scripts: list[str] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.html.decode("utf-8")


class PageRenderer:
    """Convert Markdown documents into AMP or non-AMP pages for one site."""

    def __init__(
        self,
        site: SiteConfig,
        formatter: HTMLFormatter | None = None,
        parser: str = "html.parser",
        extensions: Sequence[str] | None = None,
    ) -> None:
        self.site = site
        self.formatter = formatter or HTMLFormatter([site.template_dir])
        self.parser_backend = parser
        self.extensions = list(extensions or DEFAULT_MARKDOWN_EXTENSIONS)

        self.engine = RenderEngine()
        self._register_builtin_handlers()

    def _register_builtin_handlers(self) -> None:
        """Register the initial set of handlers for the renderer."""
        from ..handlers import (
            code as code_handlers,
            headings as heading_handlers,
            inline as inline_handlers,
            links as link_handlers,
            page as page_handlers,
        )

        self.engine.collect_from(page_handlers)
        self.engine.collect_from(heading_handlers)
        self.engine.collect_from(code_handlers)
        self.engine.collect_from(inline_handlers)
        self.engine.collect_from(link_handlers)

    def register(self, handler: Any) -> None:
        """Register additional handlers on demand.

        Arguments can be callables decorated with :func:`renders` or modules/classes
        exposing decorated attributes.
        """
        definition = getattr(handler, "__render_rule__", None)
        if definition is not None:
            self.engine.register(handler)
            return

        self.engine.collect_from(handler)

    def render(
        self,
        document: bytes | str,
        *,
        amp: bool,
        runtime: Mapping[str, Any] | None = None,
        emitter: DiagnosticEmitter | None = None,
    ) -> RenderResult:
        """Render ``document`` as the AMP or non-AMP page.

        The first error raised by a handler stops the walk and is re-raised
        here; nothing written before it is returned.
        """
        if isinstance(document, bytes):
            try:
                document = document.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedInputError("document is not valid UTF-8") from exc

        html = render_markdown(document, self.extensions).html
        soup = BeautifulSoup(html, self.parser_backend)
        context = PageContext(
            site=self.site,
            formatter=self.formatter,
            document=soup,
            mode=RenderMode.AMP if amp else RenderMode.NONAMP,
        )
        context.attach_runtime(emitter=emitter or NullEmitter())
        if runtime:
            context.attach_runtime(**runtime)

        try:
            self.engine.run(soup, context)
        except AmpsmithError:
            raise
        except Exception as exc:
            raise AmpsmithError(f"page rendering failed: {exception_hint(exc)}") from exc

        if context.error is not None:
            logger.debug("Rendering failed: %s", context.error)
            raise context.error

        meta = context.metadata
        return RenderResult(
            html=context.getvalue().encode("utf-8"),
            mode=context.mode,
            page=context.page,
            title=meta.title,
            description=meta.description,
            structured_data=meta.structured_data,
            csp_meta=meta.csp_meta,
            link_rel=meta.link_rel,
            link_href=meta.link_href,
            styles=list(meta.styles),
            scripts=list(meta.scripts),
        )


def render_page(
    document: bytes | str,
    site: SiteConfig,
    *,
    amp: bool,
    emitter: DiagnosticEmitter | None = None,
) -> RenderResult:
    """Render ``document`` with a one-off :class:`PageRenderer`."""
    return PageRenderer(site).render(document, amp=amp, emitter=emitter)


__all__ = ["PageRenderer", "RenderResult", "render_page"]
