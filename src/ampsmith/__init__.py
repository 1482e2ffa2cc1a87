"""Primary public API for AmpSmith."""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _pkg_version

from ampsmith.adapters.html.iframes import render_iframe
from ampsmith.adapters.html.renderer import PageRenderer, RenderResult, render_page
from ampsmith.core.config import SiteConfig, load_site_config
from ampsmith.core.context import PageContext, RenderMode
from ampsmith.core.diagnostics import DiagnosticEmitter, LoggingEmitter, NullEmitter
from ampsmith.core.exceptions import (
    AmpsmithError,
    CodecError,
    ConfigurationError,
    MalformedInputError,
    ResolutionError,
)
from ampsmith.core.metadata import PageInfo
from ampsmith.core.nav import NavItem
from ampsmith.core.rules import RenderPhase, WalkStatus, renders


try:
    __version__ = _pkg_version("ampsmith")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    "AmpsmithError",
    "CodecError",
    "ConfigurationError",
    "DiagnosticEmitter",
    "LoggingEmitter",
    "MalformedInputError",
    "NavItem",
    "NullEmitter",
    "PageContext",
    "PageInfo",
    "PageRenderer",
    "RenderMode",
    "RenderPhase",
    "RenderResult",
    "ResolutionError",
    "SiteConfig",
    "WalkStatus",
    "__version__",
    "load_site_config",
    "render_iframe",
    "render_page",
    "renders",
]
