"""Site configuration model used by the page renderer.

SiteConfig

`base_url` (`str`)
: Base site URL with a trailing slash, e.g. ``https://www.example.org/``.

`title_suffix` (`str`)
: Appended to page titles that do not set ``hide_title_suffix``.

`default_desc` (`str`)
: Meta description used by pages without their own ``desc``.

`favicon_path` (`str`)
: Static path of the favicon image.

`nav_text` (`str`)
: Text displayed next to the logo in the navigation area.

`logo_path_html` / `logo_path_amp` (`str`)
: Static path (possibly a wildcard such as ``logo-*.png``) of the page logo
  for the non-AMP and AMP variants.

`logo_alt` (`str`)
: Alt text of the logo.

`nav_toggle_path` / `menu_button_path` (`str`)
: Images used to toggle the navigation box (non-AMP) and open the menu (AMP).

`author_name`, `author_email`, `publisher_name`, `publisher_logo_path`
: Values copied into each page's structured data.

`google_analytics_code` (`str`)
: Analytics property identifier, only used by AMP pages.

`google_maps_api_key` (`str`)
: Key passed to the Maps API by map iframes.

`d3_script_url` (`str`)
: URL of the d3.js build loaded by graph iframes.

`extra_static_dirs` (`dict[str, str]`)
: Extra directories served as static content. Keys are paths relative to
  the site directory and values are the URL paths they are served under.

`nav_items` (`list[NavItem]`)
: The site navigation hierarchy.

The site directory holds ``inline/``, ``iframes/``, ``pages/``, ``static/``,
``static_gen/`` and ``templates/``.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
import yaml

from .exceptions import ConfigurationError, ResolutionError
from .nav import INDEX_PAGE, NavItem


DEFAULT_D3_SCRIPT_URL = "https://d3js.org/d3.v3.min.js"


class SiteConfig(BaseModel):
    """High-level information about the site being rendered."""

    model_config = ConfigDict(extra="forbid")

    base_url: str
    title_suffix: str = ""
    default_desc: str = ""
    favicon_path: str = ""
    nav_text: str = ""

    logo_path_html: str = ""
    logo_path_amp: str = ""
    logo_alt: str = ""
    nav_toggle_path: str = ""
    menu_button_path: str = ""

    author_name: str = ""
    author_email: str = ""
    publisher_name: str = ""
    publisher_logo_path: str = ""

    google_analytics_code: str = ""
    google_maps_api_key: str = ""
    d3_script_url: str = DEFAULT_D3_SCRIPT_URL
    extra_static_dirs: dict[str, str] = Field(default_factory=dict)

    nav_items: list[NavItem] = Field(default_factory=list)

    site_dir: Path = Field(default=Path("."), exclude=True)

    @field_validator("base_url")
    @classmethod
    def _require_trailing_slash(cls, value: str) -> str:
        if not value.endswith("/"):
            msg = f"base_url {value!r} must end with a slash"
            raise ValueError(msg)
        return value

    @property
    def inline_dir(self) -> Path:
        return self.site_dir / "inline"

    @property
    def iframe_dir(self) -> Path:
        return self.site_dir / "iframes"

    @property
    def page_dir(self) -> Path:
        return self.site_dir / "pages"

    @property
    def static_dir(self) -> Path:
        return self.site_dir / "static"

    @property
    def static_gen_dir(self) -> Path:
        return self.site_dir / "static_gen"

    @property
    def template_dir(self) -> Path:
        return self.site_dir / "templates"

    def static_roots(self) -> list[Path]:
        """Return the directories searched for static files, in order."""
        return [self.static_dir, self.static_gen_dir]

    def read_inline(self, name: str) -> str:
        """Return the stripped contents of ``inline/<name>`` or an empty string."""
        path = self.inline_dir / name
        try:
            return path.read_text(encoding="utf-8").strip()
        except FileNotFoundError:
            return ""
        except OSError as exc:
            raise ConfigurationError(f"Failed reading inline file '{path}'") from exc

    def resolve_static(self, path: str) -> Path | None:
        """Return the file backing the static URL path ``path`` when it exists."""
        for source, served in self.extra_static_dirs.items():
            served = served.strip("/")
            if path == served or path.startswith(served + "/"):
                candidate = self.site_dir / source / path[len(served) :].lstrip("/")
                return candidate if candidate.is_file() else None
        for root in self.static_roots():
            candidate = root / path
            if candidate.is_file():
                return candidate
        return None

    def check_static(self, path: str) -> Path:
        """Return the file backing ``path`` or raise when it does not exist."""
        resolved = self.resolve_static(path)
        if resolved is None:
            raise ResolutionError(f"static file {path!r} does not exist")
        return resolved

    def abs_url(self, url: str) -> str:
        """Convert a site-relative URL into an absolute one under ``base_url``."""
        if urlparse(url).scheme:
            if not url.startswith(self.base_url):
                raise ResolutionError(f"URL {url!r} doesn't have prefix {self.base_url!r}")
            return url
        if url == INDEX_PAGE:
            return self.base_url
        return self.base_url + url


def load_site_config(path: Path | str) -> SiteConfig:
    """Load ``site.yaml`` and bind the resulting configuration to its directory."""
    config_path = Path(path)
    try:
        payload = yaml.safe_load(config_path.read_text(encoding="utf-8")) or {}
    except OSError as exc:
        raise ConfigurationError(f"Unable to read site configuration '{config_path}'") from exc
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Invalid YAML in site configuration '{config_path}'") from exc

    if not isinstance(payload, dict):
        raise ConfigurationError(f"Site configuration '{config_path}' must be a mapping")

    payload["site_dir"] = config_path.parent
    try:
        return SiteConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid site configuration '{config_path}': {exc}") from exc


__all__ = ["DEFAULT_D3_SCRIPT_URL", "SiteConfig", "load_site_config"]
