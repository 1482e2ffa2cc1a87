from __future__ import annotations

from pathlib import Path

from PIL import Image
import pytest

from ampsmith.adapters.html.renderer import PageRenderer
from ampsmith.core.config import SiteConfig
from ampsmith.core.context import PageState
from ampsmith.core.images import ImageResolver
from ampsmith.core.links import LinkRewriter
from ampsmith.core.nav import NavItem


BASE_URL = "https://www.example.org/"

SVG_SOURCE = (
    '<svg xmlns="http://www.w3.org/2000/svg" width="64" height="32">'
    '<rect width="64" height="32" fill="#369"/></svg>'
)

INLINE_FILES = {
    "base.css": "body{margin:0}\n",
    "base-nonamp.css": "nav{display:block}",
    "desktop.css": "main{width:800px}",
    "mobile.css": "main{width:100%}",
    "mobile-amp.css": "header{height:48px}",
    "base.js": "alert('foo');\n",
    "map.js": "console.log('map');",
    "graph-iframe.js": "drawGraphs(dataSets);",
    "map-iframe.js": "initMap(points);",
}


def make_image(
    path: Path, size: tuple[int, int], color: tuple[int, int, int] = (200, 40, 40)
) -> Path:
    """Write a solid image whose format follows the file extension."""
    path.parent.mkdir(parents=True, exist_ok=True)
    image = Image.new("RGB", size, color)
    # Vary a corner so thumbnails carry more than one color.
    image.putpixel((0, 0), (10, 200, 30))
    image.save(path)
    return path


@pytest.fixture
def site_dir(tmp_path: Path) -> Path:
    static = tmp_path / "static"
    make_image(static / "favicon.png", (32, 32))
    make_image(static / "publisher.png", (60, 60))
    for name in ("logo", "nav-toggle", "menu"):
        size = (120, 40) if name == "logo" else (24, 24)
        make_image(static / f"{name}.png", size)
        make_image(static / f"{name}.webp", size)
    for width in (400, 800):
        make_image(static / "files" / f"photo-{width}.jpg", (width, width * 3 // 4))
        make_image(static / "files" / f"photo-{width}.webp", (width, width * 3 // 4))
    make_image(static / "files" / "single.png", (200, 100))
    make_image(static / "files" / "single.webp", (200, 100))
    make_image(static / "files" / "map.png", (640, 480))
    make_image(static / "files" / "map.webp", (640, 480))
    (static / "files" / "diagram.svg").write_text(SVG_SOURCE, encoding="utf-8")
    (static / "files" / "notes.pdf").write_bytes(b"%PDF-1.4\n")

    inline = tmp_path / "inline"
    inline.mkdir()
    for name, content in INLINE_FILES.items():
        (inline / name).write_text(content, encoding="utf-8")
    return tmp_path


@pytest.fixture
def nav_items() -> list[NavItem]:
    return [
        NavItem(
            name="Trips",
            url="trips.html",
            id="trips",
            children=[NavItem(name="Hiking", url="hiking.html", id="hiking")],
        ),
        NavItem(name="About", url="about.html", id="about"),
    ]


@pytest.fixture
def site(site_dir: Path, nav_items: list[NavItem]) -> SiteConfig:
    return SiteConfig(
        base_url=BASE_URL,
        title_suffix=" - Example",
        default_desc="Default description",
        favicon_path="favicon.png",
        nav_text="Example",
        logo_path_html="logo.png",
        logo_path_amp="logo.png",
        logo_alt="Example logo",
        nav_toggle_path="nav-toggle.png",
        menu_button_path="menu.png",
        author_name="Jane Doe",
        author_email="jane@example.org",
        publisher_name="Example",
        publisher_logo_path="publisher.png",
        nav_items=nav_items,
        site_dir=site_dir,
    )


@pytest.fixture
def renderer(site: SiteConfig) -> PageRenderer:
    return PageRenderer(site)


@pytest.fixture
def amp_links(site: SiteConfig) -> LinkRewriter:
    return LinkRewriter(site, amp=True)


@pytest.fixture
def html_links(site: SiteConfig) -> LinkRewriter:
    return LinkRewriter(site, amp=False)


@pytest.fixture
def html_images(site: SiteConfig) -> ImageResolver:
    return ImageResolver(site, PageState(), amp=False)


@pytest.fixture
def amp_images(site: SiteConfig) -> ImageResolver:
    return ImageResolver(site, PageState(), amp=True)


def page_document(body: str = "", **front_matter: object) -> str:
    """Return a Markdown document with a leading ``page`` block."""
    fields = {"title": "Hiking", "id": "hiking", "created": "2019-03-04"}
    fields.update(front_matter)
    lines = [f"{name}: {value}" for name, value in fields.items()]
    return "```page\n" + "\n".join(lines) + "\n```\n\n" + body


@pytest.fixture
def make_page():
    return page_document


class RecordingEmitter:
    """Diagnostic emitter keeping every call for later assertions."""

    debug_enabled = False

    def __init__(self) -> None:
        self.warnings: list[str] = []
        self.errors: list[str] = []
        self.events: list[tuple[str, dict]] = []

    def warning(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append(message)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append(message)

    def event(self, name: str, payload) -> None:
        self.events.append((name, dict(payload)))

    def event_names(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture
def emitter() -> RecordingEmitter:
    return RecordingEmitter()
