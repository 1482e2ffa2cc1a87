from pathlib import Path

import pytest

from ampsmith.core.config import DEFAULT_D3_SCRIPT_URL, SiteConfig, load_site_config
from ampsmith.core.exceptions import ConfigurationError, ResolutionError


SITE_YAML = """\
base_url: https://www.example.org/
title_suffix: " - Example"
nav_items:
  - name: Trips
    url: trips.html
    id: trips
    children:
      - name: Hiking
        url: hiking.html
        id: hiking
"""


def test_load_site_config(tmp_path: Path) -> None:
    path = tmp_path / "site.yaml"
    path.write_text(SITE_YAML, encoding="utf-8")

    site = load_site_config(path)

    assert site.site_dir == tmp_path
    assert site.title_suffix == " - Example"
    assert site.nav_items[0].children[0].id == "hiking"
    assert site.d3_script_url == DEFAULT_D3_SCRIPT_URL
    assert site.static_dir == tmp_path / "static"
    assert site.static_roots() == [tmp_path / "static", tmp_path / "static_gen"]


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("base_url: https://www.example.org\n", "must end with a slash"),
        ("base_url: https://www.example.org/\ncolor: red\n", "color"),
        ("base_url: [unterminated\n", "Invalid YAML"),
        ("- just\n- a list\n", "must be a mapping"),
    ],
)
def test_invalid_site_config(tmp_path: Path, content: str, message: str) -> None:
    path = tmp_path / "site.yaml"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError, match=message):
        load_site_config(path)


def test_missing_site_config(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Unable to read"):
        load_site_config(tmp_path / "site.yaml")


def test_read_inline(site: SiteConfig) -> None:
    assert site.read_inline("base.js") == "alert('foo');"
    assert site.read_inline("missing.css") == ""


def test_abs_url(site: SiteConfig) -> None:
    assert site.abs_url("hiking.html") == "https://www.example.org/hiking.html"
    assert site.abs_url("index.html") == "https://www.example.org/"
    assert site.abs_url("https://www.example.org/a.png") == "https://www.example.org/a.png"
    with pytest.raises(ResolutionError, match="doesn't have prefix"):
        site.abs_url("https://other.org/a.png")


def test_static_lookup(site: SiteConfig, site_dir: Path) -> None:
    assert site.check_static("files/notes.pdf") == site_dir / "static" / "files" / "notes.pdf"
    with pytest.raises(ResolutionError, match="does not exist"):
        site.check_static("files/missing.pdf")


def test_extra_static_dirs(site_dir: Path) -> None:
    (site_dir / "downloads").mkdir()
    (site_dir / "downloads" / "gpx.zip").write_bytes(b"zip")
    site = SiteConfig(
        base_url="https://www.example.org/",
        extra_static_dirs={"downloads": "dl"},
        site_dir=site_dir,
    )

    assert site.resolve_static("dl/gpx.zip") == site_dir / "downloads" / "gpx.zip"
    assert site.resolve_static("dl/other.zip") is None
    assert site.resolve_static("files/notes.pdf") is not None
