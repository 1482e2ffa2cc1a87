from pathlib import Path

import pytest

from ampsmith.adapters.html.formatter import HTMLFormatter, builtin_inline, format_date
from ampsmith.core.exceptions import ConfigurationError


def test_format_date() -> None:
    assert format_date("2020-01-05", "%b %-d, %Y") == "Jan 5, 2020"
    assert format_date("2020-01-05", "%Y-%m-%d") == "2020-01-05"
    assert format_date("2019-03-04", "%Y") == "2019"


def test_builtin_partials_render() -> None:
    formatter = HTMLFormatter()

    assert formatter.render("clear") == '<div class="clear"></div>'


def test_box_start_partial() -> None:
    html = HTMLFormatter().render(
        "box_start",
        title="Day <em>one</em>",
        id="day1",
        classes=["desktop-narrow"],
        label="A",
        amp=True,
    )

    assert '<div class="box desktop-narrow" id="day1">' in html
    assert '<span class="location-label">A</span> Day <em>one</em>' in html
    assert '<a class="map-link" href="#map">map</a>' in html


def test_site_templates_override_partials(tmp_path: Path) -> None:
    (tmp_path / "clear.html").write_text("<hr>", encoding="utf-8")

    assert HTMLFormatter([tmp_path]).render("clear") == "<hr>"


def test_missing_partial() -> None:
    with pytest.raises(ConfigurationError, match="Missing HTML partial 'nope'"):
        HTMLFormatter().render("nope")


def test_private_names_are_not_proxied() -> None:
    with pytest.raises(AttributeError):
        HTMLFormatter()._missing


def test_builtin_inline() -> None:
    assert "-amp-start" in builtin_inline("amp-boilerplate.css")
    assert builtin_inline("missing.css") == ""


def test_partial_values_may_be_called_name() -> None:
    html = HTMLFormatter().render(
        "graph",
        figure={"classes": [], "caption": ""},
        href="iframes/g.html",
        name="temps",
        width=400,
        height=200,
    )

    assert 'src="iframes/g.html?temps"' in html
