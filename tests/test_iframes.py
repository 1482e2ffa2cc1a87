from bs4 import BeautifulSoup
import pytest

from ampsmith.adapters.html.iframes import load_iframe_data, render_iframe
from ampsmith.core.config import SiteConfig
from ampsmith.core.csp import hash_source
from ampsmith.core.exceptions import MalformedInputError


GRAPH_YAML = """\
graphs:
  temps:
    title: Temperatures
    units: C
    range: [-10, 40]
    points:
      - {time: 1546300800, value: 3.5}
      - {time: 1546387200, value: 4}
    notes:
      - {time: 1546300800, text: "New <year>"}
"""

MAP_YAML = """\
map_points:
  - name: Summit
    lat_long: [46.5, 7.9]
    id: summit
"""


def test_graph_page_hashes_every_inline_payload(site: SiteConfig) -> None:
    html = render_iframe(site, GRAPH_YAML.encode("utf-8")).decode("utf-8")
    soup = BeautifulSoup(html, "html.parser")

    policy = soup.find("meta", attrs={"http-equiv": "Content-Security-Policy"})["content"]
    assert policy.startswith("default-src 'none'; script-src https://d3js.org/d3.v3.min.js ")

    inline = [script.string for script in soup.find_all("script") if not script.get("src")]
    assert inline[0] == "drawGraphs(dataSets);"
    assert inline[1].startswith("const dataSets = {")
    for script in inline:
        assert hash_source(script) in policy
    assert hash_source(soup.style.string) in policy
    assert "\\u003cyear>" in inline[1]


def test_graph_styles_combine_builtin_and_site(site: SiteConfig) -> None:
    (site.inline_dir / "graph-iframe.css").write_text("svg{color:red}", encoding="utf-8")

    html = render_iframe(site, GRAPH_YAML).decode("utf-8")
    style = BeautifulSoup(html, "html.parser").style.string

    assert style.endswith("svg{color:red}")
    assert len(style) > len("svg{color:red}")


def test_map_page(site: SiteConfig) -> None:
    site = site.model_copy(update={"google_maps_api_key": "abc123"})

    html = render_iframe(site, MAP_YAML).decode("utf-8")

    assert "https://maps.googleapis.com/maps/api/js?key=abc123&amp;callback=" in html
    assert '"latLong": [\n      46.5,\n      7.9\n    ]' in html
    assert "initMap(points);" in html
    assert "Content-Security-Policy" not in html


def test_iframe_data_model() -> None:
    data = load_iframe_data(MAP_YAML)

    assert data.graphs is None
    assert data.map_points[0].lat_long == (46.5, 7.9)


@pytest.mark.parametrize(
    ("source", "message"),
    [
        ("{}", "unknown iframe type"),
        ("graphs: [oops", "failed to parse iframe data"),
        ("- a\n- b\n", "must be a mapping"),
        ("weather: {}", "invalid iframe data"),
    ],
)
def test_invalid_iframe_data(site: SiteConfig, source: str, message: str) -> None:
    with pytest.raises(MalformedInputError, match=message):
        render_iframe(site, source)
