import pytest

from ampsmith.core.nav import (
    INDEX_PAGE,
    NavItem,
    amp_page,
    annotate_nav,
    find_id,
    index_item,
    is_page,
)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("hiking.html", True),
        ("hiking.html#day-1", True),
        ("hiking.amp.html", True),
        ("trip_2019-a.html", True),
        ("files/hiking.html", False),
        ("Hiking.html", False),
        ("notes.pdf", False),
        ("https://example.org/a.html", False),
    ],
)
def test_is_page(url: str, expected: bool) -> None:
    assert is_page(url) is expected


def test_amp_page_keeps_fragment() -> None:
    assert amp_page("hiking.html") == "hiking.amp.html"
    assert amp_page("hiking.html#top") == "hiking.amp.html#top"
    assert amp_page("hiking.amp.html") == "hiking.amp.html"


def test_amp_page_rejects_other_urls() -> None:
    with pytest.raises(ValueError):
        amp_page("notes.pdf")


def test_amp_url() -> None:
    assert NavItem(url="about.html", id="about").amp_url() == "about.amp.html"
    assert NavItem(url="https://other.org/", id="ext").amp_url() == "https://other.org/"
    assert NavItem(url="", id="index").amp_url() == "index.amp.html"


def test_find_id_searches_depth_first(nav_items: list[NavItem]) -> None:
    assert find_id(nav_items, "hiking").name == "Hiking"
    assert nav_items[0].find_id("hiking").url == "hiking.html"
    assert find_id(nav_items, "nowhere") is None


def test_index_item_wraps_top_level(nav_items: list[NavItem]) -> None:
    item = index_item(nav_items)

    assert item.is_index
    assert item.url == INDEX_PAGE
    assert [child.id for child in item.children] == ["trips", "about"]
    assert item.children[0] is not nav_items[0]


def test_annotate_marks_current_and_ancestors(nav_items: list[NavItem]) -> None:
    annotated = annotate_nav(nav_items, "hiking")

    trips, about = annotated
    assert trips.expanded and not trips.current
    assert trips.children[0].current and trips.children[0].expanded
    assert not about.expanded and not about.current


def test_annotations_do_not_leak(nav_items: list[NavItem]) -> None:
    annotate_nav(nav_items, "hiking")
    fresh = annotate_nav(nav_items, "about")

    assert not nav_items[0].expanded
    assert not nav_items[0].children[0].current
    assert not fresh[0].expanded
    assert fresh[1].current
