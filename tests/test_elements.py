from bs4 import BeautifulSoup
import pytest

from ampsmith.adapters.handlers.elements import (
    ClearFloats,
    InlineImage,
    OnlyAmp,
    TextSize,
    parse_pseudo_element,
)
from ampsmith.core.exceptions import MalformedInputError


def _tag(html: str):
    return next(iter(BeautifulSoup(html, "html.parser").children))


def test_flag_attributes_without_value() -> None:
    parsed = parse_pseudo_element(_tag("<text-size small>fine print</text-size>"))

    assert isinstance(parsed, TextSize)
    assert parsed.small and not parsed.tiny
    assert parsed.css_class == "small"
    assert parse_pseudo_element(_tag("<text-size tiny></text-size>")).css_class == "real-small"


def test_text_size_requires_a_size() -> None:
    with pytest.raises(MalformedInputError, match="missing attribute"):
        parse_pseudo_element(_tag("<text-size></text-size>"))


def test_text_size_accepts_one_size_only() -> None:
    with pytest.raises(MalformedInputError, match="small and tiny are exclusive"):
        parse_pseudo_element(_tag("<text-size small tiny>x</text-size>"))


def test_unknown_attribute() -> None:
    with pytest.raises(MalformedInputError, match='rendering HTML span "<text-size>" failed'):
        parse_pseudo_element(_tag("<text-size huge></text-size>"))


def test_simple_elements() -> None:
    assert isinstance(parse_pseudo_element(_tag("<clear-floats></clear-floats>")), ClearFloats)
    assert isinstance(parse_pseudo_element(_tag("<only-amp>x</only-amp>")), OnlyAmp)
    with pytest.raises(MalformedInputError):
        parse_pseudo_element(_tag('<only-amp class="x">x</only-amp>'))


def test_inline_image_fields() -> None:
    parsed = parse_pseudo_element(
        _tag('<img-inline path="files/single.png" alt="Icon" width="20" height="10" lazy>')
    )

    assert isinstance(parsed, InlineImage)
    assert parsed.path == "files/single.png"
    assert (parsed.width, parsed.height) == (20, 10)
    assert parsed.lazy


def test_unsupported_tag() -> None:
    with pytest.raises(
        MalformedInputError, match='rendering HTML span "<fancy-tag>" failed: unsupported tag'
    ):
        parse_pseudo_element(_tag("<fancy-tag>x</fancy-tag>"))
