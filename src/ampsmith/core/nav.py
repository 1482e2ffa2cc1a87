"""Navigation tree models and page URL helpers."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
import re

from pydantic import BaseModel, ConfigDict, Field


INDEX_ID = "index"
INDEX_PAGE = "index.html"
AMP_SUFFIX = ".amp.html"

_PAGE_PATTERN = re.compile(r"^(?P<base>[-a-z0-9_]+)(?P<amp>\.amp)?\.html(?P<fragment>#.+)?$")


def is_page(url: str) -> bool:
    """Return True when ``url`` names a generated page (``name.html[#frag]``)."""
    return _PAGE_PATTERN.match(url) is not None


def amp_page(url: str) -> str:
    """Return the AMP variant of a page URL, preserving any fragment."""
    match = _PAGE_PATTERN.match(url)
    if match is None:
        msg = f"{url!r} is not a page URL"
        raise ValueError(msg)
    return match.group("base") + AMP_SUFFIX + (match.group("fragment") or "")


class NavItem(BaseModel):
    """A node of the site navigation hierarchy.

    ``current`` and ``expanded`` are render-time annotations. They are only set
    on the copies returned by :func:`annotate_nav` so that the tree loaded with
    the site configuration is never modified.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = ""
    url: str = ""
    id: str | None = None
    children: list[NavItem] = Field(default_factory=list)

    current: bool = Field(default=False, exclude=True)
    expanded: bool = Field(default=False, exclude=True)

    @property
    def is_index(self) -> bool:
        return self.id == INDEX_ID

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def amp_url(self) -> str:
        """Return the URL of the AMP version of this item's page."""
        if self.is_index:
            return amp_page(INDEX_PAGE)
        if not is_page(self.url):
            return self.url
        return amp_page(self.url)

    def find_id(self, page_id: str) -> NavItem | None:
        """Return the item in this subtree whose ID matches ``page_id``."""
        if self.id == page_id:
            return self
        return find_id(self.children, page_id)


def find_id(items: Iterable[NavItem], page_id: str) -> NavItem | None:
    """Search a forest of navigation items depth-first for ``page_id``."""
    for item in items:
        found = item.find_id(page_id)
        if found is not None:
            return found
    return None


def index_item(items: Sequence[NavItem]) -> NavItem:
    """Return the synthetic entry used for the site's index page."""
    return NavItem(
        url=INDEX_PAGE,
        id=INDEX_ID,
        children=[item.model_copy(deep=True) for item in items],
    )


def annotate_nav(items: Sequence[NavItem], current_id: str | None) -> list[NavItem]:
    """Return annotated copies of ``items`` for the page identified by ``current_id``."""
    copies = [item.model_copy(deep=True) for item in items]
    for item in copies:
        _annotate(item, current_id)
    return copies


def _annotate(item: NavItem, current_id: str | None) -> bool:
    item.current = current_id is not None and item.id == current_id
    child_hit = False
    for child in item.children:
        child_hit = _annotate(child, current_id) or child_hit
    item.expanded = item.current or child_hit
    return item.expanded


__all__ = [
    "AMP_SUFFIX",
    "INDEX_ID",
    "INDEX_PAGE",
    "NavItem",
    "amp_page",
    "annotate_nav",
    "find_id",
    "index_item",
    "is_page",
]
