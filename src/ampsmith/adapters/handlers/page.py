"""Document-level handlers emitting the head and tail of a page.

The header rules run before the body walk. They read the front matter,
locate the page in the navigation tree, build the structured data and the
inline style and script payloads, and only then finalise the CSP, whose
hashes cover those exact payloads.
"""

from __future__ import annotations

import logging

from bs4.element import NavigableString, Tag

from ampsmith.core.config import SiteConfig
from ampsmith.core.context import PageContext
from ampsmith.core.csp import NONE, SELF, Directive
from ampsmith.core.exceptions import MalformedInputError, ResolutionError
from ampsmith.core.images import ImageDescriptor, ImageSpec
from ampsmith.core.metadata import ImageObject, Organization, PageInfo, Person, StructuredData
from ampsmith.core.nav import INDEX_ID, NavItem, annotate_nav, find_id, index_item
from ampsmith.core.rules import RenderPhase, WalkStatus, renders

from ._helpers import code_language, code_literal, load_block, read_inline


logger = logging.getLogger(__name__)

PAGE_LANGUAGE = "page"

MOBILE_MAX_WIDTH = 640
DESKTOP_MIN_WIDTH = MOBILE_MAX_WIDTH + 1


def find_front_matter(root: Tag) -> Tag:
    """Return the ``page`` block that must open every document."""
    for child in root.children:
        if isinstance(child, NavigableString) and not child.strip():
            continue
        if isinstance(child, Tag) and child.name == "pre" and code_language(child) == PAGE_LANGUAGE:
            return child
        break
    raise MalformedInputError('page doesn\'t start with "page" code block')


def read_front_matter(root: Tag) -> PageInfo:
    """Parse the leading ``page`` block into :class:`PageInfo`."""
    return load_block(code_literal(find_front_matter(root)), PageInfo, PAGE_LANGUAGE)


def resolve_nav_item(site: SiteConfig, page_id: str) -> NavItem:
    """Return the navigation entry of ``page_id``.

    The index page is not listed in the tree; it gets a synthetic entry whose
    children are the top-level items.
    """
    if page_id == INDEX_ID:
        return index_item(site.nav_items)
    item = find_id(site.nav_items, page_id)
    if item is None:
        raise ResolutionError(f'no page with ID "{page_id}"')
    return item


def build_structured_data(
    context: PageContext, page: PageInfo, nav_item: NavItem
) -> StructuredData:
    """Return the schema.org ``Article`` describing ``page``."""
    site = context.site
    logo: ImageObject | None = None
    if site.publisher_logo_path:
        width, height = context.images.image_size(site.publisher_logo_path)
        logo = ImageObject(url=site.abs_url(site.publisher_logo_path), width=width, height=height)

    data = StructuredData(
        main_entity_of_page=site.abs_url(nav_item.url),
        headline=page.title,
        date_published=page.created,
        author=Person(name=site.author_name, email=site.author_email),
        publisher=Organization(name=site.publisher_name, url=site.base_url, logo=logo),
    )
    if page.desc and page.desc != site.default_desc:
        data.description = page.desc
    if page.modified:
        data.date_modified = page.modified
    if page.img_url and page.img_width > 0 and page.img_height > 0:
        site.check_static(page.img_url)
        data.image = ImageObject(
            url=site.abs_url(page.img_url), width=page.img_width, height=page.img_height
        )
    return data


def _resolve_chrome_image(
    context: PageContext, path: str, alt: str, **options: object
) -> ImageDescriptor | None:
    if not path:
        return None
    return context.images.resolve(ImageSpec(path=path, alt=alt), no_thumb=True, **options)


def _resolve_header_images(context: PageContext, nav_item: NavItem) -> dict[str, object]:
    site = context.site
    values: dict[str, object] = {}
    if context.amp:
        values["logo_amp"] = _resolve_chrome_image(context, site.logo_path_amp, site.logo_alt)
        values["menu_button"] = _resolve_chrome_image(
            context,
            site.menu_button_path,
            "[toggle menu]",
            id="menu-button",
            attrs={"tabindex": "0", "role": "button", "on": "tap:sidebar.open"},
        )
        return values

    logo = _resolve_chrome_image(context, site.logo_path_html, site.logo_alt, id="nav-logo")
    # A second size that is not the 2x variant of the first targets mobile screens.
    if logo is not None and len(logo.widths) >= 2 and logo.widths[1] != 2 * logo.widths[0]:
        logo.sizes = f"(max-width: {MOBILE_MAX_WIDTH}px) {logo.widths[1]}px, {logo.sizes}"
    values["logo_html"] = logo
    values["nav_toggle"] = _resolve_chrome_image(
        context,
        site.nav_toggle_path,
        "[toggle navigation]",
        id="nav-toggle-img",
        classes=[] if nav_item.has_children else ["expand"],
    )
    return values


def _amp_payloads(context: PageContext) -> dict[str, str]:
    site = context.site
    custom = "".join(
        site.read_inline(name) for name in ("base.css", "mobile.css", "mobile-amp.css", "amp.css")
    )
    payloads = {
        "amp_style": read_inline(site, "amp-boilerplate.css"),
        "amp_noscript_style": read_inline(site, "amp-boilerplate-noscript.css"),
        "amp_custom_style": custom,
    }
    context.metadata.styles = list(payloads.values())
    return payloads


def _nonamp_payloads(context: PageContext, page: PageInfo) -> dict[str, object]:
    site = context.site
    style = (
        site.read_inline("base.css")
        + site.read_inline("base-nonamp.css")
        + f"@media(min-width:{DESKTOP_MIN_WIDTH}px){{{site.read_inline('desktop.css')}}}"
        + f"@media(max-width:{MOBILE_MAX_WIDTH}px){{{site.read_inline('mobile.css')}}}"
    )
    scripts = [site.read_inline("base.js")]
    if page.has_map:
        scripts.append(site.read_inline("map.js"))

    csp = context.csp
    csp.add_source(Directive.DEFAULT, NONE)
    csp.add_source(Directive.CHILD, SELF)
    csp.add_source(Directive.IMG, SELF)
    csp.add_hash(Directive.STYLE, style)
    for script in scripts:
        csp.add_hash(Directive.SCRIPT, script)
    context.metadata.csp_meta = csp.meta_tag()
    context.emitter.event("csp_finalized", {"page": page.id, "hashes": csp.hash_count()})

    context.metadata.styles = [style]
    context.metadata.scripts = list(scripts)
    return {"html_style": style, "html_scripts": scripts}


@renders(phase=RenderPhase.HEADER, name="front_matter")
def resolve_front_matter(root: Tag, context: PageContext) -> WalkStatus:
    """Read the front matter and derive the page-wide metadata."""
    site = context.site
    page = read_front_matter(root)
    nav_item = resolve_nav_item(site, page.id)
    context.page = page
    context.nav_item = nav_item
    context.nav_items = annotate_nav(site.nav_items, page.id)

    meta = context.metadata
    meta.title = page.title if page.hide_title_suffix else page.title + site.title_suffix
    meta.description = page.desc or site.default_desc
    meta.structured_data = build_structured_data(context, page, nav_item)
    if context.amp:
        meta.link_rel = "canonical"
        meta.link_href = site.abs_url(nav_item.url)
    else:
        meta.link_rel = "amphtml"
        meta.link_href = site.abs_url(nav_item.amp_url())

    meta.template_values.update(_resolve_header_images(context, nav_item))
    meta.template_values["favicon"] = (
        context.images.image_size(site.favicon_path) if site.favicon_path else None
    )
    return WalkStatus.CONTINUE


@renders(phase=RenderPhase.HEADER, name="inline_payloads", after=("front_matter",))
def collect_inline_payloads(root: Tag, context: PageContext) -> WalkStatus:
    """Read the inline styles and scripts and finalise the CSP over them."""
    if context.amp:
        payloads: dict[str, object] = dict(_amp_payloads(context))
    else:
        payloads = _nonamp_payloads(context, context.page)
    context.metadata.template_values.update(payloads)
    return WalkStatus.CONTINUE


@renders(phase=RenderPhase.HEADER, name="page_start", after=("inline_payloads",))
def render_page_start(root: Tag, context: PageContext) -> WalkStatus:
    """Write the top of the page."""
    page = context.page
    meta = context.metadata
    logger.debug("Rendering page %r (%s)", page.id, context.mode.value)
    context.write(
        context.render(
            "page_start",
            site=context.site,
            page=page,
            meta=meta,
            nav_item=context.nav_item,
            nav_items=context.nav_items,
            structured_data=meta.structured_data.to_json(),
            **meta.template_values,
        )
    )
    return WalkStatus.CONTINUE


@renders(phase=RenderPhase.FOOTER, name="page_footer")
def render_page_footer(root: Tag, context: PageContext) -> WalkStatus:
    """Close any open box and write the bottom of the page."""
    if context.boxes.finish():
        context.write(context.render("box_end"))
    context.write(context.render("page_end", page=context.page))
    return WalkStatus.CONTINUE


__all__ = [
    "build_structured_data",
    "collect_inline_payloads",
    "find_front_matter",
    "read_front_matter",
    "render_page_footer",
    "render_page_start",
    "resolve_front_matter",
    "resolve_nav_item",
]
