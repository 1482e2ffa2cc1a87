"""Image descriptor resolution.

An image is referenced either by an external URL or by a static path. Static
paths may contain a single ``*`` standing for the pixel width of each file in
a multi-resolution set, e.g. ``files/photo-*.jpg`` matching
``files/photo-400.jpg`` and ``files/photo-800.jpg``. Raster images other than
WebP are served as WebP with the original format as a fallback.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from bs4 import BeautifulSoup
from PIL import Image, UnidentifiedImageError
from pydantic import BaseModel, ConfigDict

from .diagnostics import DiagnosticEmitter, NullEmitter
from .exceptions import CodecError, MalformedInputError, ResolutionError
from .thumbnails import THUMBNAIL_SIZE, thumbnail


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import SiteConfig
    from .context import PageState


logger = logging.getLogger(__name__)

WEBP_EXT = ".webp"
SVG_EXT = ".svg"
WILDCARD = "*"
DEFAULT_AMP_LAYOUT = "responsive"


class ImageSpec(BaseModel):
    """Author-supplied image fields shared by image, map and inline images."""

    model_config = ConfigDict(extra="forbid")

    path: str = ""
    url: str = ""
    width: int = 0
    height: int = 0
    alt: str = ""
    lazy: bool = False


@dataclass(slots=True)
class ImageDescriptor:
    """Fully resolved image ready to be passed to the image templates."""

    path: str = ""
    url: str = ""
    width: int = 0
    height: int = 0
    alt: str = ""
    lazy: bool = False

    id: str = ""
    classes: list[str] = field(default_factory=list)
    attrs: dict[str, str | None] = field(default_factory=dict)
    layout: str = ""
    no_thumb: bool = False
    inline: bool = False

    src: str = ""
    srcset: str = ""
    fallback_src: str = ""
    fallback_srcset: str = ""
    sizes: str = ""
    thumb_src: str = ""
    define_thumb_filter: bool = False
    biggest_src: str = ""
    widths: list[int] = field(default_factory=list)
    svg: str = ""

    @classmethod
    def from_spec(cls, spec: ImageSpec, **options: object) -> ImageDescriptor:
        """Create an unresolved descriptor from author input plus renderer options."""
        descriptor = cls(
            path=spec.path,
            url=spec.url,
            width=spec.width,
            height=spec.height,
            alt=spec.alt,
            lazy=spec.lazy,
        )
        for name, value in options.items():
            setattr(descriptor, name, value)
        return descriptor


def replace_ext(path: str, ext: str) -> str:
    """Return ``path`` with its final extension replaced by ``ext``.

    A bare suffix such as ``.jpg`` counts as an extension.
    """
    stem, dot, last = path.rpartition(".")
    if not dot or "/" in last:
        return path + ext
    return stem + ext


class ImageResolver:
    """Resolve image descriptors for a single page render."""

    def __init__(
        self,
        site: SiteConfig,
        state: PageState,
        *,
        amp: bool,
        emitter: DiagnosticEmitter | None = None,
    ) -> None:
        self.site = site
        self.state = state
        self.amp = amp
        self.emitter = emitter or NullEmitter()

    def resolve(self, spec: ImageSpec | ImageDescriptor, **options: object) -> ImageDescriptor:
        """Validate ``spec`` and fill in sources, dimensions and thumbnail."""
        image = spec if isinstance(spec, ImageDescriptor) else ImageDescriptor.from_spec(spec)
        for name, value in options.items():
            setattr(image, name, value)

        if bool(image.path) == bool(image.url):
            raise MalformedInputError("exactly one of path or url must be set")
        if not image.alt:
            raise MalformedInputError("alt must be set")

        if image.inline and image.path.endswith(SVG_EXT):
            self._inline_svg(image)
            return image

        if self.amp:
            image.attrs["layout"] = image.layout or DEFAULT_AMP_LAYOUT
        elif image.lazy:
            image.attrs["loading"] = "lazy"

        if image.url:
            if image.width <= 0 or image.height <= 0:
                raise ResolutionError("width and height must be set for URLs")
            image.src = image.url
            return image

        if WILDCARD in image.path:
            self._resolve_set(image)
        else:
            self._resolve_single(image)

        if not image.sizes:
            image.sizes = f"{image.width}px"

        self.site.check_static(image.src)
        if image.fallback_src:
            self.site.check_static(image.fallback_src)
        self.site.check_static(image.biggest_src)

        if not image.no_thumb and not image.src.endswith(SVG_EXT):
            self._attach_thumbnail(image)

        self.emitter.event(
            "image_resolved",
            {
                "src": image.src,
                "width": image.width,
                "height": image.height,
                "widths": list(image.widths),
            },
        )
        return image

    def _inline_svg(self, image: ImageDescriptor) -> None:
        """Embed the static SVG ``image.path`` as an ``<svg>`` element."""
        resolved = self.site.check_static(image.path)
        try:
            source = resolved.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ResolutionError(f"failed reading {image.path}") from exc

        document = BeautifulSoup(source, "html.parser")
        svg = document.find("svg")
        if svg is None:
            raise CodecError(f"{image.path} does not contain an <svg> element")
        # HTML documents do not need the namespace declaration.
        for element in (svg, *svg.find_all(True)):
            element.attrs.pop("xmlns", None)
        if image.width > 0 and image.height > 0:
            svg["width"] = str(image.width)
            svg["height"] = str(image.height)
        if image.id:
            svg["id"] = image.id
        if image.classes:
            svg["class"] = " ".join(image.classes)
        for name, value in image.attrs.items():
            svg[name] = value

        title = document.new_tag("title")
        title.string = image.alt
        svg.insert(0, title)
        image.svg = str(svg)
        self.emitter.event(
            "image_resolved",
            {"src": image.path, "width": image.width, "height": image.height, "widths": []},
        )

    def image_size(self, path: str) -> tuple[int, int]:
        """Return the native pixel dimensions of the static file ``path``."""
        resolved = self.site.check_static(path)
        try:
            with Image.open(resolved) as source:
                return source.size
        except (OSError, UnidentifiedImageError) as exc:
            raise ResolutionError(f"failed getting {path} dimensions") from exc

    def match_widths(self, prefix: str, suffix: str) -> dict[int, str]:
        """Return static paths matching ``prefix*suffix`` keyed by their width token."""
        matches: dict[int, str] = {}
        for root in self.site.static_roots():
            if not root.is_dir():
                continue
            for candidate in root.glob(f"{prefix}{WILDCARD}{suffix}"):
                relative = candidate.relative_to(root).as_posix()
                token = relative[len(prefix) : len(relative) - len(suffix)]
                if not token.isdigit():
                    raise ResolutionError(f"unable to parse width from {relative!r}")
                matches.setdefault(int(token), relative)
        return dict(sorted(matches.items()))

    def _resolve_single(self, image: ImageDescriptor) -> None:
        if image.path.endswith((WEBP_EXT, SVG_EXT)):
            image.src = image.path
        else:
            image.src = replace_ext(image.path, WEBP_EXT)
            image.fallback_src = image.path
        image.biggest_src = image.path

        if image.width <= 0 or image.height <= 0:
            image.width, image.height = self.image_size(image.path)
        image.widths = [image.width]
        image.srcset = f"{image.src} {image.width}w"
        if image.fallback_src:
            image.fallback_srcset = f"{image.fallback_src} {image.width}w"

    def _resolve_set(self, image: ImageDescriptor) -> None:
        prefix, _, suffix = image.path.partition(WILDCARD)
        matches = self.match_widths(prefix, suffix)
        if not matches:
            raise ResolutionError(
                f"no images matched by prefix {prefix!r} and suffix {suffix!r}"
            )
        widths = list(matches)
        srcset = _format_srcset(matches)
        image.widths = widths

        if image.width <= 0 or image.height <= 0:
            reference: int | None = None
            if image.width <= 0 and len(widths) >= 2:
                if any(width == 2 * widths[0] for width in widths[1:]):
                    reference = widths[0]
            elif image.width > 0:
                reference = image.width
            if reference is None:
                raise ResolutionError("dimensions could not be determined")
            image.width, image.height = self.image_size(f"{prefix}{reference}{suffix}")

        src = f"{prefix}{image.width}{suffix}"
        image.biggest_src = f"{prefix}{widths[-1]}{suffix}"

        if image.path.endswith((WEBP_EXT, SVG_EXT)):
            image.src, image.srcset = src, srcset
            return

        webp_suffix = replace_ext(suffix, WEBP_EXT)
        webp_matches = self.match_widths(prefix, webp_suffix)
        if not webp_matches:
            raise ResolutionError(
                f"no images matched by prefix {prefix!r} and suffix {webp_suffix!r}"
            )
        image.src = replace_ext(src, WEBP_EXT)
        image.srcset = _format_srcset(webp_matches)
        image.fallback_src = src
        image.fallback_srcset = srcset

    def _attach_thumbnail(self, image: ImageDescriptor) -> None:
        source = image.fallback_src or image.src
        cache = self.state.thumbnails
        if source not in cache:
            cache[source] = self._generate_thumbnail(source)
        thumb = cache[source]
        if thumb is None:
            return
        image.thumb_src = thumb
        if not self.amp and not self.state.defined_thumb_filter:
            image.define_thumb_filter = True
            self.state.defined_thumb_filter = True

    def _generate_thumbnail(self, source: str) -> str | None:
        path: Path = self.site.check_static(source)
        logger.debug("Generating thumbnail for %s", path)
        try:
            return thumbnail(path, THUMBNAIL_SIZE, THUMBNAIL_SIZE)
        except UnidentifiedImageError as exc:
            # Pillow builds without animated WebP support cannot open these.
            if source.endswith(WEBP_EXT):
                self.emitter.warning(f"Skipping thumbnail for {source}", exc)
                self.emitter.event("thumbnail_skipped", {"path": source, "reason": str(exc)})
                return None
            raise CodecError(f"failed generating thumbnail for {source}") from exc
        except (OSError, ValueError) as exc:
            raise CodecError(f"failed generating thumbnail for {source}") from exc


def _format_srcset(matches: dict[int, str]) -> str:
    return ", ".join(f"{path} {width}w" for width, path in matches.items())


__all__ = [
    "DEFAULT_AMP_LAYOUT",
    "SVG_EXT",
    "WEBP_EXT",
    "ImageDescriptor",
    "ImageResolver",
    "ImageSpec",
    "replace_ext",
]
