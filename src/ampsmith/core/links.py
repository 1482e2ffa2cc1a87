"""Link target rewriting for the AMP and non-AMP page variants."""

from __future__ import annotations

from typing import TYPE_CHECKING
from urllib.parse import urlparse

from .exceptions import MalformedInputError, ResolutionError
from .nav import amp_page, is_page


if TYPE_CHECKING:  # pragma: no cover - typing only
    from .config import SiteConfig


FORCE_AMP = "!force_amp"
FORCE_NONAMP = "!force_nonamp"


def split_directives(target: str) -> tuple[str, bool, bool]:
    """Strip trailing force directives, returning ``(target, force_amp, force_nonamp)``."""
    force_amp = False
    force_nonamp = False
    while True:
        if target.endswith(FORCE_AMP):
            target = target.removesuffix(FORCE_AMP)
            force_amp = True
        elif target.endswith(FORCE_NONAMP):
            target = target.removesuffix(FORCE_NONAMP)
            force_nonamp = True
        else:
            return target, force_amp, force_nonamp


class LinkRewriter:
    """Compute hrefs for one page variant.

    AMP pages are served from a cache on a different origin, so links to
    anything that is not a generated page must become absolute there.
    """

    def __init__(self, site: SiteConfig, *, amp: bool) -> None:
        self.site = site
        self.amp = amp

    def rewrite(self, raw: str) -> str:
        """Return the href to emit for the link target ``raw``."""
        if not raw:
            raise MalformedInputError("empty link target")
        if urlparse(raw).scheme or raw.startswith("#"):
            return raw

        target, force_amp, force_nonamp = split_directives(raw)
        if force_amp and force_nonamp:
            raise MalformedInputError(f"link {raw!r} forces both AMP and non-AMP")
        if not target:
            raise MalformedInputError(f"link {raw!r} has no target")

        amp = (self.amp or force_amp) and not force_nonamp
        if target.startswith("/"):
            if amp:
                raise ResolutionError(f"link {target!r} shouldn't have leading slash")
            return target

        page = is_page(target)
        if not page:
            self.site.check_static(urlparse(target).path)
        if not amp:
            return target
        if not page:
            return self.site.base_url + target
        return amp_page(target)


__all__ = ["FORCE_AMP", "FORCE_NONAMP", "LinkRewriter", "split_directives"]
