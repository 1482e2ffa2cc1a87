"""Content-Security-Policy accumulation.

Inline resources are allowed through hashes of their exact bytes, so every
payload must be final before it is passed to :meth:`CSPBuilder.add_hash`.
"""

from __future__ import annotations

import base64
from enum import Enum
import hashlib
from html import escape


class Directive(str, Enum):
    """CSP directives, declared in the order they are serialised."""

    DEFAULT = "default-src"
    CHILD = "child-src"
    CONNECT = "connect-src"
    IMG = "img-src"
    SCRIPT = "script-src"
    STYLE = "style-src"
    FRAME = "frame-src"


NONE = "'none'"
SELF = "'self'"
UNSAFE_INLINE = "'unsafe-inline'"

_HASH_PREFIX = "'sha256-"
_INLINE_DIRECTIVES = (Directive.SCRIPT, Directive.STYLE)


def hash_source(content: str | bytes) -> str:
    """Return the ``'sha256-...'`` source matching ``content``."""
    data = content.encode("utf-8") if isinstance(content, str) else content
    digest = base64.b64encode(hashlib.sha256(data).digest()).decode("ascii")
    return f"{_HASH_PREFIX}{digest}'"


class CSPBuilder:
    """Accumulate allowed sources per directive and serialise the policy."""

    def __init__(self) -> None:
        self._sources: dict[Directive, list[str]] = {}

    def add_source(self, directive: Directive | str, source: str) -> None:
        """Allow ``source`` for ``directive``; child sources also apply to frames."""
        directive = Directive(directive)
        self._append(directive, source)
        if directive is Directive.CHILD:
            self._append(Directive.FRAME, source)

    def add_hash(self, directive: Directive | str, content: str | bytes) -> str:
        """Allow inline ``content`` for ``directive`` and return the hash source."""
        source = hash_source(content)
        self.add_source(directive, source)
        return source

    def sources(self, directive: Directive | str) -> tuple[str, ...]:
        return tuple(self._sources.get(Directive(directive), ()))

    def hash_count(self) -> int:
        return sum(
            1
            for values in self._sources.values()
            for source in values
            if source.startswith(_HASH_PREFIX)
        )

    def finish(self) -> str:
        """Return the policy string with directives in their fixed order."""
        clauses: list[str] = []
        for directive in Directive:
            values = list(self._sources.get(directive, ()))
            if not values:
                continue
            if directive in _INLINE_DIRECTIVES and any(
                value.startswith(_HASH_PREFIX) for value in values
            ):
                values.append(UNSAFE_INLINE)
            clauses.append(" ".join([directive.value, *values]))
        return "; ".join(clauses)

    def meta_tag(self) -> str:
        """Return the policy wrapped in a ``<meta http-equiv>`` tag."""
        policy = escape(self.finish(), quote=False).replace('"', "&quot;")
        return f'<meta http-equiv="Content-Security-Policy" content="{policy}">'

    def _append(self, directive: Directive, source: str) -> None:
        bucket = self._sources.setdefault(directive, [])
        if source not in bucket:
            bucket.append(source)


__all__ = [
    "NONE",
    "SELF",
    "UNSAFE_INLINE",
    "CSPBuilder",
    "Directive",
    "hash_source",
]
