"""Custom exception hierarchy for the page rendering pipeline."""

from __future__ import annotations


class AmpsmithError(RuntimeError):
    """Base exception for page rendering failures."""


class MalformedInputError(AmpsmithError, ValueError):
    """Raised when document content or directive attributes cannot be parsed."""


class ResolutionError(AmpsmithError):
    """Raised when a referenced page, image, or static asset cannot be resolved."""


class CodecError(AmpsmithError):
    """Raised when an image cannot be decoded or re-encoded."""


class ConfigurationError(AmpsmithError):
    """Raised when the site configuration is invalid or unreadable."""


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "AmpsmithError",
    "CodecError",
    "ConfigurationError",
    "MalformedInputError",
    "ResolutionError",
    "exception_hint",
    "exception_messages",
]
