"""State machine turning level-one headings into flat box sections."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from io import StringIO

from .exceptions import MalformedInputError


class BoxState(Enum):
    """Position of the walker relative to box sections."""

    NO_BOX = auto()
    STARTING_BOX = auto()
    IN_BOX = auto()


HEADING_FLAGS = ("desktop_only", "mobile_only", "narrow", "map_marker")


@dataclass(frozen=True, slots=True)
class HeadingAttributes:
    """Identifier and flags parsed from a ``id/flag1/flag2`` heading ID."""

    id: str = ""
    desktop_only: bool = False
    mobile_only: bool = False
    narrow: bool = False
    map_marker: bool = False

    @classmethod
    def parse(cls, value: str | None) -> HeadingAttributes:
        if not value:
            return cls()
        identifier, *flags = value.split("/")
        options: dict[str, bool] = {}
        for flag in flags:
            if flag not in HEADING_FLAGS:
                raise MalformedInputError(f"unknown heading flag {flag!r} in {value!r}")
            options[flag] = True
        return cls(id=identifier, **options)

    @property
    def classes(self) -> list[str]:
        """CSS classes carried by the flags."""
        classes: list[str] = []
        if self.narrow:
            classes.append("desktop-narrow")
        if self.desktop_only:
            classes.append("desktop-only")
        if self.mobile_only:
            classes.append("mobile-only")
        return classes


def marker_label(index: int) -> str:
    """Return the letter for the zero-based map marker ``index``."""
    if not 0 <= index < 26:
        raise MalformedInputError(f"map marker {index + 1} exceeds the 26 available labels")
    return chr(ord("A") + index)


@dataclass(frozen=True, slots=True)
class BoxHeader:
    """Data needed to emit the opening markup of a box."""

    title: str
    attributes: HeadingAttributes
    label: str = ""


class BoxTracker:
    """Track box sections while the document is walked.

    Boxes never nest: opening a heading while a box is open closes it first.
    """

    def __init__(self) -> None:
        self.state = BoxState.NO_BOX
        self.title = StringIO()

    @property
    def in_box(self) -> bool:
        return self.state is BoxState.IN_BOX

    def open_heading(self) -> bool:
        """Start capturing a title; return True when an open box must be closed first."""
        must_close = self.state is BoxState.IN_BOX
        self.state = BoxState.STARTING_BOX
        self.title = StringIO()
        return must_close

    def close_heading(self, attributes: HeadingAttributes, label: str = "") -> BoxHeader:
        """Finish the captured title and enter the box."""
        if self.state is not BoxState.STARTING_BOX:
            msg = f"cannot close a heading in state {self.state.name}"
            raise RuntimeError(msg)
        self.state = BoxState.IN_BOX
        return BoxHeader(title=self.title.getvalue(), attributes=attributes, label=label)

    def finish(self) -> bool:
        """Leave any open box; return True when its footer must be emitted."""
        must_close = self.state is BoxState.IN_BOX
        self.state = BoxState.NO_BOX
        return must_close


__all__ = [
    "HEADING_FLAGS",
    "BoxHeader",
    "BoxState",
    "BoxTracker",
    "HeadingAttributes",
    "marker_label",
]
