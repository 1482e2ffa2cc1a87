"""Typed models for the raw HTML pseudo-elements allowed in documents.

Documents may embed a small vocabulary of hyphenated tags that are not real
HTML. Each tag maps to one model below; attributes are validated against the
model and boolean attributes count as set when present without a value, so
``<text-size small>`` parses as ``TextSize(small=True)``.
"""

from __future__ import annotations

from typing import Any, ClassVar

from bs4.element import Tag
from pydantic import BaseModel, ConfigDict, ValidationError, model_validator

from ampsmith.core.exceptions import MalformedInputError
from ampsmith.core.images import ImageSpec

from ._helpers import coerce_attribute


class PseudoElement(BaseModel):
    """Base class of every pseudo-element model."""

    model_config = ConfigDict(extra="forbid")

    tag: ClassVar[str] = ""

    @model_validator(mode="before")
    @classmethod
    def _flag_attributes(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        values = dict(data)
        for name, value in data.items():
            field = cls.model_fields.get(name)
            if field is not None and field.annotation is bool and value == "":
                values[name] = True
        return values


class ClearFloats(PseudoElement):
    """Wraps content in a span that clears floating figures."""

    tag: ClassVar[str] = "clear-floats"


class CodeUrl(PseudoElement):
    """Renders its content as a URL in a code span."""

    tag: ClassVar[str] = "code-url"


class OnlyAmp(PseudoElement):
    """Content only shown in the AMP variant."""

    tag: ClassVar[str] = "only-amp"


class OnlyNonAmp(PseudoElement):
    """Content only shown in the non-AMP variant."""

    tag: ClassVar[str] = "only-nonamp"


class TextSize(PseudoElement):
    """Shrinks its content. Exactly one size must be requested."""

    tag: ClassVar[str] = "text-size"

    small: bool = False
    tiny: bool = False

    @model_validator(mode="after")
    def _require_size(self) -> TextSize:
        if not self.small and not self.tiny:
            msg = "missing attribute"
            raise ValueError(msg)
        if self.small and self.tiny:
            msg = "small and tiny are exclusive"
            raise ValueError(msg)
        return self

    @property
    def css_class(self) -> str:
        return "small" if self.small else "real-small"


class InlineImage(PseudoElement, ImageSpec):
    """An image displayed inline with the surrounding text."""

    tag: ClassVar[str] = "img-inline"


PSEUDO_ELEMENTS: dict[str, type[PseudoElement]] = {
    model.tag: model
    for model in (ClearFloats, CodeUrl, InlineImage, OnlyAmp, OnlyNonAmp, TextSize)
}


def parse_pseudo_element(element: Tag) -> PseudoElement:
    """Validate ``element`` against the model registered for its tag name."""
    model = PSEUDO_ELEMENTS.get(element.name)
    if model is None:
        raise MalformedInputError(f'rendering HTML span "<{element.name}>" failed: unsupported tag')
    values = {name: coerce_attribute(value) for name, value in element.attrs.items()}
    try:
        return model.model_validate(values)
    except ValidationError as exc:
        raise MalformedInputError(
            f'rendering HTML span "<{element.name}>" failed: {exc}'
        ) from exc


__all__ = [
    "PSEUDO_ELEMENTS",
    "ClearFloats",
    "CodeUrl",
    "InlineImage",
    "OnlyAmp",
    "OnlyNonAmp",
    "PseudoElement",
    "TextSize",
    "parse_pseudo_element",
]
