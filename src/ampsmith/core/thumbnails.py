"""Tiny palette-indexed placeholders used for blur-up image loading."""

from __future__ import annotations

import base64
from io import BytesIO
from pathlib import Path

from PIL import Image


MAX_THUMBNAIL_PIXELS = 256
"""Upper bound that guarantees every pixel fits in a 256-color GIF palette."""

THUMBNAIL_SIZE = 4


def build_palette(pixels: list[tuple[int, int, int]]) -> tuple[list[int], list[int]]:
    """Return ``(palette, indices)`` built from the first distinct colors seen."""
    lookup: dict[tuple[int, int, int], int] = {}
    palette: list[int] = []
    indices: list[int] = []
    for pixel in pixels:
        index = lookup.get(pixel)
        if index is None:
            index = len(lookup)
            lookup[pixel] = index
            palette.extend(pixel)
        indices.append(index)
    return palette, indices


def encode_thumbnail(path: Path | str, width: int, height: int) -> str:
    """Return a base64-encoded GIF of ``path`` scaled down to ``width`` x ``height``.

    Raises ``ValueError`` for sizes whose colors might not fit in the palette
    and lets Pillow's decoding errors propagate.
    """
    if width <= 0 or height <= 0 or width * height > MAX_THUMBNAIL_PIXELS:
        msg = f"only {MAX_THUMBNAIL_PIXELS} or fewer pixels supported"
        raise ValueError(msg)

    with Image.open(path) as source:
        rgb = source.convert("RGB")
    scaled = rgb.resize((width, height), Image.Resampling.BICUBIC)

    pixels = scaled.load()
    palette, indices = build_palette(
        [pixels[x, y] for y in range(height) for x in range(width)]
    )
    thumb = Image.new("P", (width, height))
    thumb.putpalette(palette)
    thumb.putdata(indices)

    buffer = BytesIO()
    thumb.save(buffer, format="GIF")
    return base64.b64encode(buffer.getvalue()).decode("ascii")


def thumbnail(path: Path | str, width: int = THUMBNAIL_SIZE, height: int = THUMBNAIL_SIZE) -> str:
    """Return a ``data:`` URI holding the thumbnail of ``path``."""
    return "data:image/gif;base64," + encode_thumbnail(path, width, height)


__all__ = [
    "MAX_THUMBNAIL_PIXELS",
    "THUMBNAIL_SIZE",
    "build_palette",
    "encode_thumbnail",
    "thumbnail",
]
