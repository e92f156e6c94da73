"""
Module: builder.rendering.fonts

Purpose:
    TrueType font lookup for the raster renderer. Tries the theme's font
    family first, then common system fonts, then Pillow's bundled font.

Key Functions:
    - load_font(): Cached font for a pixel size and style

Dependencies:
    - PIL.ImageFont

Used By:
    - builder.rendering.renderer: Text painting
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import List

from PIL import ImageFont

logger = logging.getLogger(__name__)

_REGULAR = [
    "arial.ttf",        # Arial (Windows)
    "Arial.ttf",        # Arial (Mac)
    "DejaVuSans.ttf",
    "LiberationSans-Regular.ttf",
]
_BOLD = [
    "arialbd.ttf",
    "Arial Bold.ttf",
    "DejaVuSans-Bold.ttf",
    "LiberationSans-Bold.ttf",
]
_ITALIC = [
    "ariali.ttf",
    "Arial Italic.ttf",
    "DejaVuSans-Oblique.ttf",
    "LiberationSans-Italic.ttf",
]


def _candidates(family: str, bold: bool, italic: bool) -> List[str]:
    names: List[str] = []
    if family:
        stem = family.replace(" ", "")
        if bold:
            names.append(f"{stem}-Bold.ttf")
        elif italic:
            names.append(f"{stem}-Italic.ttf")
        names.append(f"{stem}-Regular.ttf")
        names.append(f"{stem}.ttf")
    if bold:
        names += _BOLD
    elif italic:
        names += _ITALIC
    return names + _REGULAR


@lru_cache(maxsize=256)
def load_font(
    size: int,
    bold: bool = False,
    italic: bool = False,
    family: str = "",
) -> ImageFont.FreeTypeFont:
    """
    Load a font for text rendering.

    Args:
        size: Font size in pixels
        bold: Prefer bold variants
        italic: Prefer italic variants
        family: Theme font family tried before the system fonts

    Returns:
        Font object
    """
    size = max(1, int(size))
    for font_name in _candidates(family, bold, italic):
        try:
            return ImageFont.truetype(font_name, size)
        except (IOError, OSError):
            continue

    logger.warning("Could not load TrueType font, using default")
    return ImageFont.load_default(size)
