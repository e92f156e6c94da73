"""
Module: builder.rendering.qr

Purpose:
    Rasterize verification QR codes. Module layout comes from reportlab's
    QR barcode widget; the dark runs it draws are mapped back onto a
    module grid and scaled up without smoothing.

Key Functions:
    - qr_modules(): Payload -> boolean module matrix
    - qr_image(): Payload -> square RGBA image

Dependencies:
    - reportlab.graphics.barcode.qr: QR encoding
    - PIL: Raster output

Used By:
    - builder.rendering.renderer: QrElement painting
"""

from __future__ import annotations

from functools import lru_cache
from typing import Tuple

from PIL import Image, ImageColor
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Rect

_GRID = 1000.0


@lru_cache(maxsize=128)
def qr_modules(payload: str) -> Tuple[Tuple[bool, ...], ...]:
    """
    Encode a payload and return its module matrix (True = dark).

    The matrix excludes the quiet zone.
    """
    widget = QrCodeWidget(payload)
    widget.barBorder = 0
    widget.barWidth = _GRID
    widget.barHeight = _GRID
    group = widget.draw()

    runs = [
        shape for shape in group.contents
        if isinstance(shape, Rect) and shape.fillColor is not None
    ]
    if not runs:
        raise ValueError(f"QR encoder produced no modules for {payload!r}")

    box = runs[0].height
    count = int(round(_GRID / box))
    grid = [[False] * count for _ in range(count)]
    for run in runs:
        row = int(round((_GRID - run.y) / box)) - 1
        col = int(round(run.x / box))
        for c in range(col, min(count, col + int(round(run.width / box)))):
            grid[row][c] = True
    return tuple(tuple(row) for row in grid)


def qr_image(payload: str, size: int, color: str = "#000000") -> Image.Image:
    """
    Render a QR code as a ``size`` x ``size`` RGBA image on a transparent
    background.
    """
    modules = qr_modules(payload)
    count = len(modules)
    dark = ImageColor.getrgb(color)[:3] + (255,)

    small = Image.new("RGBA", (count, count), (0, 0, 0, 0))
    pixels = small.load()
    for r, row in enumerate(modules):
        for c, is_dark in enumerate(row):
            if is_dark:
                pixels[c, r] = dark
    return small.resize((max(1, size), max(1, size)), Image.Resampling.NEAREST)
