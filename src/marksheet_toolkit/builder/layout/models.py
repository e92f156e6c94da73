"""
Module: builder.layout.models

Purpose:
    Data models for the marksheet page description.
    Immutable dataclasses representing positioned drawing elements, the
    complete page, and the placement of a raster on a PDF page.

Key Classes:
    - TextElement, BoxElement, LineElement, ImageElement, QrElement
    - PageDescription: Complete, fully resolved marksheet layout
    - Placement: Raster position on a page (Page Fitter output)

Dependencies:
    - dataclasses (std)
    - hashlib (std): Description fingerprints

Used By:
    - builder.layout.composer: Creates PageDescriptions
    - builder.rendering.renderer: Paints PageDescriptions
    - builder.output.pdf_writer: Places images
"""

from __future__ import annotations

import hashlib
import json
from dataclasses import asdict, dataclass
from typing import Optional, Union

from marksheet_toolkit.core.models import Orientation


# All coordinates are millimetres from the top-left corner of the description.

@dataclass(frozen=True)
class TextElement:
    """
    A single line of text inside a box.

    The text is vertically centered in the box and aligned horizontally
    by ``align`` ("left", "center", "right").
    """

    x: float
    y: float
    width: float
    height: float
    text: str
    font_size: float
    color: str
    bold: bool = False
    italic: bool = False
    align: str = "left"


@dataclass(frozen=True)
class BoxElement:
    """Rectangle with optional fill, stroke and rounded corners."""

    x: float
    y: float
    width: float
    height: float
    fill: Optional[str] = None
    stroke: Optional[str] = None
    stroke_width: float = 0.0
    radius: float = 0.0
    fill_opacity: float = 1.0


@dataclass(frozen=True)
class LineElement:
    x1: float
    y1: float
    x2: float
    y2: float
    color: str
    width: float


@dataclass(frozen=True)
class ImageElement:
    """
    Embedded image resource (logo, watermark, photo).

    Attributes:
        source: Data URI, raw base64 payload or file path
        fit: "contain" keeps the whole image, "cover" fills and crops
        opacity: 0..1
        grayscale: Desaturate before painting
    """

    x: float
    y: float
    width: float
    height: float
    source: str
    fit: str = "contain"
    opacity: float = 1.0
    grayscale: bool = False


@dataclass(frozen=True)
class QrElement:
    """Square QR code for ``payload``."""

    x: float
    y: float
    size: float
    payload: str
    color: str = "#000000"


Element = Union[TextElement, BoxElement, LineElement, ImageElement, QrElement]


@dataclass(frozen=True)
class PageDescription:
    """
    Fully resolved marksheet layout (immutable).

    Elements are listed in paint order. ``height_mm`` is at least the
    page height and grows when the content does not fit; the Page Fitter
    later scales the raster back onto the physical page.

    Attributes:
        width_mm: Description width (always the page width)
        height_mm: Description height
        page_width_mm: Physical page width
        page_height_mm: Physical page height
        orientation: Page orientation
        font_family: Theme font family (informational)
        background: Page color
        elements: Drawing elements in paint order

    Example:
        >>> desc.width_mm, desc.page_height_mm
        (210.0, 297.0)
        >>> desc.overflows
        False
    """

    width_mm: float
    height_mm: float
    page_width_mm: float
    page_height_mm: float
    orientation: Orientation
    font_family: str
    background: str = "#ffffff"
    elements: tuple[Element, ...] = ()

    @property
    def overflows(self) -> bool:
        """Whether the content is taller than the physical page."""
        return self.height_mm > self.page_height_mm

    @property
    def image_sources(self) -> tuple[str, ...]:
        """Distinct image resources in first-use order."""
        seen: dict[str, None] = {}
        for element in self.elements:
            if isinstance(element, ImageElement):
                seen.setdefault(element.source, None)
        return tuple(seen)

    def fingerprint(self) -> str:
        """SHA-256 of the canonical JSON form; equal descriptions share it."""
        payload = {
            "width_mm": self.width_mm,
            "height_mm": self.height_mm,
            "page_width_mm": self.page_width_mm,
            "page_height_mm": self.page_height_mm,
            "orientation": self.orientation.value,
            "font_family": self.font_family,
            "background": self.background,
            "elements": [
                {"type": type(e).__name__, **asdict(e)} for e in self.elements
            ],
        }
        encoded = json.dumps(payload, sort_keys=True, separators=(",", ":"))
        return hashlib.sha256(encoded.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class Placement:
    """
    Raster position on a physical page, in page units from the top-left.

    Attributes:
        x, y: Top-left corner
        width, height: Placed size (aspect ratio of the raster preserved)
        mode: "width" (fit-by-width) or "height" (fit-by-height)
    """

    x: float
    y: float
    width: float
    height: float
    mode: str

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height
