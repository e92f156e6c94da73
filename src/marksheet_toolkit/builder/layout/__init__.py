"""
Module: builder.layout

Purpose:
    Marksheet page composition and page fitting.
    Converts a student's records into a positioned page description and
    places rendered rasters onto physical pages.

Key Functions:
    - compose_marksheet(): Build the PageDescription for one student
    - fit_to_page(): Fit a raster onto a page without cropping
    - page_size_mm(): Physical page size for an orientation

Key Classes:
    - LayoutConfig: Spacing and measurement settings
    - PageDescription: Fully resolved page layout
    - Placement: Raster position on a page

Dependencies:
    - reportlab: Text measurement
    - marksheet_toolkit.core.models: Records and theme

Used By:
    - builder.export: Single and batch exporters
"""

from .config import LayoutConfig, page_size_mm, px_to_mm, A4_WIDTH_MM, A4_HEIGHT_MM
from .models import (
    TextElement,
    BoxElement,
    LineElement,
    ImageElement,
    QrElement,
    PageDescription,
    Placement,
)
from .composer import compose_marksheet, verification_payload
from .fitter import fit_to_page

__all__ = [
    # Config
    "LayoutConfig",
    "page_size_mm",
    "px_to_mm",
    "A4_WIDTH_MM",
    "A4_HEIGHT_MM",
    # Models
    "TextElement",
    "BoxElement",
    "LineElement",
    "ImageElement",
    "QrElement",
    "PageDescription",
    "Placement",
    # Functions
    "compose_marksheet",
    "verification_payload",
    "fit_to_page",
]
