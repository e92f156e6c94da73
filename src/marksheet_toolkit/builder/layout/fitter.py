"""
Module: builder.layout.fitter

Purpose:
    Scale a rendered raster onto a physical page without cropping or
    distortion. Two mutually exclusive branches:

    - fit-by-width: scaled height H' = H_px * W_page / W_px fits the page,
      so the image spans the full width at the top.
    - fit-by-height: otherwise the image spans the full height and is
      centered horizontally.

Key Functions:
    - fit_to_page(): Raster size + page size -> Placement

Dependencies:
    - builder.layout.models: Placement

Used By:
    - builder.export.single / batch
"""

from __future__ import annotations

import logging

from .models import Placement

logger = logging.getLogger(__name__)

FIT_WIDTH = "width"
FIT_HEIGHT = "height"


def fit_to_page(
    image_width: float,
    image_height: float,
    page_width: float,
    page_height: float,
) -> Placement:
    """
    Place an image on a page, preserving its aspect ratio.

    Args:
        image_width: Raster width (pixels)
        image_height: Raster height (pixels)
        page_width: Printable page width (any unit)
        page_height: Printable page height (same unit)

    Returns:
        Placement in page units

    Raises:
        ValueError: If any dimension is not positive

    Example:
        >>> fit_to_page(1000, 2000, 210, 297)
        Placement(x=30.75, y=0.0, width=148.5, height=297.0, mode='height')
        >>> fit_to_page(2000, 1000, 210, 297)
        Placement(x=0.0, y=0.0, width=210.0, height=105.0, mode='width')
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive: {image_width}x{image_height}")
    if page_width <= 0 or page_height <= 0:
        raise ValueError(f"Page size must be positive: {page_width}x{page_height}")

    scaled_height = image_height * page_width / image_width
    if scaled_height <= page_height:
        logger.debug(f"Fit by width: {image_width}x{image_height} -> {page_width}x{scaled_height:.2f}")
        return Placement(
            x=0.0,
            y=0.0,
            width=float(page_width),
            height=float(scaled_height),
            mode=FIT_WIDTH,
        )

    scaled_width = image_width * page_height / image_height
    logger.debug(f"Fit by height: {image_width}x{image_height} -> {scaled_width:.2f}x{page_height}")
    return Placement(
        x=(page_width - scaled_width) / 2,
        y=0.0,
        width=float(scaled_width),
        height=float(page_height),
        mode=FIT_HEIGHT,
    )
