"""
Module: builder.layout.config

Purpose:
    Physical page sizes, unit conversion and the fixed spacing used by the
    marksheet layout. Spacing values are CSS pixels (96 per inch) and are
    converted to millimetres by the composer.

Key Functions:
    - page_size_mm(): (width, height) for an orientation
    - px_to_mm(): CSS pixels to millimetres

Key Classes:
    - LayoutConfig: Immutable spacing and typography settings

Dependencies:
    - dataclasses (std)

Used By:
    - builder.layout.composer: Page geometry
    - builder.output.pdf_writer: Page sizes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from marksheet_toolkit.core.models import Orientation


# Standard A4 sheet
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0

CSS_PX_PER_INCH = 96
MM_PER_INCH = 25.4


def page_size_mm(orientation: Orientation) -> Tuple[float, float]:
    """
    Physical page size for an orientation.

    Example:
        >>> page_size_mm(Orientation.LANDSCAPE)
        (297.0, 210.0)
    """
    if Orientation.parse(orientation) is Orientation.LANDSCAPE:
        return A4_HEIGHT_MM, A4_WIDTH_MM
    return A4_WIDTH_MM, A4_HEIGHT_MM


def px_to_mm(px: float) -> float:
    """Convert CSS pixels to millimetres."""
    return px * MM_PER_INCH / CSS_PX_PER_INCH


@dataclass(frozen=True)
class LayoutConfig:
    """
    Spacing and typography of the marksheet (immutable).

    Lengths are CSS pixels; text sizes elsewhere are em multipliers of
    the base font size passed to the composer.

    Attributes:
        outer_border_px: Thickness of the outer page border
        border_gap_px: Gap between the two page borders
        inner_padding_px: Padding inside the inner border
        logo_px: Header logo square
        photo_width_px: Student photo cell width
        photo_height_px: Student photo cell height
        info_label_px: Width reserved for info labels
        qr_px: QR code edge length
        result_width_px: Width of the final result box
        result_min_height_px: Minimum height of the final result box
        signature_line_px: Signature line length
        line_height: Text line height multiplier
        watermark_ratio: Watermark width as a fraction of page width
        sans_font: Font used for text measurement
        sans_bold_font: Bold font used for text measurement
    """

    outer_border_px: float = 3
    border_gap_px: float = 4
    inner_padding_px: float = 24
    logo_px: float = 96
    photo_width_px: float = 128
    photo_height_px: float = 160
    info_label_px: float = 128
    qr_px: float = 90
    result_width_px: float = 288
    result_min_height_px: float = 200
    signature_line_px: float = 160
    line_height: float = 1.3
    watermark_ratio: float = 0.6
    sans_font: str = "Helvetica"
    sans_bold_font: str = "Helvetica-Bold"

    def __post_init__(self) -> None:
        """Validate configuration on construction."""
        if self.line_height <= 0:
            raise ValueError(f"line_height must be positive: {self.line_height}")
        if not (0 < self.watermark_ratio <= 1):
            raise ValueError(f"watermark_ratio must be in (0, 1]: {self.watermark_ratio}")

    @property
    def frame_inset_px(self) -> float:
        """Distance from the margin edge to the content area."""
        return self.outer_border_px + self.border_gap_px + 1 + self.inner_padding_px
