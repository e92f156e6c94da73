"""
Module: builder.output.pdf_writer

Purpose:
    Assemble rendered marksheet rasters into A4 PDF documents using
    ReportLab, in memory. A document starts with one blank page; every
    further page is added explicitly.

Key Functions:
    - marksheet_filename(): "{name}_Marksheet.pdf"
    - batch_filename(): "{class}_Batch_{i}_of_{n}.pdf"

Key Classes:
    - MarksheetDocument: In-memory PDF with image placement

Dependencies:
    - reportlab: PDF generation
    - PIL: Image handling

Used By:
    - builder.export.single: export_one()
    - builder.export.batch: BatchExporter
"""

from __future__ import annotations

import io
import logging
import re
from pathlib import Path
from typing import Optional, Tuple

from PIL import Image
from reportlab.lib.pagesizes import A4, landscape, portrait
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from marksheet_toolkit import __version__
from marksheet_toolkit.core.models import Orientation, Student
from marksheet_toolkit.builder.layout.models import Placement

logger = logging.getLogger(__name__)

_PATH_SEPARATORS = re.compile(r"[\\/]")


def _safe_part(text: str, fallback: str) -> str:
    cleaned = _PATH_SEPARATORS.sub("_", text).strip()
    return cleaned or fallback


def marksheet_filename(student: Student) -> str:
    """
    File name for a single-student export.

    Example:
        >>> marksheet_filename(Student(id="1", roll_no="7", name="Asha Rao"))
        'Asha Rao_Marksheet.pdf'
    """
    return f"{_safe_part(student.name, 'Student')}_Marksheet.pdf"


def batch_filename(class_name: str, index: int, total: int) -> str:
    """
    File name for one batch of a class export (``index`` is 0-based).

    Example:
        >>> batch_filename("Class 10", 0, 3)
        'Class 10_Batch_1_of_3.pdf'
    """
    return f"{_safe_part(class_name, 'Class')}_Batch_{index + 1}_of_{total}.pdf"


def page_size_pt(orientation: Orientation) -> Tuple[float, float]:
    """A4 in PDF points for an orientation."""
    if Orientation.parse(orientation) is Orientation.LANDSCAPE:
        return landscape(A4)
    return portrait(A4)


class MarksheetDocument:
    """
    In-memory A4 PDF made of full-page marksheet images.

    Coordinates passed to ``place_image`` are millimetres from the top-left
    of the page; they are converted to bottom-up PDF points here.

    Example:
        >>> doc = MarksheetDocument(Orientation.PORTRAIT)
        >>> doc.place_image(image, fit_to_page(*image.size, 210, 297))
        >>> doc.add_page()
        >>> doc.place_image(other, placement)
        >>> data = doc.to_bytes()
    """

    def __init__(self, orientation: Orientation, *, title: Optional[str] = None) -> None:
        self.orientation = Orientation.parse(orientation)
        self.page_width_pt, self.page_height_pt = page_size_pt(self.orientation)
        self._buffer = io.BytesIO()
        self._canvas = canvas.Canvas(self._buffer, pagesize=(self.page_width_pt, self.page_height_pt))
        self._canvas.setCreator(f"Marksheet Toolkit v{__version__}")
        if title:
            self._canvas.setTitle(title)
        self._page_count = 1
        self._data: Optional[bytes] = None

    @property
    def page_count(self) -> int:
        return self._page_count

    @property
    def page_width_mm(self) -> float:
        return self.page_width_pt / mm

    @property
    def page_height_mm(self) -> float:
        return self.page_height_pt / mm

    @property
    def is_closed(self) -> bool:
        return self._data is not None

    def add_page(self) -> None:
        """Finish the current page and start a blank one."""
        self._check_open()
        self._canvas.showPage()
        self._page_count += 1

    def place_image(self, image: Image.Image, placement: Placement) -> None:
        """
        Draw an image on the current page.

        Args:
            image: Raster to embed
            placement: Position and size in millimetres (top-left origin)
        """
        self._check_open()
        width_pt = placement.width * mm
        height_pt = placement.height * mm
        x_pt = placement.x * mm
        y_pt = _transform_y(self.page_height_pt, placement.y, placement.height)

        self._canvas.drawImage(
            _pil_to_reader(image),
            x_pt,
            y_pt,
            width=width_pt,
            height=height_pt,
        )

    def to_bytes(self) -> bytes:
        """Finish the document and return the PDF bytes (idempotent)."""
        if self._data is None:
            self._canvas.showPage()
            self._canvas.save()
            self._data = self._buffer.getvalue()
            logger.debug(f"Assembled PDF: {self._page_count} pages, {len(self._data)} bytes")
        return self._data

    def save(self, path: Path) -> Path:
        """Write the finished document to ``path``."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        return path

    def _check_open(self) -> None:
        if self._data is not None:
            raise RuntimeError("Document already finished")


def _pil_to_reader(img: Image.Image) -> ImageReader:
    """
    Convert PIL image to ReportLab ImageReader.

    Args:
        img: PIL Image object

    Returns:
        ImageReader for use with ReportLab
    """
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    buf.seek(0)
    return ImageReader(buf)


def _transform_y(page_height_pt: float, y_mm_top: float, height_mm: float) -> float:
    """
    Convert a top-down millimetre Y coordinate to bottom-up PDF points.

    Args:
        page_height_pt: Page height in points
        y_mm_top: Y position from top in millimetres
        height_mm: Height of element in millimetres

    Returns:
        Y position from bottom in points
    """
    return page_height_pt - (y_mm_top + height_mm) * mm
