"""
Module: builder.export.single

Purpose:
    Export one student's marksheet as a one-page PDF.
    Compose -> Render -> Fit -> Assemble. Produces bytes only; the caller
    decides where they go.

Key Functions:
    - export_one(): Student -> PDF bytes
    - save_one(): export_one() + write to the output folder

Key Classes:
    - RenderFailure: A student's marksheet could not be rendered

Dependencies:
    - builder.layout: Composition and page fitting
    - builder.rendering: Raster renderer
    - builder.output: PDF assembly

Used By:
    - builder.controller: export_from_state()
    - scripts/export_marksheets.py
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from PIL import Image

from marksheet_toolkit.core.models import (
    ClassConfig,
    Orientation,
    SchoolInfo,
    Student,
    ThemeConfig,
)
from marksheet_toolkit.builder.config import ExportConfig
from marksheet_toolkit.builder.layout import compose_marksheet, fit_to_page
from marksheet_toolkit.builder.output import MarksheetDocument, marksheet_filename
from marksheet_toolkit.builder.rendering import PillowRenderer, Renderer, RenderSurface

logger = logging.getLogger(__name__)


class RenderFailure(Exception):
    """A marksheet could not be rendered; no file was produced."""

    def __init__(self, message: str, student_id: str, student_name: str):
        super().__init__(message)
        self.student_id = student_id
        self.student_name = student_name


def render_student(
    surface: RenderSurface,
    student: Student,
    class_config: ClassConfig,
    school: SchoolInfo,
    theme: Union[ThemeConfig, Mapping[str, Any], None],
    orientation: Orientation,
    *,
    font_size_px: float,
    timeout: float,
) -> Image.Image:
    """
    Compose a student's page and rasterize it on an owned surface.

    Shared by the single and batch exporters.

    Raises:
        RenderError: If resources fail to load or the surface never
            becomes ready
    """
    description = compose_marksheet(
        student, class_config, school, theme, orientation, font_size_px,
    )
    surface.load(description)
    surface.wait_until_ready(timeout)
    return surface.rasterize()


def export_one(
    student: Student,
    class_config: ClassConfig,
    school: SchoolInfo,
    theme: Union[ThemeConfig, Mapping[str, Any], None],
    orientation: Union[Orientation, str],
    *,
    font_size_px: Optional[float] = None,
    renderer: Optional[Renderer] = None,
    config: Optional[ExportConfig] = None,
) -> bytes:
    """
    Export a single student's marksheet.

    Args:
        student: Student record
        class_config: The student's class
        school: School header information
        theme: Normalized theme
        orientation: Page orientation
        font_size_px: Base font size (defaults to the config's, 18px)
        renderer: Renderer to use (a PillowRenderer by default)
        config: Export settings

    Returns:
        One-page PDF as bytes

    Raises:
        RenderFailure: If anything fails while rendering; carries the
            student identity and chains the original error

    Example:
        >>> data = export_one(student, cls, school, theme, Orientation.PORTRAIT)
        >>> data[:5]
        b'%PDF-'
    """
    config = config or ExportConfig()
    renderer = renderer or PillowRenderer(config.supersample)
    orientation = Orientation.parse(orientation)
    size = font_size_px if font_size_px is not None else config.font_size_px

    logger.info(f"Exporting marksheet for {student.name} ({student.id})")
    try:
        with renderer.surface() as surface:
            image = render_student(
                surface, student, class_config, school, theme, orientation,
                font_size_px=size, timeout=config.ready_timeout_s,
            )
    except Exception as e:
        logger.exception(f"Render failed for {student.name}: {e!r}")
        raise RenderFailure(
            f"Could not render marksheet for {student.name}: {e}",
            student_id=student.id,
            student_name=student.name,
        ) from e

    document = MarksheetDocument(orientation, title=f"{student.name} Marksheet")
    placement = fit_to_page(image.width, image.height, document.page_width_mm, document.page_height_mm)
    document.place_image(image, placement)
    return document.to_bytes()


def save_one(
    student: Student,
    class_config: ClassConfig,
    school: SchoolInfo,
    theme: Union[ThemeConfig, Mapping[str, Any], None],
    orientation: Union[Orientation, str],
    *,
    output_dir: Optional[Path] = None,
    font_size_px: Optional[float] = None,
    renderer: Optional[Renderer] = None,
    config: Optional[ExportConfig] = None,
) -> Path:
    """
    Export a marksheet and write it to ``output_dir``.

    Returns:
        Path of the written PDF
    """
    config = config or ExportConfig()
    data = export_one(
        student, class_config, school, theme, orientation,
        font_size_px=font_size_px, renderer=renderer, config=config,
    )
    folder = Path(output_dir) if output_dir is not None else Path(config.output_dir)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / marksheet_filename(student)
    path.write_bytes(data)
    logger.info(f"Saved {path}")
    return path
