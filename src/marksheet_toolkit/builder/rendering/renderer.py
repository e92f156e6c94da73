"""
Module: builder.rendering.renderer

Purpose:
    Turn a PageDescription into a raster image. Rendering goes through a
    single RenderSurface per renderer, owned exclusively for the duration
    of one export:

        with renderer.surface() as surface:
            surface.load(description)        # resolve images, then paint
            surface.wait_until_ready(10.0)   # explicit readiness signal
            image = surface.rasterize()

    ``load()`` decodes every embedded image before painting starts, so a
    surface only reports ready once the layout, images included, is final.

Key Classes:
    - Renderer: Abstract base, owns the surface and its lock
    - PillowRenderer: Paints descriptions with PIL.ImageDraw
    - RenderSurface: The exclusive, reusable presentation surface
    - RenderError / ResourceLoadError: Render failures

Dependencies:
    - PIL: Raster drawing
    - builder.rendering.resources / fonts / qr

Used By:
    - builder.export.single: export_one()
    - builder.export.batch: BatchExporter
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageOps

from marksheet_toolkit.builder.layout.config import CSS_PX_PER_INCH, MM_PER_INCH
from marksheet_toolkit.builder.layout.models import (
    BoxElement,
    ImageElement,
    LineElement,
    PageDescription,
    QrElement,
    TextElement,
)

from .fonts import load_font
from .qr import qr_image
from .resources import RenderError, ResourceLoadError, decode_image_source

logger = logging.getLogger(__name__)

DEFAULT_SUPERSAMPLE = 2
MIN_TEXT_PX = 6
FALLBACK_COLOR = "#000000"


class SurfaceState(str, Enum):
    EMPTY = "empty"
    READY = "ready"
    FAILED = "failed"


class RenderSurface:
    """
    The presentation surface a renderer paints on.

    Obtained only through ``Renderer.surface()``; reused across students
    within one export and cleared when released.
    """

    def __init__(self, renderer: Renderer) -> None:
        self._renderer = renderer
        self._ready = threading.Event()
        self._state = SurfaceState.EMPTY
        self._description: Optional[PageDescription] = None
        self._raster: Optional[Image.Image] = None
        self._error: Optional[RenderError] = None

    @property
    def state(self) -> SurfaceState:
        return self._state

    @property
    def description(self) -> Optional[PageDescription]:
        return self._description

    def load(self, description: PageDescription) -> None:
        """
        Resolve the description's image resources, then paint it.

        Raises:
            ResourceLoadError: If an embedded image cannot be decoded
            RenderError: If painting fails
        """
        self.clear()
        self._description = description
        try:
            resources: Dict[str, Image.Image] = {}
            for source in description.image_sources:
                resources[source] = self._renderer.resolve(source)
            self._raster = self._renderer.paint(description, resources)
        except RenderError as e:
            self._fail(e)
            raise
        except Exception as e:
            error = RenderError(f"Painting failed: {e!r}")
            self._fail(error)
            raise error from e

        self._state = SurfaceState.READY
        self._ready.set()

    def wait_until_ready(self, timeout: float) -> None:
        """
        Block until the loaded description is fully painted.

        Raises:
            RenderError: If nothing was loaded, loading failed, or the
                surface did not become ready within ``timeout`` seconds
        """
        if self._description is None:
            raise RenderError("Nothing loaded on the render surface")
        if not self._ready.wait(timeout):
            raise RenderError(f"Render surface not ready after {timeout}s")
        if self._error is not None:
            raise self._error

    def rasterize(self) -> Image.Image:
        """Copy of the painted raster. Only legal once the surface is ready."""
        if self._state is not SurfaceState.READY or self._raster is None:
            raise RenderError(f"Cannot rasterize a surface in state {self._state.value!r}")
        return self._raster.copy()

    def clear(self) -> None:
        self._ready.clear()
        self._state = SurfaceState.EMPTY
        self._description = None
        self._raster = None
        self._error = None

    def _fail(self, error: RenderError) -> None:
        self._error = error
        self._state = SurfaceState.FAILED
        self._raster = None
        self._ready.set()


class Renderer(ABC):
    """
    Abstract renderer.

    Subclasses implement ``paint()``; the base class owns the single
    surface and guarantees exclusive use of it.
    """

    def __init__(self, *, base_dir: Optional[Path] = None) -> None:
        self.base_dir = base_dir
        self._lock = threading.Lock()
        self._surface = RenderSurface(self)

    @abstractmethod
    def paint(self, description: PageDescription, resources: Mapping[str, Image.Image]) -> Image.Image:
        """
        Paint a description whose images are already decoded.

        Args:
            description: Page description
            resources: source -> decoded RGBA image

        Returns:
            RGB raster proportional to the description's physical size
        """

    def resolve(self, source: str) -> Image.Image:
        """Decode one image resource."""
        return decode_image_source(source, self.base_dir)

    @contextmanager
    def surface(self, timeout: Optional[float] = None) -> Iterator[RenderSurface]:
        """
        Acquire exclusive use of the render surface.

        Args:
            timeout: Seconds to wait for another owner to release it
                (None waits indefinitely)

        Raises:
            RenderError: If the surface stays busy past ``timeout``
        """
        acquired = self._lock.acquire(timeout=-1 if timeout is None else timeout)
        if not acquired:
            raise RenderError("Render surface is in use by another export")
        try:
            yield self._surface
        finally:
            self._surface.clear()
            self._lock.release()

    def render(self, description: PageDescription, timeout: float = 10.0) -> Image.Image:
        """Load, wait and rasterize in one exclusive acquisition."""
        with self.surface() as surface:
            surface.load(description)
            surface.wait_until_ready(timeout)
            return surface.rasterize()


class PillowRenderer(Renderer):
    """
    Paints descriptions with PIL.

    The raster has ``px_per_mm = 96 / 25.4 * supersample`` pixels per
    millimetre, so an A4 portrait description at supersample 2 is
    1587 x 2245 pixels.

    Example:
        >>> renderer = PillowRenderer(supersample=2)
        >>> image = renderer.render(description)
        >>> image.size
        (1587, 2245)
    """

    def __init__(self, supersample: int = DEFAULT_SUPERSAMPLE, *, base_dir: Optional[Path] = None) -> None:
        if supersample < 1:
            raise ValueError(f"supersample must be at least 1: {supersample}")
        super().__init__(base_dir=base_dir)
        self.supersample = supersample
        self.px_per_mm = CSS_PX_PER_INCH / MM_PER_INCH * supersample

    def raster_size(self, description: PageDescription) -> Tuple[int, int]:
        return (
            max(1, round(description.width_mm * self.px_per_mm)),
            max(1, round(description.height_mm * self.px_per_mm)),
        )

    def paint(self, description: PageDescription, resources: Mapping[str, Image.Image]) -> Image.Image:
        size = self.raster_size(description)
        image = Image.new("RGB", size, _rgb(description.background, "#ffffff"))
        draw = ImageDraw.Draw(image, "RGBA")

        for element in description.elements:
            if isinstance(element, BoxElement):
                self._draw_box(draw, element)
            elif isinstance(element, LineElement):
                self._draw_line(draw, element)
            elif isinstance(element, TextElement):
                self._draw_text(draw, element, description.font_family)
            elif isinstance(element, ImageElement):
                self._draw_image(image, element, resources[element.source])
            elif isinstance(element, QrElement):
                self._draw_qr(image, element)
            else:
                raise RenderError(f"Unknown element type: {type(element).__name__}")

        logger.debug(f"Painted {len(description.elements)} elements onto {size[0]}x{size[1]} raster")
        return image

    # ─────────────────────────────────────────────────────────────────────
    # Element painters
    # ─────────────────────────────────────────────────────────────────────

    def _px(self, mm: float) -> float:
        return mm * self.px_per_mm

    def _box(self, x: float, y: float, width: float, height: float) -> Tuple[int, int, int, int]:
        left, top = round(self._px(x)), round(self._px(y))
        right, bottom = round(self._px(x + width)), round(self._px(y + height))
        return left, top, max(left, right - 1), max(top, bottom - 1)

    def _draw_box(self, draw: ImageDraw.ImageDraw, box: BoxElement) -> None:
        if box.width <= 0 or box.height <= 0:
            return
        fill = _rgba(box.fill, box.fill_opacity) if box.fill else None
        outline = _rgba(box.stroke) if box.stroke and box.stroke_width > 0 else None
        width = max(1, round(self._px(box.stroke_width))) if outline else 0
        bounds = self._box(box.x, box.y, box.width, box.height)
        radius = round(self._px(box.radius))
        if radius > 0:
            draw.rounded_rectangle(bounds, radius=radius, fill=fill, outline=outline, width=width)
        else:
            draw.rectangle(bounds, fill=fill, outline=outline, width=width)

    def _draw_line(self, draw: ImageDraw.ImageDraw, line: LineElement) -> None:
        draw.line(
            [(self._px(line.x1), self._px(line.y1)), (self._px(line.x2), self._px(line.y2))],
            fill=_rgba(line.color),
            width=max(1, round(self._px(line.width))),
        )

    def _draw_text(self, draw: ImageDraw.ImageDraw, text: TextElement, family: str) -> None:
        if not text.text:
            return
        box_width = self._px(text.width)
        size = max(MIN_TEXT_PX, round(self._px(text.font_size)))
        font = load_font(size, text.bold, text.italic, family)
        measured = draw.textlength(text.text, font=font)
        if measured > box_width > 0 and size > MIN_TEXT_PX:
            # Shrink to the box rather than spill into the neighbouring cell
            size = max(MIN_TEXT_PX, int(size * box_width / measured))
            font = load_font(size, text.bold, text.italic, family)

        middle = self._px(text.y + text.height / 2)
        if text.align == "center":
            anchor, x = "mm", self._px(text.x + text.width / 2)
        elif text.align == "right":
            anchor, x = "rm", self._px(text.x + text.width)
        else:
            anchor, x = "lm", self._px(text.x)
        draw.text((x, middle), text.text, fill=_rgba(text.color), font=font, anchor=anchor)

    def _draw_image(self, canvas: Image.Image, element: ImageElement, source: Image.Image) -> None:
        left, top, right, bottom = self._box(element.x, element.y, element.width, element.height)
        box_size = (right - left + 1, bottom - top + 1)

        img = source
        if element.grayscale:
            alpha = img.getchannel("A")
            img = ImageOps.grayscale(img.convert("RGB")).convert("RGBA")
            img.putalpha(alpha)

        if element.fit == "cover":
            img = ImageOps.fit(img, box_size, Image.Resampling.LANCZOS)
            offset = (left, top)
        else:
            img = ImageOps.contain(img, box_size, Image.Resampling.LANCZOS)
            offset = (
                left + (box_size[0] - img.width) // 2,
                top + (box_size[1] - img.height) // 2,
            )

        if element.opacity < 1.0:
            opacity = max(0.0, element.opacity)
            alpha = img.getchannel("A").point(lambda a: round(a * opacity))
            img = img.copy()
            img.putalpha(alpha)

        canvas.paste(img, offset, img)

    def _draw_qr(self, canvas: Image.Image, element: QrElement) -> None:
        size = max(1, round(self._px(element.size)))
        img = qr_image(element.payload, size, _hex(element.color))
        canvas.paste(img, (round(self._px(element.x)), round(self._px(element.y))), img)


def _rgb(color: Optional[str], fallback: str = FALLBACK_COLOR) -> Tuple[int, int, int]:
    """Parse a CSS color; unknown colors fall back rather than fail the render."""
    try:
        return ImageColor.getrgb(color or fallback)[:3]
    except ValueError:
        logger.warning(f"Unrecognised color {color!r}, using {fallback}")
        return ImageColor.getrgb(fallback)[:3]


def _rgba(color: Optional[str], opacity: float = 1.0) -> Tuple[int, int, int, int]:
    return _rgb(color) + (round(255 * max(0.0, min(1.0, opacity))),)


def _hex(color: str) -> str:
    r, g, b = _rgb(color)
    return f"#{r:02x}{g:02x}{b:02x}"


__all__ = [
    "Renderer",
    "PillowRenderer",
    "RenderSurface",
    "SurfaceState",
    "RenderError",
    "ResourceLoadError",
]
