"""
Module: builder.rendering

Purpose:
    Raster rendering of marksheet page descriptions.

Key Classes:
    - Renderer: Abstract renderer owning one exclusive RenderSurface
    - PillowRenderer: PIL-based implementation
    - RenderError, ResourceLoadError: Render failures

Used By:
    - builder.export: Single and batch exporters
"""

from .resources import RenderError, ResourceLoadError, decode_image_source
from .renderer import Renderer, PillowRenderer, RenderSurface, SurfaceState
from .qr import qr_modules, qr_image
from .fonts import load_font

__all__ = [
    "Renderer",
    "PillowRenderer",
    "RenderSurface",
    "SurfaceState",
    "RenderError",
    "ResourceLoadError",
    "decode_image_source",
    "qr_modules",
    "qr_image",
    "load_font",
]
