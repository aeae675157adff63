"""Renderer and drawing surfaces."""

from .renderer import WATERMARK_TEXT, Renderer
from .surface import DrawingSurface, RasterSurface, SvgSurface, surface_for

__all__ = [
    "DrawingSurface",
    "RasterSurface",
    "Renderer",
    "SvgSurface",
    "WATERMARK_TEXT",
    "surface_for",
]
