"""Drawing surfaces: one small vector interface, two backends.

:class:`Renderer` only talks to :class:`DrawingSurface`, so the same
resolved document can be drawn into an SVG tree or a Pillow image.  All
coordinates are canvas pixels; text is centered on its anchor point.
"""

from __future__ import annotations

import base64
import logging
import math
from abc import ABC, abstractmethod
from functools import lru_cache
from io import BytesIO
from typing import Dict, Optional, Sequence, Tuple

from PIL import Image, ImageColor, ImageDraw, ImageFont, ImageOps

from ..assets import ImageHandle
from ..geometry import Point, norm360, to_cartesian
from ..viz.core.svg import SvgElement, SvgScene

LOG = logging.getLogger(__name__)

__all__ = ["DrawingSurface", "RasterSurface", "SvgSurface", "surface_for"]

# Clock angle of the point where circular text starts (9 o'clock).
TEXT_PATH_START_DEG = 270.0


class DrawingSurface(ABC):
    """Backend-neutral drawing primitives used by the renderer."""

    format: str = ""
    media_type: str = ""

    def __init__(self, size: float) -> None:
        if size <= 0:
            raise ValueError("surface size must be positive")
        self.size = float(size)

    @abstractmethod
    def fill_background(self, color: str) -> None: ...

    @abstractmethod
    def circle(
        self,
        center: Point,
        radius: float,
        *,
        fill: Optional[str] = None,
        stroke: Optional[str] = None,
        stroke_width: float = 1.0,
        opacity: float = 1.0,
    ) -> None: ...

    @abstractmethod
    def line(
        self,
        start: Point,
        end: Point,
        *,
        stroke: str,
        stroke_width: float = 1.0,
        opacity: float = 1.0,
    ) -> None: ...

    @abstractmethod
    def text(
        self,
        position: Point,
        value: str,
        *,
        font_size: float,
        fill: str,
        font_family: str = "sans-serif",
        bold: bool = False,
        stroke: Optional[str] = None,
        stroke_width: float = 0.0,
        opacity: float = 1.0,
    ) -> None: ...

    @abstractmethod
    def clipped_image(self, handle: ImageHandle, center: Point, radius: float) -> None:
        """Draw ``handle`` covering the circle of ``radius`` and clipped to it."""

    @abstractmethod
    def image(self, handle: ImageHandle, center: Point, box: float) -> None:
        """Draw ``handle`` scaled to fit a ``box`` x ``box`` square."""

    @abstractmethod
    def text_on_circle(
        self,
        center: Point,
        radius: float,
        value: str,
        *,
        font_size: float,
        path_length: float,
        fill: str,
        font_family: str = "serif",
    ) -> None:
        """Lay ``value`` clockwise along the circle, stretched to ``path_length``.

        The path starts at 9 o'clock and the text is centered on the path's
        midpoint, so the wrap seam falls at 9 o'clock.
        """

    @abstractmethod
    def finish(self) -> bytes: ...


# ---------------------------------------------------------------------------
# SVG


def _svg_paint(color: Optional[str]) -> Tuple[str, Optional[float]]:
    """Split ``#RRGGBBAA`` into an SVG paint and an opacity."""

    if not color:
        return "none", None
    if color.startswith("#") and len(color) == 9:
        try:
            alpha = int(color[7:9], 16) / 255.0
        except ValueError:
            return color, None
        return color[:7], round(alpha, 4)
    return color, None


def _data_uri(handle: ImageHandle) -> str:
    return f"data:{handle.mime};base64,{base64.b64encode(handle.data).decode('ascii')}"


class SvgSurface(DrawingSurface):
    format = "svg"
    media_type = "image/svg+xml"

    def __init__(self, size: float, metadata: Optional[Dict[str, str]] = None) -> None:
        super().__init__(size)
        self.scene = SvgScene(self.size, self.size, metadata=dict(metadata or {}))

    def fill_background(self, color: str) -> None:
        paint, alpha = _svg_paint(color)
        self.scene.rect(0, 0, self.size, self.size, fill=paint, fill_opacity=alpha)

    def circle(self, center, radius, *, fill=None, stroke=None, stroke_width=1.0, opacity=1.0):
        fill_paint, fill_alpha = _svg_paint(fill)
        stroke_paint, stroke_alpha = _svg_paint(stroke)
        self.scene.circle(
            center.x,
            center.y,
            radius,
            fill=fill_paint,
            fill_opacity=fill_alpha,
            stroke=stroke_paint if stroke else None,
            stroke_opacity=stroke_alpha,
            stroke_width=stroke_width if stroke else None,
            opacity=opacity if opacity < 1.0 else None,
        )

    def line(self, start, end, *, stroke, stroke_width=1.0, opacity=1.0):
        paint, alpha = _svg_paint(stroke)
        self.scene.line(
            start.x,
            start.y,
            end.x,
            end.y,
            stroke=paint,
            stroke_opacity=alpha,
            stroke_width=stroke_width,
            opacity=opacity if opacity < 1.0 else None,
        )

    def text(
        self,
        position,
        value,
        *,
        font_size,
        fill,
        font_family="sans-serif",
        bold=False,
        stroke=None,
        stroke_width=0.0,
        opacity=1.0,
    ):
        paint, alpha = _svg_paint(fill)
        self.scene.text(
            position.x,
            position.y,
            value,
            font_size=font_size,
            font_family=font_family,
            font_weight=900 if bold else None,
            fill=paint,
            fill_opacity=alpha,
            stroke=stroke if stroke and stroke_width > 0 else None,
            stroke_width=stroke_width if stroke and stroke_width > 0 else None,
            paint_order="stroke fill" if stroke and stroke_width > 0 else None,
            text_anchor="middle",
            dominant_baseline="central",
            opacity=opacity if opacity < 1.0 else None,
        )

    def clipped_image(self, handle, center, radius):
        clip_id = self.scene.clip_circle(center.x, center.y, radius)
        self._add_image(
            handle,
            center.x - radius,
            center.y - radius,
            2 * radius,
            preserveAspectRatio="xMidYMid slice",
            clip_path=f"url(#{clip_id})",
        )

    def image(self, handle, center, box):
        self._add_image(
            handle,
            center.x - box / 2.0,
            center.y - box / 2.0,
            box,
            preserveAspectRatio="xMidYMid meet",
        )

    def _add_image(self, handle: ImageHandle, x: float, y: float, extent: float, **attrs: object) -> None:
        element = SvgElement("image").set(x=x, y=y, width=extent, height=extent, href=_data_uri(handle), **attrs)
        self.scene.add(element)

    def text_on_circle(self, center, radius, value, *, font_size, path_length, fill, font_family="serif"):
        path_id = self.scene.circular_path(center.x, center.y, radius)
        paint, alpha = _svg_paint(fill)
        text_path = SvgElement("textPath", text=value).set(
            href=f"#{path_id}",
            startOffset="50%",
            lengthAdjust="spacing",
            textLength=path_length,
        )
        text = SvgElement("text").set(
            font_size=font_size,
            font_family=font_family,
            font_weight=900,
            fill=paint,
            fill_opacity=alpha,
            text_anchor="middle",
        )
        text.add(text_path)
        self.scene.add(text)

    def to_string(self) -> str:
        return self.scene.to_string()

    def finish(self) -> bytes:
        return self.scene.to_bytes()


# ---------------------------------------------------------------------------
# Raster


_SERIF_FONTS = ("DejaVuSerif.ttf", "LiberationSerif-Regular.ttf", "Times New Roman.ttf")
_SERIF_BOLD_FONTS = ("DejaVuSerif-Bold.ttf", "LiberationSerif-Bold.ttf", "Times New Roman Bold.ttf")
_SANS_FONTS = ("DejaVuSans.ttf", "LiberationSans-Regular.ttf", "Arial.ttf")
_SANS_BOLD_FONTS = ("DejaVuSans-Bold.ttf", "LiberationSans-Bold.ttf", "Arial Bold.ttf")


def _font_candidates(family: str, bold: bool) -> Sequence[str]:
    lowered = family.lower()
    serif = "serif" in lowered.replace("sans-serif", "") or "times" in lowered or "georgia" in lowered
    if serif:
        return _SERIF_BOLD_FONTS if bold else _SERIF_FONTS
    return _SANS_BOLD_FONTS if bold else _SANS_FONTS


@lru_cache(maxsize=64)
def _font(size: int, family: str = "sans-serif", bold: bool = False) -> ImageFont.FreeTypeFont | ImageFont.ImageFont:
    for name in _font_candidates(family, bold):
        try:
            return ImageFont.truetype(name, size=size)
        except OSError:
            continue
    LOG.debug("no TrueType font for %r; using Pillow default", family)
    return ImageFont.load_default(size=size)


def _measure(draw: ImageDraw.ImageDraw, text: str, font) -> Tuple[float, float, float, float]:
    bbox = draw.textbbox((0, 0), text, font=font)
    return bbox[0], bbox[1], bbox[2] - bbox[0], bbox[3] - bbox[1]


def _rgba(color: str, opacity: float = 1.0) -> Tuple[int, int, int, int]:
    try:
        parsed = ImageColor.getrgb(color)
    except ValueError:
        LOG.debug("unparseable color %r; drawing white", color)
        parsed = (255, 255, 255)
    alpha = parsed[3] if len(parsed) == 4 else 255
    return parsed[0], parsed[1], parsed[2], int(round(alpha * max(0.0, min(1.0, opacity))))


class RasterSurface(DrawingSurface):
    """Pillow-backed RGBA canvas serialised as PNG."""

    format = "png"
    media_type = "image/png"

    def __init__(self, size: float) -> None:
        super().__init__(size)
        pixels = int(round(self.size))
        self.image = Image.new("RGBA", (pixels, pixels), (255, 255, 255, 0))
        self._draw = ImageDraw.Draw(self.image, "RGBA")

    def fill_background(self, color: str) -> None:
        self._draw.rectangle((0, 0, self.image.width, self.image.height), fill=_rgba(color))

    def circle(self, center, radius, *, fill=None, stroke=None, stroke_width=1.0, opacity=1.0):
        box = (center.x - radius, center.y - radius, center.x + radius, center.y + radius)
        width = max(1, int(round(stroke_width))) if stroke else 0
        if fill:
            self._draw.ellipse(box, fill=_rgba(fill, opacity))
        if stroke:
            # Pillow strokes inward from the box; center the stroke on the radius.
            half = width / 2.0
            outer = (box[0] - half, box[1] - half, box[2] + half, box[3] + half)
            self._draw.ellipse(outer, outline=_rgba(stroke, opacity), width=width)

    def line(self, start, end, *, stroke, stroke_width=1.0, opacity=1.0):
        self._draw.line(
            (start.x, start.y, end.x, end.y),
            fill=_rgba(stroke, opacity),
            width=max(1, int(round(stroke_width))),
        )

    def text(
        self,
        position,
        value,
        *,
        font_size,
        fill,
        font_family="sans-serif",
        bold=False,
        stroke=None,
        stroke_width=0.0,
        opacity=1.0,
    ):
        font = _font(max(1, int(round(font_size))), font_family, bold)
        left, top, width, height = _measure(self._draw, value, font)
        outline = int(round(stroke_width)) if stroke else 0
        self._draw.text(
            (position.x - width / 2.0 - left, position.y - height / 2.0 - top),
            value,
            fill=_rgba(fill, opacity),
            font=font,
            stroke_width=outline,
            stroke_fill=_rgba(stroke, opacity) if outline else None,
        )

    def clipped_image(self, handle, center, radius):
        extent = max(1, int(round(2 * radius)))
        tile = ImageOps.fit(handle.image, (extent, extent), method=Image.Resampling.LANCZOS)
        mask = Image.new("L", (extent, extent), 0)
        ImageDraw.Draw(mask).ellipse((0, 0, extent - 1, extent - 1), fill=255)
        if tile.mode == "RGBA":
            mask = Image.composite(tile.getchannel("A"), mask, mask)
        self.image.paste(tile, (int(round(center.x - extent / 2.0)), int(round(center.y - extent / 2.0))), mask)

    def image(self, handle, center, box):
        extent = max(1, int(round(box)))
        tile = ImageOps.contain(handle.image, (extent, extent), method=Image.Resampling.LANCZOS)
        dest = (int(round(center.x - tile.width / 2.0)), int(round(center.y - tile.height / 2.0)))
        self.image.paste(tile, dest, tile if tile.mode == "RGBA" else None)

    def text_on_circle(self, center, radius, value, *, font_size, path_length, fill, font_family="serif"):
        if not value or radius <= 0:
            return
        font = _font(max(1, int(round(font_size))), font_family, True)
        color = _rgba(fill)
        circumference = 2.0 * math.pi * radius
        start = (circumference - path_length) / 2.0
        advance = path_length / len(value)
        # Glyph centers sit outside the path, where an SVG baseline would put them.
        glyph_radius = radius + 0.35 * font_size
        tile_size = max(4, int(math.ceil(font_size * 2.2)))
        for index, char in enumerate(value):
            if char.isspace():
                continue
            arc = start + (index + 0.5) * advance
            angle = norm360(TEXT_PATH_START_DEG + math.degrees(arc / radius))
            anchor = to_cartesian(center, glyph_radius, angle)
            tile = Image.new("RGBA", (tile_size, tile_size), (0, 0, 0, 0))
            draw = ImageDraw.Draw(tile)
            left, top, width, height = _measure(draw, char, font)
            draw.text(
                (tile_size / 2.0 - width / 2.0 - left, tile_size / 2.0 - height / 2.0 - top),
                char,
                fill=color,
                font=font,
            )
            rotated = tile.rotate(-angle, resample=Image.Resampling.BICUBIC)
            self.image.paste(
                rotated,
                (int(round(anchor.x - tile_size / 2.0)), int(round(anchor.y - tile_size / 2.0))),
                rotated,
            )

    def finish(self) -> bytes:
        buffer = BytesIO()
        self.image.save(buffer, format="PNG", optimize=True)
        return buffer.getvalue()


def surface_for(fmt: str, size: float, **kwargs) -> DrawingSurface:
    """Return a fresh surface for ``fmt`` (``"png"`` or ``"svg"``)."""

    key = (fmt or "").lower()
    if key == "png":
        return RasterSurface(size)
    if key == "svg":
        return SvgSurface(size, **kwargs)
    raise ValueError(f"unsupported output format: {fmt!r}")
