"""Draw a resolved :class:`~sealengine.layout.SealDocument` onto a surface."""

from __future__ import annotations

import logging
from pathlib import PurePosixPath
from typing import Optional

from ..assets import AssetKind, AssetLookup
from ..geometry import DIRECTION_COUNT, CoordinateSystem, Point, angle_for_direction, direction_label
from ..layout import OverlayFlags, ResolvedToken, SealDocument
from ..viz.core.theme import DEFAULT_THEME, SealTheme
from .surface import DrawingSurface

LOG = logging.getLogger(__name__)

__all__ = ["Renderer", "WATERMARK_TEXT"]

WATERMARK_TEXT = "ANOINT"
GRID_DIVISIONS = 16
TICK_OPACITY = 0.75


class Renderer:
    """Stateless painter; the z-order of :meth:`draw` is fixed.

    ``assets`` is consulted without blocking.  An image that has not loaded
    (or failed to) is skipped while the rest of the seal is still drawn.
    """

    def __init__(self, theme: SealTheme | None = None, assets: AssetLookup | None = None) -> None:
        self.theme = theme or DEFAULT_THEME
        self.assets = assets

    def draw(
        self,
        surface: DrawingSurface,
        document: SealDocument,
        overlays: Optional[OverlayFlags] = None,
    ) -> DrawingSurface:
        flags = document.overlays if overlays is None else overlays
        self._background(surface)
        self._ring_strokes(surface, document)
        self._border(surface, document)
        if flags.ticks:
            self._ticks(surface, document)
        self._central_design(surface, document)
        for token in document.ring1:
            self._number_token(surface, document, token)
        for token in document.ring2:
            self._glyph_token(surface, document, token)
        self._affirmation(surface, document)
        if flags.grid:
            self._grid(surface, document)
        if flags.watermark:
            self._watermark(surface, document)
        return surface

    # Layers -------------------------------------------------------------
    def _background(self, surface: DrawingSurface) -> None:
        surface.fill_background(self.theme.color("background", "#FFFFFF"))

    def _ring_strokes(self, surface: DrawingSurface, document: SealDocument) -> None:
        size = document.pixel_size
        radii = document.radii
        surface.circle(
            document.center,
            radii.central,
            stroke=self.theme.color("central_ring"),
            stroke_width=self.theme.stroke("central_ring", size),
        )
        ring_width = self.theme.stroke("ring", size)
        for radius in (radii.ring1, radii.ring2):
            surface.circle(document.center, radius, stroke=self.theme.color("ring"), stroke_width=ring_width)

    def _border(self, surface: DrawingSurface, document: SealDocument) -> None:
        surface.circle(
            document.center,
            document.border_radius,
            stroke=self.theme.color("gold"),
            stroke_width=document.border_width,
        )

    def _ticks(self, surface: DrawingSurface, document: SealDocument) -> None:
        radii = document.radii
        scale = document.pixel_size / self.theme.reference_size
        coords = CoordinateSystem(document.center)
        inner = radii.ring1 - max(4.0 * scale, radii.ring1_token * 0.5)
        outer = radii.ring3 + 10.0 * scale
        label_radius = radii.ring3 + 16.0 * scale
        dot = 2.0 * scale
        width = self.theme.stroke("tick", document.pixel_size)
        for index in range(DIRECTION_COUNT):
            angle = angle_for_direction(index)
            surface.line(
                coords.to_cartesian(inner, angle),
                coords.to_cartesian(outer, angle),
                stroke=self.theme.color("tick"),
                stroke_width=width,
                opacity=TICK_OPACITY,
            )
            for ring, role in ((1, "anchor_ring1"), (2, "anchor_ring2"), (3, "anchor_ring3")):
                surface.circle(
                    coords.to_cartesian(radii.ring_radius(ring), angle),
                    dot,
                    fill=self.theme.color(role),
                    opacity=TICK_OPACITY,
                )
            surface.text(
                coords.to_cartesian(label_radius, angle),
                direction_label(index),
                font_size=8.0 * scale,
                fill=self.theme.color("tick_label"),
                font_family=self.theme.font("label", "sans-serif"),
                opacity=TICK_OPACITY,
            )

    def _central_design(self, surface: DrawingSurface, document: SealDocument) -> None:
        if not document.central_design or self.assets is None:
            return
        handle = self.assets.get(AssetKind.TEMPLATE, document.central_design)
        if handle is None:
            LOG.debug("central design %r not loaded; skipped", document.central_design)
            return
        surface.clipped_image(handle, document.center, document.radii.central)

    def _token_circle(self, surface: DrawingSurface, document: SealDocument, token: ResolvedToken) -> None:
        surface.circle(
            token.position,
            token.radius,
            fill=token.fill,
            stroke=self.theme.color("token_stroke"),
            stroke_width=self.theme.stroke("token", document.pixel_size),
        )

    def _number_token(self, surface: DrawingSurface, document: SealDocument, token: ResolvedToken) -> None:
        self._token_circle(surface, document, token)
        surface.text(
            token.position,
            str(token.content),
            font_size=token.radius * 1.2,
            fill=token.content_color,
            font_family=self.theme.font("token", "sans-serif"),
            bold=True,
            stroke=self.theme.color("token_stroke"),
            stroke_width=self.theme.stroke("token_text", document.pixel_size),
        )

    def _glyph_token(self, surface: DrawingSurface, document: SealDocument, token: ResolvedToken) -> None:
        self._token_circle(surface, document, token)
        name = str(token.content)
        handle = self.assets.get(AssetKind.GLYPH, name) if self.assets is not None and name else None
        if handle is not None:
            surface.image(handle, token.position, document.radii.glyph_box)
            return
        label = PurePosixPath(name).stem
        if not label:
            return
        # Shrink long stems so the label stays inside the token circle.
        fallback_size = min(token.radius * 0.7, 1.8 * token.radius / (len(label) * 0.58))
        surface.text(
            token.position,
            label,
            font_size=fallback_size,
            fill=token.content_color,
            font_family=self.theme.font("token", "sans-serif"),
            bold=True,
        )

    def _affirmation(self, surface: DrawingSurface, document: SealDocument) -> None:
        text = document.text
        surface.text_on_circle(
            document.center,
            document.text_path_radius,
            text.rendered_text,
            font_size=text.font_size,
            path_length=text.path_length,
            fill=self.theme.color("text", "#000000"),
            font_family=self.theme.font("affirmation", "serif"),
        )

    def _grid(self, surface: DrawingSurface, document: SealDocument) -> None:
        size = document.pixel_size
        step = size / GRID_DIVISIONS
        width = self.theme.stroke("grid", size)
        color = self.theme.color("grid")
        for idx in range(1, GRID_DIVISIONS):
            offset = idx * step
            surface.line(Point(offset, 0.0), Point(offset, size), stroke=color, stroke_width=width)
            surface.line(Point(0.0, offset), Point(size, offset), stroke=color, stroke_width=width)

    def _watermark(self, surface: DrawingSurface, document: SealDocument) -> None:
        surface.text(
            document.center,
            WATERMARK_TEXT,
            font_size=document.pixel_size / 8.0,
            fill=self.theme.color("watermark"),
            font_family=self.theme.font("label", "sans-serif"),
            bold=True,
        )
