"""Compose calibration, tokens and text into a resolved :class:`SealDocument`."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .calibration import CalibrationProfile, ResolvedRadii, ScalingAdapter
from .config.settings import Settings
from .geometry import CoordinateSystem, Point, angle_for_direction
from .models import SealInput, Token, TokenKind
from .text_fit import CircularTextFitter, FittedText, FontBounds
from .viz.core.contrast import ColorContrastResolver, color_hex

LOG = logging.getLogger(__name__)

__all__ = [
    "OverlayFlags",
    "RenderTarget",
    "ResolvedToken",
    "RingLayoutEngine",
    "SealDocument",
]


@dataclass(frozen=True)
class RenderTarget:
    """Size and overlay policy for a single draw call."""

    pixel_size: float
    include_overlays: bool = True


@dataclass(frozen=True)
class OverlayFlags:
    grid: bool = False
    ticks: bool = False
    watermark: bool = False

    @classmethod
    def none(cls) -> "OverlayFlags":
        return cls()

    def any(self) -> bool:
        return self.grid or self.ticks or self.watermark


@dataclass(frozen=True)
class ResolvedToken:
    ring: int
    direction_index: int
    angle: float
    x: float
    y: float
    radius: float
    fill: str
    content_color: str
    content: str | int
    kind: TokenKind

    @property
    def position(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class SealDocument:
    """Fully resolved render plan for one target resolution.

    Instances are immutable; rendering at another size means laying out a
    new document.
    """

    pixel_size: float
    center: Point
    radii: ResolvedRadii
    ring1: Tuple[ResolvedToken, ...]
    ring2: Tuple[ResolvedToken, ...]
    text: FittedText
    font_bounds: FontBounds
    central_design: str
    overlays: OverlayFlags

    @property
    def text_path_radius(self) -> float:
        return self.radii.text_path

    @property
    def border_radius(self) -> float:
        return self.radii.border

    @property
    def border_width(self) -> float:
        return self.radii.border_width

    def tokens(self) -> Iterable[ResolvedToken]:
        yield from self.ring1
        yield from self.ring2

    def as_dict(self) -> Dict[str, object]:
        return {
            "pixel_size": self.pixel_size,
            "center": {"x": self.center.x, "y": self.center.y},
            "radii": self.radii.as_dict(),
            "text_path_radius": self.text_path_radius,
            "border_radius": self.border_radius,
            "border_width": self.border_width,
            "central_design": self.central_design,
            "overlays": {
                "grid": self.overlays.grid,
                "ticks": self.overlays.ticks,
                "watermark": self.overlays.watermark,
            },
            "font_bounds": {
                "min": self.font_bounds.min,
                "max": self.font_bounds.max,
                "step": self.font_bounds.step,
            },
            "text": self.text.as_dict(),
            "ring1": [_token_payload(token) for token in self.ring1],
            "ring2": [_token_payload(token) for token in self.ring2],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.as_dict(), sort_keys=True, indent=indent, ensure_ascii=False)


def _token_payload(token: ResolvedToken) -> Dict[str, object]:
    return {
        "ring": token.ring,
        "direction_index": token.direction_index,
        "angle": token.angle,
        "x": token.x,
        "y": token.y,
        "radius": token.radius,
        "fill": token.fill,
        "content_color": token.content_color,
        "content": token.content,
        "kind": token.kind.value,
    }


class RingLayoutEngine:
    """Pure transform from (profile, target, tokens, text) to a document."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        scaler: ScalingAdapter | None = None,
        fitter: CircularTextFitter | None = None,
        resolver: ColorContrastResolver | None = None,
    ) -> None:
        cfg = (settings or Settings()).rendering
        self.scaler = scaler or ScalingAdapter()
        self.fitter = fitter or CircularTextFitter(
            char_width_ratio=cfg.char_width_ratio,
            safety_factor=cfg.safety_factor,
            max_words=cfg.max_words,
        )
        self.resolver = resolver or ColorContrastResolver(cfg.contrast_threshold)
        self.base_font_bounds = FontBounds(cfg.font_min, cfg.font_max)
        self.font_reference_size = cfg.font_reference_size

    def layout(
        self,
        profile: CalibrationProfile,
        target: RenderTarget,
        tokens_ring1: Sequence[Token],
        tokens_ring2: Sequence[Token],
        affirmation: str,
        central_design_ref: str,
        *,
        repetitions: int = 1,
    ) -> SealDocument:
        radii = self.scaler.scale(profile, target.pixel_size)
        coords = CoordinateSystem(radii.center)

        ring1 = self._resolve_ring(coords, 1, tokens_ring1, radii.ring1, radii.ring1_token)
        ring2 = self._resolve_ring(coords, 2, tokens_ring2, radii.ring2, radii.ring2_token)

        bounds = self.base_font_bounds.scaled(target.pixel_size / self.font_reference_size)
        circumference = 2.0 * math.pi * radii.text_path
        text = self.fitter.fit(affirmation, circumference, bounds, repetitions=repetitions)

        if target.include_overlays:
            overlays = OverlayFlags(
                grid=profile.show_grid,
                ticks=profile.show_grid,
                watermark=profile.show_watermark,
            )
        else:
            overlays = OverlayFlags.none()

        LOG.debug(
            "laid out seal at %.0fpx: %d+%d tokens, font %.2f",
            target.pixel_size,
            len(ring1),
            len(ring2),
            text.font_size,
        )
        return SealDocument(
            pixel_size=float(target.pixel_size),
            center=radii.center,
            radii=radii,
            ring1=ring1,
            ring2=ring2,
            text=text,
            font_bounds=bounds,
            central_design=central_design_ref or "",
            overlays=overlays,
        )

    def layout_seal(
        self, profile: CalibrationProfile, target: RenderTarget, seal: SealInput
    ) -> SealDocument:
        return self.layout(
            profile,
            target,
            seal.ring1,
            seal.ring2,
            seal.affirmation,
            seal.central_design,
            repetitions=seal.repetitions,
        )

    def _resolve_ring(
        self,
        coords: CoordinateSystem,
        ring: int,
        tokens: Sequence[Token],
        radius: float,
        token_radius: float,
    ) -> Tuple[ResolvedToken, ...]:
        resolved: List[ResolvedToken] = []
        for token in tokens:
            point = coords.anchor(token.direction_index, radius)
            fill = color_hex(token.color)
            resolved.append(
                ResolvedToken(
                    ring=ring,
                    direction_index=token.direction_index,
                    angle=angle_for_direction(token.direction_index),
                    x=point.x,
                    y=point.y,
                    radius=token_radius,
                    fill=fill,
                    content_color=self.resolver.resolve(fill),
                    content=token.content,
                    kind=token.kind,
                )
            )
        return tuple(resolved)
