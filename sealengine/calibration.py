"""Calibration profiles and their normalisation to concrete render sizes.

A :class:`CalibrationProfile` is authored by an operator against a reference
canvas (600px by default).  :class:`ScalingAdapter` maps it onto any target
resolution.  Every length the adapter emits is proportional to the target
size, except the token visuals which are floored so they stay legible in
small previews; token *positions* never depend on those floors.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Tuple

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

from .geometry import Point

LOG = logging.getLogger(__name__)

__all__ = [
    "BorderSpec",
    "CalibrationProfile",
    "CenterOffset",
    "ResolvedRadii",
    "ScalingAdapter",
    "TokenSpec",
    "load_profile",
]

DEFAULT_REFERENCE_SIZE = 600.0
MIN_REFERENCE_SIZE = 100.0
MAX_REFERENCE_SIZE = 4800.0

# Default radii as a fraction of the reference canvas (80/140/200/260 @ 600).
_DEFAULT_RADIUS_RATIOS = {
    "central_radius": 80.0 / 600.0,
    "inner_radius": 140.0 / 600.0,
    "middle_radius": 200.0 / 600.0,
    "outer_radius": 260.0 / 600.0,
}


class CenterOffset(BaseModel):
    """Offset of the seal center from the canvas center, in reference pixels."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0


class CalibrationProfile(BaseModel):
    """Operator-authored ring geometry at a reference resolution."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    reference_canvas_size: float = Field(
        default=DEFAULT_REFERENCE_SIZE,
        validation_alias=AliasChoices(
            "reference_canvas_size", "referenceCanvasSize", "canvasSize", "canvas_size"
        ),
    )
    center_offset: CenterOffset = Field(
        default_factory=CenterOffset,
        validation_alias=AliasChoices("center_offset", "centerOffset"),
    )
    central_radius: float = Field(
        default=80.0, validation_alias=AliasChoices("central_radius", "centralRadius")
    )
    inner_radius: float = Field(
        default=140.0, validation_alias=AliasChoices("inner_radius", "innerRadius")
    )
    middle_radius: float = Field(
        default=200.0, validation_alias=AliasChoices("middle_radius", "middleRadius")
    )
    outer_radius: float = Field(
        default=260.0, validation_alias=AliasChoices("outer_radius", "outerRadius")
    )
    show_grid: bool = Field(default=True, validation_alias=AliasChoices("show_grid", "showGrid"))
    show_watermark: bool = Field(
        default=False, validation_alias=AliasChoices("show_watermark", "showWatermark")
    )

    @model_validator(mode="before")
    @classmethod
    def _unwrap_payload(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        values: Dict[str, Any] = dict(data)
        nested = values.get("settings")
        if isinstance(nested, Mapping):
            values = dict(nested)
        if "centerX" in values or "centerY" in values:
            values.setdefault(
                "center_offset",
                {"x": values.pop("centerX", 0.0) or 0.0, "y": values.pop("centerY", 0.0) or 0.0},
            )
        return {key: value for key, value in values.items() if value is not None}

    @field_validator("reference_canvas_size", mode="before")
    @classmethod
    def _cap_reference_size(cls, value: float) -> float:
        numeric = float(value)
        if not math.isfinite(numeric):
            return DEFAULT_REFERENCE_SIZE
        return max(MIN_REFERENCE_SIZE, min(MAX_REFERENCE_SIZE, numeric))

    @field_validator("central_radius", "inner_radius", "middle_radius", "outer_radius", mode="before")
    @classmethod
    def _default_unusable_radius(cls, value: float, info: ValidationInfo) -> float:
        numeric = float(value)
        if math.isfinite(numeric) and numeric > 0.0:
            return numeric
        reference = float(info.data.get("reference_canvas_size", DEFAULT_REFERENCE_SIZE))
        fallback = _DEFAULT_RADIUS_RATIOS[info.field_name] * reference
        LOG.warning("calibration %s=%r unusable; using %.2f", info.field_name, value, fallback)
        return fallback

    @field_validator("center_offset", mode="after")
    @classmethod
    def _cap_center_offset(cls, value: CenterOffset, info: ValidationInfo) -> CenterOffset:
        limit = float(info.data.get("reference_canvas_size", DEFAULT_REFERENCE_SIZE)) / 4.0
        x = value.x if math.isfinite(value.x) else 0.0
        y = value.y if math.isfinite(value.y) else 0.0
        return CenterOffset(x=max(-limit, min(limit, x)), y=max(-limit, min(limit, y)))

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "CalibrationProfile":
        """Validate an operator JSON object (bare or wrapped in ``settings``)."""

        return cls.model_validate(payload)

    def radii(self) -> Tuple[float, float, float, float]:
        return (self.central_radius, self.inner_radius, self.middle_radius, self.outer_radius)


def load_profile(path: str | Path) -> CalibrationProfile:
    """Read a calibration profile from a JSON file."""

    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, Mapping):
        raise ValueError("calibration profile must be a JSON object")
    return CalibrationProfile.from_payload(data)


@dataclass(frozen=True)
class BorderSpec:
    """Decorative border and spacing ratios, relative to the target size."""

    offset_ratio: float = 22.0 / 1200.0
    width_ratio: float = 22.0 / 1200.0
    safety_margin_ratio: float = 2.0 / 384.0
    text_inset_ratio: float = 4.0 / 384.0
    min_gap_ratio: float = 0.001


@dataclass(frozen=True)
class TokenSpec:
    """Token visual sizes relative to the target, with on-screen floors in px."""

    ring1_ratio: float = 22.5 / 1200.0
    ring1_min: float = 10.0
    ring2_ratio: float = 24.0 / 1200.0
    ring2_min: float = 12.0
    glyph_ratio: float = 50.0 / 1200.0
    glyph_min: float = 18.0


@dataclass(frozen=True)
class ResolvedRadii:
    """Concrete ring geometry for one render target."""

    target_size: float
    factor: float
    center: Point
    central: float
    ring1: float
    ring2: float
    ring3: float
    text_path: float
    border: float
    border_width: float
    ring1_token: float
    ring2_token: float
    glyph_box: float
    adjusted: Tuple[str, ...] = field(default_factory=tuple)

    @property
    def border_outer_edge(self) -> float:
        return self.border + self.border_width / 2.0

    def ring_radius(self, ring: int) -> float:
        return {0: self.central, 1: self.ring1, 2: self.ring2, 3: self.ring3}[ring]

    def as_dict(self) -> Dict[str, object]:
        return {
            "target_size": self.target_size,
            "factor": self.factor,
            "center": {"x": self.center.x, "y": self.center.y},
            "central": self.central,
            "ring1": self.ring1,
            "ring2": self.ring2,
            "ring3": self.ring3,
            "text_path": self.text_path,
            "border": self.border,
            "border_width": self.border_width,
            "ring1_token": self.ring1_token,
            "ring2_token": self.ring2_token,
            "glyph_box": self.glyph_box,
            "adjusted": list(self.adjusted),
        }


class ScalingAdapter:
    """Normalise a :class:`CalibrationProfile` to a target pixel size.

    Malformed geometry is repaired rather than rejected:

    * radii are forced strictly increasing, pushing larger radii outward;
    * ring3 is pulled inward until the decorative border clears the nearest
      canvas edge by the safety margin;
    * if that pull would cross ring2, the inner radii are compressed by the
      same proportion so the ring order survives.
    """

    def __init__(self, border: BorderSpec | None = None, tokens: TokenSpec | None = None) -> None:
        self.border = border or BorderSpec()
        self.tokens = tokens or TokenSpec()

    def scale(self, profile: CalibrationProfile, target_pixel_size: float) -> ResolvedRadii:
        size = float(target_pixel_size)
        if not math.isfinite(size) or size <= 0.0:
            raise ValueError(f"target pixel size must be positive, got {target_pixel_size!r}")

        factor = size / profile.reference_canvas_size
        half = size / 2.0
        center = Point(half + profile.center_offset.x * factor, half + profile.center_offset.y * factor)
        radii = [r * factor for r in profile.radii()]
        notes: List[str] = []

        gap = self.border.min_gap_ratio * size
        if _enforce_order(radii, gap):
            notes.append("reordered")

        border_offset = self.border.offset_ratio * size
        border_width = self.border.width_ratio * size
        margin = self.border.safety_margin_ratio * size
        edge = min(center.x, center.y, size - center.x, size - center.y) - margin
        max_ring3 = edge - border_offset - border_width / 2.0
        if radii[3] > max_ring3:
            previous = radii[3]
            radii[3] = max(max_ring3, 4.0 * gap)
            notes.append("border-clamped")
            if radii[2] >= radii[3] - gap:
                ratio = radii[3] / previous
                for idx in range(3):
                    radii[idx] *= ratio
                notes.append("compressed")

        text_path = radii[3] - self.border.text_inset_ratio * size
        if text_path <= radii[2]:
            text_path = (radii[2] + radii[3]) / 2.0

        if notes:
            LOG.warning(
                "calibration repaired at %.0fpx: %s (radii=%s)",
                size,
                ", ".join(notes),
                ", ".join(f"{r:.2f}" for r in radii),
            )

        central, ring1, ring2, ring3 = radii
        return ResolvedRadii(
            target_size=size,
            factor=factor,
            center=center,
            central=central,
            ring1=ring1,
            ring2=ring2,
            ring3=ring3,
            text_path=text_path,
            border=ring3 + border_offset,
            border_width=border_width,
            ring1_token=max(self.tokens.ring1_min, self.tokens.ring1_ratio * size),
            ring2_token=max(self.tokens.ring2_min, self.tokens.ring2_ratio * size),
            glyph_box=max(self.tokens.glyph_min, self.tokens.glyph_ratio * size),
            adjusted=tuple(notes),
        )


def _enforce_order(radii: List[float], gap: float) -> bool:
    changed = False
    if radii[0] < gap:
        radii[0] = gap
        changed = True
    for idx in range(1, len(radii)):
        floor = radii[idx - 1] + gap
        if radii[idx] < floor:
            radii[idx] = floor
            changed = True
    return changed
