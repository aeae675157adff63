"""Style tokens for seal rendering."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ...config.settings import RenderingCfg


@dataclass(frozen=True)
class SealTheme:
    """Colors, fonts and stroke widths used by :class:`~sealengine.render.Renderer`.

    Stroke widths are authored for the 384px preview and scaled with the
    render target; ``stroke_floors`` keeps hairlines visible when scaling down.
    """

    identifier: str
    colors: Mapping[str, str] = field(default_factory=dict)
    fonts: Mapping[str, str] = field(default_factory=dict)
    strokes: Mapping[str, float] = field(default_factory=dict)
    stroke_floors: Mapping[str, float] = field(default_factory=dict)
    reference_size: float = 384.0

    def color(self, role: str, default: Optional[str] = None) -> Optional[str]:
        return self.colors.get(role, default)

    def font(self, role: str, default: Optional[str] = None) -> Optional[str]:
        return self.fonts.get(role, default)

    def stroke(self, token: str, pixel_size: float) -> float:
        base = self.strokes.get(token, 1.0) * pixel_size / self.reference_size
        return max(self.stroke_floors.get(token, 0.0), base)

    @classmethod
    def from_settings(cls, cfg: RenderingCfg) -> "SealTheme":
        colors = dict(DEFAULT_THEME.colors)
        colors.update(
            background=cfg.background,
            ring=cfg.ring_stroke,
            gold=cfg.gold,
            text=cfg.text_color,
        )
        fonts = dict(DEFAULT_THEME.fonts)
        fonts["affirmation"] = cfg.font_family
        return cls(
            identifier="settings",
            colors=colors,
            fonts=fonts,
            strokes=dict(DEFAULT_THEME.strokes),
            stroke_floors=dict(DEFAULT_THEME.stroke_floors),
            reference_size=cfg.font_reference_size,
        )


DEFAULT_THEME = SealTheme(
    identifier="seal-default",
    colors={
        "background": "#FFFFFF",
        "ring": "#000000",
        "central_ring": "#00000050",
        "gold": "#D4AF37",
        "text": "#000000",
        "token_stroke": "#000000",
        "tick": "#7C3AED",
        "tick_label": "#111827",
        "anchor_ring1": "#22D3EE",
        "anchor_ring2": "#EF4444",
        "anchor_ring3": "#F59E0B",
        "grid": "#00000066",
        "watermark": "#8B5CF633",
    },
    fonts={
        "affirmation": "'Times New Roman', Georgia, serif",
        "token": "Arial, Helvetica, sans-serif",
        "label": "Arial, Helvetica, sans-serif",
    },
    strokes={
        "ring": 1.5,
        "central_ring": 2.0,
        "token": 1.5,
        "token_text": 0.7,
        "tick": 1.0,
        "grid": 1.0,
    },
    stroke_floors={
        "ring": 1.0,
        "central_ring": 1.0,
        "token": 1.0,
        "token_text": 0.35,
        "tick": 1.0,
        "grid": 1.0,
    },
)
