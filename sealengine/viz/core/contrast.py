"""Foreground color selection for token fills."""

from __future__ import annotations

import logging
from typing import Optional, Tuple

LOG = logging.getLogger(__name__)

__all__ = [
    "BLACK",
    "COLOR_HEX_MAP",
    "CONTRAST_THRESHOLD",
    "ColorContrastResolver",
    "WHITE",
    "color_hex",
    "luminance",
    "parse_hex",
]

BLACK = "#000000"
WHITE = "#FFFFFF"

# Perceived brightness (0-255) at or above which black text reads better.
CONTRAST_THRESHOLD = 160.0

COLOR_HEX_MAP = {
    "WHITE": "#FFFFFF",
    "RED": "#DC2626",
    "ORANGE": "#EA580C",
    "YELLOW": "#EAB308",
    "GREEN": "#16A34A",
    "AQUA": "#06B6D4",
    "BLUE": "#2563EB",
    "INDIGO": "#4F46E5",
    "PURPLE": "#9333EA",
    "VIOLET": "#7C3AED",
    "GOLD": "#F59E0B",
    "SILVER": "#9CA3AF",
    "GRAY": "#6B7280",
    "TURQUOISE": "#40E0D0",
    "TEAL": "#008080",
    "CYAN": "#00FFFF",
    "MAGENTA": "#FF00FF",
    "AMBER": "#FFBF00",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")


def parse_hex(value: object) -> Optional[Tuple[int, int, int]]:
    """Decode ``#RRGGBB``, ``RRGGBB`` or ``#RGB`` into channel values."""

    if not isinstance(value, str):
        return None
    clean = value.strip()
    if clean.startswith("#"):
        clean = clean[1:]
    if len(clean) == 3:
        clean = "".join(ch * 2 for ch in clean)
    if len(clean) != 6 or not set(clean) <= _HEX_DIGITS:
        return None
    return int(clean[0:2], 16), int(clean[2:4], 16), int(clean[4:6], 16)


def luminance(rgb: Tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.299 * r + 0.587 * g + 0.114 * b


def color_hex(name: object) -> str:
    """Map a palette name (or a literal hex string) to ``#RRGGBB``."""

    if isinstance(name, str):
        key = name.strip()
        if key.startswith("#") and parse_hex(key) is not None:
            return key.upper()
        mapped = COLOR_HEX_MAP.get(key.upper())
        if mapped is not None:
            return mapped
    LOG.debug("unknown token color %r; using white", name)
    return WHITE


class ColorContrastResolver:
    """Pick black or white content for a background fill."""

    def __init__(self, threshold: float = CONTRAST_THRESHOLD) -> None:
        self.threshold = float(threshold)

    def resolve(self, background_hex: object) -> str:
        rgb = parse_hex(background_hex)
        if rgb is None:
            LOG.debug("malformed background color %r; defaulting to white text", background_hex)
            return WHITE
        return BLACK if luminance(rgb) >= self.threshold else WHITE
