"""Core rendering primitives used by the seal renderer."""

from .contrast import COLOR_HEX_MAP, CONTRAST_THRESHOLD, ColorContrastResolver, color_hex
from .svg import SvgElement, SvgScene
from .theme import DEFAULT_THEME, SealTheme

__all__ = [
    "COLOR_HEX_MAP",
    "CONTRAST_THRESHOLD",
    "ColorContrastResolver",
    "color_hex",
    "SvgElement",
    "SvgScene",
    "SealTheme",
    "DEFAULT_THEME",
]
