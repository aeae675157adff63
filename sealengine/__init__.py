"""Seal layout and rendering engine.

Typical use::

    from sealengine import CalibrationProfile, Exporter, parse_seal_payload

    profile = CalibrationProfile.from_payload(admin_json)
    seal = parse_seal_payload(token_json)
    png = Exporter().export_seal(profile, seal, 1200)
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError, version as _get_version

try:
    __version__ = _get_version("sealengine")
except PackageNotFoundError:  # pragma: no cover - running from a source checkout
    __version__ = "0.0.0"

from .assets import AssetKind, AssetStore, ImageHandle
from .calibration import CalibrationProfile, ResolvedRadii, ScalingAdapter, load_profile
from .exporter import ExportResult, Exporter
from .geometry import CoordinateSystem, Point, angle_for_direction, direction_for_cartesian
from .layout import OverlayFlags, RenderTarget, ResolvedToken, RingLayoutEngine, SealDocument
from .models import SealInput, SealPayloadError, Token, TokenKind, parse_seal_payload
from .preview import PreviewFrame, PreviewSession
from .render import DrawingSurface, RasterSurface, Renderer, SvgSurface
from .text_fit import CircularTextFitter, FittedText, FontBounds
from .viz.core.contrast import ColorContrastResolver


def get_version() -> str:
    """Return the resolved sealengine package version."""

    return __version__


__all__ = [
    "__version__",
    "get_version",
    "AssetKind",
    "AssetStore",
    "CalibrationProfile",
    "CircularTextFitter",
    "ColorContrastResolver",
    "CoordinateSystem",
    "DrawingSurface",
    "ExportResult",
    "Exporter",
    "FittedText",
    "FontBounds",
    "ImageHandle",
    "OverlayFlags",
    "Point",
    "PreviewFrame",
    "PreviewSession",
    "RasterSurface",
    "RenderTarget",
    "Renderer",
    "ResolvedRadii",
    "ResolvedToken",
    "RingLayoutEngine",
    "ScalingAdapter",
    "SealDocument",
    "SealInput",
    "SealPayloadError",
    "SvgSurface",
    "Token",
    "TokenKind",
    "angle_for_direction",
    "direction_for_cartesian",
    "load_profile",
    "parse_seal_payload",
]
