"""High-resolution export of a seal as PNG or SVG plus its JSON descriptor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .assets import AssetStore
from .calibration import CalibrationProfile
from .config.settings import Settings, load_settings
from .layout import OverlayFlags, RenderTarget, RingLayoutEngine, SealDocument
from .models import SealInput, Token
from .render import Renderer, surface_for
from .viz.core.theme import SealTheme

LOG = logging.getLogger(__name__)

__all__ = ["ExportResult", "Exporter", "SUPPORTED_FORMATS"]

SUPPORTED_FORMATS = ("png", "svg")


@dataclass(frozen=True)
class ExportResult:
    image: bytes
    document: SealDocument
    fmt: str

    @property
    def media_type(self) -> str:
        return "image/svg+xml" if self.fmt == "svg" else "image/png"

    def descriptor(self, indent: int | None = 2) -> str:
        return self.document.to_json(indent=indent)


class Exporter:
    """Lay out without overlays at export size, wait for assets, serialise.

    The geometry comes from the same :class:`RingLayoutEngine` the preview
    uses, so token positions relative to the canvas match the preview.
    """

    def __init__(
        self,
        store: AssetStore | None = None,
        *,
        settings: Settings | None = None,
        engine: RingLayoutEngine | None = None,
        renderer: Renderer | None = None,
    ) -> None:
        self.settings = settings or load_settings()
        self._owns_store = store is None
        self.store = store or AssetStore.from_settings(self.settings.assets)
        self.engine = engine or RingLayoutEngine(self.settings)
        self.renderer = renderer or Renderer(
            theme=SealTheme.from_settings(self.settings.rendering), assets=self.store
        )

    def close(self) -> None:
        """Release the asset store when this exporter created it."""

        if self._owns_store:
            self.store.close()

    def __enter__(self) -> "Exporter":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def clamp_size(self, target_pixel_size: float | None) -> int:
        cfg = self.settings.export
        requested = cfg.default_size if target_pixel_size is None else target_pixel_size
        size = int(round(max(cfg.min_size, min(cfg.max_size, float(requested)))))
        if target_pixel_size is not None and size != int(round(float(target_pixel_size))):
            LOG.info("export size %s clamped to %d", target_pixel_size, size)
        return size

    def export(
        self,
        profile: CalibrationProfile,
        ring1: Sequence[Token],
        ring2: Sequence[Token],
        affirmation: str,
        central_design_ref: str,
        target_pixel_size: float | None = None,
        *,
        fmt: str | None = None,
        repetitions: int = 1,
    ) -> bytes:
        seal = SealInput(
            central_design=central_design_ref or "",
            ring1=tuple(ring1),
            ring2=tuple(ring2),
            affirmation=affirmation,
            repetitions=repetitions,
        )
        return self.export_with_descriptor(profile, seal, target_pixel_size, fmt=fmt).image

    def export_seal(
        self,
        profile: CalibrationProfile,
        seal: SealInput,
        target_pixel_size: float | None = None,
        *,
        fmt: str | None = None,
    ) -> bytes:
        return self.export_with_descriptor(profile, seal, target_pixel_size, fmt=fmt).image

    def export_with_descriptor(
        self,
        profile: CalibrationProfile,
        seal: SealInput,
        target_pixel_size: float | None = None,
        *,
        fmt: str | None = None,
    ) -> ExportResult:
        chosen = (fmt or self.settings.export.format).lower()
        if chosen not in SUPPORTED_FORMATS:
            raise ValueError(f"unsupported export format {fmt!r}; expected one of {SUPPORTED_FORMATS}")
        size = self.clamp_size(target_pixel_size)

        document = self.engine.layout_seal(profile, RenderTarget(size, include_overlays=False), seal)
        futures = self.store.preload(document.central_design, seal.glyph_names())
        self.store.wait_for(futures, timeout=self.settings.export.asset_timeout_s)

        metadata = {"generator": "sealengine", "pixel_size": str(size)}
        if seal.label:
            metadata["label"] = seal.label
        surface = surface_for(chosen, size, **({"metadata": metadata} if chosen == "svg" else {}))
        self.renderer.draw(surface, document, OverlayFlags.none())
        LOG.info("exported %s seal at %dpx", chosen, size)
        return ExportResult(image=surface.finish(), document=document, fmt=chosen)
