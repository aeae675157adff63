"""Live preview: debounced redraws driven by input changes and asset loads."""

from __future__ import annotations

import itertools
import logging
import threading
from dataclasses import dataclass
from typing import Callable, Optional

from .assets import AssetStore
from .calibration import CalibrationProfile
from .config.settings import Settings, load_settings
from .layout import RenderTarget, RingLayoutEngine, SealDocument
from .models import SealInput
from .render import DrawingSurface, Renderer
from .viz.core.theme import SealTheme

LOG = logging.getLogger(__name__)

__all__ = ["PreviewFrame", "PreviewSession"]


@dataclass(frozen=True)
class PreviewFrame:
    generation: int
    document: SealDocument
    output: bytes


class PreviewSession:
    """Holds the current preview inputs and redraws them on demand.

    ``update`` and asset arrivals only *schedule* a redraw; bursts inside
    ``debounce_s`` collapse into a single render on a timer thread.  A newer
    frame always replaces an older one, and a render that finishes after a
    newer one is dropped.

    Size, debounce, fitting and theme come from ``settings`` (the same
    object an :class:`~sealengine.exporter.Exporter` uses) unless given
    explicitly, so preview and export fit the affirmation identically.
    """

    def __init__(
        self,
        surface_factory: Callable[[float], DrawingSurface],
        store: AssetStore,
        *,
        settings: Settings | None = None,
        engine: RingLayoutEngine | None = None,
        renderer: Renderer | None = None,
        size: float | None = None,
        debounce_s: float | None = None,
        on_frame: Callable[[PreviewFrame], None] | None = None,
    ) -> None:
        self.surface_factory = surface_factory
        self.store = store
        self.settings = settings or load_settings()
        cfg = self.settings.preview
        self.engine = engine or RingLayoutEngine(self.settings)
        self.renderer = renderer or Renderer(
            theme=SealTheme.from_settings(self.settings.rendering), assets=store
        )
        self.size = float(cfg.size if size is None else size)
        self.debounce_s = max(0.0, float(cfg.debounce_s if debounce_s is None else debounce_s))
        self.on_frame = on_frame
        self._profile: Optional[CalibrationProfile] = None
        self._seal = SealInput()
        self._latest: Optional[PreviewFrame] = None
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.RLock()
        self._generations = itertools.count(1)
        self._unsubscribe = store.on_loaded(lambda kind, name, handle: self.schedule())

    @property
    def latest(self) -> Optional[PreviewFrame]:
        return self._latest

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def update(
        self,
        profile: CalibrationProfile | None = None,
        seal: SealInput | None = None,
    ) -> None:
        with self._lock:
            if profile is not None:
                self._profile = profile
            if seal is not None:
                self._seal = seal
        self.schedule()

    def schedule(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.debounce_s, lambda: self._fire(timer))
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self, timer: threading.Timer) -> None:
        with self._lock:
            if self._timer is timer:
                self._timer = None
        try:
            self.render_now()
        except Exception:
            LOG.exception("preview render failed")

    def render_now(self) -> Optional[PreviewFrame]:
        with self._lock:
            profile = self._profile
            seal = self._seal
            generation = next(self._generations)
        if profile is None:
            LOG.debug("preview has no calibration profile yet")
            return None

        document = self.engine.layout_seal(profile, RenderTarget(self.size, include_overlays=True), seal)
        self.store.preload(document.central_design, seal.glyph_names())
        surface = self.renderer.draw(self.surface_factory(self.size), document)
        frame = PreviewFrame(generation=generation, document=document, output=surface.finish())

        with self._lock:
            if self._latest is not None and self._latest.generation > generation:
                LOG.debug("dropping stale preview frame %d", generation)
                return self._latest
            self._latest = frame
        if self.on_frame is not None:
            self.on_frame(frame)
        return frame

    def close(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        self._unsubscribe()
