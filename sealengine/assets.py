"""Asynchronous loading of glyph and central-design images.

Each asset is requested once and represented by a
:class:`concurrent.futures.Future`.  Renderers never block on it: they ask
:meth:`AssetStore.get` for the decoded handle and skip the element while it
is pending.  Observers registered with :meth:`AssetStore.on_loaded` are told
when a load completes so the owner can schedule a redraw.
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Executor, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from enum import Enum
from io import BytesIO
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Tuple

import requests
from PIL import Image

LOG = logging.getLogger(__name__)

__all__ = [
    "AssetKind",
    "AssetLookup",
    "AssetStore",
    "ImageHandle",
    "decode_image",
]


class AssetKind(str, Enum):
    GLYPH = "glyphs"
    TEMPLATE = "templates"


_MIME_BY_FORMAT = {
    "PNG": "image/png",
    "JPEG": "image/jpeg",
    "GIF": "image/gif",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
}


@dataclass(frozen=True)
class ImageHandle:
    """A decoded image plus its original bytes (for vector embedding)."""

    kind: AssetKind
    name: str
    data: bytes = field(repr=False)
    mime: str
    image: Image.Image = field(repr=False, compare=False)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size


class AssetLookup(Protocol):
    def get(self, kind: AssetKind, name: str) -> Optional[ImageHandle]: ...


LoadListener = Callable[[AssetKind, str, ImageHandle], None]


def decode_image(kind: AssetKind, name: str, data: bytes) -> Optional[ImageHandle]:
    """Decode ``data`` with Pillow; undecodable payloads yield ``None``."""

    try:
        with Image.open(BytesIO(data)) as opened:
            fmt = opened.format or "PNG"
            image = opened.convert("RGBA")
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        LOG.warning("cannot decode %s asset %r: %s", kind.value, name, exc)
        return None
    return ImageHandle(
        kind=kind,
        name=name,
        data=data,
        mime=_MIME_BY_FORMAT.get(fmt, "image/png"),
        image=image,
    )


def asset_filename(kind: AssetKind, name: str) -> str:
    """Central designs are addressed by bare name and stored as PNG."""

    if kind is AssetKind.TEMPLATE and not Path(name).suffix:
        return f"{name}.png"
    return name


class AssetStore:
    """Cache of image futures fetched from a URL prefix or a directory.

    ``base_url`` takes precedence; the asset path is
    ``<base>/<kind>/<filename>`` for both sources.
    """

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        directory: Optional[str | Path] = None,
        executor: Optional[Executor] = None,
        session: Optional[requests.Session] = None,
        timeout: float = 10.0,
        max_workers: int = 4,
    ) -> None:
        self.base_url = base_url.rstrip("/") if base_url else None
        self.directory = Path(directory) if directory else None
        self.timeout = timeout
        self._session = session
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="sealengine-assets"
        )
        self._futures: Dict[Tuple[AssetKind, str], Future] = {}
        self._listeners: List[LoadListener] = []
        self._lock = threading.Lock()

    @classmethod
    def from_settings(cls, cfg) -> "AssetStore":
        return cls(
            base_url=cfg.base_url,
            directory=cfg.directory,
            timeout=cfg.request_timeout_s,
            max_workers=cfg.max_workers,
        )

    # Public API ---------------------------------------------------------
    def request(self, kind: AssetKind, name: str) -> "Future[Optional[ImageHandle]]":
        key = (kind, name)
        with self._lock:
            future = self._futures.get(key)
            if future is not None:
                return future
            future = self._executor.submit(self._load, kind, name)
            self._futures[key] = future
        future.add_done_callback(lambda done, k=kind, n=name: self._notify(k, n, done))
        return future

    def put(self, kind: AssetKind, name: str, data: bytes) -> Optional[ImageHandle]:
        """Install an in-memory asset as an already completed load."""

        handle = decode_image(kind, name, data)
        future: Future = Future()
        future.set_result(handle)
        with self._lock:
            self._futures[(kind, name)] = future
        self._notify(kind, name, future)
        return handle

    def get(self, kind: AssetKind, name: str) -> Optional[ImageHandle]:
        """Return the decoded handle if its load finished, without blocking."""

        future = self._futures.get((kind, name))
        if future is None or not future.done() or future.cancelled():
            return None
        if future.exception() is not None:
            return None
        return future.result()

    def preload(self, central_design: str, glyphs: Iterable[str]) -> List[Future]:
        futures: List[Future] = []
        if central_design:
            futures.append(self.request(AssetKind.TEMPLATE, central_design))
        for glyph in glyphs:
            if glyph:
                futures.append(self.request(AssetKind.GLYPH, glyph))
        return futures

    def wait_for(self, futures: Iterable[Future], timeout: Optional[float] = None) -> bool:
        """Block until ``futures`` settle; return ``False`` on timeout."""

        pending = list(futures)
        if not pending:
            return True
        _, not_done = wait(pending, timeout=timeout)
        if not_done:
            LOG.warning("%d asset loads still pending after %.1fs", len(not_done), timeout or 0.0)
        return not not_done

    def on_loaded(self, listener: LoadListener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unregisters it."""

        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def close(self) -> None:
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)

    # Internal helpers --------------------------------------------------
    def _notify(self, kind: AssetKind, name: str, future: Future) -> None:
        if future.cancelled() or future.exception() is not None:
            return
        handle = future.result()
        if handle is None:
            return
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(kind, name, handle)
            except Exception:
                LOG.exception("asset listener failed for %s/%s", kind.value, name)

    def _load(self, kind: AssetKind, name: str) -> Optional[ImageHandle]:
        filename = asset_filename(kind, name)
        data = self._read(kind, filename)
        if data is None:
            LOG.warning("%s asset %r unavailable; element will be skipped", kind.value, name)
            return None
        return decode_image(kind, name, data)

    def _read(self, kind: AssetKind, filename: str) -> Optional[bytes]:
        if self.base_url:
            url = f"{self.base_url}/{kind.value}/{filename}"
            try:
                getter = self._session.get if self._session is not None else requests.get
                response = getter(url, timeout=self.timeout)
                response.raise_for_status()
            except requests.RequestException as exc:
                LOG.warning("fetching %s failed: %s", url, exc)
                return None
            return response.content
        if self.directory is not None:
            path = self.directory / kind.value / filename
            try:
                return path.read_bytes()
            except OSError as exc:
                LOG.debug("reading %s failed: %s", path, exc)
                return None
        return None
